"""
# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# Created Date: Tue Jul 08 2025
# SPDX-License-Identifier: MIT
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from app.db.database import get_storage
from app.db.models import User
from app.db.storage import Storage
from app.utils.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/login")


async def get_current_session_id(token: str = Depends(oauth2_scheme)) -> str:
    """
    FastAPI dependency returning the session id carried by a valid bearer token.
    """
    payload = decode_access_token(token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload["sid"]


async def get_current_user(
    sid: str = Depends(get_current_session_id), storage: Storage = Depends(get_storage)
) -> User:
    """
    FastAPI dependency to get the current authenticated user.
    The token is only honoured while its login session still exists.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
    session = await storage.get_session(sid)
    if session is None:
        raise credentials_exception
    user = await storage.get_user(session.user_id)
    if user is None:
        raise credentials_exception
    return user


def get_current_volunteer(current_user: User = Depends(get_current_user)) -> User:
    if current_user.user_type != "volunteer":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return current_user


def get_current_recruiter(current_user: User = Depends(get_current_user)) -> User:
    if current_user.user_type != "recruiter":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return current_user


def require_ngo(current_recruiter: User = Depends(get_current_recruiter)) -> User:
    """
    FastAPI dependency for recruiter actions that need an associated NGO.
    """
    if current_recruiter.ngo_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Recruiter must be associated with an NGO"
        )
    return current_recruiter
