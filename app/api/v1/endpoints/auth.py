"""
# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# Created Date: Tue Jul 08 2025
# SPDX-License-Identifier: MIT
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from app.db.database import get_storage
from app.db.exceptions import DuplicateUserError
from app.db.models import User, UserCreate
from app.db.storage import Storage
from app.dependencies import get_current_session_id, get_current_user
from app.schemas import schemas
from app.utils.security import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Authentication"],
    responses={404: {"description": "Not found"}},
)


@router.post("/register", response_model=schemas.UserPublic, status_code=status.HTTP_201_CREATED)
async def register_user(user: schemas.UserRegister, storage: Storage = Depends(get_storage)):
    """
    Registers a new volunteer or recruiter.
    """
    if await storage.get_user_by_username(user.username):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already exists")
    if await storage.get_user_by_email(user.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    new_user = UserCreate(**user.model_dump(exclude={"password"}), password=get_password_hash(user.password))
    try:
        return await storage.create_user(new_user)
    except DuplicateUserError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post("/login", response_model=schemas.Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(), storage: Storage = Depends(get_storage)
):
    """
    Authenticates a user by username and returns an access token bound to a new session.
    """
    user = await storage.get_user_by_username(form_data.username)
    if not user or not verify_password(form_data.password, user.password):
        logger.info("Failed login attempt for username '%s'", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = await storage.create_session(user.id)
    access_token = create_access_token(user.username, session)
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout", response_model=schemas.Message)
async def logout(sid: str = Depends(get_current_session_id), storage: Storage = Depends(get_storage)):
    """
    Ends the session the bearer token belongs to.
    """
    await storage.delete_session(sid)
    return {"message": "Logged out successfully"}


@router.get("/user", response_model=schemas.UserPublic)
async def read_current_user(current_user: User = Depends(get_current_user)):
    """
    Retrieves the current authenticated user.
    """
    return current_user
