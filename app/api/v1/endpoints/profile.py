# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

from fastapi import APIRouter, Depends, HTTPException, status

from app.db.database import get_storage
from app.db.models import User, UserUpdate
from app.db.storage import Storage
from app.dependencies import get_current_user
from app.schemas import schemas

router = APIRouter(
    prefix="/profile",
    tags=["Profile"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=schemas.UserPublic)
async def read_profile(current_user: User = Depends(get_current_user)):
    """
    Retrieves the current authenticated user's profile.
    """
    return current_user


@router.patch("/", response_model=schemas.UserPublic)
async def update_profile(
    profile: schemas.ProfileUpdate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Updates the editable profile fields. Credentials, username, email and user type
    cannot be changed here; unknown fields are ignored.
    """
    updated = await storage.update_user(
        current_user.id, UserUpdate(**profile.model_dump(exclude_unset=True))
    )
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return updated
