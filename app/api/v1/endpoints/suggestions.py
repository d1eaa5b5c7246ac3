# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.db.database import get_storage
from app.db.exceptions import UnknownReferenceError
from app.db.models import Suggestion, SuggestionCreate, User
from app.db.storage import Storage
from app.dependencies import get_current_user, get_current_volunteer
from app.schemas import schemas

router = APIRouter(
    prefix="/suggestions",
    tags=["Suggestions"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[Suggestion])
async def read_suggestions(
    current_user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)
):
    if current_user.user_type == "volunteer":
        return await storage.list_suggestions_by_volunteer(current_user.id)

    if current_user.ngo_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Recruiter must be associated with an NGO"
        )
    return await storage.list_suggestions_by_ngo(current_user.ngo_id)


@router.post("/", response_model=Suggestion, status_code=status.HTTP_201_CREATED)
async def create_suggestion(
    suggestion: schemas.SuggestionRequest,
    current_volunteer: User = Depends(get_current_volunteer),
    storage: Storage = Depends(get_storage),
):
    """
    Sends free-form feedback from the authenticated volunteer to an NGO.
    """
    try:
        return await storage.create_suggestion(
            SuggestionCreate(volunteer_id=current_volunteer.id, **suggestion.model_dump())
        )
    except UnknownReferenceError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="NGO not found")
