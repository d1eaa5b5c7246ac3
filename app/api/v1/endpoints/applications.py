# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.db.database import get_storage
from app.db.exceptions import (
    DuplicateApplicationError,
    InvalidStatusTransitionError,
    UnknownReferenceError,
)
from app.db.models import Application, ApplicationCreate, ApplicationUpdate, User
from app.db.storage import Storage
from app.dependencies import get_current_user, get_current_volunteer, require_ngo
from app.schemas import schemas

router = APIRouter(
    prefix="/applications",
    tags=["Applications"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[Application])
async def read_applications(
    current_user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)
):
    """
    Volunteers see their own applications, recruiters see the ones sent to their NGO.
    """
    if current_user.user_type == "volunteer":
        return await storage.list_applications_by_volunteer(current_user.id)

    if current_user.ngo_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Recruiter must be associated with an NGO"
        )
    return await storage.list_applications_by_ngo(current_user.ngo_id)


@router.post("/", response_model=Application, status_code=status.HTTP_201_CREATED)
async def create_application(
    application: schemas.ApplicationRequest,
    current_volunteer: User = Depends(get_current_volunteer),
    storage: Storage = Depends(get_storage),
):
    """
    Applies the authenticated volunteer to an open opportunity.
    """
    try:
        return await storage.create_application(
            ApplicationCreate(volunteer_id=current_volunteer.id, **application.model_dump())
        )
    except UnknownReferenceError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Opportunity not found or has been deleted"
        )
    except DuplicateApplicationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="You have already applied for this opportunity"
        )


@router.patch("/{application_id}", response_model=Application)
async def update_application_status(
    application_id: int,
    update: schemas.ApplicationStatusUpdate,
    current_recruiter: User = Depends(require_ngo),
    storage: Storage = Depends(get_storage),
):
    """
    Accepts or rejects an application sent to the recruiter's NGO.
    """
    db_application = await storage.get_application(application_id)
    if db_application is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")

    if db_application.ngo_id != current_recruiter.ngo_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to update this application"
        )

    try:
        updated = await storage.update_application(application_id, ApplicationUpdate(status=update.status))
    except InvalidStatusTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")
    return updated
