# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.db.database import get_storage
from app.db.models import Ngo, NgoCreate, User, UserUpdate
from app.db.storage import Storage
from app.dependencies import get_current_recruiter

router = APIRouter(
    prefix="/ngos",
    tags=["NGOs"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[Ngo])
async def read_ngos(cause: Optional[str] = None, storage: Storage = Depends(get_storage)):
    """
    Retrieves all NGOs, optionally only those working on a given cause.
    """
    if cause:
        return await storage.list_ngos_by_cause(cause)
    return await storage.list_ngos()


@router.get("/{ngo_id}", response_model=Ngo)
async def read_ngo(ngo_id: int, storage: Storage = Depends(get_storage)):
    db_ngo = await storage.get_ngo(ngo_id)
    if db_ngo is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="NGO not found")
    return db_ngo


@router.post("/", response_model=Ngo, status_code=status.HTTP_201_CREATED)
async def create_ngo(
    ngo: NgoCreate,
    current_recruiter: User = Depends(get_current_recruiter),
    storage: Storage = Depends(get_storage),
):
    """
    Creates a new NGO and associates the authenticated recruiter with it.
    """
    db_ngo = await storage.create_ngo(ngo)
    await storage.update_user(current_recruiter.id, UserUpdate(ngo_id=db_ngo.id))
    return db_ngo
