# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.db.database import get_storage
from app.db.exceptions import UnknownReferenceError
from app.db.models import Opportunity, OpportunityCreate, OpportunityUpdate, User
from app.db.storage import Storage
from app.dependencies import get_current_recruiter, require_ngo
from app.schemas import schemas

router = APIRouter(
    prefix="/opportunities",
    tags=["Opportunities"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[Opportunity])
async def read_opportunities(
    ngo_id: Optional[int] = None,
    cause: Optional[str] = None,
    storage: Storage = Depends(get_storage),
):
    """
    Retrieves open opportunities, filtered by owning NGO or by the NGO's cause.
    Deleted opportunities are never listed.
    """
    if ngo_id is not None:
        return await storage.list_opportunities_by_ngo(ngo_id)
    if cause:
        return await storage.list_opportunities_by_cause(cause)
    return await storage.list_opportunities()


@router.get("/{opportunity_id}", response_model=Opportunity)
async def read_opportunity(opportunity_id: int, storage: Storage = Depends(get_storage)):
    db_opportunity = await storage.get_opportunity(opportunity_id)
    if db_opportunity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Opportunity not found")
    if db_opportunity.deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Opportunity not found or has been deleted"
        )
    return db_opportunity


@router.post("/", response_model=Opportunity, status_code=status.HTTP_201_CREATED)
async def create_opportunity(
    opportunity: schemas.OpportunityRequest,
    current_recruiter: User = Depends(require_ngo),
    storage: Storage = Depends(get_storage),
):
    """
    Creates a new opportunity owned by the recruiter's NGO.
    """
    try:
        return await storage.create_opportunity(
            OpportunityCreate(ngo_id=current_recruiter.ngo_id, **opportunity.model_dump())
        )
    except UnknownReferenceError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.delete("/{opportunity_id}", response_model=schemas.Message)
async def delete_opportunity(
    opportunity_id: int,
    current_recruiter: User = Depends(get_current_recruiter),
    storage: Storage = Depends(get_storage),
):
    """
    Marks an opportunity as deleted. Only recruiters of the owning NGO may do this.
    """
    db_opportunity = await storage.get_opportunity(opportunity_id)
    if db_opportunity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Opportunity not found")

    if current_recruiter.ngo_id is None or db_opportunity.ngo_id != current_recruiter.ngo_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to delete this opportunity"
        )

    await storage.update_opportunity(opportunity_id, OpportunityUpdate(deleted=True))
    return {"message": "Opportunity deleted successfully"}
