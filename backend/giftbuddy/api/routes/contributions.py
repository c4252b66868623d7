"""
Contribution management routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from giftbuddy.db.session import get_db
from giftbuddy.schemas.contribution import (
    AdminContributionRow, ContributionAmountUpdate, ContributionResponse, ContributionUpdate
)
from giftbuddy.api.dependencies import get_caller
from giftbuddy.services.capability import Caller
from giftbuddy.services import contribution_service

router = APIRouter(prefix="/contributions", tags=["contributions"])


@router.get("", response_model=List[AdminContributionRow])
async def list_contributions(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """All contributions with user, event and gift names (admin)."""
    rows = []
    for c in contribution_service.list_contributions(caller, db):
        row = AdminContributionRow(
            **ContributionResponse.model_validate(c).model_dump(),
            user_name=c.user.name if c.user else None,
            event_title=c.event.title,
            event_date=c.event.date,
            gift_names=", ".join(g.gift_name for g in c.event.gifts)
        )
        rows.append(row)
    return rows


@router.get("/mine", response_model=List[ContributionResponse])
async def list_my_contributions(
    user_id: Optional[str] = None,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """The caller's contributions across events; admins may pass user_id."""
    return contribution_service.list_user_contributions(user_id or caller.user_id, caller, db)


@router.patch("/{contribution_id}", response_model=ContributionResponse)
async def update_contribution(
    contribution_id: int,
    patch: ContributionUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Edit a contribution's amount or paid flag (admin)."""
    return contribution_service.update_contribution(contribution_id, patch, caller, db)


@router.put("/{contribution_id}/amount", response_model=ContributionResponse)
async def set_contribution_amount(
    contribution_id: int,
    amount: ContributionAmountUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Correct one participant's share (event creator)."""
    return contribution_service.set_contribution_amount(
        contribution_id, amount.split_amount, caller, db
    )


@router.delete("/{contribution_id}")
async def delete_contribution(
    contribution_id: int,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Delete a contribution (admin)."""
    contribution_service.delete_contribution(contribution_id, caller, db)
    return {"message": "Contribution deleted successfully"}
