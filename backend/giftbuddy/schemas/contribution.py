"""
Pydantic schemas for Contribution entity.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from giftbuddy.core.utils import MAX_SUBUNITS


class ContributionResponse(BaseModel):
    """Schema for contribution response."""
    id: int
    event_id: int
    user_id: str
    gift_id: Optional[int] = None
    split_amount: int  # subunits
    paid: bool
    payment_time: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ContributionWithUser(ContributionResponse):
    """Contribution with the contributor's name and payment contact."""
    user_name: Optional[str] = None
    user_upi_id: Optional[str] = None


class AdminContributionRow(ContributionResponse):
    """Row of the admin contributions table."""
    user_name: Optional[str] = None
    event_title: str
    event_date: date
    gift_names: str = ""


class ContributionUpdate(BaseModel):
    """Schema for admin contribution patch."""
    split_amount: Optional[int] = Field(default=None, ge=0, le=MAX_SUBUNITS)
    paid: Optional[bool] = None


class ContributionAmountUpdate(BaseModel):
    """Schema for the organizer's amount correction, in subunits."""
    split_amount: int = Field(ge=0, le=MAX_SUBUNITS)


class MarkPaidRequest(BaseModel):
    """Mark a contribution paid; user_id set only when an admin acts for someone."""
    user_id: Optional[str] = None


class PaymentStatusResponse(BaseModel):
    """A user's payment position for one event, in subunits."""
    event_id: int
    user_id: str
    total_amount: int
    paid_amount: int
    pending_amount: int
    paid_status: bool
    payment_time: Optional[datetime] = None
