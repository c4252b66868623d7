"""
Pydantic schemas for Gift entity.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from giftbuddy.core.utils import MAX_SUBUNITS


class GiftCreate(BaseModel):
    """Schema for a gift in major units (rupees), converted to subunits on write."""
    name: str = Field(min_length=1, max_length=200)
    link: Optional[str] = None
    estimated_cost: Decimal = Field(gt=0, le=Decimal(MAX_SUBUNITS) / 100)


class GiftResponse(BaseModel):
    """Schema for gift response."""
    id: int
    event_id: int
    gift_name: str
    gift_link: Optional[str] = None
    total_amount: int  # subunits
    created_at: datetime

    class Config:
        from_attributes = True


class GiftBreakdownItem(BaseModel):
    """Per-gift view of a pooled split."""
    gift_id: int
    gift_name: str
    total_amount: int
    share_of_total: int  # percentage of the event's gift total
    per_person_amount: int
