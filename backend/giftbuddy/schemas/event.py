"""
Pydantic schemas for Event entity.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
import datetime as dt
from datetime import date, datetime
from giftbuddy.models.event import EventStatus
from giftbuddy.schemas.gift import GiftCreate, GiftResponse, GiftBreakdownItem
from giftbuddy.schemas.contribution import ContributionResponse, ContributionWithUser


class PaymentContact(BaseModel):
    """Organizer's payment contact."""
    upi_id: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)


class EventCreate(PaymentContact):
    """Schema for event creation with its gifts and participant selection.

    When participant_ids is given it is used as-is (minus the birthday person
    and excluded ids); otherwise every known user is a participant.
    """
    title: str = Field(min_length=1, max_length=200)
    date: date
    birthday_person_id: str
    gifts: List[GiftCreate] = Field(min_length=1)
    note: Optional[str] = None
    participant_ids: Optional[List[str]] = None
    excluded_user_ids: List[str] = []


class EventCreateResult(BaseModel):
    """Result of event creation."""
    event_id: int
    message: str
    gifts_count: int
    participants_count: int
    per_person_amount: int


class EventUpdate(PaymentContact):
    """Schema for event patch."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    date: Optional[dt.date] = None
    note: Optional[str] = None
    status: Optional[EventStatus] = None


class EventClone(BaseModel):
    """Schema for cloning an event to a new date."""
    date: date


class BulkStatusUpdate(BaseModel):
    """Schema for bulk status change."""
    event_ids: List[int] = Field(min_length=1)
    status: EventStatus


class EventResponse(BaseModel):
    """Schema for event response."""
    id: int
    title: str
    date: date
    status: EventStatus
    birthday_person_id: Optional[str] = None
    created_by: Optional[str] = None
    note: Optional[str] = None
    upi_id: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class EventSummary(BaseModel):
    """Rollup of an event's contributions, in subunits."""
    currency: str
    total_amount: int
    total_collected: int
    total_pending: int
    contributions_count: int
    paid_count: int
    collection_percentage: int


class EventWithStats(EventResponse):
    """Event row of the dashboard list."""
    total_contributions: int
    total_collected: int
    total_pending: int
    paid_count: int
    collection_percentage: int
    gifts_count: int
    contributors_count: int
    total_gift_amount: int


class EventDetailResponse(BaseModel):
    """Event with gifts, contributions, summary and per-gift breakdown."""
    event: EventResponse
    gifts: List[GiftResponse]
    contributions: List[ContributionWithUser]
    summary: EventSummary
    gift_breakdown: List[GiftBreakdownItem]


class UserEventResponse(EventResponse):
    """Upcoming event as seen by one participant."""
    gifts: List[GiftResponse] = []
    user_contributions: List[ContributionResponse] = []
    total_owed: int = 0


class ExclusionRequest(BaseModel):
    """Schema for excluding or re-including a user."""
    user_id: str


class ExclusionResponse(BaseModel):
    """Schema for exclusion response."""
    id: int
    event_id: int
    excluded_user_id: str
    user_name: Optional[str] = None


class PaymentContactResponse(PaymentContact):
    """Event payment contact."""
    id: int
    title: str

    class Config:
        from_attributes = True
