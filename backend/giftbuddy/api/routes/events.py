"""
Event management routes.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from giftbuddy.core.config import settings
from giftbuddy.db.session import get_db
from giftbuddy.models.event import Event, EventStatus
from giftbuddy.schemas.contribution import (
    ContributionResponse, ContributionWithUser, MarkPaidRequest, PaymentStatusResponse
)
from giftbuddy.schemas.event import (
    BulkStatusUpdate, EventClone, EventCreate, EventCreateResult, EventDetailResponse,
    EventResponse, EventSummary, EventUpdate, EventWithStats, ExclusionRequest,
    ExclusionResponse, PaymentContact, PaymentContactResponse, UserEventResponse
)
from giftbuddy.schemas.gift import GiftBreakdownItem, GiftCreate, GiftResponse
from giftbuddy.api.dependencies import get_caller
from giftbuddy.services.capability import Caller
from giftbuddy.services import contribution_service, event_service, stats_service
from giftbuddy.services.split_service import gift_breakdown

router = APIRouter(prefix="/events", tags=["events"])


def build_event_with_stats(event: Event) -> EventWithStats:
    return EventWithStats(
        **EventResponse.model_validate(event).model_dump(),
        **stats_service.event_stats(event)
    )


@router.post("", response_model=EventCreateResult, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Create an event with gifts and split the cost among participants (admin)."""
    event, participants_count, per_person = event_service.create_event_with_gifts(
        event_data, caller, db
    )
    gifts_count = len(event.gifts)
    return EventCreateResult(
        event_id=event.id,
        message=f"Event created with {gifts_count} gifts and {participants_count} participants",
        gifts_count=gifts_count,
        participants_count=participants_count,
        per_person_amount=per_person
    )


@router.get("", response_model=List[EventWithStats])
async def list_events(
    status_filter: Optional[EventStatus] = Query(default=None, alias="status"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """List events with collection statistics."""
    events = event_service.list_events(caller, db, status=status_filter)
    return [build_event_with_stats(event) for event in events]


@router.get("/upcoming", response_model=List[UserEventResponse])
async def list_upcoming_events(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Upcoming events with the caller's own contributions."""
    results = []
    for event, contributions in event_service.list_upcoming_events_for_user(caller, db):
        results.append(UserEventResponse(
            **EventResponse.model_validate(event).model_dump(),
            gifts=[GiftResponse.model_validate(g) for g in event.gifts],
            user_contributions=[ContributionResponse.model_validate(c) for c in contributions],
            total_owed=sum(c.split_amount for c in contributions)
        ))
    return results


@router.post("/bulk-status", response_model=List[EventResponse])
async def bulk_update_status(
    update: BulkStatusUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Change the status of several events at once (admin)."""
    return event_service.bulk_update_status(update.event_ids, update.status, caller, db)


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event(
    event_id: int,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Get event details with gifts, contributions and summary."""
    event = event_service.get_event_for_caller(event_id, caller, db)

    contributions = []
    for c in event.contributions:
        item = ContributionWithUser.model_validate(c)
        if c.user:
            item.user_name = c.user.name
            item.user_upi_id = c.user.upi_id
        contributions.append(item)

    summary = stats_service.summarize_contributions(event.contributions)
    return EventDetailResponse(
        event=EventResponse.model_validate(event),
        gifts=[GiftResponse.model_validate(g) for g in event.gifts],
        contributions=contributions,
        summary=EventSummary(**summary, currency=settings.CURRENCY_CODE),
        gift_breakdown=[
            GiftBreakdownItem(**item)
            for item in gift_breakdown(event.gifts, len(event.contributions))
        ]
    )


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    patch: EventUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Update event fields (admin)."""
    return event_service.update_event(event_id, patch, caller, db)


@router.delete("/{event_id}")
async def delete_event(
    event_id: int,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Delete an event with its gifts and contributions (admin)."""
    event_service.delete_event(event_id, caller, db)
    return {"message": "Event deleted successfully"}


@router.post("/{event_id}/clone", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def clone_event(
    event_id: int,
    clone: EventClone,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Duplicate an event and its gifts on a new date (admin)."""
    return event_service.clone_event(event_id, clone.date, caller, db)


@router.post("/{event_id}/complete", response_model=EventResponse)
async def complete_event(
    event_id: int,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Mark an event completed (creator or admin)."""
    return event_service.complete_event(event_id, caller, db)


@router.post("/{event_id}/cancel", response_model=EventResponse)
async def cancel_event(
    event_id: int,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Cancel an event (creator only)."""
    return event_service.cancel_event(event_id, caller, db)


@router.post("/{event_id}/gifts", response_model=GiftResponse, status_code=status.HTTP_201_CREATED)
async def add_gift(
    event_id: int,
    gift: GiftCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Append a gift to an event."""
    return event_service.add_gift(event_id, gift, caller, db)


@router.post("/{event_id}/pay", response_model=List[ContributionResponse])
async def mark_paid(
    event_id: int,
    payment: Optional[MarkPaidRequest] = None,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Mark the caller's contribution paid; admins may name another user."""
    user_id = payment.user_id if payment else None
    return contribution_service.mark_contribution_paid(event_id, caller, db, user_id=user_id)


@router.get("/{event_id}/payment-status", response_model=PaymentStatusResponse)
async def get_payment_status(
    event_id: int,
    user_id: Optional[str] = None,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """A user's payment position for an event (defaults to the caller)."""
    return contribution_service.get_payment_status(
        event_id, user_id or caller.user_id, caller, db
    )


@router.get("/{event_id}/payment-contact", response_model=PaymentContactResponse)
async def get_payment_contact(
    event_id: int,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Get the event's payment contact (admin)."""
    return event_service.get_payment_contact(event_id, caller, db)


@router.put("/{event_id}/payment-contact", response_model=PaymentContactResponse)
async def update_payment_contact(
    event_id: int,
    contact: PaymentContact,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Update the event's payment contact (admin)."""
    return event_service.update_payment_contact(event_id, contact, caller, db)


@router.delete("/{event_id}/payment-contact", response_model=PaymentContactResponse)
async def clear_payment_contact(
    event_id: int,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Clear the event's payment contact (admin)."""
    return event_service.clear_payment_contact(event_id, caller, db)


def _exclusion_response(exclusion) -> ExclusionResponse:
    return ExclusionResponse(
        id=exclusion.id,
        event_id=exclusion.event_id,
        excluded_user_id=exclusion.excluded_user_id,
        user_name=exclusion.user.name if exclusion.user else None
    )


@router.get("/{event_id}/exclusions", response_model=List[ExclusionResponse])
async def list_exclusions(
    event_id: int,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Users excluded from an event."""
    return [
        _exclusion_response(e)
        for e in event_service.list_exclusions(event_id, caller, db)
    ]


@router.post("/{event_id}/exclusions", response_model=ExclusionResponse, status_code=status.HTTP_201_CREATED)
async def exclude_user(
    event_id: int,
    exclusion_data: ExclusionRequest,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Exclude a user from an event (creator only)."""
    exclusion = event_service.exclude_user(event_id, exclusion_data.user_id, caller, db)
    return _exclusion_response(exclusion)


@router.delete("/{event_id}/exclusions/{user_id}")
async def include_user(
    event_id: int,
    user_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Remove a user's exclusion (creator only)."""
    event_service.include_user(event_id, user_id, caller, db)
    return {"message": "User included in event"}
