"""
Event service: creation with gifts and split contributions, status changes,
cloning, payment contact and exclusions.
"""
import logging
from datetime import date
from sqlalchemy import select
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from giftbuddy.core.exceptions import LedgerValidationError, NotFoundError
from giftbuddy.core.utils import ensure_storable, to_subunits
from giftbuddy.db.session import transaction
from giftbuddy.models.user import User
from giftbuddy.models.event import Event, EventExclusion, EventStatus
from giftbuddy.models.gift import Gift
from giftbuddy.models.contribution import Contribution
from giftbuddy.schemas.event import EventCreate, EventUpdate, PaymentContact
from giftbuddy.schemas.gift import GiftCreate
from giftbuddy.services.capability import Caller
from giftbuddy.services.split_service import (
    per_person_amount, select_participants, total_gift_amount
)

logger = logging.getLogger(__name__)


def get_event(event_id: int, db: Session) -> Event:
    """Fetch an event or raise NotFoundError."""
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundError("Event not found")
    return event


def ensure_event_open(event: Event, action: str) -> None:
    """Reject writes to contributions of a completed or cancelled event."""
    if event.status.is_terminal:
        raise LedgerValidationError(
            f"Event is {event.status.value}; cannot {action}"
        )


def is_user_excluded(event_id: int, user_id: str, db: Session) -> bool:
    """Check if a user is excluded from an event."""
    return db.query(EventExclusion).filter(
        EventExclusion.event_id == event_id,
        EventExclusion.excluded_user_id == user_id
    ).first() is not None


def _gift_amounts(gifts: List[GiftCreate]) -> List[int]:
    amounts = [to_subunits(gift.estimated_cost) for gift in gifts]
    if any(amount <= 0 for amount in amounts):
        raise LedgerValidationError("Gift cost must be greater than zero")
    return amounts


def _check_users_exist(user_ids: List[str], db: Session, label: str) -> None:
    if not user_ids:
        return
    found = {row.id for row in db.query(User.id).filter(User.id.in_(user_ids)).all()}
    missing = sorted(set(user_ids) - found)
    if missing:
        raise NotFoundError(f"Unknown {label}: {', '.join(missing)}")


def create_event_with_gifts(
    data: EventCreate,
    caller: Caller,
    db: Session
) -> Tuple[Event, int, int]:
    """
    Create an event, its gifts and one contribution per participant.

    Every participant owes the same share of the pooled gift total. All rows
    are written in a single transaction. Returns the event, the participant
    count and the per-person amount.
    """
    caller.require_admin("create events")

    birthday_person = db.query(User).filter(User.id == data.birthday_person_id).first()
    if not birthday_person:
        raise NotFoundError("Birthday person not found")

    _check_users_exist(data.excluded_user_ids, db, "excluded users")
    if data.participant_ids is not None:
        _check_users_exist(data.participant_ids, db, "participants")

    all_user_ids = [row.id for row in db.query(User.id).order_by(User.created_at, User.id).all()]
    participants = select_participants(
        all_user_ids,
        data.birthday_person_id,
        excluded_user_ids=data.excluded_user_ids,
        participant_ids=data.participant_ids
    )
    if not participants:
        raise LedgerValidationError("At least one user must participate in cost splitting")

    amounts = _gift_amounts(data.gifts)
    split_amount = ensure_storable(
        per_person_amount(total_gift_amount(amounts), len(participants))
    )

    with transaction(db, "events", "create_event_with_gifts"):
        event = Event(
            title=data.title,
            date=data.date,
            birthday_person_id=data.birthday_person_id,
            created_by=caller.user_id,
            status=EventStatus.UPCOMING,
            note=data.note,
            upi_id=data.upi_id or None,
            phone=data.phone or None
        )
        db.add(event)
        db.flush()

        for gift, amount in zip(data.gifts, amounts):
            db.add(Gift(
                event_id=event.id,
                gift_name=gift.name,
                gift_link=gift.link or None,
                total_amount=amount
            ))

        for user_id in participants:
            db.add(Contribution(
                event_id=event.id,
                user_id=user_id,
                split_amount=split_amount,
                paid=False
            ))

        for user_id in dict.fromkeys(data.excluded_user_ids):
            if user_id == data.birthday_person_id:
                continue
            db.add(EventExclusion(event_id=event.id, excluded_user_id=user_id))

    db.refresh(event)
    logger.info(
        f"Event {event.id} created by {caller.user_id} with {len(amounts)} gifts "
        f"and {len(participants)} participants at {split_amount} each"
    )
    return event, len(participants), split_amount


def add_gift(event_id: int, data: GiftCreate, caller: Caller, db: Session) -> Gift:
    """Append a gift to an event. Existing contributions are not recomputed."""
    event = get_event(event_id, db)
    caller.require_owner(event, "add gifts", allow_admin=True)
    ensure_event_open(event, "add gifts")
    amount = _gift_amounts([data])[0]

    with transaction(db, "gifts", "add_gift"):
        gift = Gift(
            event_id=event.id,
            gift_name=data.name,
            gift_link=data.link or None,
            total_amount=amount
        )
        db.add(gift)

    db.refresh(gift)
    logger.info(f"Gift {gift.id} added to event {event.id}")
    return gift


def check_status_transition(event: Event, new_status: EventStatus, caller: Caller) -> None:
    """
    Validate a status change.

    upcoming -> completed needs the creator or an admin; upcoming -> cancelled
    needs the creator. Terminal states never change.
    """
    if new_status == event.status:
        return
    if event.status.is_terminal:
        raise LedgerValidationError(
            f"Event is already {event.status.value}; its status can no longer change"
        )
    if new_status == EventStatus.COMPLETED:
        caller.require_owner(event, "complete this event", allow_admin=True)
    elif new_status == EventStatus.CANCELLED:
        caller.require_owner(event, "cancel this event")


def change_status(event_id: int, new_status: EventStatus, caller: Caller, db: Session) -> Event:
    """Move an event to a new status."""
    event = get_event(event_id, db)
    check_status_transition(event, new_status, caller)
    if new_status == event.status:
        return event

    with transaction(db, "events", "change_status"):
        event.status = new_status

    db.refresh(event)
    logger.info(f"Event {event.id} marked {new_status.value} by {caller.user_id}")
    return event


def complete_event(event_id: int, caller: Caller, db: Session) -> Event:
    return change_status(event_id, EventStatus.COMPLETED, caller, db)


def cancel_event(event_id: int, caller: Caller, db: Session) -> Event:
    return change_status(event_id, EventStatus.CANCELLED, caller, db)


def bulk_update_status(
    event_ids: List[int],
    new_status: EventStatus,
    caller: Caller,
    db: Session
) -> List[Event]:
    """Change the status of several events; nothing is written unless all may change."""
    caller.require_admin("bulk update events")

    events = db.query(Event).filter(Event.id.in_(event_ids)).all()
    missing = set(event_ids) - {e.id for e in events}
    if missing:
        raise NotFoundError(f"Events not found: {', '.join(str(i) for i in sorted(missing))}")

    for event in events:
        check_status_transition(event, new_status, caller)

    with transaction(db, "events", "bulk_update_status"):
        for event in events:
            event.status = new_status

    logger.info(f"{len(events)} events marked {new_status.value} by {caller.user_id}")
    return events


def update_event(event_id: int, patch: EventUpdate, caller: Caller, db: Session) -> Event:
    """Apply an admin patch to an event. Status changes follow the state machine."""
    caller.require_admin("update events")
    event = get_event(event_id, db)

    changes = patch.model_dump(exclude_unset=True)
    new_status = changes.pop("status", None)
    if new_status is not None:
        check_status_transition(event, new_status, caller)
    if "title" in changes and changes["title"] is None:
        raise LedgerValidationError("Event title cannot be empty")
    if "date" in changes and changes["date"] is None:
        raise LedgerValidationError("Event date is required")

    with transaction(db, "events", "update_event"):
        for field, value in changes.items():
            setattr(event, field, value)
        if new_status is not None:
            event.status = new_status

    db.refresh(event)
    logger.info(f"Event {event.id} updated by {caller.user_id}: {sorted(patch.model_fields_set)}")
    return event


def delete_event(event_id: int, caller: Caller, db: Session) -> None:
    """Delete an event together with its gifts, contributions and exclusions."""
    caller.require_admin("delete events")
    event = get_event(event_id, db)

    with transaction(db, "events", "delete_event"):
        db.delete(event)

    logger.info(f"Event {event_id} deleted by {caller.user_id}")


def clone_event(event_id: int, new_date: date, caller: Caller, db: Session) -> Event:
    """Duplicate an event and its gifts onto a new date. Contributions are not copied."""
    caller.require_admin("clone events")
    original = get_event(event_id, db)

    with transaction(db, "events", "clone_event"):
        clone = Event(
            title=original.title,
            date=new_date,
            status=EventStatus.UPCOMING,
            birthday_person_id=original.birthday_person_id,
            created_by=caller.user_id,
            note=original.note,
            upi_id=original.upi_id,
            phone=original.phone
        )
        db.add(clone)
        db.flush()

        for gift in original.gifts:
            db.add(Gift(
                event_id=clone.id,
                gift_name=gift.gift_name,
                gift_link=gift.gift_link,
                total_amount=gift.total_amount
            ))

    db.refresh(clone)
    logger.info(f"Event {event_id} cloned to {clone.id} for {new_date.isoformat()}")
    return clone


def get_payment_contact(event_id: int, caller: Caller, db: Session) -> Event:
    caller.require_admin("view payment contacts")
    return get_event(event_id, db)


def update_payment_contact(
    event_id: int,
    contact: PaymentContact,
    caller: Caller,
    db: Session
) -> Event:
    """Set the organizer's UPI id and/or phone on an event."""
    caller.require_admin("update payment contacts")
    event = get_event(event_id, db)

    with transaction(db, "events", "update_payment_contact"):
        for field, value in contact.model_dump(exclude_unset=True).items():
            setattr(event, field, value or None)

    db.refresh(event)
    return event


def clear_payment_contact(event_id: int, caller: Caller, db: Session) -> Event:
    caller.require_admin("clear payment contacts")
    event = get_event(event_id, db)

    with transaction(db, "events", "clear_payment_contact"):
        event.upi_id = None
        event.phone = None

    db.refresh(event)
    return event


def _visible_to(caller: Caller):
    """Events a non-admin may read: ones they organize or owe on."""
    participating = select(Contribution.event_id).where(
        Contribution.user_id == caller.user_id
    )
    return (Event.created_by == caller.user_id) | (Event.id.in_(participating))


def list_events(
    caller: Caller,
    db: Session,
    status: Optional[EventStatus] = None
) -> List[Event]:
    """
    Events visible to the caller, newest date first.

    Admins see every event; other users see events they organize or owe on.
    """
    query = db.query(Event)
    if not caller.is_admin():
        query = query.filter(_visible_to(caller))
    if status is not None:
        query = query.filter(Event.status == status)
    return query.order_by(Event.date.desc(), Event.id.desc()).all()


def get_event_for_caller(event_id: int, caller: Caller, db: Session) -> Event:
    """Fetch an event if the caller may see it; hidden events read as missing."""
    event = get_event(event_id, db)
    if caller.is_admin():
        return event
    visible = db.query(Event.id).filter(Event.id == event_id, _visible_to(caller)).first()
    if not visible or is_user_excluded(event_id, caller.user_id, db):
        raise NotFoundError("Event not found")
    return event


def list_upcoming_events_for_user(caller: Caller, db: Session) -> List[Tuple[Event, List[Contribution]]]:
    """Upcoming events, soonest first, with the caller's own contributions."""
    excluded = select(EventExclusion.event_id).where(
        EventExclusion.excluded_user_id == caller.user_id
    )
    query = db.query(Event).filter(
        Event.status == EventStatus.UPCOMING,
        ~Event.id.in_(excluded)
    )
    if not caller.is_admin():
        query = query.filter(_visible_to(caller))
    events = query.order_by(Event.date.asc(), Event.id.asc()).all()

    results = []
    for event in events:
        own = [c for c in event.contributions if c.user_id == caller.user_id]
        results.append((event, own))
    return results


def list_exclusions(event_id: int, caller: Caller, db: Session) -> List[EventExclusion]:
    event = get_event(event_id, db)
    caller.require_owner(event, "view exclusions", allow_admin=True)
    return db.query(EventExclusion).filter(
        EventExclusion.event_id == event_id
    ).order_by(EventExclusion.id).all()


def exclude_user(event_id: int, user_id: str, caller: Caller, db: Session) -> EventExclusion:
    """
    Exclude a user from an event.

    Their unpaid contribution is removed; a user who already paid cannot be
    excluded. Shares of the remaining participants are not recomputed.
    """
    event = get_event(event_id, db)
    caller.require_owner(event, "exclude users")
    ensure_event_open(event, "change exclusions")

    if not db.query(User).filter(User.id == user_id).first():
        raise NotFoundError("User not found")
    if user_id == event.birthday_person_id:
        raise LedgerValidationError("The birthday person is never a participant")

    existing = db.query(EventExclusion).filter(
        EventExclusion.event_id == event_id,
        EventExclusion.excluded_user_id == user_id
    ).first()
    if existing:
        return existing

    contribution = db.query(Contribution).filter(
        Contribution.event_id == event_id,
        Contribution.user_id == user_id
    ).first()
    if contribution and contribution.paid:
        raise LedgerValidationError("Cannot exclude a user who has already paid")

    with transaction(db, "event_exclusions", "exclude_user"):
        if contribution:
            db.delete(contribution)
        exclusion = EventExclusion(event_id=event_id, excluded_user_id=user_id)
        db.add(exclusion)

    db.refresh(exclusion)
    logger.info(f"User {user_id} excluded from event {event_id} by {caller.user_id}")
    return exclusion


def include_user(event_id: int, user_id: str, caller: Caller, db: Session) -> None:
    """Remove an exclusion. No contribution is issued for the re-included user."""
    event = get_event(event_id, db)
    caller.require_owner(event, "remove exclusions")
    ensure_event_open(event, "change exclusions")

    exclusion = db.query(EventExclusion).filter(
        EventExclusion.event_id == event_id,
        EventExclusion.excluded_user_id == user_id
    ).first()
    if not exclusion:
        raise NotFoundError("User is not excluded from this event")

    with transaction(db, "event_exclusions", "include_user"):
        db.delete(exclusion)

    logger.info(f"User {user_id} re-included in event {event_id} by {caller.user_id}")
