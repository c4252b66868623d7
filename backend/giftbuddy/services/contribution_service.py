"""
Contribution service: payment marking, amount corrections and listings.
"""
import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session, joinedload
from typing import List
from giftbuddy.core.exceptions import LedgerValidationError, NotFoundError
from giftbuddy.db.session import transaction
from giftbuddy.models.contribution import Contribution
from giftbuddy.models.event import Event
from giftbuddy.schemas.contribution import ContributionUpdate
from giftbuddy.services.capability import Caller
from giftbuddy.services.event_service import ensure_event_open, get_event

logger = logging.getLogger(__name__)


def get_contribution(contribution_id: int, db: Session) -> Contribution:
    """Fetch a contribution or raise NotFoundError."""
    contribution = db.query(Contribution).filter(Contribution.id == contribution_id).first()
    if not contribution:
        raise NotFoundError("Contribution not found")
    return contribution


def _set_paid(contribution: Contribution, paid: bool) -> None:
    # payment_time is stamped only on the false -> true transition
    if paid and not contribution.paid:
        contribution.paid = True
        contribution.payment_time = datetime.now(timezone.utc)
    elif not paid and contribution.paid:
        contribution.paid = False
        contribution.payment_time = None


def mark_contribution_paid(
    event_id: int,
    caller: Caller,
    db: Session,
    user_id: str = None
) -> List[Contribution]:
    """
    Mark a participant's contribution to an event as paid.

    Participants mark their own; admins may pass ``user_id`` to mark someone
    else's. Marking an already-paid contribution changes nothing.
    """
    target_id = user_id or caller.user_id
    if target_id != caller.user_id:
        caller.require_admin("mark payments for other users")

    event = get_event(event_id, db)
    ensure_event_open(event, "mark payments")

    contributions = db.query(Contribution).filter(
        Contribution.event_id == event_id,
        Contribution.user_id == target_id
    ).all()
    if not contributions:
        raise NotFoundError("No contributions found for this event")

    with transaction(db, "contributions", "mark_paid"):
        for contribution in contributions:
            _set_paid(contribution, True)

    for contribution in contributions:
        db.refresh(contribution)
    logger.info(f"Payment marked for {target_id} on event {event_id} by {caller.user_id}")
    return contributions


def set_contribution_amount(
    contribution_id: int,
    new_amount: int,
    caller: Caller,
    db: Session
) -> Contribution:
    """Organizer's correction of one share. Other shares are left untouched."""
    contribution = get_contribution(contribution_id, db)
    caller.require_owner(contribution.event, "correct contribution amounts")
    ensure_event_open(contribution.event, "change contributions")
    if new_amount < 0:
        raise LedgerValidationError("Contribution amount cannot be negative")

    with transaction(db, "contributions", "set_amount"):
        contribution.split_amount = new_amount

    db.refresh(contribution)
    logger.info(f"Contribution {contribution_id} set to {new_amount} by {caller.user_id}")
    return contribution


def update_contribution(
    contribution_id: int,
    patch: ContributionUpdate,
    caller: Caller,
    db: Session
) -> Contribution:
    """Admin patch of split_amount and/or paid."""
    caller.require_admin("edit contributions")
    contribution = get_contribution(contribution_id, db)
    ensure_event_open(contribution.event, "change contributions")

    changes = patch.model_dump(exclude_unset=True)
    if any(value is None for value in changes.values()):
        raise LedgerValidationError("Contribution fields cannot be null")

    with transaction(db, "contributions", "update_contribution"):
        if "split_amount" in changes:
            contribution.split_amount = changes["split_amount"]
        if "paid" in changes:
            _set_paid(contribution, changes["paid"])

    db.refresh(contribution)
    logger.info(f"Contribution {contribution_id} updated by {caller.user_id}: {sorted(changes)}")
    return contribution


def delete_contribution(contribution_id: int, caller: Caller, db: Session) -> None:
    caller.require_admin("delete contributions")
    contribution = get_contribution(contribution_id, db)
    ensure_event_open(contribution.event, "change contributions")

    with transaction(db, "contributions", "delete_contribution"):
        db.delete(contribution)

    logger.info(f"Contribution {contribution_id} deleted by {caller.user_id}")


def list_contributions(caller: Caller, db: Session) -> List[Contribution]:
    """Every contribution, newest first, with user, event and gifts loaded."""
    caller.require_admin("list contributions")
    return db.query(Contribution).options(
        joinedload(Contribution.user),
        joinedload(Contribution.event).selectinload(Event.gifts)
    ).order_by(Contribution.created_at.desc(), Contribution.id.desc()).all()


def list_user_contributions(user_id: str, caller: Caller, db: Session) -> List[Contribution]:
    """A user's contributions across events, newest first."""
    if user_id != caller.user_id:
        caller.require_admin("view other users' contributions")
    return db.query(Contribution).filter(
        Contribution.user_id == user_id
    ).order_by(Contribution.created_at.desc(), Contribution.id.desc()).all()


def get_payment_status(event_id: int, user_id: str, caller: Caller, db: Session) -> dict:
    """Total, paid and pending amounts a user owes on one event."""
    if user_id != caller.user_id:
        caller.require_admin("view other users' payment status")
    get_event(event_id, db)

    contributions = db.query(Contribution).filter(
        Contribution.event_id == event_id,
        Contribution.user_id == user_id
    ).all()

    total = sum(c.split_amount for c in contributions)
    paid = sum(c.split_amount for c in contributions if c.paid)
    payment_times = [c.payment_time for c in contributions if c.paid and c.payment_time]

    return {
        "event_id": event_id,
        "user_id": user_id,
        "total_amount": total,
        "paid_amount": paid,
        "pending_amount": total - paid,
        "paid_status": bool(contributions) and all(c.paid for c in contributions),
        "payment_time": min(payment_times) if payment_times else None,
    }
