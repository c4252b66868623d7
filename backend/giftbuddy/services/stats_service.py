"""
Read-only rollups over contribution rows.

Everything is recomputed from the fetched rows on each read.
"""
from sqlalchemy.orm import Session
from typing import Dict, Iterable
from giftbuddy.core.utils import percentage
from giftbuddy.models.event import Event, EventStatus
from giftbuddy.models.contribution import Contribution


def summarize_contributions(contributions: Iterable[Contribution]) -> Dict[str, int]:
    """Collected/pending totals and counts for a set of contributions."""
    collected = 0
    pending = 0
    count = 0
    paid_count = 0
    for contribution in contributions:
        count += 1
        if contribution.paid:
            collected += contribution.split_amount
            paid_count += 1
        else:
            pending += contribution.split_amount

    return {
        "total_amount": collected + pending,
        "total_collected": collected,
        "total_pending": pending,
        "contributions_count": count,
        "paid_count": paid_count,
        "collection_percentage": percentage(collected, collected + pending),
    }


def event_stats(event: Event) -> Dict[str, int]:
    """Contribution summary plus gift and contributor counts for one event."""
    summary = summarize_contributions(event.contributions)
    return {
        "total_contributions": summary["contributions_count"],
        "total_collected": summary["total_collected"],
        "total_pending": summary["total_pending"],
        "paid_count": summary["paid_count"],
        "collection_percentage": summary["collection_percentage"],
        "gifts_count": len(event.gifts),
        "contributors_count": len({c.user_id for c in event.contributions}),
        "total_gift_amount": sum(g.total_amount for g in event.gifts),
    }


def admin_dashboard_stats(db: Session) -> Dict[str, int]:
    """Ledger-wide rollup across every event."""
    statuses = [row.status for row in db.query(Event.status).all()]
    summary = summarize_contributions(db.query(Contribution).all())

    return {
        "total_events": len(statuses),
        "upcoming_events": statuses.count(EventStatus.UPCOMING),
        "completed_events": statuses.count(EventStatus.COMPLETED),
        "cancelled_events": statuses.count(EventStatus.CANCELLED),
        "total_collected": summary["total_collected"],
        "total_pending": summary["total_pending"],
        "total_contributions": summary["contributions_count"],
        "paid_contributions": summary["paid_count"],
        "collection_percentage": summary["collection_percentage"],
    }


def dashboard_stats(db: Session) -> Dict[str, int]:
    """Active events, contributing members, money collected and participation."""
    active_events = db.query(Event).filter(Event.status == EventStatus.UPCOMING).count()
    contributions = db.query(Contribution).all()
    summary = summarize_contributions(contributions)

    return {
        "active_events": active_events,
        "total_members": len({c.user_id for c in contributions}),
        "collected": summary["total_collected"],
        "participation": percentage(summary["paid_count"], summary["contributions_count"]),
    }
