"""Models package - Import all models for SQLAlchemy registration."""
from giftbuddy.models.user import User, UserRole
from giftbuddy.models.event import Event, EventExclusion, EventStatus
from giftbuddy.models.gift import Gift
from giftbuddy.models.contribution import Contribution

__all__ = [
    "User",
    "UserRole",
    "Event",
    "EventExclusion",
    "EventStatus",
    "Gift",
    "Contribution",
]
