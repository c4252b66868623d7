"""
Per-request capability token.

The caller's role is read from the users table once per request and carried
through every service call, instead of re-querying it at each check.
"""
import logging
from dataclasses import dataclass
from sqlalchemy.orm import Session
from giftbuddy.core.exceptions import AuthorizationError, NotFoundError
from giftbuddy.models.user import User, UserRole
from giftbuddy.models.event import Event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
    """Authenticated identity with its resolved role."""
    user_id: str
    role: UserRole = UserRole.USER

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def owns_event(self, event: Event) -> bool:
        return event.created_by is not None and event.created_by == self.user_id

    def require_admin(self, action: str) -> None:
        """Raise AuthorizationError unless the caller is an admin."""
        if not self.is_admin():
            logger.warning(f"User {self.user_id} denied admin action: {action}")
            raise AuthorizationError(f"Only admins can {action}")

    def require_owner(self, event: Event, action: str, allow_admin: bool = False) -> None:
        """Raise AuthorizationError unless the caller created the event."""
        if self.owns_event(event) or (allow_admin and self.is_admin()):
            return
        logger.warning(f"User {self.user_id} denied on event {event.id}: {action}")
        raise AuthorizationError(f"Only the event creator can {action}")


def resolve_caller(user_id: str, db: Session) -> Caller:
    """Look up the caller's role. Unknown ids are rejected."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return Caller(user_id=user.id, role=user.role)
