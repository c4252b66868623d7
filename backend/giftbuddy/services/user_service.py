"""
User service for profiles and admin member management.
"""
import logging
import uuid
from sqlalchemy.orm import Session
from typing import List
from giftbuddy.core.exceptions import NotFoundError
from giftbuddy.db.session import transaction
from giftbuddy.models.user import User, UserRole
from giftbuddy.schemas.user import ProfileUpsert, UserCreate, UserUpdate
from giftbuddy.services.capability import Caller

logger = logging.getLogger(__name__)


def get_user(user_id: str, db: Session) -> User:
    """Fetch a user or raise NotFoundError."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def upsert_profile(user_id: str, data: ProfileUpsert, db: Session) -> User:
    """
    Create or refresh the profile row for an authenticated identity.

    Called after signup/login. New rows get the ``user`` role; an existing
    role is never changed here.
    """
    user = db.query(User).filter(User.id == user_id).first()

    with transaction(db, "users", "upsert_profile"):
        if user is None:
            user = User(id=user_id, role=UserRole.USER)
            db.add(user)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(user, field, value)

    db.refresh(user)
    return user


def list_users(caller: Caller, db: Session) -> List[User]:
    caller.require_admin("list users")
    return db.query(User).order_by(User.name, User.id).all()


def create_user(data: UserCreate, caller: Caller, db: Session) -> User:
    """Admin-created member without a login of their own yet."""
    caller.require_admin("create users")

    with transaction(db, "users", "create_user"):
        user = User(
            id=f"user_{uuid.uuid4().hex}",
            name=data.name,
            birthday=data.birthday,
            upi_id=data.upi_id or None,
            phone=data.phone or None,
            role=UserRole.USER
        )
        db.add(user)

    db.refresh(user)
    logger.info(f"User {user.id} created by {caller.user_id}")
    return user


def update_user(user_id: str, patch: UserUpdate, caller: Caller, db: Session) -> User:
    caller.require_admin("update users")
    user = get_user(user_id, db)

    with transaction(db, "users", "update_user"):
        for field, value in patch.model_dump(exclude_unset=True).items():
            if field in ("name", "role") and value is None:
                continue
            setattr(user, field, value)

    db.refresh(user)
    logger.info(f"User {user_id} updated by {caller.user_id}")
    return user


def delete_user(user_id: str, caller: Caller, db: Session) -> None:
    """
    Delete a user and their contributions and exclusions.

    Events they organized or celebrate are kept; their references are nulled.
    """
    caller.require_admin("delete users")
    user = get_user(user_id, db)

    with transaction(db, "users", "delete_user"):
        db.delete(user)

    logger.info(f"User {user_id} deleted by {caller.user_id}")
