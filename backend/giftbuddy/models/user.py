"""
User model for team members and their payment contacts.
"""
from sqlalchemy import Column, String, Date, Enum as SQLEnum
from sqlalchemy.orm import relationship
from giftbuddy.db.base import BaseModel
import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    USER = "user"
    ADMIN = "admin"


class User(BaseModel):
    """User model keyed by the identity provider's stable id."""
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(100), nullable=True)
    birthday = Column(Date, nullable=True)
    upi_id = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    role = Column(SQLEnum(UserRole), default=UserRole.USER, nullable=False)

    # Relationships
    contributions = relationship("Contribution", back_populates="user", cascade="all, delete-orphan")
    exclusions = relationship("EventExclusion", back_populates="user", cascade="all, delete-orphan")
