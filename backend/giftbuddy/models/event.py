"""
Event model for birthday celebrations.
"""
from sqlalchemy import Column, String, Date, Text, Enum as SQLEnum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from giftbuddy.db.base import BaseModel
import enum


class EventStatus(str, enum.Enum):
    """Event status enumeration. COMPLETED and CANCELLED are terminal."""
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not EventStatus.UPCOMING


class Event(BaseModel):
    """Event model; aggregate root for gifts, contributions and exclusions."""
    __tablename__ = "events"

    title = Column(String(200), nullable=False)
    date = Column(Date, nullable=False, index=True)
    status = Column(SQLEnum(EventStatus), default=EventStatus.UPCOMING, nullable=False, index=True)
    # Weak references: deleting a user nulls these instead of deleting the event
    birthday_person_id = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    note = Column(Text, nullable=True)
    upi_id = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)

    # Relationships
    birthday_person = relationship("User", foreign_keys=[birthday_person_id])
    creator = relationship("User", foreign_keys=[created_by])
    gifts = relationship("Gift", back_populates="event", cascade="all, delete-orphan", order_by="Gift.id")
    contributions = relationship("Contribution", back_populates="event", cascade="all, delete-orphan", order_by="Contribution.id")
    exclusions = relationship("EventExclusion", back_populates="event", cascade="all, delete-orphan")


class EventExclusion(BaseModel):
    """A user removed from an event's participant set."""
    __tablename__ = "event_exclusions"

    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    excluded_user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Relationships
    event = relationship("Event", back_populates="exclusions")
    user = relationship("User", back_populates="exclusions")

    __table_args__ = (
        UniqueConstraint('event_id', 'excluded_user_id', name='uq_event_exclusion'),
    )
