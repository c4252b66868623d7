"""
Contribution model for a participant's share of an event.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from giftbuddy.db.base import BaseModel


class Contribution(BaseModel):
    """One participant's share of an event's pooled gift cost, in subunits."""
    __tablename__ = "contributions"

    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # NULL for pooled splits; per-gift breakdown is computed on read
    gift_id = Column(Integer, ForeignKey("gifts.id", ondelete="SET NULL"), nullable=True, index=True)
    split_amount = Column(Integer, nullable=False)
    paid = Column(Boolean, default=False, nullable=False)
    payment_time = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    event = relationship("Event", back_populates="contributions")
    user = relationship("User", back_populates="contributions")
    gift = relationship("Gift", back_populates="contributions")

    # One contribution per participant per event
    __table_args__ = (
        UniqueConstraint('event_id', 'user_id', name='uq_event_user_contribution'),
    )
