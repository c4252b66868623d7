"""
Gift model for items bought for an event.
"""
from sqlalchemy import Column, String, Text, ForeignKey, Integer
from sqlalchemy.orm import relationship
from giftbuddy.db.base import BaseModel


class Gift(BaseModel):
    """Gift model; total_amount is in currency subunits."""
    __tablename__ = "gifts"

    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    gift_name = Column(String(200), nullable=False)
    gift_link = Column(Text, nullable=True)
    total_amount = Column(Integer, nullable=False)

    # Relationships
    event = relationship("Event", back_populates="gifts")
    contributions = relationship("Contribution", back_populates="gift", passive_deletes=True)
