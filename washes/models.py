# src/washes/models.py
from sqlalchemy import Column, Integer, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime


class Wash(Base):
    """A wash redeemed against a subscription, or a standalone paid wash."""
    __tablename__ = "washes"

    id: int = Column(Integer, primary_key=True, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    vehicle_id: int = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    subscription_id: int = Column(Integer, ForeignKey("subscriptions.id"), nullable=True)
    created_at: datetime = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, nullable=True)
    deleted_at: datetime = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="washes")
    vehicle = relationship("Vehicle", back_populates="washes")
    subscription = relationship("Subscription", back_populates="washes")
