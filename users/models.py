# src/users/models.py
from sqlalchemy import Column, Integer, String, Text, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime

ACCOUNT_STATUSES = ("active", "cancelled")


class User(Base):
    """Represents a car-wash customer."""
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)
    name: str = Column(String, nullable=False)
    email: str = Column(String, unique=True, index=True, nullable=False)
    phone: str = Column(String, nullable=True)
    address: str = Column(String, nullable=True)
    account_status: str = Column(String, nullable=False, default="active")
    cancelled_at: datetime = Column(DateTime, nullable=True)
    cancelled_by: str = Column(String, nullable=True)
    cancelled_reason: str = Column(String, nullable=True)
    csr_notes: str = Column(Text, nullable=True)
    created_at: datetime = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, nullable=True)
    deleted_at: datetime = Column(DateTime, nullable=True)

    vehicles = relationship("Vehicle", back_populates="user")
    subscriptions = relationship("Subscription", back_populates="user")
    payment_methods = relationship("PaymentMethod", back_populates="user")
    payments = relationship("Payment", back_populates="user")
    washes = relationship("Wash", back_populates="user")

    __table_args__ = (
        CheckConstraint("account_status IN ('active', 'cancelled')", name="ck_users_account_status"),
    )
