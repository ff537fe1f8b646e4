# src/subscription/models.py
from sqlalchemy import (
    Column, Integer, String, ForeignKey, DateTime, Boolean, Numeric, Index, CheckConstraint, text
)
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime
from decimal import Decimal

SUBSCRIPTION_STATUSES = ("active", "inactive", "overdue", "transferred")
PLAN_NAMES = ("bronze", "silver", "gold", "platinum")


class SubscriptionPlan(Base):
    """A plan tier fixing the monthly price and wash quota."""
    __tablename__ = "subscription_plans"

    id: int = Column(Integer, primary_key=True, index=True)
    name: str = Column(String, unique=True, nullable=False)
    description: str = Column(String, nullable=True)
    price: Decimal = Column(Numeric(10, 2), nullable=False)
    washes_per_month: int = Column(Integer, nullable=False)
    is_active: bool = Column(Boolean, nullable=False, default=True)
    created_at: datetime = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, nullable=True)
    deleted_at: datetime = Column(DateTime, nullable=True)

    subscriptions = relationship("Subscription", back_populates="plan")

    __table_args__ = (
        CheckConstraint("name IN ('bronze', 'silver', 'gold', 'platinum')", name="ck_subscription_plans_name"),
    )


class Subscription(Base):
    """Links a user, one of their vehicles and a plan."""
    __tablename__ = "subscriptions"

    id: int = Column(Integer, primary_key=True, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    vehicle_id: int = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    plan_id: int = Column(Integer, ForeignKey("subscription_plans.id"), nullable=False)
    remaining_washes: int = Column(Integer, nullable=False, default=0)
    status: str = Column(String, nullable=False, default="active")
    billing_period_start: datetime = Column(DateTime, nullable=False)
    payment_due_date: datetime = Column(DateTime, nullable=False)
    last_payment_date: datetime = Column(DateTime, nullable=True)
    last_payment_status: str = Column(String, nullable=True)
    cancellation_date: datetime = Column(DateTime, nullable=True)
    created_at: datetime = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, nullable=True)
    deleted_at: datetime = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="subscriptions")
    vehicle = relationship("Vehicle", back_populates="subscriptions")
    plan = relationship("SubscriptionPlan", back_populates="subscriptions")
    payments = relationship("Payment", back_populates="subscription")
    washes = relationship("Wash", back_populates="subscription")

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'inactive', 'overdue', 'transferred')",
            name="ck_subscriptions_status",
        ),
        CheckConstraint("remaining_washes >= 0", name="ck_subscriptions_remaining_washes"),
        # at most one active subscription per vehicle
        Index(
            "uq_subscriptions_active_vehicle",
            "vehicle_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )


class SubscriptionTransfer(Base):
    """Audit record of a subscription moved between vehicles."""
    __tablename__ = "subscription_transfers"

    id: int = Column(Integer, primary_key=True, index=True)
    subscription_id: int = Column(Integer, ForeignKey("subscriptions.id"), nullable=False, index=True)
    new_subscription_id: int = Column(Integer, ForeignKey("subscriptions.id"), nullable=True)
    from_vehicle_id: int = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    to_vehicle_id: int = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    transfer_reason: str = Column(String, nullable=True)
    transferred_at: datetime = Column(DateTime, nullable=False, default=datetime.utcnow)
    transferred_by: str = Column(String, nullable=False, default="system")
    created_at: datetime = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, nullable=True)
    deleted_at: datetime = Column(DateTime, nullable=True)

    subscription = relationship("Subscription", foreign_keys=[subscription_id])
    new_subscription = relationship("Subscription", foreign_keys=[new_subscription_id])
