# src/payment/models.py
from sqlalchemy import (
    Column, Integer, String, ForeignKey, DateTime, Boolean, Numeric, Index, CheckConstraint, text
)
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime
from decimal import Decimal

PAYMENT_STATUSES = ("paid", "failed", "pending", "refunded")
ITEM_TYPES = ("subscription", "wash")


class PaymentMethod(Base):
    """A stored card for a user."""
    __tablename__ = "payment_methods"

    id: int = Column(Integer, primary_key=True, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    card_last4: int = Column(Integer, nullable=False)
    card_exp_month: int = Column(Integer, nullable=False)
    card_exp_year: int = Column(Integer, nullable=False)
    is_default: bool = Column(Boolean, nullable=False, default=False)
    created_at: datetime = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, nullable=True)
    deleted_at: datetime = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="payment_methods")
    payments = relationship("Payment", back_populates="payment_method")

    __table_args__ = (
        # one default card per user
        Index(
            "uq_payment_methods_default_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("is_default"),
            sqlite_where=text("is_default = 1"),
        ),
    )


class Payment(Base):
    """Represents a payment for a subscription period or a single wash."""
    __tablename__ = "payments"

    id: int = Column(Integer, primary_key=True, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    payment_method_id: int = Column(Integer, ForeignKey("payment_methods.id"), nullable=False)
    item_type: str = Column(String, nullable=False)  # subscription, wash
    subscription_id: int = Column(Integer, ForeignKey("subscriptions.id"), nullable=True)
    wash_id: int = Column(Integer, ForeignKey("washes.id"), nullable=True)
    coupon_id: int = Column(Integer, ForeignKey("coupons.id"), nullable=True)
    base_amount: Decimal = Column(Numeric(10, 2), nullable=False)
    discount_amount: Decimal = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    final_amount: Decimal = Column(Numeric(10, 2), nullable=False)
    status: str = Column(String, nullable=False, default="pending")  # paid, failed, pending, refunded
    status_reason: str = Column(String, nullable=True)
    created_at: datetime = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, nullable=True)
    deleted_at: datetime = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="payments")
    payment_method = relationship("PaymentMethod", back_populates="payments")
    subscription = relationship("Subscription", back_populates="payments")
    coupon = relationship("Coupon", back_populates="payments")

    __table_args__ = (
        CheckConstraint(
            "(item_type = 'subscription' AND subscription_id IS NOT NULL AND wash_id IS NULL) OR "
            "(item_type = 'wash' AND wash_id IS NOT NULL AND subscription_id IS NULL)",
            name="ck_payments_item_reference",
        ),
        CheckConstraint(
            "status IN ('paid', 'failed', 'pending', 'refunded')",
            name="ck_payments_status",
        ),
    )


class Coupon(Base):
    """A discount code with a validity window."""
    __tablename__ = "coupons"

    id: int = Column(Integer, primary_key=True, index=True)
    code: str = Column(String, unique=True, nullable=False)
    discount_amount: Decimal = Column(Numeric(10, 2), nullable=False)
    is_active: bool = Column(Boolean, nullable=False, default=True)
    valid_from: datetime = Column(DateTime, nullable=True)
    valid_to: datetime = Column(DateTime, nullable=True)
    created_at: datetime = Column(DateTime, nullable=False, default=datetime.utcnow)

    payments = relationship("Payment", back_populates="coupon")
