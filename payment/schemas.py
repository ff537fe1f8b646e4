# src/payment/schemas.py
from pydantic import BaseModel, field_validator
from datetime import datetime
from decimal import Decimal
from typing import Optional, Literal

from config import settings
from results import check_record_id


class PaymentMethodCreate(BaseModel):
    """Schema for adding a card to a user."""
    user_id: int
    card_last4: int
    card_exp_month: int
    card_exp_year: int
    is_default: bool = False

    @field_validator("user_id")
    @classmethod
    def check_user(cls, v: int) -> int:
        return check_record_id(v, "Please select a user")

    @field_validator("card_last4")
    @classmethod
    def check_last4(cls, v: int) -> int:
        if not 1001 <= v <= 9999:
            raise ValueError("Card number must end in four digits between 1001 and 9999")
        return v

    @field_validator("card_exp_month")
    @classmethod
    def check_month(cls, v: int) -> int:
        if not 1 <= v <= 12:
            raise ValueError("Expiry month must be between 1 and 12")
        return v

    @field_validator("card_exp_year")
    @classmethod
    def check_year(cls, v: int) -> int:
        current_year = datetime.utcnow().year
        if v < current_year:
            raise ValueError("Card is expired")
        if v > current_year + settings.CARD_MAX_YEARS_AHEAD:
            raise ValueError("Expiry year is too far in the future")
        return v


class PaymentMethodResponse(BaseModel):
    id: int
    user_id: int
    card_last4: int
    card_exp_month: int
    card_exp_year: int
    is_default: bool
    created_at: datetime

    class Config:
        from_attributes = True


class PaymentResponse(BaseModel):
    """Schema for payment response."""
    id: int
    user_id: int
    payment_method_id: int
    item_type: Literal["subscription", "wash"]
    subscription_id: Optional[int]
    wash_id: Optional[int]
    coupon_id: Optional[int]
    base_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    status: Literal["paid", "failed", "pending", "refunded"]
    status_reason: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class CouponResponse(BaseModel):
    id: int
    code: str
    discount_amount: Decimal
    is_active: bool
    valid_from: Optional[datetime]
    valid_to: Optional[datetime]
    usage_count: int = 0

    class Config:
        from_attributes = True
