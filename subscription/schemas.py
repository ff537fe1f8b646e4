# src/subscription/schemas.py
from pydantic import BaseModel, field_validator, ValidationInfo
from datetime import datetime
from decimal import Decimal
from typing import Optional, Literal

from results import check_record_id

SubscriptionStatus = Literal["active", "inactive", "overdue", "transferred"]


class SubscriptionCreate(BaseModel):
    """Schema for creating a subscription."""
    user_id: int
    vehicle_id: int
    plan_id: int
    payment_method_id: int

    @field_validator("user_id")
    @classmethod
    def check_user(cls, v: int) -> int:
        return check_record_id(v, "Please select a user")

    @field_validator("vehicle_id")
    @classmethod
    def check_vehicle(cls, v: int) -> int:
        return check_record_id(v, "Please select a vehicle")

    @field_validator("plan_id")
    @classmethod
    def check_plan(cls, v: int) -> int:
        return check_record_id(v, "Please select a plan")

    @field_validator("payment_method_id")
    @classmethod
    def check_payment_method(cls, v: int) -> int:
        return check_record_id(v, "Please select a payment method")


class SubscriptionTransferCreate(BaseModel):
    """Schema for moving a subscription to another vehicle."""
    subscription_id: int
    from_vehicle_id: int
    to_vehicle_id: int
    transfer_reason: Optional[str] = None
    transferred_by: Optional[str] = None

    @field_validator("subscription_id")
    @classmethod
    def check_subscription(cls, v: int) -> int:
        return check_record_id(v, "Please select a subscription")

    @field_validator("from_vehicle_id")
    @classmethod
    def check_from_vehicle(cls, v: int) -> int:
        return check_record_id(v, "Please select a vehicle")

    @field_validator("to_vehicle_id")
    @classmethod
    def check_to_vehicle(cls, v: int, info: ValidationInfo) -> int:
        check_record_id(v, "Please select a vehicle")
        if info.data.get("from_vehicle_id") == v:
            raise ValueError("Destination vehicle must differ from the current vehicle")
        return v


class SubscriptionPlanResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    price: Decimal
    washes_per_month: int
    is_active: bool

    class Config:
        from_attributes = True


class SubscriptionResponse(BaseModel):
    """Schema for subscription response."""
    id: int
    user_id: int
    vehicle_id: int
    plan_id: int
    remaining_washes: int
    status: SubscriptionStatus
    billing_period_start: datetime
    payment_due_date: datetime
    last_payment_date: Optional[datetime] = None
    last_payment_status: Optional[str] = None
    cancellation_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubscriptionWithPlanResponse(SubscriptionResponse):
    plan: SubscriptionPlanResponse


class SubscriptionTransferResponse(BaseModel):
    id: int
    subscription_id: int
    new_subscription_id: Optional[int]
    from_vehicle_id: int
    to_vehicle_id: int
    transfer_reason: Optional[str]
    transferred_at: datetime
    transferred_by: str

    class Config:
        from_attributes = True
