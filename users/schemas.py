# src/users/schemas.py
from pydantic import BaseModel, EmailStr, field_validator
from datetime import datetime
from typing import Optional, List, Literal

from vehicles.schemas import VehicleResponse
from subscription.schemas import SubscriptionWithPlanResponse
from payment.schemas import PaymentResponse, PaymentMethodResponse
from washes.schemas import WashResponse
from results import check_record_id

AccountStatus = Literal["active", "cancelled"]


class UserUpdate(BaseModel):
    """Schema for a CSR editing a customer profile."""
    id: int
    name: str
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    account_status: AccountStatus = "active"
    cancelled_reason: Optional[str] = None

    @field_validator("id")
    @classmethod
    def check_id(cls, v: int) -> int:
        return check_record_id(v, "Invalid user id")

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) < 10:
            raise ValueError("Phone number must be at least 10 digits")
        return v


class CSRNoteCreate(BaseModel):
    user_id: int
    csr_notes: str

    @field_validator("user_id")
    @classmethod
    def check_user(cls, v: int) -> int:
        return check_record_id(v, "Please select a user")

    @field_validator("csr_notes")
    @classmethod
    def check_length(cls, v: str) -> str:
        if len(v) < 10:
            raise ValueError("Note must be at least 10 characters.")
        if len(v) > 500:
            raise ValueError("Note must not be longer than 500 characters.")
        return v


class UserResponse(BaseModel):
    """Schema for user response."""
    id: int
    name: str
    email: str
    phone: Optional[str]
    address: Optional[str]
    account_status: AccountStatus
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    cancelled_reason: Optional[str] = None
    csr_notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserDetail(BaseModel):
    """A user with everything a CSR needs on one screen."""
    user: UserResponse
    vehicles: List[VehicleResponse]
    subscriptions: List[SubscriptionWithPlanResponse]
    payments: List[PaymentResponse]
    payment_methods: List[PaymentMethodResponse]
    washes: List[WashResponse]
    next_payment_date: Optional[datetime]
    last_wash_date: Optional[datetime]
    is_overdue: bool


class UserTableRow(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str]
    address: Optional[str]
    account_status: AccountStatus
    updated_at: Optional[datetime]
    vehicle_count: int
    active_subscription_count: int
    last_wash_date: Optional[datetime]
    next_payment_date: Optional[datetime]
    is_overdue: bool
