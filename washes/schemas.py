# src/washes/schemas.py
from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Optional

from results import check_record_id


class WashCreate(BaseModel):
    """Schema for redeeming a subscription wash."""
    user_id: int
    vehicle_id: int

    @field_validator("user_id", "vehicle_id")
    @classmethod
    def check_positive(cls, v: int) -> int:
        return check_record_id(v, "Please select a value")


class WashResponse(BaseModel):
    id: int
    user_id: int
    vehicle_id: int
    subscription_id: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True
