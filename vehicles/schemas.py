# src/vehicles/schemas.py
from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Optional, Literal

from config import settings
from results import check_record_id

VehicleColor = Literal["black", "blue", "bronze", "gold", "gray", "green", "red", "silver", "white", "yellow"]


class VehicleCreate(BaseModel):
    """Schema for adding a vehicle to a user."""
    user_id: int
    make: str
    model: str
    year: int
    color: VehicleColor
    license_plate: str

    @field_validator("user_id")
    @classmethod
    def check_user(cls, v: int) -> int:
        return check_record_id(v, "Please select a user")

    @field_validator("make")
    @classmethod
    def check_make(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Make is required")
        return v.strip()

    @field_validator("model")
    @classmethod
    def check_model(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Model is required")
        return v.strip()

    @field_validator("year")
    @classmethod
    def check_year(cls, v: int) -> int:
        if v < settings.VEHICLE_MIN_YEAR:
            raise ValueError(f"Year must be {settings.VEHICLE_MIN_YEAR} or later")
        if v > datetime.utcnow().year + 1:
            raise ValueError("Year must be less than or equal to the current year")
        return v

    @field_validator("license_plate")
    @classmethod
    def check_plate(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) < 7:
            raise ValueError("License plate must be at least 7 characters")
        return v


class VehicleResponse(BaseModel):
    """Schema for vehicle response."""
    id: int
    user_id: int
    make: str
    model: str
    year: int
    color: str
    license_plate: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
