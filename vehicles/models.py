# src/vehicles/models.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime

VEHICLE_COLORS = ("black", "blue", "bronze", "gold", "gray", "green", "red", "silver", "white", "yellow")


class Vehicle(Base):
    """Represents a customer vehicle."""
    __tablename__ = "vehicles"

    id: int = Column(Integer, primary_key=True, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    make: str = Column(String, nullable=False)
    model: str = Column(String, nullable=False)
    year: int = Column(Integer, nullable=False)
    color: str = Column(String, nullable=False)
    license_plate: str = Column(String, nullable=False)
    created_at: datetime = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, nullable=True)
    deleted_at: datetime = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="vehicles")
    subscriptions = relationship("Subscription", back_populates="vehicle")
    washes = relationship("Wash", back_populates="vehicle")

    __table_args__ = (
        CheckConstraint(
            "color IN ('black', 'blue', 'bronze', 'gold', 'gray', 'green', 'red', 'silver', 'white', 'yellow')",
            name="ck_vehicles_color",
        ),
    )
