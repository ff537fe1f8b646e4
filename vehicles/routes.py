# src/vehicles/routes.py
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session
from typing import Any, Dict
from vehicles.services import VehicleService
from results import ActionResult
from database import get_db

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.post("/", response_model=ActionResult)
def create_vehicle(payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Add a vehicle to a customer."""
    return VehicleService.create_vehicle(payload, db)
