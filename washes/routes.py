# src/washes/routes.py
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session
from typing import Any, Dict
from washes.services import WashService
from results import ActionResult
from database import get_db

router = APIRouter(prefix="/washes", tags=["washes"])


@router.post("/", response_model=ActionResult)
def record_wash(payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Redeem a wash against the vehicle's active subscription."""
    return WashService.record_wash(payload, db)
