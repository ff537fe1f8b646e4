# src/payment/routes.py
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session
from typing import Any, Dict
from payment.services import PaymentService
from results import ActionResult
from database import get_db

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/methods", response_model=ActionResult)
def create_payment_method(payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Add a card to a customer, optionally as their default."""
    return PaymentService.create_payment_method(payload, db)
