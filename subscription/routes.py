# src/subscription/routes.py
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session
from typing import Any, Dict, List
from subscription.services import SubscriptionService
from subscription.schemas import SubscriptionPlanResponse
from results import ActionResult
from database import get_db

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.get("/plans", response_model=List[SubscriptionPlanResponse])
def get_plans(db: Session = Depends(get_db)):
    """List the plans a CSR can sell."""
    return SubscriptionService.get_plans(db)


@router.post("/", response_model=ActionResult)
def create_subscription(payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Create a subscription and charge its first period."""
    return SubscriptionService.create_subscription(payload, db)


@router.post("/transfer", response_model=ActionResult)
def transfer_subscription(payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Move an active subscription to another vehicle."""
    return SubscriptionService.transfer_subscription(payload, db)


@router.post("/{subscription_id}/cancel", response_model=ActionResult)
def cancel_subscription(subscription_id: int, db: Session = Depends(get_db)):
    return SubscriptionService.cancel_subscription(subscription_id, db)
