# src/admin/routes.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from subscription.models import Subscription, SubscriptionTransfer
from subscription.schemas import SubscriptionResponse, SubscriptionTransferResponse
from payment.schemas import PaymentResponse, CouponResponse
from payment.services import PaymentService
from database import get_db
from config import settings

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/subscriptions", response_model=List[SubscriptionResponse])
def get_subscriptions(
    status: Optional[str] = None,
    vehicle_id: Optional[int] = Query(None, ge=1, le=settings.MAX_RECORD_ID),
    db: Session = Depends(get_db)
):
    """Retrieve subscriptions with optional status and vehicle filters."""
    query = db.query(Subscription)
    if status:
        query = query.filter(Subscription.status == status)
    if vehicle_id:
        query = query.filter(Subscription.vehicle_id == vehicle_id)
    return [SubscriptionResponse.model_validate(sub) for sub in query.order_by(Subscription.id).all()]


@router.get("/payments", response_model=List[PaymentResponse])
def get_payments(
    status: Optional[str] = None,
    item_type: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Retrieve payments with optional status and item type filters."""
    return PaymentService.get_payments(status, item_type, db)


@router.get("/transfers", response_model=List[SubscriptionTransferResponse])
def get_transfers(
    subscription_id: Optional[int] = Query(None, ge=1, le=settings.MAX_RECORD_ID),
    db: Session = Depends(get_db)
):
    """Retrieve the subscription transfer audit trail."""
    query = db.query(SubscriptionTransfer)
    if subscription_id:
        query = query.filter(SubscriptionTransfer.subscription_id == subscription_id)
    transfers = query.order_by(SubscriptionTransfer.transferred_at.desc(), SubscriptionTransfer.id.desc()).all()
    return [SubscriptionTransferResponse.model_validate(t) for t in transfers]


@router.get("/coupons", response_model=List[CouponResponse])
def get_coupons(active: Optional[bool] = None, db: Session = Depends(get_db)):
    return PaymentService.get_coupons(active, db)
