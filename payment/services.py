# src/payment/services.py
import logging

from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Any, Dict, List, Optional

from payment.models import Payment, PaymentMethod, Coupon
from payment.schemas import PaymentMethodCreate, PaymentMethodResponse, PaymentResponse, CouponResponse
from users.models import User
from results import ActionResult, flatten_validation_errors

logger = logging.getLogger(__name__)


class PaymentService:
    @staticmethod
    def create_payment_method(inputs: Dict[str, Any], db: Session) -> ActionResult:
        """Store a card; a new default demotes the previous one in the same transaction."""
        try:
            data = PaymentMethodCreate.model_validate(inputs)
        except ValidationError as e:
            return ActionResult.fail(flatten_validation_errors(e))

        try:
            if not db.get(User, data.user_id):
                return ActionResult.field_error("user_id", "User not found")

            if data.is_default:
                demoted = db.query(PaymentMethod).filter(
                    PaymentMethod.user_id == data.user_id,
                    PaymentMethod.is_default == True
                ).update({"is_default": False, "updated_at": datetime.utcnow()}, synchronize_session="fetch")
                if demoted:
                    logger.info(f"Demoted {demoted} default payment method(s) for user {data.user_id}")

            payment_method = PaymentMethod(**data.model_dump())
            db.add(payment_method)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create payment method: {str(e)}", exc_info=True)
            return ActionResult.form_error("Failed to create payment method. Please try again.")

        logger.info(f"Created payment method {payment_method.id} for user {data.user_id}")
        return ActionResult.ok(PaymentMethodResponse.model_validate(payment_method).model_dump(mode="json"))

    @staticmethod
    def get_payments(status: Optional[str], item_type: Optional[str], db: Session) -> List[PaymentResponse]:
        query = db.query(Payment)
        if status:
            query = query.filter(Payment.status == status)
        if item_type:
            query = query.filter(Payment.item_type == item_type)
        payments = query.order_by(Payment.created_at.desc(), Payment.id.desc()).all()
        return [PaymentResponse.model_validate(p) for p in payments]

    @staticmethod
    def get_coupons(active: Optional[bool], db: Session) -> List[CouponResponse]:
        usage_count = func.count(Payment.id)
        query = db.query(Coupon, usage_count).outerjoin(Payment, Payment.coupon_id == Coupon.id)
        if active is not None:
            query = query.filter(Coupon.is_active == active)
        rows = query.group_by(Coupon.id).order_by(Coupon.code).all()
        return [
            CouponResponse.model_validate(coupon).model_copy(update={"usage_count": count})
            for coupon, count in rows
        ]
