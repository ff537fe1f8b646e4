# src/washes/services.py
import logging

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Any, Dict

from washes.models import Wash
from washes.schemas import WashCreate, WashResponse
from subscription.models import Subscription
from subscription.schemas import SubscriptionResponse
from results import ActionResult, flatten_validation_errors

logger = logging.getLogger(__name__)


class WashService:
    @staticmethod
    def record_wash(inputs: Dict[str, Any], db: Session) -> ActionResult:
        """Redeem one wash from the vehicle's active subscription."""
        try:
            data = WashCreate.model_validate(inputs)
        except ValidationError as e:
            return ActionResult.fail(flatten_validation_errors(e))

        try:
            subscription = db.query(Subscription).filter(
                Subscription.vehicle_id == data.vehicle_id,
                Subscription.user_id == data.user_id,
                Subscription.status == "active"
            ).first()
            if not subscription:
                return ActionResult.field_error("vehicle_id", "No active subscription for this vehicle")

            # Quota check and decrement happen in one UPDATE
            now = datetime.utcnow()
            redeemed = db.query(Subscription).filter(
                Subscription.id == subscription.id,
                Subscription.status == "active",
                Subscription.remaining_washes > 0
            ).update({
                "remaining_washes": Subscription.remaining_washes - 1,
                "updated_at": now,
            }, synchronize_session=False)
            if not redeemed:
                db.rollback()
                return ActionResult.field_error("subscription_id", "No washes remaining this billing period")

            wash = Wash(
                user_id=data.user_id,
                vehicle_id=data.vehicle_id,
                subscription_id=subscription.id,
                created_at=now,
            )
            db.add(wash)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to record wash: {str(e)}", exc_info=True)
            return ActionResult.form_error("Failed to record wash. Please try again.")

        logger.info(f"Recorded wash {wash.id} on subscription {subscription.id}, {subscription.remaining_washes} left")
        return ActionResult.ok({
            "wash": WashResponse.model_validate(wash).model_dump(mode="json"),
            "subscription": SubscriptionResponse.model_validate(subscription).model_dump(mode="json"),
        })
