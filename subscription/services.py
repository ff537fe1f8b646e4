# src/subscription/services.py
import logging

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from subscription.models import Subscription, SubscriptionPlan, SubscriptionTransfer
from subscription.schemas import (
    SubscriptionCreate,
    SubscriptionTransferCreate,
    SubscriptionResponse,
    SubscriptionPlanResponse,
    SubscriptionTransferResponse,
)
from subscription.lifecycle import CANCEL, TRANSFER, IllegalTransition, require_transition
from payment.models import Payment, PaymentMethod
from vehicles.models import Vehicle
from results import ActionResult, flatten_validation_errors
from config import settings

logger = logging.getLogger(__name__)


class SubscriptionService:
    @staticmethod
    def get_plan(plan_id: int, db: Session) -> Optional[SubscriptionPlan]:
        return db.query(SubscriptionPlan).filter(
            SubscriptionPlan.id == plan_id,
            SubscriptionPlan.is_active == True
        ).first()

    @staticmethod
    def get_plans(db: Session) -> List[SubscriptionPlanResponse]:
        plans = db.query(SubscriptionPlan).filter(
            SubscriptionPlan.is_active == True
        ).order_by(SubscriptionPlan.price).all()
        return [SubscriptionPlanResponse.model_validate(p) for p in plans]

    @staticmethod
    def create_subscription(inputs: Dict[str, Any], db: Session) -> ActionResult:
        """Open a subscription and record its first payment in one transaction."""
        try:
            data = SubscriptionCreate.model_validate(inputs)
        except ValidationError as e:
            return ActionResult.fail(flatten_validation_errors(e))

        try:
            plan = SubscriptionService.get_plan(data.plan_id, db)
            if not plan:
                return ActionResult.field_error("plan_id", "Invalid plan selected")

            vehicle = db.get(Vehicle, data.vehicle_id)
            if not vehicle or vehicle.user_id != data.user_id:
                return ActionResult.field_error("vehicle_id", "Vehicle not found for this customer")
            payment_method = db.get(PaymentMethod, data.payment_method_id)
            if not payment_method or payment_method.user_id != data.user_id:
                return ActionResult.field_error("payment_method_id", "Payment method not found for this customer")

            now = datetime.utcnow()
            subscription = Subscription(
                user_id=data.user_id,
                vehicle_id=data.vehicle_id,
                plan_id=plan.id,
                remaining_washes=plan.washes_per_month,
                status="active",
                billing_period_start=now,
                payment_due_date=now + timedelta(days=settings.BILLING_PERIOD_DAYS),
                last_payment_date=now,
                last_payment_status="paid",
            )
            db.add(subscription)
            db.flush()

            payment = Payment(
                user_id=data.user_id,
                payment_method_id=data.payment_method_id,
                item_type="subscription",
                subscription_id=subscription.id,
                base_amount=plan.price,
                discount_amount=Decimal("0.00"),
                final_amount=plan.price,
                status="paid",
            )
            db.add(payment)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Subscription creation failed: {str(e)}", exc_info=True)
            return ActionResult.form_error("Failed to create subscription. Please try again.")

        logger.info(f"Created subscription {subscription.id} (plan {plan.name}) for vehicle {subscription.vehicle_id}")
        return ActionResult.ok(SubscriptionResponse.model_validate(subscription).model_dump(mode="json"))

    @staticmethod
    def transfer_subscription(inputs: Dict[str, Any], db: Session) -> ActionResult:
        """Retire a subscription on one vehicle and reopen it on another.

        The source row is kept with status ``transferred``; the destination gets
        a fresh row carrying the plan, remaining washes and billing dates. The
        audit row, the status change and the new row commit together.
        """
        try:
            data = SubscriptionTransferCreate.model_validate(inputs)
        except ValidationError as e:
            return ActionResult.fail(flatten_validation_errors(e))

        try:
            source = db.get(Subscription, data.subscription_id)
            if not source:
                return ActionResult.field_error("subscription_id", "Subscription not found")
            if source.vehicle_id != data.from_vehicle_id:
                return ActionResult.field_error("from_vehicle_id", "Subscription does not belong to this vehicle")

            target_vehicle = db.get(Vehicle, data.to_vehicle_id)
            if not target_vehicle:
                return ActionResult.field_error("to_vehicle_id", "Vehicle not found")
            if target_vehicle.user_id != source.user_id:
                return ActionResult.field_error("to_vehicle_id", "Vehicle belongs to another customer")

            try:
                new_status = require_transition(source.status, TRANSFER)
            except IllegalTransition as e:
                return ActionResult.field_error("subscription_id", str(e))

            now = datetime.utcnow()
            transfer = SubscriptionTransfer(
                subscription_id=source.id,
                from_vehicle_id=data.from_vehicle_id,
                to_vehicle_id=data.to_vehicle_id,
                transfer_reason=data.transfer_reason,
                transferred_at=now,
                transferred_by=data.transferred_by or settings.DEFAULT_TRANSFERRED_BY,
            )
            db.add(transfer)

            source.status = new_status
            source.updated_at = now
            db.flush()
            db.refresh(source)

            # No pre-check on the destination: the active-per-vehicle index rejects conflicts.
            new_subscription = Subscription(
                user_id=source.user_id,
                vehicle_id=data.to_vehicle_id,
                plan_id=source.plan_id,
                remaining_washes=source.remaining_washes,
                status="active",
                billing_period_start=source.billing_period_start,
                payment_due_date=source.payment_due_date,
                last_payment_date=source.last_payment_date,
                last_payment_status=source.last_payment_status,
            )
            db.add(new_subscription)
            db.flush()

            transfer.new_subscription_id = new_subscription.id
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Subscription transfer failed: {str(e)}", exc_info=True)
            return ActionResult.form_error("Failed to transfer subscription. Please try again.")

        logger.info(
            f"Transferred subscription {source.id} from vehicle {data.from_vehicle_id} "
            f"to vehicle {data.to_vehicle_id} as subscription {new_subscription.id}"
        )
        return ActionResult.ok({
            "transfer": SubscriptionTransferResponse.model_validate(transfer).model_dump(mode="json"),
            "previous_subscription": SubscriptionResponse.model_validate(source).model_dump(mode="json"),
            "subscription": SubscriptionResponse.model_validate(new_subscription).model_dump(mode="json"),
        })

    @staticmethod
    def cancel_subscription(subscription_id: int, db: Session) -> ActionResult:
        """Set a subscription inactive. Remaining washes are forfeited, not refunded."""
        if not isinstance(subscription_id, int) or not 1 <= subscription_id <= settings.MAX_RECORD_ID:
            return ActionResult.field_error("subscription_id", "Invalid subscription id")

        try:
            subscription = db.get(Subscription, subscription_id)
            if not subscription:
                return ActionResult.field_error("subscription_id", "Subscription not found")

            try:
                new_status = require_transition(subscription.status, CANCEL)
            except IllegalTransition as e:
                return ActionResult.field_error("subscription_id", str(e))

            if subscription.status != new_status:
                now = datetime.utcnow()
                subscription.status = new_status
                subscription.cancellation_date = now
                subscription.updated_at = now
                db.commit()
                logger.info(f"Cancelled subscription {subscription.id}")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Subscription cancellation failed: {str(e)}", exc_info=True)
            return ActionResult.form_error("Failed to cancel subscription. Please try again.")

        return ActionResult.ok(SubscriptionResponse.model_validate(subscription).model_dump(mode="json"))
