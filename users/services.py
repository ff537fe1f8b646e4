# src/users/services.py
import logging

from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, joinedload
from datetime import datetime
from typing import Any, Dict, List, Optional

from users.models import User
from users.schemas import UserUpdate, CSRNoteCreate, UserResponse, UserDetail, UserTableRow
from vehicles.models import Vehicle
from vehicles.schemas import VehicleResponse
from subscription.models import Subscription
from subscription.schemas import SubscriptionWithPlanResponse
from subscription.lifecycle import any_overdue
from payment.schemas import PaymentResponse, PaymentMethodResponse
from washes.schemas import WashResponse
from results import ActionResult, flatten_validation_errors
from config import settings

logger = logging.getLogger(__name__)

OPEN_STATUSES = ("active", "overdue")


def _newest_first(rows):
    return sorted(rows, key=lambda r: (r.created_at, r.id), reverse=True)


def _next_payment_date(subscriptions) -> Optional[datetime]:
    due_dates = [s.payment_due_date for s in subscriptions if s.status in OPEN_STATUSES]
    return min(due_dates) if due_dates else None


class UserService:
    @staticmethod
    def update_user(inputs: Dict[str, Any], db: Session) -> ActionResult:
        try:
            data = UserUpdate.model_validate(inputs)
        except ValidationError as e:
            return ActionResult.fail(flatten_validation_errors(e))

        try:
            user = db.get(User, data.id)
            if not user:
                return ActionResult.field_error("id", "User not found")

            now = datetime.utcnow()
            if data.account_status == "cancelled" and user.account_status != "cancelled":
                user.cancelled_at = now
                user.cancelled_by = "csr"
                user.cancelled_reason = data.cancelled_reason
            elif data.account_status == "active" and user.account_status == "cancelled":
                user.cancelled_at = None
                user.cancelled_by = None
                user.cancelled_reason = None

            user.name = data.name
            user.email = data.email
            user.phone = data.phone
            user.address = data.address
            user.account_status = data.account_status
            user.updated_at = now
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update user {data.id}: {str(e)}", exc_info=True)
            return ActionResult.form_error("Failed to update user. Please try again.")

        logger.info(f"Updated user {user.id}")
        return ActionResult.ok(UserResponse.model_validate(user).model_dump(mode="json"))

    @staticmethod
    def add_csr_note(inputs: Dict[str, Any], db: Session) -> ActionResult:
        try:
            data = CSRNoteCreate.model_validate(inputs)
        except ValidationError as e:
            return ActionResult.fail(flatten_validation_errors(e))

        try:
            user = db.get(User, data.user_id)
            if not user:
                return ActionResult.field_error("user_id", "User not found")
            user.csr_notes = data.csr_notes
            user.updated_at = datetime.utcnow()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to add CSR note for user {data.user_id}: {str(e)}", exc_info=True)
            return ActionResult.form_error("Failed to add CSR note. Please try again.")

        return ActionResult.ok(UserResponse.model_validate(user).model_dump(mode="json"))

    @staticmethod
    def _build_detail(user: User, subscriptions: List[Subscription], now: datetime) -> UserDetail:
        washes = _newest_first(user.washes)
        return UserDetail(
            user=UserResponse.model_validate(user),
            vehicles=[VehicleResponse.model_validate(v) for v in user.vehicles],
            subscriptions=[SubscriptionWithPlanResponse.model_validate(s) for s in subscriptions],
            payments=[PaymentResponse.model_validate(p) for p in _newest_first(user.payments)],
            payment_methods=[PaymentMethodResponse.model_validate(m) for m in user.payment_methods],
            washes=[WashResponse.model_validate(w) for w in washes],
            next_payment_date=_next_payment_date(subscriptions),
            last_wash_date=washes[0].created_at if washes else None,
            is_overdue=any_overdue(subscriptions, now),
        )

    @staticmethod
    def _load_users(db: Session):
        return db.query(User).options(
            selectinload(User.vehicles),
            selectinload(User.payments),
            selectinload(User.payment_methods),
            selectinload(User.washes),
        )

    @staticmethod
    def _open_subscriptions(user_ids: List[int], db: Session) -> Dict[int, List[Subscription]]:
        grouped: Dict[int, List[Subscription]] = {user_id: [] for user_id in user_ids}
        if not user_ids:
            return grouped
        rows = db.query(Subscription).options(joinedload(Subscription.plan)).filter(
            Subscription.user_id.in_(user_ids),
            Subscription.status.in_(OPEN_STATUSES)
        ).order_by(Subscription.payment_due_date, Subscription.id).all()
        for row in rows:
            grouped[row.user_id].append(row)
        return grouped

    @staticmethod
    def generate_detailed_users_data(db: Session) -> List[UserDetail]:
        """Project every active user with related rows and derived fields. Read-only."""
        users = UserService._load_users(db).filter(User.account_status == "active").order_by(User.id).all()
        subscriptions = UserService._open_subscriptions([u.id for u in users], db)
        now = datetime.utcnow()
        return [UserService._build_detail(u, subscriptions[u.id], now) for u in users]

    @staticmethod
    def get_user_detail(user_id: int, db: Session) -> Optional[UserDetail]:
        if not 1 <= user_id <= settings.MAX_RECORD_ID:
            return None
        user = UserService._load_users(db).filter(User.id == user_id).first()
        if not user:
            return None
        subscriptions = UserService._open_subscriptions([user.id], db)
        return UserService._build_detail(user, subscriptions[user.id], datetime.utcnow())

    @staticmethod
    def generate_users_table_data(search: Optional[str], db: Session) -> List[UserTableRow]:
        query = db.query(User).options(
            selectinload(User.vehicles),
            selectinload(User.subscriptions),
            selectinload(User.washes),
        )
        if search:
            pattern = f"%{search.strip()}%"
            query = query.outerjoin(Vehicle, Vehicle.user_id == User.id).filter(or_(
                User.name.ilike(pattern),
                User.email.ilike(pattern),
                User.phone.ilike(pattern),
                Vehicle.license_plate.ilike(pattern),
            )).distinct()

        now = datetime.utcnow()
        rows = []
        for user in query.order_by(User.id).all():
            open_subs = [s for s in user.subscriptions if s.status in OPEN_STATUSES]
            washes = _newest_first(user.washes)
            rows.append(UserTableRow(
                id=user.id,
                name=user.name,
                email=user.email,
                phone=user.phone,
                address=user.address,
                account_status=user.account_status,
                updated_at=user.updated_at,
                vehicle_count=len(user.vehicles),
                active_subscription_count=sum(1 for s in user.subscriptions if s.status == "active"),
                last_wash_date=washes[0].created_at if washes else None,
                next_payment_date=_next_payment_date(open_subs),
                is_overdue=any_overdue(open_subs, now),
            ))
        return rows
