# src/dashboard/services.py
import logging

from concurrent.futures import ThreadPoolExecutor
from sqlalchemy import and_, or_, func
from sqlalchemy.orm import Session
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Dict, List, Any

from database import Database
from users.models import User
from subscription.models import Subscription, SubscriptionPlan
from payment.models import Payment
from dashboard.schemas import DashboardHeaderMetrics, DashboardMetrics, StatusCount, PlanCount
from config import settings

logger = logging.getLogger(__name__)


def get_total_active_users(db: Session) -> int:
    return db.query(func.count(User.id)).filter(User.account_status == "active").scalar() or 0


def get_users_with_overdue_subscriptions(db: Session) -> int:
    """Distinct users holding an overdue subscription.

    Active subscriptions past their due date count too, in case the status
    was never updated.
    """
    now = datetime.utcnow()
    return db.query(func.count(func.distinct(Subscription.user_id))).filter(or_(
        Subscription.status == "overdue",
        and_(Subscription.status == "active", Subscription.payment_due_date < now),
    )).scalar() or 0


def get_subscription_status_count(db: Session) -> List[StatusCount]:
    rows = db.query(
        Subscription.status, func.count(Subscription.id)
    ).group_by(Subscription.status).order_by(Subscription.status).all()
    return [StatusCount(status=status, count=count) for status, count in rows]


def get_subscription_plan_count(db: Session) -> List[PlanCount]:
    count = func.count(Subscription.id)
    rows = db.query(SubscriptionPlan.name, count).select_from(Subscription).join(
        SubscriptionPlan, Subscription.plan_id == SubscriptionPlan.id
    ).filter(
        Subscription.status == "active"
    ).group_by(SubscriptionPlan.name).order_by(count.desc(), SubscriptionPlan.name).all()
    return [PlanCount(plan=name, count=total) for name, total in rows]


def get_monthly_revenue(db: Session) -> Decimal:
    since = datetime.utcnow() - timedelta(days=settings.MONTHLY_REVENUE_WINDOW_DAYS)
    total = db.query(func.sum(Payment.final_amount)).filter(
        Payment.status == "paid",
        Payment.created_at >= since
    ).scalar()
    return Decimal(str(total or 0)).quantize(Decimal("0.01"))


class DashboardService:
    @staticmethod
    def _fan_out(database: Database, queries: Dict[str, Callable[[Session], Any]]) -> Dict[str, Any]:
        """Run independent queries concurrently, each on its own session.

        The first failure propagates; nothing is returned for a partial run.
        """
        def run(query: Callable[[Session], Any]) -> Any:
            db = database.session()
            try:
                return query(db)
            finally:
                db.close()

        with ThreadPoolExecutor(max_workers=settings.METRICS_MAX_WORKERS) as pool:
            futures = {name: pool.submit(run, query) for name, query in queries.items()}
            return {name: future.result() for name, future in futures.items()}

    @staticmethod
    def get_dashboard_header_metrics(database: Database) -> DashboardHeaderMetrics:
        results = DashboardService._fan_out(database, {
            "totalActiveUsers": get_total_active_users,
            "usersWithOverdueSubscriptions": get_users_with_overdue_subscriptions,
            "subscriptionStatusCount": get_subscription_status_count,
        })
        return DashboardHeaderMetrics(**results)

    @staticmethod
    def get_dashboard_metrics(database: Database) -> DashboardMetrics:
        results = DashboardService._fan_out(database, {
            "totalActiveUsers": get_total_active_users,
            "usersWithOverdueSubscriptions": get_users_with_overdue_subscriptions,
            "subscriptionStatusCount": get_subscription_status_count,
            "subscriptionPlanCount": get_subscription_plan_count,
            "monthlyRevenue": get_monthly_revenue,
        })
        return DashboardMetrics(**results)
