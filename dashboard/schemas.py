# src/dashboard/schemas.py
from pydantic import BaseModel
from decimal import Decimal
from typing import List


class StatusCount(BaseModel):
    status: str
    count: int


class PlanCount(BaseModel):
    plan: str
    count: int


class DashboardHeaderMetrics(BaseModel):
    """Figures shown in the dashboard header."""
    totalActiveUsers: int
    usersWithOverdueSubscriptions: int
    subscriptionStatusCount: List[StatusCount]


class DashboardMetrics(DashboardHeaderMetrics):
    subscriptionPlanCount: List[PlanCount]
    monthlyRevenue: Decimal
