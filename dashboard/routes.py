# src/dashboard/routes.py
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from dashboard.services import DashboardService
from dashboard.schemas import DashboardMetrics, DashboardHeaderMetrics
from database import Database, get_database

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/metrics", response_model=DashboardMetrics)
def get_metrics(database: Database = Depends(get_database)):
    """Header figures plus plan breakdown and revenue for the last 30 days."""
    try:
        return DashboardService.get_dashboard_metrics(database)
    except SQLAlchemyError as e:
        logger.error(f"Dashboard metrics failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load dashboard metrics")


@router.get("/header", response_model=DashboardHeaderMetrics)
def get_header_metrics(database: Database = Depends(get_database)):
    try:
        return DashboardService.get_dashboard_header_metrics(database)
    except SQLAlchemyError as e:
        logger.error(f"Dashboard header metrics failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load dashboard metrics")
