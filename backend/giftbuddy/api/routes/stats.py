"""
Dashboard statistics routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from giftbuddy.db.session import get_db
from giftbuddy.schemas.stats import AdminDashboardStats, DashboardStats
from giftbuddy.api.dependencies import get_caller
from giftbuddy.services.capability import Caller
from giftbuddy.services import stats_service

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/admin", response_model=AdminDashboardStats)
async def get_admin_stats(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Ledger-wide totals for the admin dashboard."""
    caller.require_admin("view admin statistics")
    return stats_service.admin_dashboard_stats(db)


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard_stats(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Headline numbers for the member dashboard."""
    return stats_service.dashboard_stats(db)
