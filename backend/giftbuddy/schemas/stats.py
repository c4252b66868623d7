"""
Pydantic schemas for dashboard statistics.
"""
from pydantic import BaseModel


class AdminDashboardStats(BaseModel):
    """Ledger-wide rollup for the admin dashboard. Amounts in subunits."""
    total_events: int
    upcoming_events: int
    completed_events: int
    cancelled_events: int
    total_collected: int
    total_pending: int
    total_contributions: int
    paid_contributions: int
    collection_percentage: int


class DashboardStats(BaseModel):
    """Headline numbers for the member dashboard."""
    active_events: int
    total_members: int
    collected: int
    participation: int  # percentage of contributions marked paid
