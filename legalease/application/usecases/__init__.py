"""
Use cases built on the record store: dashboard summary and admin panel.
"""

from .admin_panel import AdminPanelService, one_month_before
from .admin_results import (
    ACCESS_DENIED_MESSAGE,
    AdminError,
    AdminErrorCode,
    AdminOverview,
    AdminOverviewResult,
    AdminUserResult,
)
from .dashboard import DashboardService, DashboardSummary

__all__ = [
    "AdminPanelService",
    "one_month_before",
    "ACCESS_DENIED_MESSAGE",
    "AdminError",
    "AdminErrorCode",
    "AdminOverview",
    "AdminOverviewResult",
    "AdminUserResult",
    "DashboardService",
    "DashboardSummary",
]
