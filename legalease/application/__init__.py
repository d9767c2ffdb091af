"""
===============================================================================
APPLICATION LAYER (Public API / Exports)
===============================================================================

Exposes:
  - ActivityRecorder: best-effort activity / analytics writes
  - ensure_default_admin: first-start admin seeding
  - Use cases from `usecases/`: DashboardService, AdminPanelService
===============================================================================
"""

from .recorder import ActivityRecorder
from .seed_admin import SeedOutcome, ensure_default_admin
from .usecases import AdminPanelService, DashboardService, DashboardSummary

__all__ = [
    "ActivityRecorder",
    "SeedOutcome",
    "ensure_default_admin",
    "AdminPanelService",
    "DashboardService",
    "DashboardSummary",
]
