"""
Domain layer: entities and ports. No infrastructure imports.
"""

from .entities import (
    Activity,
    ActivityType,
    AnalyticsEvent,
    AnalyticsType,
    NewUser,
    Session,
    User,
)
from .repositories import RecordStore, SessionStorage, StoreTransaction

__all__ = [
    "Activity",
    "ActivityType",
    "AnalyticsEvent",
    "AnalyticsType",
    "NewUser",
    "Session",
    "User",
    "RecordStore",
    "SessionStorage",
    "StoreTransaction",
]
