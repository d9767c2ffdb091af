"""
===============================================================================
USE CASE: Dashboard Summary
===============================================================================

Name:
    Dashboard Summary

Business Goal:
    Give a logged-in user an overview of their own usage: member since,
    counts per tracked feature and the most recent activities.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    DashboardService

Responsibilities:
    - Read the user's activities (index-scoped by user_id).
    - Count legal queries, license searches and the total.
    - Return the last N activities, newest first.

Collaborators:
    - RecordStore.list_activities_for_user
    - domain.entities: User, Activity, ActivityType
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ...domain.entities import Activity, ActivityType, User
from ...domain.repositories import RecordStore

DEFAULT_RECENT_LIMIT = 5


@dataclass(frozen=True)
class DashboardSummary:
    first_name: str
    member_since: str
    legal_queries: int
    license_searches: int
    total_activities: int
    recent_activities: List[Activity] = field(default_factory=list)


class DashboardService:
    def __init__(self, store: RecordStore, *, recent_limit: int = DEFAULT_RECENT_LIMIT) -> None:
        self._store = store
        self._recent_limit = recent_limit

    async def summary(self, user: User) -> DashboardSummary:
        activities = await self._store.list_activities_for_user(user.id)
        recent = activities[-self._recent_limit :] if self._recent_limit > 0 else []

        return DashboardSummary(
            first_name=user.first_name,
            member_since=user.created_at,
            legal_queries=sum(1 for a in activities if a.type == ActivityType.LEGAL_QUERY.value),
            license_searches=sum(
                1 for a in activities if a.type == ActivityType.LICENSE_SEARCH.value
            ),
            total_activities=len(activities),
            recent_activities=list(reversed(recent)),
        )
