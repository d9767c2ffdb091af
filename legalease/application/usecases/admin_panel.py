"""
===============================================================================
USE CASE: Admin Panel
===============================================================================

Name:
    Admin Panel Service

Business Goal:
    Let the administrator see user and usage totals, activate/deactivate
    accounts and search the user list.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    AdminPanelService

Responsibilities:
    - Gate every command on auth.current_user.is_admin (FORBIDDEN otherwise).
    - overview: total / active / joined-in-the-last-month users, analytics
      totals for legal_query, license_search and faq_view.
    - toggle_user_status: flip is_active (the only user mutation).
    - filter_users: case-insensitive substring search over the user rows.

Collaborators:
    - RecordStore: list_users, find_user_by_id, set_user_active,
      list_analytics_by_type
    - AuthManager: current_user
    - admin_results: AdminOverview / AdminError / AdminErrorCode

-------------------------------------------------------------------------------
Error Mapping:
    - FORBIDDEN: anonymous or non-admin actor
    - NOT_FOUND: toggle target does not exist
    - STORE_ERROR: record store failure (logged with traceback)
===============================================================================
"""

from __future__ import annotations

import calendar
from datetime import datetime, timezone
from typing import Iterable, List

from ...crosscutting.exceptions import LegalEaseError
from ...crosscutting.logger import logger
from ...domain.entities import AnalyticsType, User, parse_timestamp
from ...domain.repositories import RecordStore
from ...identity.auth_manager import AuthManager
from .admin_results import (
    ACCESS_DENIED_MESSAGE,
    AdminError,
    AdminErrorCode,
    AdminOverview,
    AdminOverviewResult,
    AdminUserResult,
)


def one_month_before(moment: datetime) -> datetime:
    """Same day-of-month one calendar month earlier, clamped to month end."""
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _searchable_text(user: User) -> str:
    return f"{user.first_name} {user.last_name} {user.email} {user.phone}".lower()


class AdminPanelService:
    def __init__(self, store: RecordStore, auth: AuthManager) -> None:
        self._store = store
        self._auth = auth

    def _is_admin(self) -> bool:
        user = self._auth.current_user
        return self._auth.is_logged_in and user is not None and user.is_admin

    @staticmethod
    def _forbidden() -> AdminError:
        return AdminError(code=AdminErrorCode.FORBIDDEN, message=ACCESS_DENIED_MESSAGE)

    @staticmethod
    def _store_error(exc: Exception) -> AdminError:
        message = exc.message if isinstance(exc, LegalEaseError) else str(exc)
        return AdminError(code=AdminErrorCode.STORE_ERROR, message=message)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    async def overview(self, now: datetime | None = None) -> AdminOverviewResult:
        if not self._is_admin():
            return AdminOverviewResult(error=self._forbidden())

        moment = now or datetime.now(timezone.utc)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        cutoff = one_month_before(moment)
        try:
            users = await self._store.list_users()
            legal_queries = await self._store.list_analytics_by_type(AnalyticsType.LEGAL_QUERY)
            license_searches = await self._store.list_analytics_by_type(
                AnalyticsType.LICENSE_SEARCH
            )
            faq_views = await self._store.list_analytics_by_type(AnalyticsType.FAQ_VIEW)
        except Exception as exc:
            logger.exception("Admin overview failed")
            return AdminOverviewResult(error=self._store_error(exc))

        overview = AdminOverview(
            total_users=len(users),
            active_users=sum(1 for u in users if u.is_active),
            new_users=sum(1 for u in users if parse_timestamp(u.created_at) > cutoff),
            total_legal_queries=len(legal_queries),
            total_license_searches=len(license_searches),
            total_faq_views=len(faq_views),
            users=users,
        )
        return AdminOverviewResult(overview=overview)

    @staticmethod
    def filter_users(users: Iterable[User], term: str) -> List[User]:
        needle = (term or "").lower()
        return [u for u in users if needle in _searchable_text(u)]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    async def toggle_user_status(self, user_id: int) -> AdminUserResult:
        if not self._is_admin():
            return AdminUserResult(error=self._forbidden())

        try:
            target = await self._store.find_user_by_id(user_id)
            if target is None:
                return AdminUserResult(
                    error=AdminError(code=AdminErrorCode.NOT_FOUND, message="User not found")
                )
            updated = await self._store.set_user_active(target.id, not target.is_active)
        except Exception as exc:
            logger.exception("User status toggle failed", extra={"target_user_id": user_id})
            return AdminUserResult(error=self._store_error(exc))

        if updated is None:
            return AdminUserResult(
                error=AdminError(code=AdminErrorCode.NOT_FOUND, message="User not found")
            )

        logger.info(
            "User status changed",
            extra={"target_user_id": updated.id, "is_active": updated.is_active},
        )
        return AdminUserResult(user=updated)
