"""
===============================================================================
CRC CARD — application/recorder.py
===============================================================================

Class:
    ActivityRecorder

Responsibilities:
    - Best-effort writes of activities and analytics events: a failure is
      logged and swallowed so the feature that triggered it still renders.
    - Feature tracking for the three tracked features (legal question,
      license search, FAQ view), only when a user is logged in.

Collaborators:
    - domain.repositories.RecordStore
    - identity.auth_manager.AuthManager (is_logged_in / current_user)
    - crosscutting.logger
===============================================================================
"""

from __future__ import annotations

from typing import Any, Dict

from ..crosscutting.logger import logger
from ..domain.entities import ActivityType, AnalyticsType, tag_value, utc_timestamp
from ..domain.repositories import RecordStore
from ..identity.auth_manager import AuthManager

QUERY_DESCRIPTION_CHARS = 50
PAYLOAD_TEXT_CHARS = 100


class ActivityRecorder:
    """Fire-and-forget telemetry on top of the record store."""

    def __init__(self, store: RecordStore, auth: AuthManager) -> None:
        self._store = store
        self._auth = auth

    # ------------------------------------------------------------------
    # Raw writes
    # ------------------------------------------------------------------
    async def record_activity(self, user_id: int, type: str, description: str) -> None:
        try:
            await self._store.append_activity(user_id, tag_value(type), description)
        except Exception as exc:
            logger.warning(
                "Failed to record activity",
                extra={
                    "activity_user_id": user_id,
                    "type": tag_value(type),
                    "error": str(exc),
                    "error_type": exc.__class__.__name__,
                },
            )

    async def record_analytics(self, type: str, data: Dict[str, Any]) -> None:
        try:
            await self._store.append_analytics(tag_value(type), data)
        except Exception as exc:
            logger.warning(
                "Failed to record analytics",
                extra={
                    "type": tag_value(type),
                    "error": str(exc),
                    "error_type": exc.__class__.__name__,
                },
            )

    # ------------------------------------------------------------------
    # Feature tracking
    # ------------------------------------------------------------------
    async def track_legal_query(self, query: str) -> bool:
        user = self._auth.current_user
        if not self._auth.is_logged_in or user is None:
            return False

        await self.record_activity(
            user.id,
            ActivityType.LEGAL_QUERY,
            f"Asked legal question: {query[:QUERY_DESCRIPTION_CHARS]}...",
        )
        await self.record_analytics(
            AnalyticsType.LEGAL_QUERY,
            {
                "userId": user.id,
                "query": query[:PAYLOAD_TEXT_CHARS],
                "timestamp": utc_timestamp(),
            },
        )
        return True

    async def track_license_search(
        self, business_type: str, state: str, city: str = ""
    ) -> bool:
        user = self._auth.current_user
        if not self._auth.is_logged_in or user is None:
            return False

        await self.record_activity(
            user.id,
            ActivityType.LICENSE_SEARCH,
            f"Searched for {business_type} licenses in {state}",
        )
        await self.record_analytics(
            AnalyticsType.LICENSE_SEARCH,
            {
                "userId": user.id,
                "businessType": business_type,
                "state": state,
                "city": city,
                "timestamp": utc_timestamp(),
            },
        )
        return True

    async def track_faq_view(self, question: str) -> bool:
        user = self._auth.current_user
        if not self._auth.is_logged_in or user is None:
            return False

        await self.record_activity(
            user.id, ActivityType.FAQ_VIEW, f"Viewed FAQ: {question}"
        )
        await self.record_analytics(
            AnalyticsType.FAQ_VIEW,
            {
                "userId": user.id,
                "question": question[:PAYLOAD_TEXT_CHARS],
                "timestamp": utc_timestamp(),
            },
        )
        return True
