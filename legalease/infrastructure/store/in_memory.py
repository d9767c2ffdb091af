# =============================================================================
# FILE: infrastructure/store/in_memory.py
# =============================================================================
"""
============================================================
CRC CARD — infrastructure/store/in_memory.py
============================================================
Class: InMemoryRecordStore

Responsibilities:
  - Hold users / activities / analytics in process memory (tests, local dev,
    throwaway sessions).
  - Enforce the same indexes as the durable store:
      users.email (unique), users.phone, activities.user_id, analytics.type
  - Group writes into atomic transactions (commit all or nothing).
  - Assign monotonically increasing ids per collection.

Collaborators:
  - domain.entities: User, NewUser, Activity, AnalyticsEvent
  - domain.repositories.RecordStore (contract implemented here)
  - crosscutting.exceptions: StoreUnavailable, DuplicateKey, StoreError

Constraints / Notes:
  - NOT durable: data is lost when the process ends.
  - Every public operation yields to the event loop once, so independent
    call chains interleave the way they do against the SQLite store.
  - The email check-and-reserve runs without suspending: two transactions
    cannot both claim the same email.
  - Analytics payloads are JSON round-tripped on write and copied on read.
============================================================
"""

from __future__ import annotations

import asyncio
import copy
import json
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from ...crosscutting.exceptions import DuplicateKey, StoreError, StoreUnavailable
from ...crosscutting.logger import logger
from ...domain.entities import (
    Activity,
    AnalyticsEvent,
    NewUser,
    User,
    tag_value,
    utc_timestamp,
)
from .schema import DEFAULT_ADMIN_EMAIL, SCHEMA_VERSION


class _InMemoryTransaction:
    """Buffered writes applied to the store on commit."""

    def __init__(self, store: "InMemoryRecordStore") -> None:
        self._store = store
        self._users: List[User] = []
        self._activities: List[Activity] = []
        self._analytics: List[AnalyticsEvent] = []
        self._reserved: List[str] = []

    async def insert_user(self, record: NewUser) -> int:
        await asyncio.sleep(0)
        store = self._store
        store._require_open()

        # R: index check + reservation happen without an await in between.
        if record.email in store._email_index or record.email in store._reserved_emails:
            raise DuplicateKey(
                "User with this email already exists",
            )
        store._reserved_emails.add(record.email)
        self._reserved.append(record.email)

        user = User(
            id=store._next_id("users"),
            first_name=record.first_name,
            last_name=record.last_name,
            email=record.email,
            phone=record.phone,
            password=record.password,
            created_at=store._timestamp(),
            is_active=True,
            is_admin=record.email == store.admin_email,
        )
        self._users.append(user)
        return user.id

    async def append_activity(self, user_id: int, type: str, description: str) -> int:
        await asyncio.sleep(0)
        store = self._store
        store._require_open()

        activity = Activity(
            id=store._next_id("activities"),
            user_id=int(user_id),
            type=tag_value(type),
            description=description,
            timestamp=store._timestamp(),
        )
        self._activities.append(activity)
        return activity.id

    async def append_analytics(self, type: str, data: Dict[str, Any]) -> int:
        await asyncio.sleep(0)
        store = self._store
        store._require_open()

        event = AnalyticsEvent(
            id=store._next_id("analytics"),
            type=tag_value(type),
            data=_json_document(data),
            timestamp=store._timestamp(),
        )
        self._analytics.append(event)
        return event.id

    # ------------------------------------------------------------------
    # Lifecycle (called by InMemoryRecordStore.transaction)
    # ------------------------------------------------------------------
    def _commit(self) -> None:
        store = self._store
        for user in self._users:
            store._users[user.id] = user
            store._email_index[user.email] = user.id
            store._phone_index.setdefault(user.phone, []).append(user.id)
        for activity in self._activities:
            store._activities[activity.id] = activity
            store._activities_by_user.setdefault(activity.user_id, []).append(
                activity.id
            )
        for event in self._analytics:
            store._analytics[event.id] = event
            store._analytics_by_type.setdefault(event.type, []).append(event.id)
        self._release()

    def _rollback(self) -> None:
        self._users.clear()
        self._activities.clear()
        self._analytics.clear()
        self._release()

    def _release(self) -> None:
        for email in self._reserved:
            self._store._reserved_emails.discard(email)
        self._reserved.clear()


def _json_document(data: Dict[str, Any] | None) -> Dict[str, Any]:
    """Normalize a payload the way the SQLite store persists it."""
    try:
        return json.loads(json.dumps(data or {}))
    except (TypeError, ValueError) as exc:
        raise StoreError(
            f"Analytics data is not a JSON document: {exc}", original_error=exc
        ) from exc


class InMemoryRecordStore:
    """
    In-memory implementation of RecordStore.

    Mental model:
    - One dict per collection is the "table" (id -> record).
    - Secondary dicts are the indexes (email -> id, user_id -> [ids], ...).
    - Writes land through _InMemoryTransaction and become visible on commit.
    """

    def __init__(
        self,
        *,
        admin_email: str = DEFAULT_ADMIN_EMAIL,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.admin_email = admin_email
        self._clock = clock
        self._schema_version = 0

        self._users: Dict[int, User] = {}
        self._email_index: Dict[str, int] = {}
        self._phone_index: Dict[str, List[int]] = {}
        self._reserved_emails: set[str] = set()

        self._activities: Dict[int, Activity] = {}
        self._activities_by_user: Dict[int, List[int]] = {}

        self._analytics: Dict[int, AnalyticsEvent] = {}
        self._analytics_by_type: Dict[str, List[int]] = {}

        self._sequences: Dict[str, int] = {"users": 0, "activities": 0, "analytics": 0}

    # =========================================================
    # Internal helpers
    # =========================================================
    def _require_open(self) -> None:
        if self._schema_version < SCHEMA_VERSION:
            raise StoreUnavailable("Record store is not initialized")

    def _next_id(self, collection: str) -> int:
        # R: ids are never reused here, even when a transaction rolls back.
        # The SQLite store rolls its sequence back with the insert.
        self._sequences[collection] += 1
        return self._sequences[collection]

    def _timestamp(self) -> str:
        return utc_timestamp(self._clock() if self._clock else None)

    # =========================================================
    # Lifecycle
    # =========================================================
    async def initialize(self) -> None:
        await asyncio.sleep(0)
        if self._schema_version >= SCHEMA_VERSION:
            return
        previous = self._schema_version
        self._schema_version = SCHEMA_VERSION
        logger.info(
            "Record store ready",
            extra={
                "backend": "memory",
                "schema_version": SCHEMA_VERSION,
                "previous_version": previous,
            },
        )

    async def close(self) -> None:
        """Nothing to release; kept for interface symmetry."""
        await asyncio.sleep(0)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[_InMemoryTransaction]:
        self._require_open()
        tx = _InMemoryTransaction(self)
        try:
            yield tx
        except BaseException:
            tx._rollback()
            raise
        else:
            tx._commit()

    # =========================================================
    # Users
    # =========================================================
    async def insert_user(self, record: NewUser) -> int:
        async with self.transaction() as tx:
            return await tx.insert_user(record)

    async def find_user_by_email(self, email: str) -> Optional[User]:
        await asyncio.sleep(0)
        self._require_open()
        user_id = self._email_index.get(email)
        return self._users.get(user_id) if user_id is not None else None

    async def find_user_by_id(self, user_id: int) -> Optional[User]:
        await asyncio.sleep(0)
        self._require_open()
        return self._users.get(int(user_id))

    async def list_users(self) -> List[User]:
        await asyncio.sleep(0)
        self._require_open()
        return [self._users[k] for k in sorted(self._users)]

    async def set_user_active(self, user_id: int, is_active: bool) -> Optional[User]:
        await asyncio.sleep(0)
        self._require_open()
        current = self._users.get(int(user_id))
        if current is None:
            return None
        updated = current.with_active(bool(is_active))
        self._users[updated.id] = updated
        return updated

    # =========================================================
    # Activities / analytics
    # =========================================================
    async def append_activity(self, user_id: int, type: str, description: str) -> int:
        async with self.transaction() as tx:
            return await tx.append_activity(user_id, type, description)

    async def append_analytics(self, type: str, data: Dict[str, Any]) -> int:
        async with self.transaction() as tx:
            return await tx.append_analytics(type, data)

    async def list_activities_for_user(self, user_id: int) -> List[Activity]:
        await asyncio.sleep(0)
        self._require_open()
        ids = self._activities_by_user.get(int(user_id), [])
        return [self._activities[i] for i in ids]

    async def list_analytics_by_type(self, type: str) -> List[AnalyticsEvent]:
        await asyncio.sleep(0)
        self._require_open()
        ids = self._analytics_by_type.get(tag_value(type), [])
        return [
            AnalyticsEvent(
                id=self._analytics[i].id,
                type=self._analytics[i].type,
                data=copy.deepcopy(self._analytics[i].data),
                timestamp=self._analytics[i].timestamp,
            )
            for i in ids
        ]

    # -------------------------------------------------------------------------
    # Testing helpers
    # -------------------------------------------------------------------------
    def count_users_by_phone(self, phone: str) -> int:
        """Users sharing a phone number (phone is not unique)."""
        return len(self._phone_index.get(phone, []))
