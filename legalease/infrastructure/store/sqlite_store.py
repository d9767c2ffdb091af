"""
============================================================
CRC CARD — infrastructure/store/sqlite_store.py
============================================================
Class: SqliteRecordStore

Responsibilities:
  - Durable, asynchronous record store backed by one SQLite file (aiosqlite).
  - Open once, apply additive schema migrations (PRAGMA user_version).
  - Execute parameterized SQL for users / activities / analytics.
  - Map raw rows -> domain entities (User, Activity, AnalyticsEvent).
  - Translate sqlite errors into StoreUnavailable / DuplicateKey / StoreError
    with structured logging.

Collaborators:
  - aiosqlite (async driver over the stdlib sqlite3 module)
  - infrastructure.store.schema (DDL, SCHEMA_VERSION, column lists)
  - infrastructure.store.retry (tenacity policy for opening)
  - domain.entities / domain.repositories.RecordStore
  - crosscutting.logger / crosscutting.exceptions

Constraints / Notes:
  - Pure repository: no business rules besides the is_admin stamp at insert.
  - Returns None when a record does not exist (no exception for not-found).
  - Parameterized SQL always (never interpolate user input).
  - One connection per store; operations are serialized by an asyncio.Lock
    for the lifetime of a transaction, the way a browser store schedules
    overlapping readwrite transactions. Do not call store methods from
    inside a transaction() block; use the yielded transaction.
  - Stable listing order: id ASC (insertion order).
============================================================
"""

from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Dict, Iterable, List, Optional

import aiosqlite

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
from .retry import create_open_retrying
from .schema import (
    _ACTIVITY_COLUMNS,
    _ANALYTICS_COLUMNS,
    _USER_COLUMNS,
    DEFAULT_ADMIN_EMAIL,
    SCHEMA_VERSION,
    pending_migrations,
)

_IN_MEMORY_PATH = ":memory:"


# ============================================================
# Row mapping
# ============================================================
def _row_to_user(row: aiosqlite.Row) -> User:
    return User(
        id=int(row["id"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=row["email"],
        phone=row["phone"],
        password=row["password"],
        created_at=row["created_at"],
        is_active=bool(row["is_active"]),
        is_admin=bool(row["is_admin"]),
    )


def _row_to_activity(row: aiosqlite.Row) -> Activity:
    return Activity(
        id=int(row["id"]),
        user_id=int(row["user_id"]),
        type=row["type"],
        description=row["description"],
        timestamp=row["timestamp"],
    )


def _row_to_analytics(row: aiosqlite.Row) -> AnalyticsEvent:
    try:
        data = json.loads(row["data"] or "{}")
    except json.JSONDecodeError as exc:
        raise StoreError(
            f"Corrupt analytics payload (id={row['id']})", original_error=exc
        ) from exc
    return AnalyticsEvent(
        id=int(row["id"]),
        type=row["type"],
        data=data,
        timestamp=row["timestamp"],
    )


def _dump_document(data: Dict[str, Any] | None) -> str:
    try:
        return json.dumps(data or {}, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise StoreError(
            f"Analytics data is not a JSON document: {exc}", original_error=exc
        ) from exc


# ============================================================
# Transaction
# ============================================================
class _SqliteTransaction:
    """Writes issued on the store connection inside BEGIN ... COMMIT."""

    def __init__(self, store: "SqliteRecordStore", conn: aiosqlite.Connection) -> None:
        self._store = store
        self._conn = conn

    async def insert_user(self, record: NewUser) -> int:
        params = (
            record.first_name,
            record.last_name,
            record.email,
            record.phone,
            record.password,
            self._store._timestamp(),
            int(record.email == self._store.admin_email),
        )
        try:
            cursor = await self._conn.execute(
                "INSERT INTO users "
                "(first_name, last_name, email, phone, password, created_at, is_active, is_admin) "
                "VALUES (?, ?, ?, ?, ?, ?, 1, ?)",
                params,
            )
        except aiosqlite.IntegrityError as exc:
            if "unique" in str(exc).lower():
                raise DuplicateKey(
                    "User with this email already exists", original_error=exc
                ) from exc
            raise StoreError(f"Failed to insert user: {exc}", original_error=exc) from exc
        except aiosqlite.Error as exc:
            logger.exception("Failed to insert user", extra={"error": str(exc)})
            raise StoreError(f"Failed to insert user: {exc}", original_error=exc) from exc

        user_id = cursor.lastrowid
        await cursor.close()
        return int(user_id)

    async def append_activity(self, user_id: int, type: str, description: str) -> int:
        return await self._insert(
            "INSERT INTO activities (user_id, type, description, timestamp) "
            "VALUES (?, ?, ?, ?)",
            (int(user_id), tag_value(type), description, self._store._timestamp()),
            log_msg="Failed to append activity",
        )

    async def append_analytics(self, type: str, data: Dict[str, Any]) -> int:
        return await self._insert(
            "INSERT INTO analytics (type, data, timestamp) VALUES (?, ?, ?)",
            (tag_value(type), _dump_document(data), self._store._timestamp()),
            log_msg="Failed to append analytics",
        )

    async def _insert(self, query: str, params: Iterable[object], *, log_msg: str) -> int:
        try:
            cursor = await self._conn.execute(query, tuple(params))
        except aiosqlite.Error as exc:
            logger.exception(log_msg, extra={"error": str(exc)})
            raise StoreError(f"{log_msg}: {exc}", original_error=exc) from exc
        row_id = cursor.lastrowid
        await cursor.close()
        return int(row_id)


# ============================================================
# Store
# ============================================================
class SqliteRecordStore:
    """Durable RecordStore over a single SQLite database file."""

    def __init__(
        self,
        path: str | Path,
        *,
        admin_email: str = DEFAULT_ADMIN_EMAIL,
        busy_timeout_seconds: float = 5.0,
        open_max_attempts: int = 3,
        open_base_delay_seconds: float = 0.1,
        open_max_delay_seconds: float = 2.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.path = str(path)
        self.admin_email = admin_email
        self._busy_timeout = busy_timeout_seconds
        self._open_max_attempts = open_max_attempts
        self._open_base_delay = open_base_delay_seconds
        self._open_max_delay = open_max_delay_seconds
        self._clock = clock
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()
        self._open_lock = asyncio.Lock()

    # =========================================================
    # Internal helpers
    # =========================================================
    def _require_open(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StoreUnavailable("Record store is not initialized")
        return self._conn

    def _timestamp(self) -> str:
        return utc_timestamp(self._clock() if self._clock else None)

    async def _fetchall(
        self,
        query: str,
        params: Iterable[object] = (),
        *,
        log_msg: str,
        log_extra: dict[str, object] | None = None,
    ) -> list[aiosqlite.Row]:
        """SELECT ... fetchall() with consistent error handling."""
        conn = self._require_open()
        async with self._lock:
            try:
                async with conn.execute(query, tuple(params)) as cursor:
                    return list(await cursor.fetchall())
            except aiosqlite.Error as exc:
                logger.exception(log_msg, extra={**(log_extra or {}), "error": str(exc)})
                raise StoreError(f"{log_msg}: {exc}", original_error=exc) from exc

    async def _fetchone(
        self,
        query: str,
        params: Iterable[object],
        *,
        log_msg: str,
        log_extra: dict[str, object] | None = None,
    ) -> aiosqlite.Row | None:
        rows = await self._fetchall(query, params, log_msg=log_msg, log_extra=log_extra)
        return rows[0] if rows else None

    async def _read_user_version(self, conn: aiosqlite.Connection) -> int:
        async with conn.execute("PRAGMA user_version") as cursor:
            row = await cursor.fetchone()
        return int(row[0]) if row else 0

    async def _connect_and_upgrade(self) -> aiosqlite.Connection:
        if self.path != _IN_MEMORY_PATH:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(self.path, timeout=self._busy_timeout)
        try:
            conn.row_factory = aiosqlite.Row
            current = await self._read_user_version(conn)
            if current > SCHEMA_VERSION:
                raise StoreUnavailable(
                    f"Record store schema v{current} is newer than supported v{SCHEMA_VERSION}"
                )

            for version, statements in pending_migrations(current):
                for statement in statements:
                    await conn.execute(statement)
                # R: PRAGMA does not accept bound parameters; version is an int we own.
                await conn.execute(f"PRAGMA user_version = {int(version)}")
                await conn.commit()
                logger.info(
                    "Record store schema upgraded",
                    extra={"from_version": current, "to_version": version},
                )
                current = version
        except BaseException:
            await conn.close()
            raise
        return conn

    # =========================================================
    # Lifecycle
    # =========================================================
    async def initialize(self) -> None:
        """Open the database and apply pending migrations (idempotent)."""
        async with self._open_lock:
            if self._conn is not None:
                return
            self._conn = await self._open()
        logger.info(
            "Record store ready",
            extra={"backend": "sqlite", "path": self.path, "schema_version": SCHEMA_VERSION},
        )

    async def _open(self) -> aiosqlite.Connection:
        retrying = create_open_retrying(
            max_attempts=self._open_max_attempts,
            base_delay=self._open_base_delay,
            max_delay=self._open_max_delay,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    conn = await self._connect_and_upgrade()
        except StoreUnavailable:
            logger.error("Record store unavailable", extra={"path": self.path})
            raise
        except (aiosqlite.Error, OSError) as exc:
            logger.exception(
                "Record store cannot be opened",
                extra={"path": self.path, "error": str(exc)},
            )
            raise StoreUnavailable(
                f"Record store cannot be opened: {exc}", original_error=exc
            ) from exc

        return conn

    async def close(self) -> None:
        if self._conn is None:
            return
        async with self._lock:
            await self._conn.close()
            self._conn = None

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[_SqliteTransaction]:
        conn = self._require_open()
        async with self._lock:
            tx = _SqliteTransaction(self, conn)
            try:
                yield tx
            except BaseException:
                await conn.rollback()
                raise
            try:
                await conn.commit()
            except aiosqlite.Error as exc:
                await conn.rollback()
                logger.exception("Transaction commit failed", extra={"error": str(exc)})
                raise StoreError(f"Transaction commit failed: {exc}", original_error=exc) from exc

    # =========================================================
    # Users
    # =========================================================
    async def insert_user(self, record: NewUser) -> int:
        async with self.transaction() as tx:
            return await tx.insert_user(record)

    async def find_user_by_email(self, email: str) -> Optional[User]:
        row = await self._fetchone(
            f"SELECT {_USER_COLUMNS} FROM users WHERE email = ?",
            (email,),
            log_msg="Failed to get user by email",
            log_extra={"email": email},
        )
        return _row_to_user(row) if row else None

    async def find_user_by_id(self, user_id: int) -> Optional[User]:
        row = await self._fetchone(
            f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?",
            (int(user_id),),
            log_msg="Failed to get user by id",
            log_extra={"user_id": user_id},
        )
        return _row_to_user(row) if row else None

    async def list_users(self) -> List[User]:
        rows = await self._fetchall(
            f"SELECT {_USER_COLUMNS} FROM users ORDER BY id ASC",
            log_msg="Failed to list users",
        )
        return [_row_to_user(r) for r in rows]

    async def set_user_active(self, user_id: int, is_active: bool) -> Optional[User]:
        conn = self._require_open()
        async with self._lock:
            try:
                cursor = await conn.execute(
                    "UPDATE users SET is_active = ? WHERE id = ?",
                    (int(bool(is_active)), int(user_id)),
                )
                changed = cursor.rowcount
                await cursor.close()
                await conn.commit()
            except aiosqlite.Error as exc:
                await conn.rollback()
                logger.exception(
                    "Failed to update user status",
                    extra={"user_id": user_id, "error": str(exc)},
                )
                raise StoreError(
                    f"Failed to update user status: {exc}", original_error=exc
                ) from exc

        if not changed:
            return None
        return await self.find_user_by_id(user_id)

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
        rows = await self._fetchall(
            f"SELECT {_ACTIVITY_COLUMNS} FROM activities WHERE user_id = ? ORDER BY id ASC",
            (int(user_id),),
            log_msg="Failed to list activities",
            log_extra={"user_id": user_id},
        )
        return [_row_to_activity(r) for r in rows]

    async def list_analytics_by_type(self, type: str) -> List[AnalyticsEvent]:
        rows = await self._fetchall(
            f"SELECT {_ANALYTICS_COLUMNS} FROM analytics WHERE type = ? ORDER BY id ASC",
            (tag_value(type),),
            log_msg="Failed to list analytics",
            log_extra={"type": tag_value(type)},
        )
        return [_row_to_analytics(r) for r in rows]
