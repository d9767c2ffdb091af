"""
===============================================================================
CRC CARD — infrastructure/store/schema.py
===============================================================================

Component:
  Record store schema (collections + indexes) and its version history

Responsibilities:
  - Declare SCHEMA_VERSION (single integer, persisted as PRAGMA user_version).
  - Keep the additive migration list: version -> DDL statements.
  - Name the column lists shared by the SQLite queries.

Rules:
  - Bump SCHEMA_VERSION only when a collection or index is introduced.
  - Migrations are additive: never DROP, never rewrite existing columns.
  - Every statement is idempotent (IF NOT EXISTS) so a partially applied
    upgrade can be re-run.
===============================================================================
"""

from __future__ import annotations

from typing import Dict, Final, List

SCHEMA_VERSION: Final[int] = 1

DEFAULT_ADMIN_EMAIL: Final[str] = "admin@legalease.com"

_USER_COLUMNS: Final[str] = (
    "id, first_name, last_name, email, phone, password, created_at, is_active, is_admin"
)
_ACTIVITY_COLUMNS: Final[str] = "id, user_id, type, description, timestamp"
_ANALYTICS_COLUMNS: Final[str] = "id, type, data, timestamp"

MIGRATIONS: Dict[int, List[str]] = {
    1: [
        # users: unique email, non-unique phone
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            first_name TEXT NOT NULL DEFAULT '',
            last_name TEXT NOT NULL DEFAULT '',
            email TEXT NOT NULL,
            phone TEXT NOT NULL DEFAULT '',
            password TEXT NOT NULL,
            created_at TEXT NOT NULL,
            is_active INTEGER NOT NULL DEFAULT 1,
            is_admin INTEGER NOT NULL DEFAULT 0
        )
        """,
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_users_email ON users (email)",
        "CREATE INDEX IF NOT EXISTS idx_users_phone ON users (phone)",
        # activities: by user and by time
        """
        CREATE TABLE IF NOT EXISTS activities (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            type TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            timestamp TEXT NOT NULL
        )
        """,
        "CREATE INDEX IF NOT EXISTS idx_activities_user_id ON activities (user_id)",
        "CREATE INDEX IF NOT EXISTS idx_activities_timestamp ON activities (timestamp)",
        # analytics: by type and by time
        """
        CREATE TABLE IF NOT EXISTS analytics (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            type TEXT NOT NULL,
            data TEXT NOT NULL DEFAULT '{}',
            timestamp TEXT NOT NULL
        )
        """,
        "CREATE INDEX IF NOT EXISTS idx_analytics_type ON analytics (type)",
        "CREATE INDEX IF NOT EXISTS idx_analytics_timestamp ON analytics (timestamp)",
    ],
}


def pending_migrations(current_version: int) -> List[tuple[int, List[str]]]:
    """Migrations still to apply when the store is at `current_version`."""
    return [
        (version, MIGRATIONS[version])
        for version in sorted(MIGRATIONS)
        if current_version < version <= SCHEMA_VERSION
    ]
