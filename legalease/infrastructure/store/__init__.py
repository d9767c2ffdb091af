# infrastructure/store/__init__.py
"""
============================================================
CRC CARD — infrastructure/store/__init__.py
============================================================
Module: infrastructure.store (Public Export Surface)

Responsibilities:
  - Expose the RecordStore implementations (SQLite first, then InMemory).
  - Expose the schema version so callers can report it.

Policy:
  - Re-exports only; no side effects.
============================================================
"""

# ------------------------------------------------------------
# SQLite implementation (durable)
# ------------------------------------------------------------
from .sqlite_store import SqliteRecordStore

# ------------------------------------------------------------
# In-memory implementation (tests / throwaway sessions)
# ------------------------------------------------------------
from .in_memory import InMemoryRecordStore

from .schema import DEFAULT_ADMIN_EMAIL, SCHEMA_VERSION

__all__ = [
    "SqliteRecordStore",
    "InMemoryRecordStore",
    "DEFAULT_ADMIN_EMAIL",
    "SCHEMA_VERSION",
]
