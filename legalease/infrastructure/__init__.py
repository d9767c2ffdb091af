"""
============================================================
CRC CARD — infrastructure/__init__.py
============================================================
Module: infrastructure (adapters behind the domain ports)

Responsibilities:
  - Group the concrete RecordStore and SessionStorage implementations.

Policy:
  - No business logic. Re-exports only; no side effects.
============================================================
"""

from .session_storage import InMemorySessionStorage
from .store import InMemoryRecordStore, SqliteRecordStore

__all__ = [
    "InMemoryRecordStore",
    "InMemorySessionStorage",
    "SqliteRecordStore",
]
