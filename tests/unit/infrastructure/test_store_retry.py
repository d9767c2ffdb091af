"""
Name: Store Open Retry Tests

Responsibilities:
  - Test transient vs permanent error classification
  - Test retry policy stops after the configured attempts
  - Test argument validation

Notes:
  - base_delay=0 keeps backoff (and jitter) at zero
"""

import sqlite3

import pytest

from legalease.infrastructure.store.retry import (
    create_open_retrying,
    is_transient_store_error,
)


@pytest.mark.unit
class TestIsTransientStoreError:
    @pytest.mark.parametrize(
        "message",
        ["database is locked", "database table is locked", "Database is BUSY", "disk I/O error"],
    )
    def test_lock_contention_is_transient(self, message):
        assert is_transient_store_error(sqlite3.OperationalError(message)) is True

    def test_timeout_is_transient(self):
        assert is_transient_store_error(TimeoutError()) is True

    @pytest.mark.parametrize(
        "exc",
        [
            sqlite3.OperationalError("unable to open database file"),
            sqlite3.DatabaseError("file is not a database"),
            ValueError("bad"),
        ],
    )
    def test_other_errors_are_permanent(self, exc):
        assert is_transient_store_error(exc) is False


@pytest.mark.unit
class TestCreateOpenRetrying:
    @pytest.mark.asyncio
    async def test_retries_transient_errors_until_success(self):
        attempts = 0

        async for attempt in create_open_retrying(max_attempts=3, base_delay=0, max_delay=0.01):
            with attempt:
                attempts += 1
                if attempts < 3:
                    raise sqlite3.OperationalError("database is locked")

        assert attempts == 3

    @pytest.mark.asyncio
    async def test_reraises_last_transient_error_when_exhausted(self):
        attempts = 0

        with pytest.raises(sqlite3.OperationalError, match="locked"):
            async for attempt in create_open_retrying(max_attempts=2, base_delay=0, max_delay=0.01):
                with attempt:
                    attempts += 1
                    raise sqlite3.OperationalError("database is locked")

        assert attempts == 2

    @pytest.mark.asyncio
    async def test_permanent_errors_fail_fast(self):
        attempts = 0

        with pytest.raises(sqlite3.OperationalError):
            async for attempt in create_open_retrying(max_attempts=5, base_delay=0, max_delay=0.01):
                with attempt:
                    attempts += 1
                    raise sqlite3.OperationalError("unable to open database file")

        assert attempts == 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"base_delay": -1},
            {"max_delay": 0},
        ],
    )
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            create_open_retrying(**kwargs)
