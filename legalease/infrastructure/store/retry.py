"""legalease.infrastructure.store.retry

Name: Store-open retry with exponential backoff + jitter

What it is
----------
Resilience helper for opening the embedded store. Implements:
  - Error classification: **transient** (retry) vs **permanent** (fail-fast)
  - A `tenacity` AsyncRetrying policy with exponential backoff + jitter
  - Structured logging of every retry attempt

CRC (Component Card)
--------------------
Component: store retry helper
Responsibilities:
  - Decide which SQLite errors are worth retrying (locked / busy)
  - Provide a standard AsyncRetrying (tenacity) configured from Settings
  - Log attempts with useful context
Collaborators:
  - tenacity (retry engine)
  - infrastructure.store.sqlite_store (opening / schema upgrade)
  - crosscutting.logger
Constraints:
  - Retry ONLY lock contention and transient I/O (another process holds the
    database during its own upgrade)
  - Corruption, permission and schema-version errors fail fast
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ...crosscutting.logger import logger

# R: message fragments SQLite uses for lock contention.
_TRANSIENT_MESSAGE_PATTERNS: tuple[str, ...] = (
    "database is locked",
    "database table is locked",
    "database is busy",
    "disk i/o error",
)


def is_transient_store_error(exception: BaseException) -> bool:
    """R: Decide if an error opening the store is transient.

    Rules (in order):
      1) sqlite3.OperationalError whose message mentions lock/busy: True.
      2) TimeoutError: True.
      3) Anything else (permissions, corruption, version mismatch): False.
    """
    if isinstance(exception, sqlite3.OperationalError):
        message = str(exception).lower()
        return any(p in message for p in _TRANSIENT_MESSAGE_PATTERNS)

    if isinstance(exception, TimeoutError):
        return True

    return False


def _log_retry(retry_state: RetryCallState) -> None:
    """R: Log each attempt before sleeping (before_sleep)."""
    attempt = retry_state.attempt_number
    wait_time = (
        retry_state.next_action.sleep if retry_state.next_action is not None else 0
    )

    exc: Optional[BaseException] = None
    if retry_state.outcome is not None:
        exc = retry_state.outcome.exception()

    logger.warning(
        "Retrying record store open",
        extra={
            "attempt": attempt,
            "wait_seconds": round(float(wait_time), 2),
            "error": str(exc) if exc else None,
            "error_type": type(exc).__name__ if exc else None,
        },
    )


def create_open_retrying(
    max_attempts: int = 3,
    base_delay: float = 0.1,
    max_delay: float = 2.0,
) -> AsyncRetrying:
    """R: Build a tenacity AsyncRetrying with exponential backoff + jitter.

    Config:
      - stop: `stop_after_attempt(max_attempts)`
      - wait: `wait_exponential_jitter(initial=base_delay, max=max_delay,
        jitter=base_delay)` (jitter scales with the base delay)
      - retry: only if `is_transient_store_error(exception)`
      - before_sleep: `_log_retry`
      - reraise: True (propagates the last exception)
    """
    if max_attempts <= 0:
        raise ValueError("max_attempts must be > 0")
    if base_delay < 0:
        raise ValueError("base_delay must be >= 0")
    if max_delay <= 0:
        raise ValueError("max_delay must be > 0")

    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential_jitter(
            initial=base_delay, max=max_delay, jitter=base_delay
        ),
        retry=retry_if_exception(is_transient_store_error),
        before_sleep=_log_retry,
        reraise=True,
    )
