# legalease/crosscutting/exceptions.py
"""
===============================================================================
MODULE: Typed exceptions (internal errors)
===============================================================================

Goal
----
Internal exceptions with:
- a stable error_code
- an error_id for log correlation
- a human-readable message (never a password or fingerprint)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Component:
  LegalEaseError + subclasses

Responsibilities:
  - Standardize store and identity failures
  - Generate error_id, carried into AuthFailure and failure logs

Collaborators:
  - identity/auth_manager.py (maps exceptions to AuthFailure results)
  - infrastructure/store/* (raise StoreUnavailable / DuplicateKey / StoreError)
  - crosscutting/logger.py
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class LegalEaseError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      LegalEaseError

    Responsibilities:
      - Base for every internal error of the core
      - Provide error_code + error_id + message
    ----------------------------------------------------------------------------
    """

    error_code: str = "LEGALEASE_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)


# ---------------------------------------------------------------------------
# Record store
# ---------------------------------------------------------------------------


class StoreUnavailable(LegalEaseError):
    """The store cannot be opened or upgraded. Fatal for the session."""

    error_code: str = "STORE_UNAVAILABLE"


class StoreError(LegalEaseError):
    """Store-level failure of a single operation."""

    error_code: str = "STORE_ERROR"


class DuplicateKey(StoreError):
    """A unique index rejected the write (e.g. email already registered)."""

    error_code: str = "DUPLICATE_KEY"


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class WeakPassword(LegalEaseError):
    """Password does not satisfy the strength policy."""

    error_code: str = "WEAK_PASSWORD"


class NotFound(LegalEaseError):
    """No user matches the supplied email."""

    error_code: str = "NOT_FOUND"


class InvalidCredentials(LegalEaseError):
    """Password fingerprint does not match the stored one."""

    error_code: str = "INVALID_CREDENTIALS"


class AccountDeactivated(LegalEaseError):
    """The user exists but was deactivated by an administrator."""

    error_code: str = "ACCOUNT_DEACTIVATED"
