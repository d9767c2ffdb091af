"""
===============================================================================
AUTH RESULTS (Shared Result / Error Models)
===============================================================================

Name:
    Auth Manager results

Why:
    - signup/login return typed results instead of raising, so callers (forms,
      CLI, seeding) branch on `error` and show `error.message` as-is.
    - Error codes mirror crosscutting.exceptions error_code values.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    auth_results models (module)

Responsibilities:
    - Define AuthErrorCode and AuthFailure (code + message).
    - Represent SignupInput, SignupResult and LoginResult.

Collaborators:
    - identity.auth_manager (producer)
    - domain.entities.User
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import uuid4

from ..crosscutting.exceptions import LegalEaseError
from ..domain.entities import User


class AuthErrorCode(str, Enum):
    """
    Stable failure categories of the Auth Manager.

    Values match LegalEaseError.error_code of the exception that caused them.
    """

    DUPLICATE_KEY = "DUPLICATE_KEY"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    NOT_FOUND = "NOT_FOUND"
    ACCOUNT_DEACTIVATED = "ACCOUNT_DEACTIVATED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    STORE_ERROR = "STORE_ERROR"


@dataclass(frozen=True)
class AuthFailure:
    """Human-readable failure (message is shown to the user verbatim).

    error_id ties the result to the log line written for the same failure.
    """

    code: AuthErrorCode
    message: str
    error_id: str | None = None

    @classmethod
    def from_exception(cls, exc: Exception) -> "AuthFailure":
        if isinstance(exc, LegalEaseError):
            try:
                code = AuthErrorCode(exc.error_code)
            except ValueError:
                code = AuthErrorCode.STORE_ERROR
            return cls(code=code, message=exc.message, error_id=exc.error_id)
        return cls(
            code=AuthErrorCode.STORE_ERROR,
            message=str(exc) or type(exc).__name__,
            error_id=str(uuid4()),
        )


@dataclass(frozen=True)
class SignupInput:
    """Signup form fields; password is plaintext and never stored as such."""

    first_name: str
    last_name: str
    email: str
    phone: str
    password: str


@dataclass
class SignupResult:
    """
    Contract:
      - error is None => user_id is set (success)
      - error set     => user_id is None
    """

    user_id: int | None = None
    error: AuthFailure | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class LoginResult:
    """
    Contract:
      - error is None => user is the authenticated User
      - error set     => user is None and session state did not change
    """

    user: User | None = None
    error: AuthFailure | None = None

    @property
    def success(self) -> bool:
        return self.error is None
