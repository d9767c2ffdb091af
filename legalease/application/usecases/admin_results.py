"""
===============================================================================
ADMIN PANEL RESULTS (Result / Error Models)
===============================================================================

Responsibilities:
    - Define AdminErrorCode and AdminError (code + message).
    - Represent AdminOverview and the results of the admin operations.

Contract (all results):
    - error is None => payload present (success)
    - error set     => payload None
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from ...domain.entities import User

ACCESS_DENIED_MESSAGE = "Access denied. Admin privileges required."


class AdminErrorCode(str, Enum):
    """
    Codes:
      - FORBIDDEN: no logged-in admin.
      - NOT_FOUND: target user does not exist.
      - STORE_ERROR: the record store failed.
    """

    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    STORE_ERROR = "STORE_ERROR"


@dataclass(frozen=True)
class AdminError:
    code: AdminErrorCode
    message: str


@dataclass(frozen=True)
class AdminOverview:
    """Numbers and rows shown on the admin panel."""

    total_users: int
    active_users: int
    new_users: int
    total_legal_queries: int
    total_license_searches: int
    total_faq_views: int
    users: List[User] = field(default_factory=list)


@dataclass
class AdminOverviewResult:
    overview: AdminOverview | None = None
    error: AdminError | None = None


@dataclass
class AdminUserResult:
    """Result of a single-user command (status toggle)."""

    user: User | None = None
    error: AdminError | None = None
