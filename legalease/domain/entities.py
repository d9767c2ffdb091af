"""
===============================================================================
CRC CARD — domain/entities.py
===============================================================================

Module:
    Domain entities (User, Activity, AnalyticsEvent, Session)

Responsibilities:
    - Define the core records of the system (no infrastructure).
    - Offer minimal helpers to keep simple invariants (timestamps, copies).
    - Keep clear types for the store, the auth manager and the recorder.

Collaborators:
    - domain.repositories: persist/retrieve these entities.
    - identity.*: builds Session values, serializes User for the snapshot.
    - application.*: reads Activity / AnalyticsEvent for dashboards.

Principles:
    - No dependencies on SQLite or logging.
    - Timestamps are ISO-8601 UTC strings with millisecond precision and a
      trailing "Z", the format the browser build produced.
===============================================================================
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp, e.g. 2024-05-01T10:20:30.123Z."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Inverse of utc_timestamp (accepts a trailing Z)."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


# ---------------------------------------------------------------------------
# Event tags
# ---------------------------------------------------------------------------


class ActivityType(str, Enum):
    """Known activity tags. The store accepts any string."""

    SIGNUP = "signup"
    LOGIN = "login"
    LEGAL_QUERY = "legal_query"
    LICENSE_SEARCH = "license_search"
    FAQ_VIEW = "faq_view"


class AnalyticsType(str, Enum):
    """Known analytics tags, namespaced apart from ActivityType."""

    USER_SIGNUP = "user_signup"
    USER_LOGIN = "user_login"
    LEGAL_QUERY = "legal_query"
    LICENSE_SEARCH = "license_search"
    FAQ_VIEW = "faq_view"


def tag_value(tag: str | Enum) -> str:
    """Plain string for a tag given either an Enum member or a str."""
    return tag.value if isinstance(tag, Enum) else str(tag)


def _flag(data: Mapping[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise TypeError(f"{key} must be a boolean, got {type(value).__name__}")
    return value


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NewUser:
    """
    Insert payload for the users collection.

    `password` must already be a fingerprint; the store never sees plaintext.
    """

    first_name: str
    last_name: str
    email: str
    phone: str
    password: str


@dataclass(frozen=True)
class User:
    """Registered user as stored by the record store."""

    id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    password: str
    created_at: str
    is_active: bool = True
    is_admin: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def with_active(self, is_active: bool) -> "User":
        """Copy with a new is_active flag (the only supported mutation)."""
        return replace(self, is_active=is_active)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        """
        Build a User from a mapping (snapshot payloads, store rows).

        Raises:
            KeyError / TypeError / ValueError on malformed input.
        """
        return cls(
            id=int(data["id"]),
            first_name=str(data["first_name"]),
            last_name=str(data["last_name"]),
            email=str(data["email"]),
            phone=str(data["phone"]),
            password=str(data["password"]),
            created_at=str(data["created_at"]),
            is_active=_flag(data, "is_active", True),
            is_admin=_flag(data, "is_admin", False),
        )


# ---------------------------------------------------------------------------
# Activity / analytics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Activity:
    """User-initiated action. user_id is not checked against users."""

    id: int
    user_id: int
    type: str
    description: str
    timestamp: str


@dataclass(frozen=True)
class AnalyticsEvent:
    """Aggregate usage record; data is a JSON document."""

    id: int
    type: str
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = ""


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Session:
    """In-memory authentication state of one tab context."""

    user: User | None = None
    is_logged_in: bool = False

    @classmethod
    def anonymous(cls) -> "Session":
        return cls()

    @classmethod
    def authenticated(cls, user: User) -> "Session":
        return cls(user=user, is_logged_in=True)
