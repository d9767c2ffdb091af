"""
Name: Session Snapshot

Responsibilities:
  - Mirror the authenticated user into tab-scoped storage under the keys the
    browser build used: "currentUser" (JSON) and "isLoggedIn" ("true").
  - Load it back, treating missing keys or corrupt JSON as "no session".
  - Capture/restore raw contents so a failed login can roll back.

Collaborators:
  - domain.repositories.SessionStorage (injected)
  - domain.entities.User
  - identity.auth_manager (only writer)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Final, Optional

from ..crosscutting.logger import logger
from ..domain.entities import User
from ..domain.repositories import SessionStorage

CURRENT_USER_KEY: Final[str] = "currentUser"
IS_LOGGED_IN_KEY: Final[str] = "isLoggedIn"
LOGGED_IN_FLAG: Final[str] = "true"


@dataclass(frozen=True)
class SnapshotState:
    """Raw storage values at capture time (None = key absent)."""

    current_user: Optional[str]
    is_logged_in: Optional[str]


class SessionSnapshot:
    def __init__(self, storage: SessionStorage) -> None:
        self._storage = storage

    def save(self, user: User) -> None:
        self._storage.set_item(CURRENT_USER_KEY, json.dumps(user.to_dict()))
        self._storage.set_item(IS_LOGGED_IN_KEY, LOGGED_IN_FLAG)

    def load(self) -> Optional[User]:
        raw = self._storage.get_item(CURRENT_USER_KEY)
        flag = self._storage.get_item(IS_LOGGED_IN_KEY)
        if not raw or flag != LOGGED_IN_FLAG:
            return None
        try:
            return User.from_dict(json.loads(raw))
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning(
                "Session snapshot is corrupt; ignoring",
                extra={"error_type": type(exc).__name__},
            )
            return None

    def clear(self) -> None:
        self._storage.remove_item(CURRENT_USER_KEY)
        self._storage.remove_item(IS_LOGGED_IN_KEY)

    def capture(self) -> SnapshotState:
        return SnapshotState(
            current_user=self._storage.get_item(CURRENT_USER_KEY),
            is_logged_in=self._storage.get_item(IS_LOGGED_IN_KEY),
        )

    def restore(self, state: SnapshotState) -> None:
        """Put back exactly what capture() saw."""
        for key, value in (
            (CURRENT_USER_KEY, state.current_user),
            (IS_LOGGED_IN_KEY, state.is_logged_in),
        ):
            if value is None:
                self._storage.remove_item(key)
            else:
                self._storage.set_item(key, value)
