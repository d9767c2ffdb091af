"""
Name: In-memory tab storage

Responsibilities:
  - Implement the SessionStorage port with a plain dict of strings.
  - Stand in for the browser's per-tab storage: one instance per tab context,
    shared by every AuthManager that represents a reload of that tab.

Constraints:
  - Values are strings only; callers serialize.
"""

from __future__ import annotations

from typing import Dict, Optional


class InMemorySessionStorage:
    """Dict-backed SessionStorage."""

    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError("session storage values must be strings")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)
