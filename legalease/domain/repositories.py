"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define the persistence contracts of the core (ports).
- Keep identity/application independent from SQLite or in-memory details.
- Enable dependency inversion and straightforward unit testing.

Collaborators
- domain.entities: User, NewUser, Activity, AnalyticsEvent
- infrastructure.store: InMemoryRecordStore, SqliteRecordStore
- infrastructure.session_storage: InMemorySessionStorage

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Every RecordStore operation is a coroutine; callers await before issuing
  dependent operations (insert_user's id before append_activity).

Notes
- We use typing.Protocol for structural subtyping ("duck typing").
- Outputs are concrete lists for predictable iteration/serialization.
- Lookups return None for "not found"; only store failures raise.
- Store methods must not be awaited inside a `transaction()` block; use the
  yielded StoreTransaction (the SQLite store holds a non-reentrant lock).
"""

from typing import Any, AsyncContextManager, Dict, List, Optional, Protocol

from .entities import Activity, AnalyticsEvent, NewUser, User


class StoreTransaction(Protocol):
    """
    R: Write operations grouped into one atomic unit.

    All writes issued through a transaction commit together when the
    `RecordStore.transaction()` block exits normally and are discarded when
    it exits with an exception.
    """

    async def insert_user(self, record: NewUser) -> int:
        """R: Insert a user; raises DuplicateKey if the email is taken."""
        ...

    async def append_activity(
        self, user_id: int, type: str, description: str
    ) -> int:
        """R: Append an activity; returns its id."""
        ...

    async def append_analytics(self, type: str, data: Dict[str, Any]) -> int:
        """R: Append an analytics event; returns its id."""
        ...


class RecordStore(Protocol):
    """
    R: Interface for the embedded record store (users, activities, analytics).

    Implementations must provide:
      - Idempotent initialization with additive schema upgrades
      - Unique index on users.email enforced at insert time
      - Index-scoped reads for activities (user_id) and analytics (type)
      - Atomic multi-write transactions
    """

    async def initialize(self) -> None:
        """R: Open/create collections and indexes. Raises StoreUnavailable."""
        ...

    def transaction(self) -> AsyncContextManager[StoreTransaction]:
        """R: Open a write transaction (async context manager)."""
        ...

    async def insert_user(self, record: NewUser) -> int:
        """R: Insert in its own transaction; raises DuplicateKey."""
        ...

    async def find_user_by_email(self, email: str) -> Optional[User]:
        """R: Exact, case-sensitive match on the unique email index."""
        ...

    async def find_user_by_id(self, user_id: int) -> Optional[User]:
        """R: Primary-key lookup."""
        ...

    async def list_users(self) -> List[User]:
        """R: All users. Order is not part of the contract."""
        ...

    async def set_user_active(self, user_id: int, is_active: bool) -> Optional[User]:
        """R: Admin status toggle; returns the updated user or None."""
        ...

    async def append_activity(
        self, user_id: int, type: str, description: str
    ) -> int:
        """R: Append an activity in its own transaction."""
        ...

    async def append_analytics(self, type: str, data: Dict[str, Any]) -> int:
        """R: Append an analytics event in its own transaction."""
        ...

    async def list_activities_for_user(self, user_id: int) -> List[Activity]:
        """R: Activities of a user (insertion order)."""
        ...

    async def list_analytics_by_type(self, type: str) -> List[AnalyticsEvent]:
        """R: Analytics events of a type (insertion order)."""
        ...

    async def close(self) -> None:
        """R: Release the underlying connection (idempotent)."""
        ...


class SessionStorage(Protocol):
    """
    R: Tab-scoped string key/value storage (the session snapshot backend).

    Distinct from the record store: it survives reloads of the same tab
    context only.
    """

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...
