"""
===============================================================================
CRC CARD — legalease/container.py (Composition Root / manual DI)
===============================================================================

Responsibilities:
  - Build the record store, session snapshot, Auth Manager, recorder and
    use cases for one tab context from Settings.
  - Own the startup sequence: open the store, then seed the default admin.

Collaborators:
  - crosscutting.config.Settings / get_settings
  - infrastructure.store (SqliteRecordStore, InMemoryRecordStore)
  - infrastructure.session_storage.InMemorySessionStorage
  - identity (AuthManager, SessionSnapshot, build_password_hasher)
  - application (ActivityRecorder, ensure_default_admin, use cases)

Notes:
  - No module-level singletons: build_context() returns an AppContext that
    callers pass explicitly.
  - No business logic here.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

from .application import (
    ActivityRecorder,
    AdminPanelService,
    DashboardService,
    SeedOutcome,
    ensure_default_admin,
)
from .context import set_tab_context
from .crosscutting.config import Settings, get_settings
from .crosscutting.logger import logger
from .domain.repositories import RecordStore, SessionStorage
from .identity import AuthManager, SessionSnapshot, build_password_hasher
from .infrastructure import (
    InMemoryRecordStore,
    InMemorySessionStorage,
    SqliteRecordStore,
)


def build_record_store(settings: Settings) -> RecordStore:
    """Record store for the configured backend (not yet initialized)."""
    if settings.store_backend == "memory":
        return InMemoryRecordStore(admin_email=settings.admin_email)
    return SqliteRecordStore(
        settings.store_path,
        admin_email=settings.admin_email,
        busy_timeout_seconds=settings.store_busy_timeout_seconds,
        open_max_attempts=settings.store_open_max_attempts,
        open_base_delay_seconds=settings.store_open_base_delay_seconds,
        open_max_delay_seconds=settings.store_open_max_delay_seconds,
    )


@dataclass
class AppContext:
    """Everything one tab context needs, wired once."""

    settings: Settings
    tab_id: str
    store: RecordStore
    session_storage: SessionStorage
    snapshot: SessionSnapshot
    auth: AuthManager
    recorder: ActivityRecorder
    dashboard: DashboardService
    admin_panel: AdminPanelService

    async def initialize(self) -> SeedOutcome:
        """Open the store (raises StoreUnavailable), then seed the admin."""
        await self.store.initialize()
        return await ensure_default_admin(self.auth, self.store, self.settings)

    async def close(self) -> None:
        await self.store.close()


def build_context(
    settings: Settings | None = None,
    *,
    store: RecordStore | None = None,
    session_storage: SessionStorage | None = None,
    tab_id: str | None = None,
) -> AppContext:
    """
    Compose an AppContext.

    Passing the same session_storage to a second build_context() call models
    a reload of the same tab: restore_session() picks the snapshot back up.
    """
    settings = settings or get_settings()
    tab_id = tab_id or uuid4().hex
    set_tab_context(tab_id=tab_id)

    store = store or build_record_store(settings)
    session_storage = session_storage if session_storage is not None else InMemorySessionStorage()
    snapshot = SessionSnapshot(session_storage)
    auth = AuthManager(
        store, snapshot, hasher=build_password_hasher(settings.password_scheme)
    )

    logger.info(
        "App context built",
        extra={
            "store_backend": settings.store_backend,
            "password_scheme": settings.password_scheme,
        },
    )

    return AppContext(
        settings=settings,
        tab_id=tab_id,
        store=store,
        session_storage=session_storage,
        snapshot=snapshot,
        auth=auth,
        recorder=ActivityRecorder(store, auth),
        dashboard=DashboardService(store, recent_limit=settings.recent_activity_limit),
        admin_panel=AdminPanelService(store, auth),
    )
