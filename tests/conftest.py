"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Provide reusable test fixtures (settings, stores, session storage, auth)
  - Run record store tests against both backends (memory + SQLite)
  - Configure test environment

Collaborators:
  - pytest / pytest-asyncio
  - legalease.infrastructure: InMemoryRecordStore, SqliteRecordStore
  - legalease.identity: AuthManager, SessionSnapshot

Notes:
  - Fixtures are auto-discovered by pytest
  - SQLite stores live under tmp_path (one file per test)
  - Context variables are reset after every test
"""

import os
import sys
from pathlib import Path
from typing import Callable

import pytest
import pytest_asyncio

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from legalease.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None
app_config.get_settings.cache_clear()

from legalease.context import clear_context  # noqa: E402
from legalease.identity import AuthManager, SessionSnapshot, SignupInput  # noqa: E402
from legalease.infrastructure import (  # noqa: E402
    InMemoryRecordStore,
    InMemorySessionStorage,
    SqliteRecordStore,
)

os.environ.setdefault("APP_ENV", "test")

STRONG_PASSWORD = "Abcdef1!"


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


@pytest.fixture(autouse=True)
def _reset_context():
    yield
    clear_context()


# ============================================================================
# Settings
# ============================================================================


@pytest.fixture
def settings() -> app_config.Settings:
    """R: In-memory backend, no admin seeding, legacy passwords."""
    return app_config.Settings(
        app_env="test",
        store_backend="memory",
        seed_default_admin=False,
        password_scheme="legacy",
    )


# ============================================================================
# Record stores
# ============================================================================


@pytest_asyncio.fixture
async def memory_store():
    """R: Initialized InMemoryRecordStore."""
    store = InMemoryRecordStore()
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def sqlite_store(tmp_path: Path):
    """R: Initialized SqliteRecordStore backed by a file under tmp_path."""
    store = SqliteRecordStore(
        tmp_path / "legalease.db",
        open_base_delay_seconds=0.0,
        open_max_delay_seconds=0.01,
    )
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path: Path):
    """R: Initialized record store, once per backend."""
    if request.param == "memory":
        instance = InMemoryRecordStore()
    else:
        instance = SqliteRecordStore(
            tmp_path / "legalease.db",
            open_base_delay_seconds=0.0,
            open_max_delay_seconds=0.01,
        )
    await instance.initialize()
    yield instance
    await instance.close()


# ============================================================================
# Identity
# ============================================================================


@pytest.fixture
def session_storage() -> InMemorySessionStorage:
    return InMemorySessionStorage()


@pytest.fixture
def auth(memory_store, session_storage) -> AuthManager:
    """R: AuthManager over the in-memory store with the legacy hasher."""
    return AuthManager(memory_store, SessionSnapshot(session_storage))


@pytest.fixture
def make_signup() -> Callable[..., SignupInput]:
    """R: Factory for SignupInput with valid defaults."""

    def _make(
        email: str = "jane@example.com",
        password: str = STRONG_PASSWORD,
        first_name: str = "Jane",
        last_name: str = "Doe",
        phone: str = "+91 9000000000",
    ) -> SignupInput:
        return SignupInput(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            password=password,
        )

    return _make
