"""
Name: SQLite Record Store Tests

Responsibilities:
  - Test durability across close/reopen
  - Test schema versioning (PRAGMA user_version, newer-version refusal)
  - Test open failures surface as StoreUnavailable

Notes:
  - Contract behavior shared with the in-memory store lives in
    test_record_store.py
"""

import asyncio

import aiosqlite
import pytest

from legalease.crosscutting.exceptions import StoreUnavailable
from legalease.domain.entities import NewUser
from legalease.infrastructure.store import SCHEMA_VERSION, SqliteRecordStore
from legalease.infrastructure.store.schema import pending_migrations


def _store(path) -> SqliteRecordStore:
    return SqliteRecordStore(
        path, open_max_attempts=2, open_base_delay_seconds=0.0, open_max_delay_seconds=0.01
    )


def _new_user(email: str = "jane@example.com") -> NewUser:
    return NewUser(
        first_name="Jane", last_name="Doe", email=email, phone="+91 1", password="1"
    )


@pytest.mark.unit
class TestSqliteDurability:
    @pytest.mark.asyncio
    async def test_records_survive_reopen(self, tmp_path):
        path = tmp_path / "legalease.db"
        store = _store(path)
        await store.initialize()
        user_id = await store.insert_user(_new_user())
        await store.append_activity(user_id, "signup", "User created account")
        await store.append_analytics("user_signup", {"userId": user_id})
        await store.close()

        reopened = _store(path)
        await reopened.initialize()
        try:
            user = await reopened.find_user_by_email("jane@example.com")
            assert user is not None and user.id == user_id
            assert len(await reopened.list_activities_for_user(user_id)) == 1
            assert (await reopened.list_analytics_by_type("user_signup"))[0].data == {
                "userId": user_id
            }
        finally:
            await reopened.close()

    @pytest.mark.asyncio
    async def test_ids_are_not_reused_after_reopen(self, tmp_path):
        path = tmp_path / "legalease.db"
        store = _store(path)
        await store.initialize()
        first = await store.insert_user(_new_user("a@example.com"))
        await store.close()

        reopened = _store(path)
        await reopened.initialize()
        try:
            second = await reopened.insert_user(_new_user("b@example.com"))
        finally:
            await reopened.close()

        assert second > first

    @pytest.mark.asyncio
    async def test_rolled_back_id_is_handed_out_again(self, sqlite_store):
        with pytest.raises(RuntimeError):
            async with sqlite_store.transaction() as tx:
                rolled_back = await tx.insert_user(_new_user("a@example.com"))
                raise RuntimeError("abort")

        committed = await sqlite_store.insert_user(_new_user("b@example.com"))

        assert committed == rolled_back

    @pytest.mark.asyncio
    async def test_creates_parent_directories(self, tmp_path):
        store = _store(tmp_path / "nested" / "dir" / "legalease.db")
        await store.initialize()
        await store.close()

        assert (tmp_path / "nested" / "dir" / "legalease.db").exists()

    @pytest.mark.asyncio
    async def test_close_is_idempotent_and_blocks_further_use(self, sqlite_store):
        await sqlite_store.close()
        await sqlite_store.close()

        with pytest.raises(StoreUnavailable):
            await sqlite_store.list_users()

    @pytest.mark.asyncio
    async def test_concurrent_initialize_opens_one_connection(self, tmp_path, monkeypatch):
        opened = []
        original_connect = aiosqlite.connect

        def counting_connect(*args, **kwargs):
            opened.append(args[0])
            return original_connect(*args, **kwargs)

        monkeypatch.setattr(aiosqlite, "connect", counting_connect)
        store = _store(tmp_path / "legalease.db")

        await asyncio.gather(store.initialize(), store.initialize())
        try:
            assert len(opened) == 1
            assert await store.list_users() == []
        finally:
            await store.close()


@pytest.mark.unit
class TestSqliteSchema:
    @pytest.mark.asyncio
    async def test_schema_version_is_persisted(self, tmp_path):
        path = tmp_path / "legalease.db"
        store = _store(path)
        await store.initialize()
        await store.close()

        async with aiosqlite.connect(path) as conn:
            async with conn.execute("PRAGMA user_version") as cursor:
                (version,) = await cursor.fetchone()
            async with conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'index' AND name LIKE 'idx_%'"
            ) as cursor:
                indexes = {row[0] for row in await cursor.fetchall()}

        assert version == SCHEMA_VERSION
        assert {
            "idx_users_email",
            "idx_users_phone",
            "idx_activities_user_id",
            "idx_activities_timestamp",
            "idx_analytics_type",
            "idx_analytics_timestamp",
        } <= indexes

    @pytest.mark.asyncio
    async def test_newer_schema_version_is_refused(self, tmp_path):
        path = tmp_path / "legalease.db"
        async with aiosqlite.connect(path) as conn:
            await conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")
            await conn.commit()

        store = _store(path)
        with pytest.raises(StoreUnavailable, match="newer than supported"):
            await store.initialize()

    @pytest.mark.asyncio
    async def test_unopenable_path_is_unavailable(self, tmp_path):
        store = _store(tmp_path)  # a directory, not a database file

        with pytest.raises(StoreUnavailable) as exc_info:
            await store.initialize()

        assert exc_info.value.error_code == "STORE_UNAVAILABLE"

    def test_pending_migrations_skips_applied_versions(self):
        assert [v for v, _ in pending_migrations(0)] == list(range(1, SCHEMA_VERSION + 1))
        assert pending_migrations(SCHEMA_VERSION) == []
