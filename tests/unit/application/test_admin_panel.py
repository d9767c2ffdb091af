"""
Name: Admin Panel Tests

Responsibilities:
  - Test admin gating (anonymous / non-admin -> FORBIDDEN)
  - Test overview totals, "new in the last month" window and analytics counts
  - Test status toggle (and its effect on login) and user filtering
"""

from datetime import datetime, timezone

import pytest

from legalease.application.usecases import (
    ACCESS_DENIED_MESSAGE,
    AdminErrorCode,
    AdminPanelService,
    one_month_before,
)
from legalease.identity import AuthErrorCode, AuthManager, SessionSnapshot
from legalease.infrastructure import InMemoryRecordStore, InMemorySessionStorage

PASSWORD = "Abcdef1!"
ADMIN_PASSWORD = "Admin@123"


async def _admin_context(make_signup, clock=None):
    store = InMemoryRecordStore(clock=clock)
    await store.initialize()
    auth = AuthManager(store, SessionSnapshot(InMemorySessionStorage()))
    await auth.signup(
        make_signup(email="admin@legalease.com", password=ADMIN_PASSWORD, first_name="Admin")
    )
    return store, auth


@pytest.mark.unit
class TestAdminGate:
    @pytest.mark.asyncio
    async def test_anonymous_is_forbidden(self, memory_store, auth):
        panel = AdminPanelService(memory_store, auth)

        result = await panel.overview()

        assert result.overview is None
        assert result.error.code == AdminErrorCode.FORBIDDEN
        assert result.error.message == ACCESS_DENIED_MESSAGE

    @pytest.mark.asyncio
    async def test_regular_user_is_forbidden(self, memory_store, auth, make_signup):
        signup = await auth.signup(make_signup())
        await auth.login("jane@example.com", PASSWORD)
        panel = AdminPanelService(memory_store, auth)

        assert (await panel.overview()).error.code == AdminErrorCode.FORBIDDEN
        toggle = await panel.toggle_user_status(signup.user_id)
        assert toggle.error.code == AdminErrorCode.FORBIDDEN
        assert (await memory_store.find_user_by_id(signup.user_id)).is_active is True


@pytest.mark.unit
class TestOverview:
    @pytest.mark.asyncio
    async def test_totals(self, make_signup):
        now = {"value": datetime(2024, 1, 1, tzinfo=timezone.utc)}
        store, auth = await _admin_context(make_signup, clock=lambda: now["value"])

        now["value"] = datetime(2024, 3, 10, tzinfo=timezone.utc)
        bob = await auth.signup(make_signup(email="bob@example.com"))
        await auth.signup(make_signup(email="eve@example.com"))
        await store.set_user_active(bob.user_id, False)
        await store.append_analytics("legal_query", {"userId": 2})
        await store.append_analytics("legal_query", {"userId": 3})
        await store.append_analytics("faq_view", {"userId": 2})

        await auth.login("admin@legalease.com", ADMIN_PASSWORD)
        result = await AdminPanelService(store, auth).overview(
            now=datetime(2024, 3, 15, tzinfo=timezone.utc)
        )

        ov = result.overview
        assert result.error is None
        assert ov.total_users == 3
        assert ov.active_users == 2
        assert ov.new_users == 2
        assert ov.total_legal_queries == 2
        assert ov.total_license_searches == 0
        assert ov.total_faq_views == 1
        assert [u.email for u in ov.users] == [
            "admin@legalease.com",
            "bob@example.com",
            "eve@example.com",
        ]

    @pytest.mark.asyncio
    async def test_naive_now_is_treated_as_utc(self, make_signup):
        store, auth = await _admin_context(make_signup)
        await auth.login("admin@legalease.com", ADMIN_PASSWORD)

        result = await AdminPanelService(store, auth).overview(
            now=datetime.now(timezone.utc).replace(tzinfo=None)
        )

        assert result.overview.new_users == 1

    @pytest.mark.parametrize(
        "moment,expected",
        [
            (datetime(2024, 3, 15), datetime(2024, 2, 15)),
            (datetime(2024, 3, 31), datetime(2024, 2, 29)),
            (datetime(2024, 1, 10), datetime(2023, 12, 10)),
        ],
    )
    def test_one_month_before(self, moment, expected):
        assert one_month_before(moment) == expected


@pytest.mark.unit
class TestToggleUserStatus:
    @pytest.mark.asyncio
    async def test_toggle_blocks_and_unblocks_login(self, make_signup):
        store, admin_auth = await _admin_context(make_signup)
        bob = await admin_auth.signup(make_signup(email="bob@example.com"))
        await admin_auth.login("admin@legalease.com", ADMIN_PASSWORD)
        panel = AdminPanelService(store, admin_auth)
        bob_auth = AuthManager(store, SessionSnapshot(InMemorySessionStorage()))

        deactivated = await panel.toggle_user_status(bob.user_id)
        assert deactivated.user.is_active is False
        blocked = await bob_auth.login("bob@example.com", PASSWORD)
        assert blocked.error.code == AuthErrorCode.ACCOUNT_DEACTIVATED

        reactivated = await panel.toggle_user_status(bob.user_id)
        assert reactivated.user.is_active is True
        assert (await bob_auth.login("bob@example.com", PASSWORD)).success

    @pytest.mark.asyncio
    async def test_unknown_user(self, make_signup):
        store, auth = await _admin_context(make_signup)
        await auth.login("admin@legalease.com", ADMIN_PASSWORD)

        result = await AdminPanelService(store, auth).toggle_user_status(999)

        assert result.user is None
        assert result.error.code == AdminErrorCode.NOT_FOUND


@pytest.mark.unit
class TestFilterUsers:
    @pytest.mark.asyncio
    async def test_matches_name_email_and_phone_case_insensitively(self, make_signup):
        store, auth = await _admin_context(make_signup)
        await auth.signup(make_signup(email="bob@example.com", first_name="Bob", phone="+91 555"))
        users = await store.list_users()

        by_name = AdminPanelService.filter_users(users, "BOB")
        by_phone = AdminPanelService.filter_users(users, "555")
        by_domain = AdminPanelService.filter_users(users, "LEGALEASE.com")

        assert [u.email for u in by_name] == ["bob@example.com"]
        assert [u.email for u in by_phone] == ["bob@example.com"]
        assert [u.email for u in by_domain] == ["admin@legalease.com"]
        assert AdminPanelService.filter_users(users, "") == users
        assert AdminPanelService.filter_users(users, "nobody") == []
