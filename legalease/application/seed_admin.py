# =============================================================================
# FILE: application/seed_admin.py
# =============================================================================
"""
===============================================================================
TASK: Seed Default Admin
===============================================================================

Name:
    Seed Default Admin

What it is:
    Makes sure the administrator account exists on first start, the way the
    browser build did on page load. The account goes through the regular
    signup flow so its signup activity and analytics are recorded too.

Patterns:
    - Task orchestration (seed)
    - Dependency Injection (auth + store + settings)
    - Idempotence (ensure-create; never resets an existing admin)

CRC:
    Component: ensure_default_admin
    Responsibilities:
      - Honour settings.seed_default_admin
      - Skip when a user with settings.admin_email already exists
      - Sign the admin up otherwise
    Collaborators:
      - identity.auth_manager.AuthManager
      - domain.repositories.RecordStore
      - Settings
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Final

from ..crosscutting.config import Settings
from ..crosscutting.logger import logger
from ..domain.repositories import RecordStore
from ..identity.auth_manager import AuthManager
from ..identity.auth_results import AuthErrorCode, SignupInput

_ADMIN_FIRST_NAME: Final[str] = "Admin"
_ADMIN_LAST_NAME: Final[str] = "User"


class SeedOutcome(str, Enum):
    DISABLED = "disabled"
    EXISTS = "exists"
    CREATED = "created"
    FAILED = "failed"


def _admin_signup(settings: Settings) -> SignupInput:
    return SignupInput(
        first_name=_ADMIN_FIRST_NAME,
        last_name=_ADMIN_LAST_NAME,
        email=settings.admin_email,
        phone=settings.admin_phone,
        password=settings.admin_password,
    )


async def ensure_default_admin(
    auth: AuthManager,
    store: RecordStore,
    settings: Settings,
) -> SeedOutcome:
    """
    Ensure the default admin user exists if configured.

    Behavior:
      - If disabled: no-op
      - If a user with admin_email exists: skip
      - Otherwise: signup through the Auth Manager

    Failures are logged and reported as SeedOutcome.FAILED, never raised.
    """
    if not settings.seed_default_admin:
        return SeedOutcome.DISABLED

    email = settings.admin_email
    try:
        existing = await store.find_user_by_email(email)
    except Exception:
        logger.exception("Seed admin: lookup failed", extra={"email": email})
        return SeedOutcome.FAILED

    if existing is not None:
        logger.info("Seed admin: user exists; skipping", extra={"email": email})
        return SeedOutcome.EXISTS

    result = await auth.signup(_admin_signup(settings))
    if result.error is not None and result.error.code == AuthErrorCode.DUPLICATE_KEY:
        # R: another chain created it between the lookup and the insert.
        logger.info("Seed admin: user exists; skipping", extra={"email": email})
        return SeedOutcome.EXISTS
    if result.error is not None:
        logger.warning(
            "Seed admin: signup failed",
            extra={"email": email, "error_code": result.error.code.value},
        )
        return SeedOutcome.FAILED

    logger.info(
        "Seed admin: user created", extra={"email": email, "user_id": result.user_id}
    )
    return SeedOutcome.CREATED
