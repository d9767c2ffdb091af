"""
===============================================================================
CRC CARD — identity/auth_manager.py
===============================================================================

Class:
    AuthManager

States:
    Anonymous -> (login | restore_session) -> Authenticated(user)
    Authenticated -> logout -> Anonymous

Responsibilities:
    - signup: uniqueness pre-check, strength policy, hashing, then insert
      user + "signup" activity + "user_signup" analytics in one transaction.
    - login: lookup, active check, credential check, then snapshot write +
      "login" activity + "user_login" analytics, then state change. On any
      failure the snapshot is put back and the state does not move.
    - logout / restore_session against the Session Snapshot.
    - Convert every failure into a typed result (nothing escapes).

Collaborators:
    - domain.repositories.RecordStore
    - identity.session_snapshot.SessionSnapshot
    - identity.credentials (validate_strength, PasswordHasher)
    - context.set_user_context (log correlation)

Notes:
    - Login messages tell "User not found" apart from "Invalid password".
      This reveals whether an account exists; kept as observable behavior.
    - restore_session trusts the snapshot for the rest of the tab's life; a
      user deactivated meanwhile stays logged in until logout.
===============================================================================
"""

from __future__ import annotations

import asyncio

from ..context import set_user_context
from ..crosscutting.exceptions import (
    AccountDeactivated,
    DuplicateKey,
    InvalidCredentials,
    LegalEaseError,
    NotFound,
    WeakPassword,
)
from ..crosscutting.logger import logger
from ..domain.entities import ActivityType, AnalyticsType, NewUser, Session, User
from ..domain.repositories import RecordStore
from .auth_results import AuthFailure, LoginResult, SignupInput, SignupResult
from .credentials import (
    WEAK_PASSWORD_MESSAGE,
    LegacyFingerprintHasher,
    PasswordHasher,
    validate_strength,
)
from .session_snapshot import SessionSnapshot

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"
USER_NOT_FOUND_MESSAGE = "User not found"
ACCOUNT_DEACTIVATED_MESSAGE = "Account is deactivated"
INVALID_PASSWORD_MESSAGE = "Invalid password"


class AuthManager:
    """Session authentication for one tab context."""

    def __init__(
        self,
        store: RecordStore,
        snapshot: SessionSnapshot,
        *,
        hasher: PasswordHasher | None = None,
    ) -> None:
        self._store = store
        self._snapshot = snapshot
        self._hasher = hasher or LegacyFingerprintHasher()
        self._session = Session.anonymous()
        # R: only one login at a time between snapshot write and state change.
        self._commit_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def is_logged_in(self) -> bool:
        return self._session.is_logged_in

    @property
    def current_user(self) -> User | None:
        return self._session.user

    @property
    def session(self) -> Session:
        return self._session

    # ------------------------------------------------------------------
    # Signup
    # ------------------------------------------------------------------
    async def signup(self, data: SignupInput) -> SignupResult:
        try:
            user_id = await self._signup(data)
        except LegalEaseError as exc:
            failure = AuthFailure.from_exception(exc)
            logger.warning(
                "Signup failed",
                extra={
                    "email": data.email,
                    "error_code": exc.error_code,
                    "error_id": failure.error_id,
                },
            )
            return SignupResult(error=failure)
        except Exception as exc:
            failure = AuthFailure.from_exception(exc)
            logger.exception(
                "Signup failed unexpectedly",
                extra={"email": data.email, "error_id": failure.error_id},
            )
            return SignupResult(error=failure)

        logger.info("User signed up", extra={"user_id": user_id, "email": data.email})
        return SignupResult(user_id=user_id)

    async def _signup(self, data: SignupInput) -> int:
        # R: fast path only; the unique index inside the transaction decides.
        if await self._store.find_user_by_email(data.email) is not None:
            raise DuplicateKey(DUPLICATE_EMAIL_MESSAGE)

        if not validate_strength(data.password):
            raise WeakPassword(WEAK_PASSWORD_MESSAGE)

        record = NewUser(
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone=data.phone,
            password=self._hasher.hash(data.password),
        )

        async with self._store.transaction() as tx:
            user_id = await tx.insert_user(record)
            await tx.append_activity(user_id, ActivityType.SIGNUP, "User created account")
            await tx.append_analytics(
                AnalyticsType.USER_SIGNUP, {"userId": user_id, "email": data.email}
            )
        return user_id

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------
    async def login(self, email: str, password: str) -> LoginResult:
        try:
            user = await self._login(email, password)
        except LegalEaseError as exc:
            failure = AuthFailure.from_exception(exc)
            logger.warning(
                "Login failed",
                extra={
                    "email": email,
                    "error_code": exc.error_code,
                    "error_id": failure.error_id,
                },
            )
            return LoginResult(error=failure)
        except Exception as exc:
            failure = AuthFailure.from_exception(exc)
            logger.exception(
                "Login failed unexpectedly",
                extra={"email": email, "error_id": failure.error_id},
            )
            return LoginResult(error=failure)

        logger.info("User logged in", extra={"user_id": user.id, "email": user.email})
        return LoginResult(user=user)

    async def _login(self, email: str, password: str) -> User:
        user = await self._store.find_user_by_email(email)
        if user is None:
            raise NotFound(USER_NOT_FOUND_MESSAGE)
        if not user.is_active:
            raise AccountDeactivated(ACCOUNT_DEACTIVATED_MESSAGE)
        if not self._hasher.verify(password, user.password):
            raise InvalidCredentials(INVALID_PASSWORD_MESSAGE)

        async with self._commit_lock:
            previous = self._snapshot.capture()
            try:
                self._snapshot.save(user)
                async with self._store.transaction() as tx:
                    await tx.append_activity(user.id, ActivityType.LOGIN, "User logged in")
                    await tx.append_analytics(
                        AnalyticsType.USER_LOGIN, {"userId": user.id, "email": user.email}
                    )
            except BaseException:
                self._snapshot.restore(previous)
                raise

            self._session = Session.authenticated(user)
            set_user_context(user_id=user.id)
        return user

    # ------------------------------------------------------------------
    # Logout / restore
    # ------------------------------------------------------------------
    def logout(self) -> None:
        """Unconditional: in-memory state and snapshot are both cleared."""
        previous = self._session.user
        self._session = Session.anonymous()
        set_user_context(user_id=None)
        try:
            self._snapshot.clear()
        except Exception:
            logger.exception("Failed to clear session snapshot")

        logger.info(
            "User logged out",
            extra={"user_id": previous.id if previous is not None else None},
        )

    def restore_session(self) -> bool:
        user = self._snapshot.load()
        if user is None:
            return False

        self._session = Session.authenticated(user)
        set_user_context(user_id=user.id)
        logger.info("Session restored", extra={"user_id": user.id})
        return True
