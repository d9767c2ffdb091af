"""
Identity: credential policy, session snapshot and the Auth Manager.
"""

from .auth_manager import AuthManager
from .auth_results import (
    AuthErrorCode,
    AuthFailure,
    LoginResult,
    SignupInput,
    SignupResult,
)
from .credentials import (
    WEAK_PASSWORD_MESSAGE,
    Argon2Hasher,
    LegacyFingerprintHasher,
    PasswordHasher,
    build_password_hasher,
    fingerprint,
    strength_label,
    strength_score,
    validate_strength,
)
from .session_snapshot import SessionSnapshot

__all__ = [
    "AuthManager",
    "AuthErrorCode",
    "AuthFailure",
    "LoginResult",
    "SignupInput",
    "SignupResult",
    "WEAK_PASSWORD_MESSAGE",
    "Argon2Hasher",
    "LegacyFingerprintHasher",
    "PasswordHasher",
    "build_password_hasher",
    "fingerprint",
    "strength_label",
    "strength_score",
    "validate_strength",
    "SessionSnapshot",
]
