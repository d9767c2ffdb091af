"""
===============================================================================
CRC CARD — identity/credentials.py
===============================================================================

Module:
    Credential policy (strength rules + password fingerprint)

Responsibilities:
    - Validate password strength (length + character classes).
    - Compute the legacy password fingerprint, bit-for-bit compatible with
      records written by the browser build.
    - Score passwords for the signup strength meter.
    - Offer a PasswordHasher abstraction with an opt-in Argon2 scheme.

Collaborators:
    - identity.auth_manager: validates and hashes on signup, verifies on login.
    - argon2-cffi: Argon2Hasher.
    - crosscutting.config: password_scheme selects the hasher.

Known weaknesses (kept on purpose, see DESIGN.md):
    - The fingerprint is a 32-bit rolling hash: not one-way, collisions are
      easy to find. It stays the default so existing records keep working.
    - Switching to Argon2 changes stored-data compatibility: users created
      under one scheme cannot log in under the other.
===============================================================================
"""

from __future__ import annotations

import re
from typing import Final, Protocol

from argon2 import PasswordHasher as _Argon2PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

# ---------------------------------------------------------------------------
# Policy constants
# ---------------------------------------------------------------------------

MIN_PASSWORD_LENGTH: Final[int] = 8

SPECIAL_CHARACTERS: Final[str] = '!@#$%^&*(),.?":{}|<>'

WEAK_PASSWORD_MESSAGE: Final[str] = (
    "Password must be at least 8 characters with uppercase, lowercase, "
    "number, and special character"
)

# R: ASCII classes, same as the original form regexes ([A-Z], [a-z], \d).
_UPPER_RE: Final[re.Pattern[str]] = re.compile(r"[A-Z]")
_LOWER_RE: Final[re.Pattern[str]] = re.compile(r"[a-z]")
_DIGIT_RE: Final[re.Pattern[str]] = re.compile(r"[0-9]")
_SPECIAL_RE: Final[re.Pattern[str]] = re.compile(
    "[" + re.escape(SPECIAL_CHARACTERS) + "]"
)

STRENGTH_LABELS: Final[tuple[str, ...]] = (
    "Very Weak",
    "Very Weak",
    "Weak",
    "Fair",
    "Good",
    "Strong",
)

_INT32_MASK: Final[int] = 0xFFFFFFFF
_INT32_SIGN: Final[int] = 0x80000000


# ---------------------------------------------------------------------------
# Strength
# ---------------------------------------------------------------------------


def _rules(password: str) -> tuple[bool, ...]:
    return (
        len(password) >= MIN_PASSWORD_LENGTH,
        bool(_UPPER_RE.search(password)),
        bool(_LOWER_RE.search(password)),
        bool(_DIGIT_RE.search(password)),
        bool(_SPECIAL_RE.search(password)),
    )


def validate_strength(password: str) -> bool:
    """True when every rule holds (no max length, no dictionary check)."""
    return all(_rules(password or ""))


def strength_score(password: str) -> int:
    """Number of satisfied rules, 0..5."""
    return sum(_rules(password or ""))


def strength_label(score: int) -> str:
    """Meter label for a score; out-of-range scores are clamped."""
    return STRENGTH_LABELS[max(0, min(score, len(STRENGTH_LABELS) - 1))]


# ---------------------------------------------------------------------------
# Legacy fingerprint
# ---------------------------------------------------------------------------


def _utf16_code_units(text: str) -> list[int]:
    data = text.encode("utf-16-le", errors="surrogatepass")
    return [data[i] | (data[i + 1] << 8) for i in range(0, len(data), 2)]


def fingerprint(password: str) -> str:
    """
    32-bit rolling hash of the password, stringified.

    h = (h * 31 + code_unit) mod 2**32 over UTF-16 code units, read back as
    a signed 32-bit integer. fingerprint("abc") == "96354".
    """
    h = 0
    for unit in _utf16_code_units(password):
        h = (h * 31 + unit) & _INT32_MASK
    if h & _INT32_SIGN:
        h -= 1 << 32
    return str(h)


# ---------------------------------------------------------------------------
# Hashers
# ---------------------------------------------------------------------------


class PasswordHasher(Protocol):
    """Turns a plaintext password into the stored credential and checks it."""

    scheme: str

    def hash(self, password: str) -> str: ...

    def verify(self, password: str, stored: str) -> bool: ...


class LegacyFingerprintHasher:
    """Default scheme: stored value is fingerprint(password)."""

    scheme = "legacy"

    def hash(self, password: str) -> str:
        return fingerprint(password)

    def verify(self, password: str, stored: str) -> bool:
        return fingerprint(password) == stored


class Argon2Hasher:
    """Opt-in scheme (PASSWORD_SCHEME=argon2). Not readable by legacy records."""

    scheme = "argon2"

    def __init__(self, hasher: _Argon2PasswordHasher | None = None) -> None:
        self._hasher = hasher or _Argon2PasswordHasher()

    def hash(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify(self, password: str, stored: str) -> bool:
        try:
            return self._hasher.verify(stored, password)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False


def build_password_hasher(scheme: str = "legacy") -> PasswordHasher:
    """Hasher for a configured scheme name."""
    normalized = (scheme or "legacy").strip().lower()
    if normalized == "legacy":
        return LegacyFingerprintHasher()
    if normalized == "argon2":
        return Argon2Hasher()
    raise ValueError(f"Unknown password scheme: {scheme!r}")
