"""
Name: Credential Policy Tests

Responsibilities:
  - Test password strength validation (length + ASCII character classes)
  - Test legacy fingerprint compatibility (32-bit signed rolling hash)
  - Test strength meter scores and labels
  - Test password hashers (legacy default, Argon2 opt-in)

Notes:
  - Fingerprint values equal Java's String.hashCode for the same text
"""

import pytest
from argon2 import PasswordHasher as Argon2PasswordHasher

from legalease.identity.credentials import (
    WEAK_PASSWORD_MESSAGE,
    Argon2Hasher,
    LegacyFingerprintHasher,
    build_password_hasher,
    fingerprint,
    strength_label,
    strength_score,
    validate_strength,
)


def _cheap_argon2() -> Argon2Hasher:
    return Argon2Hasher(Argon2PasswordHasher(time_cost=1, memory_cost=8, parallelism=1))


@pytest.mark.unit
class TestValidateStrength:
    @pytest.mark.parametrize("password", ["Abcdef1!", "Admin@123", "Zz9(longer-password)"])
    def test_accepts_strong_passwords(self, password):
        assert validate_strength(password) is True

    @pytest.mark.parametrize(
        "password",
        [
            "abcdefgh",  # no uppercase / digit / special
            "Ab1!",  # too short
            "ABCDEFG1!",  # no lowercase
            "Abcdefgh!",  # no digit
            "Abcdefg1",  # no special
            "Abcdef1~",  # "~" is not in the special set
            "Ábcdefg1!",  # non-ASCII uppercase does not count
            "",
        ],
    )
    def test_rejects_weak_passwords(self, password):
        assert validate_strength(password) is False

    def test_policy_message(self):
        assert WEAK_PASSWORD_MESSAGE == (
            "Password must be at least 8 characters with uppercase, lowercase, "
            "number, and special character"
        )


@pytest.mark.unit
class TestFingerprint:
    @pytest.mark.parametrize(
        "password,expected",
        [
            ("", "0"),
            ("a", "97"),
            ("abc", "96354"),
            ("hello", "99162322"),
        ],
    )
    def test_known_values(self, password, expected):
        assert fingerprint(password) == expected

    def test_wraps_to_signed_32_bit(self):
        assert fingerprint("polygenelubricants") == "-2147483648"

    def test_hashes_utf16_code_units(self):
        # U+1F600 is the surrogate pair D83D DE00
        assert fingerprint("\U0001F600") == str(0xD83D * 31 + 0xDE00)

    def test_is_deterministic(self):
        assert fingerprint("Admin@123") == fingerprint("Admin@123")

    def test_single_character_change_changes_output(self):
        assert fingerprint("Admin@123") != fingerprint("Admin@124")

    def test_is_order_sensitive(self):
        assert fingerprint("ab") != fingerprint("ba")


@pytest.mark.unit
class TestStrengthMeter:
    @pytest.mark.parametrize(
        "password,score,label",
        [
            ("", 0, "Very Weak"),
            ("a", 1, "Very Weak"),
            ("aA", 2, "Weak"),
            ("aA1", 3, "Fair"),
            ("aA1!", 4, "Good"),
            ("aA1!aaaa", 5, "Strong"),
        ],
    )
    def test_score_and_label(self, password, score, label):
        assert strength_score(password) == score
        assert strength_label(score) == label

    def test_label_clamps_out_of_range(self):
        assert strength_label(-3) == "Very Weak"
        assert strength_label(9) == "Strong"


@pytest.mark.unit
class TestHashers:
    def test_legacy_hasher_stores_fingerprint(self):
        hasher = LegacyFingerprintHasher()
        stored = hasher.hash("Abcdef1!")

        assert stored == fingerprint("Abcdef1!")
        assert hasher.verify("Abcdef1!", stored) is True
        assert hasher.verify("Abcdef1?", stored) is False

    def test_argon2_hasher_round_trip(self):
        hasher = _cheap_argon2()
        stored = hasher.hash("Abcdef1!")

        assert stored.startswith("$argon2")
        assert "Abcdef1!" not in stored
        assert hasher.verify("Abcdef1!", stored) is True
        assert hasher.verify("wrong", stored) is False

    def test_argon2_cannot_verify_legacy_records(self):
        assert _cheap_argon2().verify("Abcdef1!", fingerprint("Abcdef1!")) is False

    def test_build_password_hasher(self):
        assert build_password_hasher().scheme == "legacy"
        assert build_password_hasher("ARGON2").scheme == "argon2"
        with pytest.raises(ValueError):
            build_password_hasher("md5")
