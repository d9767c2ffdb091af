"""
Name: Logging and Context Tests

Responsibilities:
  - Test JSONFormatter output shape and context enrichment
  - Test redaction of sensitive keys and truncation of long values
  - Test ContextVar helpers
"""

import json
import logging
import sys

import pytest

from legalease.context import (
    clear_context,
    get_context_dict,
    set_tab_context,
    set_user_context,
)
from legalease.crosscutting.logger import JSONFormatter, _Redactor


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("legalease", logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestContext:
    def test_empty_by_default(self):
        clear_context()
        assert get_context_dict() == {}

    def test_set_and_clear(self):
        set_tab_context(tab_id="tab-1")
        set_user_context(user_id=7)

        assert get_context_dict() == {"tab_id": "tab-1", "user_id": "7"}

        set_user_context(user_id=None)
        assert get_context_dict() == {"tab_id": "tab-1"}

        clear_context()
        assert get_context_dict() == {}


@pytest.mark.unit
class TestJSONFormatter:
    def test_payload_shape(self):
        payload = json.loads(JSONFormatter().format(_record("store ready", backend="memory")))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "legalease"
        assert payload["message"] == "store ready"
        assert payload["backend"] == "memory"

    def test_context_is_included(self):
        set_tab_context(tab_id="tab-9")
        set_user_context(user_id=3)

        payload = json.loads(JSONFormatter().format(_record()))

        assert payload["tab_id"] == "tab-9"
        assert payload["user_id"] == "3"

    def test_sensitive_keys_are_redacted(self):
        payload = json.loads(
            JSONFormatter().format(
                _record(password="Abcdef1!", details={"fingerprint": "96354", "email": "a@b.c"})
            )
        )

        assert payload["password"] == "***REDACTED***"
        assert payload["details"] == {"fingerprint": "***REDACTED***", "email": "a@b.c"}

    def test_exception_is_attached(self):
        try:
            raise ValueError("broken")
        except ValueError:
            record = logging.LogRecord(
                "legalease", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )

        payload = json.loads(JSONFormatter().format(record))

        assert payload["exception"]["type"] == "ValueError"
        assert payload["exception"]["message"] == "broken"


@pytest.mark.unit
class TestRedactor:
    def test_truncates_long_strings(self):
        out = _Redactor(max_str=5).sanitize("abcdefghij")
        assert out.startswith("abcde")
        assert out.endswith("(truncated)")

    def test_limits_depth(self):
        nested = {"a": {"b": {"c": "d"}}}
        assert _Redactor(max_depth=1).sanitize(nested) == {"a": {"b": "***TRUNCATED***"}}

    def test_bytes_are_summarized(self):
        assert _Redactor().sanitize(b"1234") == "<bytes 4B>"
