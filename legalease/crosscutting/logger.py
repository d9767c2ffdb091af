# legalease/crosscutting/logger.py
"""
===============================================================================
MODULE: Structured (JSON) logger with tab/session context
===============================================================================

Goal
----
Log in a way that is:
- Parseable (JSON)
- Correlatable (tab_id / user_id)
- Safe (secrets such as passwords are redacted)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Component:
  JSONFormatter + setup_logger()

Responsibilities:
  - Format records as JSON
  - Enrich with context (tab_id, user_id)
  - Redact sensitive fields and bound payload sizes

Collaborators:
  - legalease/context.py (ContextVars)
  - crosscutting/config.py (level and format)
===============================================================================
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

# LogRecord attributes that must not be copied as "extra".
_INTERNAL_LOGRECORD_KEYS: set[str] = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
    "taskName",
}


class _Redactor:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      _Redactor

    Responsibilities:
      - Redact sensitive keys
      - Trim huge strings
      - Keep JSON serialization safe

    Collaborators:
      - JSONFormatter
    ----------------------------------------------------------------------------
    """

    SENSITIVE_KEYS = {
        "password",
        "passwd",
        "new_password",
        "confirm_password",
        "fingerprint",
        "secret",
        "token",
        "authorization",
        "api_key",
        "credential",
    }

    def __init__(self, max_str: int = 4_000, max_depth: int = 4):
        self._max_str = max_str
        self._max_depth = max_depth

    def sanitize(self, value: Any, *, depth: int = 0, key: str | None = None) -> Any:
        if key and key.lower() in self.SENSITIVE_KEYS:
            return "***REDACTED***"

        if depth > self._max_depth:
            return "***TRUNCATED***"

        if isinstance(value, str):
            if len(value) <= self._max_str:
                return value
            return value[: self._max_str] + "…(truncated)"

        if isinstance(value, (bytes, bytearray)):
            return f"<bytes {len(value)}B>"

        if isinstance(value, dict):
            out: dict[str, Any] = {}
            for k, v in value.items():
                ks = str(k)
                out[ks] = self.sanitize(v, depth=depth + 1, key=ks)
            return out

        if isinstance(value, (list, tuple)):
            return [self.sanitize(v, depth=depth + 1, key=key) for v in value]

        try:
            json.dumps(value, default=str)
            return value
        except (TypeError, ValueError):
            return str(value)


class JSONFormatter(logging.Formatter):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      JSONFormatter

    Responsibilities:
      - Convert LogRecord -> JSON
      - Enrich with tab/session context
      - Attach the stacktrace when an exception is logged

    Collaborators:
      - legalease/context.get_context_dict()
      - _Redactor
    ----------------------------------------------------------------------------
    """

    def __init__(self):
        super().__init__()
        self._redactor = _Redactor()

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "pid": os.getpid(),
        }

        from ..context import get_context_dict

        ctx = get_context_dict()
        if ctx:
            payload.update(ctx)

        for k, v in record.__dict__.items():
            if k in _INTERNAL_LOGRECORD_KEYS:
                continue
            payload[k] = self._redactor.sanitize(v, key=k)

        if record.exc_info:
            exc_type = record.exc_info[0].__name__ if record.exc_info[0] else None
            exc_msg = str(record.exc_info[1]) if record.exc_info[1] else None
            payload["exception"] = {
                "type": exc_type,
                "message": exc_msg,
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(
            payload, ensure_ascii=False, default=str, separators=(",", ":")
        )


def setup_logger(name: str = "legalease") -> logging.Logger:
    """
    Create and configure the package logger.

    - Avoids duplicated handlers on re-import
    - Honours log_level / log_json from Settings when they load
    """
    log = logging.getLogger(name)

    level = "INFO"
    use_json = True

    try:
        from .config import get_settings

        s = get_settings()
        level = (s.log_level or "INFO").upper()
        use_json = bool(s.log_json)
    except ValueError:
        # Invalid env must not break logging; Settings will fail loudly later.
        pass

    log.setLevel(getattr(logging, level, logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            JSONFormatter()
            if use_json
            else logging.Formatter("%(levelname)s %(message)s")
        )
        log.addHandler(handler)

    return log


logger = setup_logger()
