"""
===============================================================================
CRC CARD — legalease/context.py (Per-tab / per-session context)
===============================================================================

Responsibilities:
  - Keep "tab-scoped" correlation data in ContextVars (async-safe).
  - Let the logger enrich records without threading ids through every call.
  - Provide minimal helpers: set_*(), get_context_dict(), clear_context().

Collaborators:
  - identity.auth_manager: sets user_id on login / restore, clears on logout.
  - container.AppContext: sets tab_id when a context is built.
  - crosscutting.logger: reads get_context_dict().

Constraints:
  - Primitive values only (str) for safe JSON serialization.
  - Empty-string defaults to avoid None in log payloads.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Final

# Identifier of the tab/session context that owns the AuthManager.
tab_id_var: ContextVar[str] = ContextVar("tab_id", default="")

# Id of the authenticated user (stringified), empty when anonymous.
user_id_var: ContextVar[str] = ContextVar("user_id", default="")

_CTX_TAB_ID: Final[str] = "tab_id"
_CTX_USER_ID: Final[str] = "user_id"


def set_tab_context(*, tab_id: str = "") -> None:
    """Set the tab identifier; empty string means "not available"."""
    tab_id_var.set(tab_id or "")


def set_user_context(*, user_id: int | str | None = None) -> None:
    """Set the authenticated user id (None clears it)."""
    user_id_var.set("" if user_id is None else str(user_id))


def get_context_dict() -> dict[str, str]:
    """
    Return the current context as a dict, omitting empty keys.

    Typical use:
      - Structured log enrichment.
    """
    ctx: dict[str, str] = {}

    if val := tab_id_var.get():
        ctx[_CTX_TAB_ID] = val
    if val := user_id_var.get():
        ctx[_CTX_USER_ID] = val

    return ctx


def clear_context() -> None:
    """Reset every context variable."""
    tab_id_var.set("")
    user_id_var.set("")
