"""
LegalEase core: client-side persistence and session authentication.

Typical use:

    ctx = build_context()
    await ctx.initialize()
    result = await ctx.auth.signup(SignupInput(...))
"""

from .container import AppContext, build_context
from .identity import SignupInput

__all__ = ["AppContext", "build_context", "SignupInput"]

__version__ = "1.0.0"
