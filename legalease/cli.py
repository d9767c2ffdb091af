"""
Name: Operator CLI

Responsibilities:
  - Open the durable record store (creating/upgrading it if needed)
  - Seed the default admin on demand
  - Print users, a user's activities and analytics events of a type
  - Print the admin overview after an admin login

Usage:
  python -m legalease [--store-path PATH] <command> [args]
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import sys
from typing import Sequence

from .application import SeedOutcome, ensure_default_admin
from .container import AppContext, build_context
from .crosscutting.config import Settings, get_settings
from .crosscutting.exceptions import StoreUnavailable


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="legalease",
        description="Inspect and maintain the LegalEase record store.",
    )
    parser.add_argument(
        "--store-path",
        help="SQLite file to use (default: STORE_PATH setting)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create or upgrade the store schema")
    sub.add_parser("seed-admin", help="Create the default admin if missing")
    sub.add_parser("users", help="List registered users")

    activities = sub.add_parser("activities", help="List a user's activities")
    activities.add_argument("user_id", type=int)

    analytics = sub.add_parser("analytics", help="List analytics events of a type")
    analytics.add_argument("type", help="e.g. user_signup, legal_query, faq_view")

    overview = sub.add_parser("overview", help="Admin overview (requires admin login)")
    overview.add_argument("--email", help="Admin email (default: ADMIN_EMAIL setting)")
    overview.add_argument(
        "--password", help="Admin password (omit to be prompted securely)"
    )
    return parser


def _resolve_settings(args: argparse.Namespace) -> Settings:
    settings = get_settings()
    if args.store_path:
        settings = settings.model_copy(
            update={"store_path": args.store_path, "store_backend": "sqlite"}
        )
    return settings


async def _cmd_init(ctx: AppContext, args: argparse.Namespace) -> int:
    await ctx.store.initialize()
    print(f"Store ready: {ctx.settings.store_path}")
    return 0


async def _cmd_seed_admin(ctx: AppContext, args: argparse.Namespace) -> int:
    await ctx.store.initialize()
    settings = ctx.settings.model_copy(update={"seed_default_admin": True})
    outcome = await ensure_default_admin(ctx.auth, ctx.store, settings)
    print(f"Seed admin: {outcome.value} ({settings.admin_email})")
    return 1 if outcome is SeedOutcome.FAILED else 0


async def _cmd_users(ctx: AppContext, args: argparse.Namespace) -> int:
    await ctx.store.initialize()
    for user in await ctx.store.list_users():
        print(
            f"id={user.id} email={user.email} name={user.full_name!r} "
            f"phone={user.phone!r} active={user.is_active} admin={user.is_admin} "
            f"created_at={user.created_at}"
        )
    return 0


async def _cmd_activities(ctx: AppContext, args: argparse.Namespace) -> int:
    await ctx.store.initialize()
    for activity in await ctx.store.list_activities_for_user(args.user_id):
        print(f"{activity.timestamp} {activity.type} {activity.description}")
    return 0


async def _cmd_analytics(ctx: AppContext, args: argparse.Namespace) -> int:
    await ctx.store.initialize()
    for event in await ctx.store.list_analytics_by_type(args.type):
        print(f"{event.timestamp} {event.type} {json.dumps(event.data, ensure_ascii=False)}")
    return 0


async def _cmd_overview(ctx: AppContext, args: argparse.Namespace) -> int:
    await ctx.store.initialize()
    email = (args.email or ctx.settings.admin_email).strip()
    password = args.password or getpass.getpass("Password: ")

    login = await ctx.auth.login(email, password)
    if login.error is not None:
        print(f"Login failed: {login.error.message}", file=sys.stderr)
        return 1

    result = await ctx.admin_panel.overview()
    ctx.auth.logout()
    if result.error is not None or result.overview is None:
        message = result.error.message if result.error else "No overview"
        print(message, file=sys.stderr)
        return 1

    ov = result.overview
    print(f"Total users:       {ov.total_users}")
    print(f"Active users:      {ov.active_users}")
    print(f"New (last month):  {ov.new_users}")
    print(f"Legal queries:     {ov.total_legal_queries}")
    print(f"License searches:  {ov.total_license_searches}")
    print(f"FAQ views:         {ov.total_faq_views}")
    return 0


_COMMANDS = {
    "init": _cmd_init,
    "seed-admin": _cmd_seed_admin,
    "users": _cmd_users,
    "activities": _cmd_activities,
    "analytics": _cmd_analytics,
    "overview": _cmd_overview,
}


async def _run(args: argparse.Namespace) -> int:
    ctx = build_context(_resolve_settings(args))
    try:
        return await _COMMANDS[args.command](ctx, args)
    finally:
        await ctx.close()


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        return asyncio.run(_run(args))
    except StoreUnavailable as exc:
        print(f"Store unavailable: {exc.message}", file=sys.stderr)
        return 2
