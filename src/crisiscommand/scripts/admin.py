#!/usr/bin/env python3
"""Admin CLI for local CrisisCommand maintenance.

Commands:
    seed-services  - Create the configured emergency services if none exist
    list-active    - Print incidents that still need a response
    audit-log      - Print the most recent audit records

Usage:
    uv run crisis-admin seed-services
    uv run crisis-admin list-active
    uv run crisis-admin audit-log --limit 20
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Silence noisy libraries
logging.getLogger("azure").setLevel(logging.WARNING)


async def _seed_services() -> int:
    """Seed the emergency service directory."""
    from crisiscommand.seed import seed_emergency_services

    created = await seed_emergency_services()
    if created:
        print(f"Created {created} emergency services")
    else:
        print("Emergency services already present, nothing to do")
    return 0


async def _list_active() -> int:
    """Print active incidents, newest first."""
    from crisiscommand.core.config import get_timezone
    from crisiscommand.incidents.store import IncidentStore

    async with IncidentStore() as store:
        incidents = await store.list_active()
    tz = get_timezone()

    if not incidents:
        print("No active incidents")
        return 0

    for incident in incidents:
        responder = incident.assigned_responder_id or "unassigned"
        print(
            f"{incident.created_at.astimezone(tz):%Y-%m-%d %H:%M}  {incident.priority:<8}  "
            f"{incident.status:<9}  {incident.title}  ({responder})"
        )
        print(f"  {incident.id}  {incident.location.address}")
    print(f"\n{len(incidents)} active incident(s)")
    return 0


async def _audit_log(limit: int) -> int:
    """Print the most recent audit records."""
    from crisiscommand.audit.store import AuditStore

    async with AuditStore() as store:
        entries = await store.list_recent(limit)

    for entry in entries:
        target = f"{entry.entity_type}:{entry.entity_id}" if entry.entity_type else "-"
        print(
            f"{entry.created_at:%Y-%m-%d %H:%M:%S}  {entry.user_id or '-':<20}  "
            f"{entry.action:<20}  {target}"
        )
    return 0


def cmd_seed_services(args: argparse.Namespace) -> int:
    """Seed emergency services."""
    load_dotenv()
    return asyncio.run(_seed_services())


def cmd_list_active(args: argparse.Namespace) -> int:
    """List active incidents."""
    load_dotenv()
    return asyncio.run(_list_active())


def cmd_audit_log(args: argparse.Namespace) -> int:
    """Show recent audit records."""
    if args.limit < 1:
        print("Error: --limit must be at least 1")
        return 1
    load_dotenv()
    return asyncio.run(_audit_log(args.limit))


def main() -> None:
    """CLI entry point for admin commands."""
    from crisiscommand.audit.store import DEFAULT_AUDIT_LIMIT

    parser = argparse.ArgumentParser(description="CrisisCommand admin CLI")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("seed-services", help="Create the configured emergency services")
    sub.add_parser("list-active", help="List incidents that still need a response")

    audit_p = sub.add_parser("audit-log", help="Show recent audit records")
    audit_p.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_AUDIT_LIMIT,
        help=f"Number of records to show (default: {DEFAULT_AUDIT_LIMIT})",
    )

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "seed-services": cmd_seed_services,
        "list-active": cmd_list_active,
        "audit-log": cmd_audit_log,
    }
    sys.exit(commands[args.command](args))


if __name__ == "__main__":
    main()
