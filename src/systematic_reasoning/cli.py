#!/usr/bin/env python3
"""
Systematic Reasoning CLI - inspect and maintain the reasoning store.

Usage:
    sysreason serve                          Run the MCP server on stdio
    sysreason namespace <workspace>          Show the namespace key of a workspace
    sysreason status <workspace>             Show active ticket and history size
    sysreason tickets <workspace>            List reasoning tickets
    sysreason reflections <workspace>        List reflections (newest first)
    sysreason search <query> [-w WORKSPACE]  Fuzzy-search reflections
    sysreason revert <workspace> <ticket>    Remove a ticket and its reflection
"""
import argparse
import json
import logging
import sys

from . import __version__
from .modules.core.config import Settings
from .modules.core.errors import ReasoningError
from .modules.ledger.display import (
    DIM,
    color,
    format_hit,
    format_reflection_row,
    format_status,
    format_ticket_row,
)
from .modules.ledger.keying import namespace_of
from .modules.ledger.learning_log import hit_to_dict
from .modules.ledger.lifecycle import TicketLifecycle

logger = logging.getLogger(__name__)


def _machine_output(result: dict | list) -> None:
    """Print result as JSON when --json is set."""
    print(json.dumps(result, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sysreason",
        description="Reasoning ticket and learning store for AI agents",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--home", help="Storage root (default: $SYSREASON_HOME or ~/.systematic-reasoning)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at INFO level")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Run the MCP server on stdio")

    ns_p = sub.add_parser("namespace", help="Show the namespace key of a workspace")
    ns_p.add_argument("workspace", help="Workspace identifier (path)")

    status_p = sub.add_parser("status", help="Show active ticket and history size")
    status_p.add_argument("workspace", help="Workspace identifier (path)")

    tickets_p = sub.add_parser("tickets", help="List reasoning tickets")
    tickets_p.add_argument("workspace", help="Workspace identifier (path)")
    tickets_p.add_argument("--active", "-a", action="store_true", help="Only the active ticket")

    refl_p = sub.add_parser("reflections", help="List reflections, newest first")
    refl_p.add_argument("workspace", help="Workspace identifier (path)")
    refl_p.add_argument("--limit", "-n", type=int, default=20, help="Max reflections to show")

    search_p = sub.add_parser("search", help="Fuzzy-search reflections")
    search_p.add_argument("query", nargs="+", help="Query text")
    search_p.add_argument("--workspace", "-w", help="Search only this workspace")
    search_p.add_argument("--limit", "-n", type=int, default=5, help="Max results")

    revert_p = sub.add_parser("revert", help="Remove a ticket and its reflection")
    revert_p.add_argument("workspace", help="Workspace identifier (path)")
    revert_p.add_argument("ticket_id", help="Ticket ID")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env().with_home(args.home)
    except ReasoningError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if args.command == "serve":
        from .modules.core.mcp_server import configure_logging, serve

        configure_logging("INFO" if args.verbose else settings.log_level)
        serve(settings)
        return 0

    logging.basicConfig(
        level=logging.INFO if args.verbose else getattr(logging, settings.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    lifecycle = TicketLifecycle.from_settings(settings)

    try:
        return _dispatch(args, lifecycle)
    except ReasoningError as e:
        if args.json:
            _machine_output(e.to_dict())
            return 1
        print(f"Error: {e.render()}", file=sys.stderr)
        return 1


def _dispatch(args: argparse.Namespace, lifecycle: TicketLifecycle) -> int:
    cmd = args.command

    if cmd == "namespace":
        return _cmd_namespace(args)
    elif cmd == "status":
        return _cmd_status(args, lifecycle)
    elif cmd == "tickets":
        return _cmd_tickets(args, lifecycle)
    elif cmd == "reflections":
        return _cmd_reflections(args, lifecycle)
    elif cmd == "search":
        return _cmd_search(args, lifecycle)
    elif cmd == "revert":
        return _cmd_revert(args, lifecycle)
    else:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        return 1


# Command implementations

def _cmd_namespace(args: argparse.Namespace) -> int:
    namespace = namespace_of(args.workspace)
    if args.json:
        _machine_output({"workspace_path": args.workspace, "namespace": namespace})
    else:
        print(namespace)
    return 0


def _cmd_status(args: argparse.Namespace, lifecycle: TicketLifecycle) -> int:
    status = lifecycle.status(args.workspace)
    if args.json:
        _machine_output(status)
    else:
        print(format_status(status))
    return 0


def _cmd_tickets(args: argparse.Namespace, lifecycle: TicketLifecycle) -> int:
    tickets = lifecycle.tickets.list(namespace_of(args.workspace))
    if args.active:
        tickets = [t for t in tickets if t.is_active]

    if args.json:
        _machine_output([t.to_dict() for t in tickets])
        return 0
    if not tickets:
        print(color("No tickets found.", DIM))
        return 0
    for ticket in tickets:
        print(format_ticket_row(ticket))
    return 0


def _cmd_reflections(args: argparse.Namespace, lifecycle: TicketLifecycle) -> int:
    reflections = lifecycle.log.list(namespace_of(args.workspace))[: args.limit]

    if args.json:
        _machine_output([r.to_dict() for r in reflections])
        return 0
    if not reflections:
        print(color("No reflections found.", DIM))
        return 0
    for reflection in reflections:
        print(format_reflection_row(reflection))
    return 0


def _cmd_search(args: argparse.Namespace, lifecycle: TicketLifecycle) -> int:
    query = " ".join(args.query)
    if args.workspace:
        hits = lifecycle.search_local(args.workspace, query, args.limit)
    else:
        hits = lifecycle.search_global(query, args.limit)

    if args.json:
        _machine_output([hit_to_dict(hit) for hit in hits])
        return 0
    if not hits:
        print(color("No matching reflections.", DIM))
        return 0
    for hit in hits:
        print(format_hit(hit))
    return 0


def _cmd_revert(args: argparse.Namespace, lifecycle: TicketLifecycle) -> int:
    result = lifecycle.revert(args.workspace, args.ticket_id)
    if args.json:
        _machine_output(
            {
                "ticket_id": result.ticket_id,
                "ticket_removed": result.ticket_removed,
                "reflection_removed": result.reflection_removed,
            },
        )
    elif result.removed_anything:
        print(f"Reverted {args.ticket_id}")
    else:
        print(color(f"Nothing to revert for {args.ticket_id}", DIM))
    return 0


if __name__ == "__main__":
    sys.exit(main())
