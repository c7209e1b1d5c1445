"""Output formatting for the sysreason CLI."""

from __future__ import annotations

from datetime import datetime, timezone

from ..search.fuzzy import SearchHit
from .learning_log import NamespacedReflection
from .reflection import Outcome, Reflection
from .ticket import ReasoningTicket

# ANSI color codes
RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
CYAN = "\033[36m"
MAGENTA = "\033[35m"


def supports_color() -> bool:
    """Check if terminal supports color."""
    import os
    import sys

    if not sys.stdout.isatty():
        return False
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return True


def color(text: str, code: str) -> str:
    """Apply color if supported."""
    if supports_color():
        return f"{code}{text}{RESET}"
    return text


def format_timestamp(ts: datetime | str) -> str:
    """Format timestamp for display, relative when recent."""
    if isinstance(ts, str):
        ts = datetime.fromisoformat(ts)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)

    seconds = (datetime.now(timezone.utc) - ts).total_seconds()
    if seconds < 60:
        return "just now"
    elif seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    elif seconds < 86400:
        return f"{int(seconds // 3600)}h ago"
    else:
        return ts.strftime("%Y-%m-%d %H:%M")


def truncate(text: str, max_len: int = 60) -> str:
    """Truncate text with ellipsis."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def format_outcome(outcome: Outcome) -> str:
    if outcome == Outcome.SUCCESS:
        return color("success", GREEN)
    return color("failure", RED)


def format_ticket_row(ticket: ReasoningTicket) -> str:
    """Format a ticket for list display (single row)."""
    ticket_id = color(ticket.id, CYAN)
    if ticket.is_active:
        status = color("active   ", YELLOW)
    else:
        status = color("completed", DIM)
    timestamp = color(format_timestamp(ticket.created_at), DIM)
    return f"{ticket_id}  {status}  {timestamp:>12}  {truncate(ticket.task_description, 50)}"


def format_reflection_row(reflection: Reflection) -> str:
    """Format a reflection for list display (two lines)."""
    header = (
        f"{color(reflection.ticket_id, CYAN)}  {format_outcome(reflection.outcome)}  "
        f"{color(format_timestamp(reflection.timestamp), DIM)}  {truncate(reflection.task, 50)}"
    )
    return f"{header}\n    {truncate(reflection.learning, 100)}"


def format_hit(hit: SearchHit) -> str:
    """Format a search hit with its score and origin."""
    item = hit.item
    score = color(f"{hit.score:.3f}", MAGENTA)
    if isinstance(item, NamespacedReflection):
        origin = item.workspace or item.namespace[:12]
        return f"{score}  {color(origin, BOLD)}\n    {format_reflection_row(item.reflection)}"
    return f"{score}  {format_reflection_row(item)}"


def format_status(status: dict) -> str:
    lines = [color(f"Workspace: {status['workspace_path']}", BOLD + CYAN), ""]
    lines.append(f"  {color('Namespace:', BOLD)} {status['namespace']}")
    active = status["active_ticket"]
    if active:
        lines.append(
            f"  {color('Active:', BOLD)} {active['id']} ({truncate(active['task_description'], 50)})"
        )
    else:
        lines.append(f"  {color('Active:', BOLD)} none")
    lines.append(f"  {color('Tickets:', BOLD)} {status['ticket_count']}")
    lines.append(f"  {color('Reflections:', BOLD)} {status['reflection_count']}")
    return "\n".join(lines)
