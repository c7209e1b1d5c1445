"""
Systematic Reasoning MCP Server - Model Context Protocol interface.

Exposes the reasoning ticket lifecycle to AI agents: begin a budgeted
reasoning cycle, log what was learned, search earlier reflections and
revert a cycle.

Usage:
    sysreason-mcp [--home ~/.systematic-reasoning]
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Iterator

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from ..ledger.learning_log import hit_to_dict
from ..ledger.lifecycle import TicketLifecycle
from .config import MAX_TOKEN_BUDGET, Settings
from .errors import ReasoningError, ValidationError

logger = logging.getLogger(__name__)

mcp = FastMCP("systematic-reasoning")

_lifecycle: TicketLifecycle | None = None


def get_lifecycle() -> TicketLifecycle:
    """Lifecycle used by the tools, built from the environment on first use."""
    global _lifecycle
    if _lifecycle is None:
        _lifecycle = TicketLifecycle.from_settings(Settings.from_env())
    return _lifecycle


def set_lifecycle(lifecycle: TicketLifecycle | None) -> None:
    global _lifecycle
    _lifecycle = lifecycle


@contextmanager
def _tool_errors(tool: str) -> Iterator[None]:
    """Turn store errors into MCP tool errors; the server keeps running."""
    try:
        yield
    except ReasoningError as e:
        logger.warning("%s failed: %s", tool, e.render())
        raise ToolError(f"Error in tool {tool}: {e.render()}") from e
    except Exception:
        logger.exception("Unexpected error in %s", tool)
        raise


def _require_text(**fields: str) -> None:
    for name, value in fields.items():
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{name} must be a non-empty string", field=name)


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise ValidationError("limit must be a positive integer", limit=limit)


# === REASONING CYCLE TOOLS ===


@mcp.tool()
def set_reasoning_budget(
    workspace_path: str,
    task_description: str,
    token_budget: int | None = None,
) -> str:
    """Begin a reasoning cycle and get the instruction for it.

    Opens a reasoning ticket for the workspace (only one may be active at a
    time) and returns an instruction embedding the ticket id, the <think>
    block token budget and the reflection search tools to consult first.

    Args:
        workspace_path: Absolute path of the workspace being worked on
        task_description: What you are about to reason about
        token_budget: Maximum tokens for the <think> block (1-8000)

    Returns:
        Instruction text containing the new reasoning ticket id
    """
    with _tool_errors("set_reasoning_budget"):
        _require_text(workspace_path=workspace_path, task_description=task_description)
        if token_budget is not None and not 0 < token_budget <= MAX_TOKEN_BUDGET:
            raise ValidationError(
                f"token_budget must be between 1 and {MAX_TOKEN_BUDGET}",
                token_budget=token_budget,
            )
        result = get_lifecycle().begin(workspace_path, task_description, token_budget)
    return result.instruction


@mcp.tool()
def log_reasoning_reflection(
    workspace_path: str,
    reasoning_ticket_id: str,
    task: str,
    outcome: str,
    learning: str,
) -> str:
    """Complete a reasoning cycle and record what was learned.

    Args:
        workspace_path: Workspace the ticket was opened for
        reasoning_ticket_id: Ticket id returned by set_reasoning_budget
        task: The task that was attempted
        outcome: "success" or "failure"
        learning: One concise lesson from this cycle

    Returns:
        Confirmation text
    """
    with _tool_errors("log_reasoning_reflection"):
        _require_text(
            workspace_path=workspace_path,
            reasoning_ticket_id=reasoning_ticket_id,
            task=task,
            learning=learning,
        )
        reflection = get_lifecycle().complete(
            workspace_path, reasoning_ticket_id, task, outcome, learning
        )
    return (
        f"Reflection recorded for ticket {reflection.ticket_id} "
        f"({reflection.outcome.value}). The workspace is ready for a new reasoning cycle."
    )


@mcp.tool()
def search_reasoning_reflections(workspace_path: str, query: str, limit: int = 5) -> dict:
    """Fuzzy-search this workspace's past reflections.

    Any word of the query may match; misspellings are tolerated.

    Args:
        workspace_path: Workspace whose reflections to search
        query: Free-text query
        limit: Maximum results (default 5)

    Returns:
        Dict with ranked results; lower score means a closer match
    """
    with _tool_errors("search_reasoning_reflections"):
        _require_text(workspace_path=workspace_path, query=query)
        _check_limit(limit)
        hits = get_lifecycle().search_local(workspace_path, query, limit)
    return {"query": query, "results": [hit_to_dict(hit) for hit in hits]}


@mcp.tool()
def search_global_reflections(query: str, limit: int = 5) -> dict:
    """Fuzzy-search reflections from every workspace.

    Matching is stricter than the per-workspace search; each result names the
    namespace (and workspace path) it came from.

    Args:
        query: Free-text query, "|" separates alternatives
        limit: Maximum results (default 5)

    Returns:
        Dict with ranked results; lower score means a closer match
    """
    with _tool_errors("search_global_reflections"):
        _require_text(query=query)
        _check_limit(limit)
        hits = get_lifecycle().search_global(query, limit)
    return {"query": query, "results": [hit_to_dict(hit) for hit in hits]}


@mcp.tool()
def revert_reasoning_cycle(workspace_path: str, reasoning_ticket_id: str) -> str:
    """Undo a reasoning cycle: remove its ticket and its reflection.

    Reverting a ticket that no longer exists is a no-op.

    Args:
        workspace_path: Workspace the ticket was opened for
        reasoning_ticket_id: Ticket id to revert
    """
    with _tool_errors("revert_reasoning_cycle"):
        _require_text(workspace_path=workspace_path, reasoning_ticket_id=reasoning_ticket_id)
        result = get_lifecycle().revert(workspace_path, reasoning_ticket_id)
    if not result.removed_anything:
        return f"Nothing to revert for ticket {reasoning_ticket_id}."
    removed = []
    if result.ticket_removed:
        removed.append("ticket")
    if result.reflection_removed:
        removed.append("reflection")
    return f"Reverted ticket {reasoning_ticket_id} (removed {' and '.join(removed)})."


@mcp.tool()
def reasoning_status(workspace_path: str) -> dict:
    """Show the active ticket and history size for a workspace.

    Args:
        workspace_path: Workspace to inspect
    """
    with _tool_errors("reasoning_status"):
        _require_text(workspace_path=workspace_path)
        return get_lifecycle().status(workspace_path)


def configure_logging(level: str) -> None:
    """Log to stderr; stdout carries the stdio protocol."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def serve(settings: Settings) -> None:
    """Run the server on stdio with the given settings."""
    set_lifecycle(TicketLifecycle.from_settings(settings))
    logger.info("Serving reasoning store from %s", settings.home)
    mcp.run(transport="stdio")


def main():
    """Entry point for sysreason-mcp command."""
    import argparse

    parser = argparse.ArgumentParser(description="Systematic Reasoning MCP Server")
    parser.add_argument("--home", help="Storage root (default: $SYSREASON_HOME or ~/.systematic-reasoning)")
    parser.add_argument("--log-level", help="Logging level (default: $SYSREASON_LOG_LEVEL or WARNING)")
    args = parser.parse_args()

    try:
        settings = Settings.from_env().with_home(args.home)
    except ValidationError as e:
        print(f"sysreason-mcp: {e.message}", file=sys.stderr)
        sys.exit(1)

    configure_logging(args.log_level or settings.log_level)
    serve(settings)


if __name__ == "__main__":
    main()
