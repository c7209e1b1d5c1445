"""Instruction text handed back to the agent when a reasoning cycle begins."""

from __future__ import annotations

from textwrap import dedent

THINK_BLOCK_EXAMPLE = dedent(
    """\
    <think>
    - Goal: [Your primary goal for this task]
    - Assumptions: [List of assumptions you are making]
    - Risk: [The main risk or potential issue]
    - Prior learnings: [Relevant reflections found, or "none"]
    </think>"""
)


def build_instruction(ticket_id: str, task_description: str, token_budget: int) -> str:
    """Compose the begin-cycle instruction for a new ticket."""
    return "\n".join(
        [
            f"Reasoning ticket: {ticket_id}",
            f"Task: {task_description}",
            "",
            "Before acting, call search_reasoning_reflections with this workspace "
            "(and search_global_reflections for lessons from other workspaces) "
            "to check what was learned on similar tasks.",
            "",
            f"You MUST use a <think> block for your reasoning, and it must not exceed "
            f"{token_budget} tokens. Example format:",
            THINK_BLOCK_EXAMPLE,
            "",
            f"When the task is done, call log_reasoning_reflection with "
            f"reasoning_ticket_id={ticket_id}, the outcome (success or failure) and "
            "one concise learning. To abandon this cycle instead, call "
            f"revert_reasoning_cycle with reasoning_ticket_id={ticket_id}.",
        ]
    )
