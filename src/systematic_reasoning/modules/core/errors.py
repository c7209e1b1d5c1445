"""
Structured error codes for agent-parseable reasoning-store failures.

Error codes that agents can programmatically handle:
- SRM_ERR_VALIDATION: Tool arguments failed validation
- SRM_ERR_CONFLICT: An active reasoning ticket already exists
- SRM_ERR_NOT_FOUND: No active ticket with the given id
- SRM_ERR_STORAGE_CORRUPT: A persisted document exists but cannot be parsed
- SRM_ERR_PARTIAL: Ticket completed but the reflection was not recorded
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


# Error codes
ERR_VALIDATION = "SRM_ERR_VALIDATION"
ERR_CONFLICT = "SRM_ERR_CONFLICT"
ERR_NOT_FOUND = "SRM_ERR_NOT_FOUND"
ERR_STORAGE_CORRUPT = "SRM_ERR_STORAGE_CORRUPT"
ERR_PARTIAL = "SRM_ERR_PARTIAL"
ERR_INTERNAL = "SRM_ERR_INTERNAL"


class ReasoningError(Exception):
    """Base class for reasoning-store failures surfaced to callers."""

    code = ERR_INTERNAL

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def render(self) -> str:
        """Human-readable one-line form used in tool responses."""
        return f"[{self.code}] {self.message}"


class ValidationError(ReasoningError):
    code = ERR_VALIDATION


class ConflictError(ReasoningError):
    code = ERR_CONFLICT


class NotFoundError(ReasoningError):
    code = ERR_NOT_FOUND


class StorageCorrupt(ReasoningError):
    code = ERR_STORAGE_CORRUPT


class PartialFailure(ReasoningError):
    code = ERR_PARTIAL


def make_conflict_error(ticket_id: str, task_description: str) -> ConflictError:
    """Create the error raised when a second cycle is started."""
    return ConflictError(
        f"An active reasoning ticket already exists: {ticket_id} "
        f"(task: {task_description!r}). Complete it with "
        "log_reasoning_reflection or discard it with revert_reasoning_cycle first.",
        ticket_id=ticket_id,
        task_description=task_description,
    )


def make_not_found_error(ticket_id: str, namespace: str) -> NotFoundError:
    """Create the error raised when no active ticket matches."""
    return NotFoundError(
        f"No active reasoning ticket '{ticket_id}' in this workspace "
        "(it may never have existed or was already completed)",
        ticket_id=ticket_id,
        namespace=namespace,
    )


def make_corrupt_error(path: str, reason: str) -> StorageCorrupt:
    """Create the error raised for an unparsable persisted document."""
    return StorageCorrupt(
        f"Stored document {path} is corrupt: {reason}. "
        "Fix or remove the file; it was left untouched.",
        path=path,
    )
