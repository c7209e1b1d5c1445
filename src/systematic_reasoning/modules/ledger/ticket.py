"""ReasoningTicket: one in-flight or finished reasoning cycle.

A ticket has a lifecycle (active → completed). At most one ticket per
workspace is active; completing it makes room for the next cycle.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class TicketStatus(str, Enum):
    """Ticket lifecycle status."""

    ACTIVE = "active"
    COMPLETED = "completed"


def generate_ticket_id() -> str:
    """Generate a UUID4 ticket ID."""
    return str(uuid.uuid4())


@dataclass
class ReasoningTicket:
    """A reasoning cycle opened for a workspace."""

    id: str
    workspace: str
    task_description: str
    status: TicketStatus
    created_at: datetime

    @classmethod
    def create(cls, workspace: str, task_description: str) -> ReasoningTicket:
        """Create a new active ticket.

        Args:
            workspace: Workspace identifier the cycle belongs to.
            task_description: What the agent is about to reason about.

        Returns:
            New ReasoningTicket with active status.
        """
        return cls(
            id=generate_ticket_id(),
            workspace=workspace,
            task_description=task_description,
            status=TicketStatus.ACTIVE,
            created_at=datetime.now(timezone.utc),
        )

    @classmethod
    def from_dict(cls, data: dict) -> ReasoningTicket:
        """Create ReasoningTicket from its stored dict.

        Raises:
            KeyError, TypeError, ValueError: If required fields are missing
                or invalid.
        """
        for key in ("workspace_path", "task_description", "created_at"):
            if not isinstance(data[key], str):
                raise TypeError(f"{key} must be a string, got {type(data[key]).__name__}")
        created_at = datetime.fromisoformat(data["created_at"])

        return cls(
            id=str(data["id"]),
            workspace=data["workspace_path"],
            task_description=data["task_description"],
            status=TicketStatus(data["status"]),
            created_at=created_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "workspace_path": self.workspace,
            "task_description": self.task_description,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }

    @property
    def is_active(self) -> bool:
        return self.status == TicketStatus.ACTIVE

    def complete(self) -> None:
        """Mark the cycle as finished."""
        self.status = TicketStatus.COMPLETED

