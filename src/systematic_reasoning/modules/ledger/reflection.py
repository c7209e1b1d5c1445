"""Reflection: the lesson recorded when a reasoning cycle completes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class Reflection:
    """Outcome and learning for one completed ticket."""

    ticket_id: str  # back-reference, the ticket may since have been reverted
    timestamp: datetime
    task: str
    outcome: Outcome
    learning: str

    @classmethod
    def create(
        cls,
        ticket_id: str,
        task: str,
        outcome: Outcome | str,
        learning: str,
    ) -> Reflection:
        return cls(
            ticket_id=ticket_id,
            timestamp=datetime.now(timezone.utc),
            task=task,
            outcome=Outcome(outcome),
            learning=learning,
        )

    @classmethod
    def from_dict(cls, data: dict) -> Reflection:
        """Create Reflection from its stored dict.

        Raises:
            KeyError, TypeError, ValueError: If fields are missing or invalid.
        """
        fields = {
            "timestamp": data["timestamp"],
            "task": data.get("task", ""),
            "learning": data.get("learning", ""),
        }
        for key, value in fields.items():
            if not isinstance(value, str):
                raise TypeError(f"{key} must be a string, got {type(value).__name__}")

        return cls(
            ticket_id=str(data["ticket_id"]),
            timestamp=datetime.fromisoformat(fields["timestamp"]),
            task=fields["task"],
            outcome=Outcome(data["outcome"]),
            learning=fields["learning"],
        )

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "timestamp": self.timestamp.isoformat(),
            "task": self.task,
            "outcome": self.outcome.value,
            "learning": self.learning,
        }

    def searchable(self) -> dict[str, str]:
        """Text fields exposed to the fuzzy matcher."""
        return {
            "task": self.task,
            "learning": self.learning,
            "outcome": self.outcome.value,
        }
