"""
Reasoning cycle coordinator.

Per workspace the cycle moves idle → active (begin) → idle (complete or
revert). Completion touches two documents, the ticket ledger and the
reflection log, which cannot be committed together: the ticket is completed
first, and a reflection append that still fails after a retry surfaces as
PartialFailure instead of a silent success.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.config import Settings
from ..core.errors import PartialFailure, ReasoningError, ValidationError
from ..core.instructions import build_instruction
from ..search.fuzzy import SearchHit
from .documents import DocumentStore, FileDocumentStore
from .keying import namespace_of
from .learning_log import LearningLog
from .reflection import Outcome, Reflection
from .ticket import ReasoningTicket
from .ticket_store import TicketStore

logger = logging.getLogger(__name__)

APPEND_ATTEMPTS = 2


@dataclass
class BeginResult:
    ticket: ReasoningTicket
    token_budget: int
    instruction: str


@dataclass
class RevertResult:
    ticket_id: str
    ticket_removed: bool
    reflection_removed: bool

    @property
    def removed_anything(self) -> bool:
        return self.ticket_removed or self.reflection_removed


class TicketLifecycle:
    """Begin, complete, search and revert reasoning cycles."""

    def __init__(self, documents: DocumentStore, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self.documents = documents
        self.tickets = TicketStore(documents)
        self.log = LearningLog(
            documents,
            max_reflections=self.settings.max_reflections,
            local_threshold=self.settings.local_threshold,
            global_threshold=self.settings.global_threshold,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> TicketLifecycle:
        """Lifecycle backed by JSON files under ``settings.home``."""
        return cls(FileDocumentStore(settings.home), settings)

    def begin(
        self,
        workspace: str,
        task_description: str,
        token_budget: int | None = None,
    ) -> BeginResult:
        """Open a reasoning cycle and build the instruction for it.

        Raises:
            ConflictError: If the workspace already has an active ticket.
        """
        budget = token_budget if token_budget is not None else self.settings.default_token_budget
        namespace = namespace_of(workspace)
        self.documents.ensure_namespace(namespace, workspace)
        ticket = self.tickets.begin(namespace, workspace, task_description)
        return BeginResult(
            ticket=ticket,
            token_budget=budget,
            instruction=build_instruction(ticket.id, task_description, budget),
        )

    def complete(
        self,
        workspace: str,
        ticket_id: str,
        task: str,
        outcome: Outcome | str,
        learning: str,
    ) -> Reflection:
        """Complete the active ticket and record its reflection.

        Raises:
            ValidationError: If ``outcome`` is not success/failure.
            NotFoundError: If ``ticket_id`` is not the active ticket.
            PartialFailure: If the ticket was completed but the reflection
                could not be written.
        """
        try:
            outcome = Outcome(outcome.strip().lower())
        except (AttributeError, ValueError):
            raise ValidationError(
                f"outcome must be 'success' or 'failure', got {outcome!r}",
                outcome=str(outcome),
            )

        namespace = namespace_of(workspace)
        ticket = self.tickets.complete(namespace, ticket_id)

        last_error: Exception | None = None
        for attempt in range(1, APPEND_ATTEMPTS + 1):
            try:
                return self.log.append(namespace, ticket.id, task, outcome, learning)
            except (ReasoningError, OSError) as e:
                last_error = e
                logger.warning(
                    "Appending reflection for %s failed (attempt %d/%d): %s",
                    ticket.id,
                    attempt,
                    APPEND_ATTEMPTS,
                    e,
                )
        raise PartialFailure(
            f"Ticket {ticket.id} was completed but its reflection may not have been "
            f"recorded: {last_error}",
            ticket_id=ticket.id,
        ) from last_error

    def search_local(self, workspace: str, query: str, limit: int = 5) -> list[SearchHit]:
        return self.log.search_local(namespace_of(workspace), query, limit)

    def search_global(self, query: str, limit: int = 5) -> list[SearchHit]:
        return self.log.search_global(query, limit)

    def revert(self, workspace: str, ticket_id: str) -> RevertResult:
        """Remove a ticket and its reflection. Missing entries are not an error."""
        namespace = namespace_of(workspace)
        ticket_removed = self.tickets.revert(namespace, ticket_id)
        reflection_removed = self.log.revert(namespace, ticket_id)
        return RevertResult(
            ticket_id=ticket_id,
            ticket_removed=ticket_removed,
            reflection_removed=reflection_removed,
        )

    def status(self, workspace: str) -> dict:
        """Summary of a workspace's ledger and log."""
        namespace = namespace_of(workspace)
        tickets = self.tickets.list(namespace)
        active = next((t for t in tickets if t.is_active), None)
        return {
            "workspace_path": workspace,
            "namespace": namespace,
            "active_ticket": active.to_dict() if active else None,
            "ticket_count": len(tickets),
            "reflection_count": len(self.log.list(namespace)),
        }
