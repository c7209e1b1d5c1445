"""Ticket ledger: one JSON list of ReasoningTickets per namespace."""

from __future__ import annotations

import logging

from ..core.errors import make_conflict_error, make_corrupt_error, make_not_found_error
from .documents import TICKETS_DOC, DocumentStore
from .ticket import ReasoningTicket, TicketStatus

logger = logging.getLogger(__name__)


class TicketStore:
    """Owns the ticket ledger of every namespace.

    Each mutation runs under the namespace lock: read the whole ledger,
    mutate in memory, overwrite the whole ledger.
    """

    def __init__(self, documents: DocumentStore) -> None:
        self.documents = documents

    def _read(self, namespace: str) -> list[ReasoningTicket]:
        raw = self.documents.load(namespace, TICKETS_DOC)
        if raw is None:
            return []
        location = self.documents.location(namespace, TICKETS_DOC)
        if not isinstance(raw, list):
            raise make_corrupt_error(location, "expected a list of tickets")
        try:
            return [ReasoningTicket.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            raise make_corrupt_error(location, f"malformed ticket ({e!r})") from e

    def _write(self, namespace: str, tickets: list[ReasoningTicket]) -> None:
        self.documents.save(namespace, TICKETS_DOC, [t.to_dict() for t in tickets])

    def list(self, namespace: str) -> list[ReasoningTicket]:
        """All tickets in insertion order."""
        return self._read(namespace)

    def active(self, namespace: str) -> ReasoningTicket | None:
        for ticket in self._read(namespace):
            if ticket.is_active:
                return ticket
        return None

    def begin(self, namespace: str, workspace: str, task_description: str) -> ReasoningTicket:
        """Open a new reasoning cycle.

        Raises:
            ConflictError: If the namespace already has an active ticket.
        """
        with self.documents.lock(namespace):
            tickets = self._read(namespace)
            for existing in tickets:
                if existing.is_active:
                    raise make_conflict_error(existing.id, existing.task_description)
            ticket = ReasoningTicket.create(workspace, task_description)
            tickets.append(ticket)
            self._write(namespace, tickets)
        logger.info("Began ticket %s in %s", ticket.id, namespace)
        return ticket

    def complete(self, namespace: str, ticket_id: str) -> ReasoningTicket:
        """Transition an active ticket to completed.

        Raises:
            NotFoundError: If no active ticket has this id.
        """
        if self.documents.load(namespace, TICKETS_DOC) is None:
            # no ledger yet; locking would create an empty namespace
            raise make_not_found_error(ticket_id, namespace)
        with self.documents.lock(namespace):
            tickets = self._read(namespace)
            for ticket in tickets:
                if ticket.id == ticket_id and ticket.status == TicketStatus.ACTIVE:
                    ticket.complete()
                    self._write(namespace, tickets)
                    break
            else:
                raise make_not_found_error(ticket_id, namespace)
        logger.info("Completed ticket %s in %s", ticket_id, namespace)
        return ticket

    def revert(self, namespace: str, ticket_id: str) -> bool:
        """Remove a ticket regardless of status. Returns whether one was removed."""
        if self.documents.load(namespace, TICKETS_DOC) is None:
            return False
        with self.documents.lock(namespace):
            tickets = self._read(namespace)
            remaining = [t for t in tickets if t.id != ticket_id]
            if len(remaining) == len(tickets):
                return False
            self._write(namespace, remaining)
        logger.info("Reverted ticket %s in %s", ticket_id, namespace)
        return True
