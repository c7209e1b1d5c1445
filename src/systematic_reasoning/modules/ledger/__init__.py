"""
Ledger: reasoning tickets and reflections per workspace namespace.

A workspace holds at most one active ticket. Completing it records a
reflection in a bounded newest-first log; reverting removes both.
"""

from .documents import DocumentStore, FileDocumentStore, MemoryDocumentStore
from .keying import namespace_of
from .learning_log import LearningLog, NamespacedReflection
from .lifecycle import BeginResult, RevertResult, TicketLifecycle
from .reflection import Outcome, Reflection
from .ticket import ReasoningTicket, TicketStatus
from .ticket_store import TicketStore

__all__ = [
    # Storage
    "DocumentStore",
    "FileDocumentStore",
    "MemoryDocumentStore",
    "namespace_of",
    # Records
    "ReasoningTicket",
    "TicketStatus",
    "Reflection",
    "Outcome",
    # Stores
    "TicketStore",
    "LearningLog",
    "NamespacedReflection",
    # Coordinator
    "TicketLifecycle",
    "BeginResult",
    "RevertResult",
]
