"""
Systematic Reasoning: reasoning tickets and a learning store for AI agents.

Exposes MCP tools that open a budgeted reasoning cycle per workspace, record
what was learned when the cycle completes, and fuzzy-search those lessons
across one or all workspaces.

Modules:
- core: MCP server, configuration, error codes, instruction text
- ledger: Ticket ledger, reflection log and the cycle coordinator
- search: Fuzzy ranked matching over reflections
"""

try:
    from importlib.metadata import version
    __version__ = version("systematic-reasoning-mcp")
except Exception:
    __version__ = "0.1.0"

from .modules.core.config import Settings
from .modules.core.errors import (
    ConflictError,
    NotFoundError,
    PartialFailure,
    ReasoningError,
    StorageCorrupt,
    ValidationError,
)
from .modules.ledger import (
    FileDocumentStore,
    MemoryDocumentStore,
    ReasoningTicket,
    Reflection,
    TicketLifecycle,
    namespace_of,
)

__all__ = [
    "Settings",
    # Errors
    "ReasoningError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "StorageCorrupt",
    "PartialFailure",
    # Ledger
    "FileDocumentStore",
    "MemoryDocumentStore",
    "ReasoningTicket",
    "Reflection",
    "TicketLifecycle",
    "namespace_of",
]
