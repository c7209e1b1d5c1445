"""Configuration, error codes and the MCP tool surface.

The server lives in ``mcp_server`` and is imported on demand so that the
ledger can use config and errors without pulling in the MCP runtime.
"""

from .config import Settings
from .errors import (
    ConflictError,
    NotFoundError,
    PartialFailure,
    ReasoningError,
    StorageCorrupt,
    ValidationError,
)

__all__ = [
    "Settings",
    "ReasoningError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "StorageCorrupt",
    "PartialFailure",
]
