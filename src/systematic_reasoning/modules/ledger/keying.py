"""Workspace identifier -> storage namespace."""

from __future__ import annotations

import hashlib


def namespace_of(workspace: str) -> str:
    """Compute the namespace key for a workspace identifier.

    The identifier is hashed verbatim (no path resolution), so the key is
    stable across restarts and machines for the same string.

    Returns:
        64-character SHA-256 hex digest.
    """
    return hashlib.sha256(workspace.encode("utf-8")).hexdigest()


def is_namespace(name: str) -> bool:
    """Check whether a directory name looks like a namespace key."""
    if len(name) != 64:
        return False
    try:
        int(name, 16)
    except ValueError:
        return False
    return name == name.lower()
