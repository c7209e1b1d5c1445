"""
Document storage for reasoning namespaces.

Each namespace owns a handful of small JSON documents (ticket ledger,
reflection log, workspace info). Every mutation is a full read-modify-write
of one document, so the store only needs whole-document load/save plus a
per-namespace critical section.
"""

from __future__ import annotations

import copy
import fcntl
import json
import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable

from ..core.errors import StorageCorrupt, make_corrupt_error
from .keying import is_namespace

logger = logging.getLogger(__name__)

TICKETS_DOC = "tickets"
REFLECTIONS_DOC = "reflections"
WORKSPACE_DOC = "workspace"

LOCK_FILENAME = ".lock"


# ---------------------------------------------------------------------------
# Store protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class DocumentStore(Protocol):
    """Whole-document persistence keyed by (namespace, document name).

    ``load`` returns None for a missing or blank document and raises
    StorageCorrupt when the document exists but cannot be parsed.
    """

    def load(self, namespace: str, name: str) -> Any | None: ...

    def save(self, namespace: str, name: str, document: Any) -> None: ...

    def lock(self, namespace: str) -> Any: ...

    def namespaces(self) -> list[str]: ...

    def ensure_namespace(self, namespace: str, workspace: str) -> None: ...

    def workspace_for(self, namespace: str) -> str | None: ...

    def location(self, namespace: str, name: str) -> str: ...


# ---------------------------------------------------------------------------
# Filesystem implementation
# ---------------------------------------------------------------------------


class FileDocumentStore:
    """JSON documents under ``<home>/workspaces/<namespace>/``.

    Writes go through a temp file + rename so a reader never observes a
    partially written document; ``lock`` takes an exclusive ``flock`` on the
    namespace's lock file.
    """

    def __init__(self, home: Path) -> None:
        self.home = Path(home).expanduser()
        self.workspaces_dir = self.home / "workspaces"

    def namespace_dir(self, namespace: str) -> Path:
        return self.workspaces_dir / namespace

    def path(self, namespace: str, name: str) -> Path:
        return self.namespace_dir(namespace) / f"{name}.json"

    def location(self, namespace: str, name: str) -> str:
        return str(self.path(namespace, name))

    def load(self, namespace: str, name: str) -> Any | None:
        path = self.path(namespace, name)
        try:
            text = path.read_text(encoding="utf-8")
            if not text.strip():
                return None
            return json.loads(text)
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise make_corrupt_error(str(path), f"not UTF-8 text ({e})") from e
        except json.JSONDecodeError as e:
            raise make_corrupt_error(str(path), f"invalid JSON ({e})") from e

    def save(self, namespace: str, name: str, document: Any) -> None:
        path = self.path(namespace, name)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(f".tmp.{uuid.uuid4().hex[:8]}")
        try:
            tmp.write_text(json.dumps(document, indent=2), encoding="utf-8")
            tmp.replace(path)
        finally:
            tmp.unlink(missing_ok=True)

    @contextmanager
    def lock(self, namespace: str) -> Iterator[None]:
        """Hold an exclusive advisory lock on the namespace."""
        lock_path = self.namespace_dir(namespace) / LOCK_FILENAME
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        with open(lock_path, "w") as fd:
            fcntl.flock(fd.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(fd.fileno(), fcntl.LOCK_UN)

    def namespaces(self) -> list[str]:
        if not self.workspaces_dir.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.workspaces_dir.iterdir()
            if entry.is_dir() and is_namespace(entry.name)
        )

    def ensure_namespace(self, namespace: str, workspace: str) -> None:
        """Create the namespace directory and its workspace record on first use."""
        info_path = self.path(namespace, WORKSPACE_DOC)
        if info_path.exists():
            return
        logger.info("Creating namespace %s for %s", namespace, workspace)
        self.save(
            namespace,
            WORKSPACE_DOC,
            {
                "workspace_path": workspace,
                "created_at": datetime.now(timezone.utc).isoformat(),
            },
        )

    def workspace_for(self, namespace: str) -> str | None:
        try:
            info = self.load(namespace, WORKSPACE_DOC)
        except StorageCorrupt as e:
            logger.warning("Unreadable workspace info for %s: %s", namespace, e)
            return None
        if isinstance(info, dict):
            return info.get("workspace_path")
        return None


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


class MemoryDocumentStore:
    """Process-local store with the same semantics, for tests and embedding."""

    def __init__(self) -> None:
        self._docs: dict[str, dict[str, Any]] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def location(self, namespace: str, name: str) -> str:
        return f"memory://{namespace}/{name}"

    def load(self, namespace: str, name: str) -> Any | None:
        document = self._docs.get(namespace, {}).get(name)
        return copy.deepcopy(document)

    def save(self, namespace: str, name: str, document: Any) -> None:
        self._docs.setdefault(namespace, {})[name] = copy.deepcopy(document)

    @contextmanager
    def lock(self, namespace: str) -> Iterator[None]:
        with self._guard:
            ns_lock = self._locks.setdefault(namespace, threading.Lock())
        with ns_lock:
            yield

    def namespaces(self) -> list[str]:
        return sorted(self._docs)

    def ensure_namespace(self, namespace: str, workspace: str) -> None:
        if WORKSPACE_DOC not in self._docs.get(namespace, {}):
            self.save(
                namespace,
                WORKSPACE_DOC,
                {
                    "workspace_path": workspace,
                    "created_at": datetime.now(timezone.utc).isoformat(),
                },
            )

    def workspace_for(self, namespace: str) -> str | None:
        info = self._docs.get(namespace, {}).get(WORKSPACE_DOC)
        if isinstance(info, dict):
            return info.get("workspace_path")
        return None
