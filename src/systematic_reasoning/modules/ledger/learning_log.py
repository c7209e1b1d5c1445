"""Reflection log: bounded, newest-first lessons per namespace."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.config import DEFAULT_GLOBAL_THRESHOLD, DEFAULT_LOCAL_THRESHOLD, DEFAULT_MAX_REFLECTIONS
from ..core.errors import ReasoningError, make_corrupt_error
from ..search.fuzzy import FuzzySearchEngine, SearchHit, or_query
from .documents import REFLECTIONS_DOC, DocumentStore
from .reflection import Outcome, Reflection

logger = logging.getLogger(__name__)


@dataclass
class NamespacedReflection:
    """A reflection tagged with the namespace it was loaded from."""

    reflection: Reflection
    namespace: str
    workspace: str | None = None

    def searchable(self) -> dict[str, str]:
        return self.reflection.searchable()


class LearningLog:
    """Owns the reflection log of every namespace.

    The persisted document is ``{"reflections": [...]}``, newest first and
    never longer than ``max_reflections``.
    """

    def __init__(
        self,
        documents: DocumentStore,
        max_reflections: int = DEFAULT_MAX_REFLECTIONS,
        local_threshold: float = DEFAULT_LOCAL_THRESHOLD,
        global_threshold: float = DEFAULT_GLOBAL_THRESHOLD,
    ) -> None:
        self.documents = documents
        self.max_reflections = max_reflections
        self.local_engine = FuzzySearchEngine(threshold=local_threshold)
        self.global_engine = FuzzySearchEngine(threshold=global_threshold)

    def _read(self, namespace: str) -> list[Reflection]:
        raw = self.documents.load(namespace, REFLECTIONS_DOC)
        if raw is None:
            return []
        location = self.documents.location(namespace, REFLECTIONS_DOC)
        if not isinstance(raw, dict) or not isinstance(raw.get("reflections", []), list):
            raise make_corrupt_error(location, "expected {'reflections': [...]}")
        try:
            return [Reflection.from_dict(item) for item in raw.get("reflections", [])]
        except (KeyError, TypeError, ValueError) as e:
            raise make_corrupt_error(location, f"malformed reflection ({e!r})") from e

    def _write(self, namespace: str, reflections: list[Reflection]) -> None:
        self.documents.save(
            namespace,
            REFLECTIONS_DOC,
            {"reflections": [r.to_dict() for r in reflections]},
        )

    def list(self, namespace: str) -> list[Reflection]:
        """Reflections for a namespace, newest first."""
        return self._read(namespace)

    def append(
        self,
        namespace: str,
        ticket_id: str,
        task: str,
        outcome: Outcome | str,
        learning: str,
    ) -> Reflection:
        """Prepend a reflection, evicting the oldest beyond the bound."""
        reflection = Reflection.create(ticket_id, task, outcome, learning)
        with self.documents.lock(namespace):
            reflections = self._read(namespace)
            reflections.insert(0, reflection)
            evicted = len(reflections) - self.max_reflections
            if evicted > 0:
                logger.debug("Evicting %d oldest reflection(s) in %s", evicted, namespace)
            self._write(namespace, reflections[: self.max_reflections])
        return reflection

    def revert(self, namespace: str, ticket_id: str) -> bool:
        """Drop reflections recorded for ``ticket_id``. Returns whether the log changed."""
        if self.documents.load(namespace, REFLECTIONS_DOC) is None:
            return False
        with self.documents.lock(namespace):
            reflections = self._read(namespace)
            remaining = [r for r in reflections if r.ticket_id != ticket_id]
            if len(remaining) == len(reflections):
                return False
            self._write(namespace, remaining)
        logger.info("Removed reflection for ticket %s in %s", ticket_id, namespace)
        return True

    def search_local(self, namespace: str, query: str, limit: int = 5) -> list[SearchHit]:
        """Fuzzy search one namespace; any query word may match."""
        return self.local_engine.search(self._read(namespace), or_query(query), limit)

    def search_global(self, query: str, limit: int = 5) -> list[SearchHit]:
        """Fuzzy search every namespace with the stricter threshold.

        Hits carry NamespacedReflection items. Namespaces whose log cannot be
        read are logged and skipped.
        """
        tagged: list[NamespacedReflection] = []
        for namespace in self.documents.namespaces():
            try:
                reflections = self._read(namespace)
            except (ReasoningError, OSError) as e:
                logger.warning("Skipping namespace %s in global search: %s", namespace, e)
                continue
            if not reflections:
                continue
            workspace = self.documents.workspace_for(namespace)
            tagged.extend(NamespacedReflection(r, namespace, workspace) for r in reflections)
        return self.global_engine.search(tagged, query, limit)


def hit_to_dict(hit: SearchHit) -> dict:
    """JSON form of a search hit: the reflection, its score and origin if tagged."""
    item = hit.item
    if isinstance(item, NamespacedReflection):
        payload = item.reflection.to_dict()
        payload["namespace"] = item.namespace
        payload["workspace_path"] = item.workspace
    else:
        payload = item.to_dict()
    payload["score"] = hit.score
    return payload
