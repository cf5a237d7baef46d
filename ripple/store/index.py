"""Dependency lookups over the artifact graph."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from ..models import ArtifactRecord
from . import ArtifactSource

logger = logging.getLogger(__name__)


@dataclass
class DependencyTables:
    """Forward and reverse blocked_by edges between known artifacts."""

    nodes: dict[str, ArtifactRecord] = field(default_factory=dict)  # id -> record
    edges: dict[str, list[str]] = field(
        default_factory=lambda: defaultdict(list)
    )  # artifact -> dependencies (blocked_by order)
    reverse_edges: dict[str, list[str]] = field(
        default_factory=lambda: defaultdict(list)
    )  # artifact -> dependents (listing order)

    @classmethod
    def from_records(cls, records: list[ArtifactRecord]) -> "DependencyTables":
        """Build lookup tables from a full artifact listing."""
        tables = cls()

        # Add all nodes first
        for record in records:
            tables.nodes[record.id] = record

        # Build edges; references to unknown ids are dropped
        for record in records:
            src = record.id
            for dst in record.artifact.blocked_by:
                if dst not in tables.nodes or dst in tables.edges[src]:
                    continue
                tables.edges[src].append(dst)
                tables.reverse_edges[dst].append(src)

        return tables


class DependencyIndex:
    """Lazily built dependency/dependent lookup for one artifact source."""

    def __init__(self, source: ArtifactSource):
        self.source = source
        self._tables: DependencyTables | None = None

    def _build(self) -> DependencyTables:
        if self._tables is None:
            self._tables = DependencyTables.from_records(self.source.find_artifacts())
            logger.debug("Built dependency index over %d artifacts", len(self._tables.nodes))
        return self._tables

    def get_dependencies(self, artifact_id: str) -> list[ArtifactRecord]:
        """Artifacts that artifact_id is blocked by."""
        tables = self._build()
        return [tables.nodes[d] for d in tables.edges.get(artifact_id, [])]

    def get_blocked_artifacts(self, artifact_id: str) -> list[ArtifactRecord]:
        """Artifacts whose blocked_by contains artifact_id."""
        tables = self._build()
        return [tables.nodes[d] for d in tables.reverse_edges.get(artifact_id, [])]

    def clear_cache(self) -> None:
        """Drop the lookup tables and the source's own cache, if it has one."""
        self._tables = None
        clear = getattr(self.source, "clear_cache", None)
        if callable(clear):
            clear()
