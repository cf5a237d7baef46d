"""
Artifact storage and dependency lookups.

Impact analysis only talks to these collaborators through two small
interfaces:

- ArtifactSource: a full (or filtered) listing of artifacts
- DependencyLookup: one-hop dependency and dependent queries

ArtifactStore and DependencyIndex are the file-backed implementations.
"""

from __future__ import annotations

from typing import Any, Protocol

from ..models import ArtifactRecord


class ArtifactSource(Protocol):
    def find_artifacts(self, artifact_filter: Any = None) -> list[ArtifactRecord]: ...


class DependencyLookup(Protocol):
    def get_dependencies(self, artifact_id: str) -> list[ArtifactRecord]: ...

    def get_blocked_artifacts(self, artifact_id: str) -> list[ArtifactRecord]: ...

    def clear_cache(self) -> None: ...


from .index import DependencyIndex, DependencyTables  # noqa: E402
from .loader import ArtifactFilter, ArtifactStore, load_artifact, load_artifacts  # noqa: E402

__all__ = [
    # Interfaces
    "ArtifactSource",
    "DependencyLookup",
    # Implementations
    "ArtifactStore",
    "ArtifactFilter",
    "DependencyIndex",
    "DependencyTables",
    # Loading
    "load_artifact",
    "load_artifacts",
]
