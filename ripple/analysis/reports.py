"""
Report value objects produced by impact analysis.

Reports are ephemeral: built per call, never stored. Every report exposes
to_dict() returning JSON-compatible data for the formatter and --json output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..models import Artifact, ArtifactRecord


class ImpactOperation(str, Enum):
    CANCEL = "cancel"
    DELETE = "delete"
    REMOVE_DEPENDENCY = "remove_dependency"


class ImpactType(str, Enum):
    BLOCKS_PARENT_COMPLETION = "blocks_parent_completion"  # parent/blocked artifacts can't complete
    BREAKS_DEPENDENCY = "breaks_dependency"  # dependents lose a dependency
    ORPHANS_CHILDREN = "orphans_children"  # children lose their parent


@dataclass(frozen=True)
class ImpactedArtifact:
    id: str
    artifact: Artifact
    impact_type: ImpactType
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "artifact": self.artifact.to_dict(),
            "impact_type": self.impact_type.value,
            "reason": self.reason,
        }


@dataclass
class ImpactReport:
    """Coarse impact classification for one operation on one artifact."""

    artifact_id: str
    operation: ImpactOperation
    impacted_artifacts: list[ImpactedArtifact] = field(default_factory=list)
    has_impact: bool = False
    analyzed_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "artifact_id": self.artifact_id,
            "operation": self.operation.value,
            "impacted_artifacts": [i.to_dict() for i in self.impacted_artifacts],
            "has_impact": self.has_impact,
            "analyzed_at": self.analyzed_at,
        }


# -----------------------------------------------------------------------------
# Cancellation
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class ParentCompletionImpact:
    id: str
    artifact: Artifact
    remaining_incomplete: int  # open siblings once the target is cancelled
    can_complete: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "artifact": self.artifact.to_dict(),
            "remaining_incomplete": self.remaining_incomplete,
            "can_complete": self.can_complete,
            "message": self.message,
        }


@dataclass(frozen=True)
class DependentUnblocked:
    id: str
    artifact: Artifact
    remaining_blockers: int
    fully_unblocked: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "artifact": self.artifact.to_dict(),
            "remaining_blockers": self.remaining_blockers,
            "fully_unblocked": self.fully_unblocked,
            "message": self.message,
        }


@dataclass
class CancellationImpactReport:
    artifact_id: str
    parent_completion_affected: list[ParentCompletionImpact] = field(default_factory=list)
    dependents_unblocked: list[DependentUnblocked] = field(default_factory=list)
    children: list[ArtifactRecord] = field(default_factory=list)  # left in their current state
    has_impact: bool = False
    summary: str = ""
    analyzed_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "artifact_id": self.artifact_id,
            "parent_completion_affected": [p.to_dict() for p in self.parent_completion_affected],
            "dependents_unblocked": [d.to_dict() for d in self.dependents_unblocked],
            "children": [c.to_dict() for c in self.children],
            "has_impact": self.has_impact,
            "summary": self.summary,
            "analyzed_at": self.analyzed_at,
        }


# -----------------------------------------------------------------------------
# Deletion
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class OrphanedDependent:
    id: str
    artifact: Artifact
    fully_orphaned: bool
    remaining_dependencies: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "artifact": self.artifact.to_dict(),
            "fully_orphaned": self.fully_orphaned,
            "remaining_dependencies": self.remaining_dependencies,
            "message": self.message,
        }


@dataclass(frozen=True)
class BrokenParent:
    id: str
    artifact: Artifact
    remaining_children: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "artifact": self.artifact.to_dict(),
            "remaining_children": self.remaining_children,
            "message": self.message,
        }


@dataclass(frozen=True)
class AffectedSibling:
    id: str
    artifact: Artifact
    can_help_complete: bool  # sibling is already completed/cancelled
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "artifact": self.artifact.to_dict(),
            "can_help_complete": self.can_help_complete,
            "message": self.message,
        }


@dataclass
class DeletionImpactReport:
    artifact_id: str
    orphaned_dependents: list[OrphanedDependent] = field(default_factory=list)
    broken_parent: BrokenParent | None = None
    affected_siblings: list[AffectedSibling] = field(default_factory=list)
    orphaned_children: list[ArtifactRecord] = field(default_factory=list)
    has_impact: bool = False
    requires_force: bool = False
    summary: str = ""
    analyzed_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "artifact_id": self.artifact_id,
            "orphaned_dependents": [d.to_dict() for d in self.orphaned_dependents],
            "broken_parent": self.broken_parent.to_dict() if self.broken_parent else None,
            "affected_siblings": [s.to_dict() for s in self.affected_siblings],
            "orphaned_children": [c.to_dict() for c in self.orphaned_children],
            "has_impact": self.has_impact,
            "requires_force": self.requires_force,
            "summary": self.summary,
            "analyzed_at": self.analyzed_at,
        }
