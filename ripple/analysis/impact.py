"""
Impact analysis for destructive artifact operations.

Given one artifact and a prospective cancel, delete or remove_dependency,
report what else in the hierarchy + dependency graph is affected. Analysis
is read-only and advisory: nothing here vetoes or performs an operation.

Every classification looks one hop away (direct dependents, direct
dependencies, direct children), so dependency cycles cannot cause
unbounded work.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from ..errors import ArtifactNotFoundError
from ..models import ArtifactRecord, is_terminal
from ..store import ArtifactSource, DependencyLookup
from ..store.index import DependencyIndex
from .hierarchy import get_parent_id, is_direct_child
from .reports import (
    AffectedSibling,
    BrokenParent,
    CancellationImpactReport,
    DeletionImpactReport,
    DependentUnblocked,
    ImpactedArtifact,
    ImpactOperation,
    ImpactReport,
    ImpactType,
    OrphanedDependent,
    ParentCompletionImpact,
)

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


class _ImpactCollector:
    """Accumulates impacted artifacts; the first classification of an id wins."""

    def __init__(self) -> None:
        self.items: list[ImpactedArtifact] = []
        self._seen: set[str] = set()

    def add(self, record: ArtifactRecord, impact_type: ImpactType, reason: str) -> None:
        if record.id in self._seen:
            return
        self._seen.add(record.id)
        self.items.append(ImpactedArtifact(record.id, record.artifact, impact_type, reason))


class ImpactAnalyzer:
    """
    Classifies the ripple effects of an operation on one artifact.

    The full artifact listing is loaded lazily on first need and memoized on
    the instance until clear_cache() is called. Long-lived analyzers should
    call clear_cache() whenever the underlying artifacts may have changed.
    """

    def __init__(self, source: ArtifactSource, index: DependencyLookup | None = None):
        self.source = source
        self.index = index if index is not None else DependencyIndex(source)
        self._artifacts: dict[str, ArtifactRecord] | None = None

    @classmethod
    def for_directory(cls, artifacts_dir: Path) -> ImpactAnalyzer:
        """Build an analyzer over the artifact files in artifacts_dir."""
        from ..store.loader import ArtifactStore

        store = ArtifactStore(artifacts_dir)
        return cls(store, DependencyIndex(store))

    # -------------------------------------------------------------------------
    # Listing cache and hierarchy
    # -------------------------------------------------------------------------

    def _all_artifacts(self) -> dict[str, ArtifactRecord]:
        if self._artifacts is None:
            # Replaced wholesale, never updated in place
            self._artifacts = {r.id: r for r in self.source.find_artifacts()}
            logger.debug("Cached listing of %d artifacts", len(self._artifacts))
        return self._artifacts

    def _lookup(self, artifact_id: str) -> ArtifactRecord | None:
        return self._all_artifacts().get(artifact_id)

    def _require(self, artifact_id: str) -> ArtifactRecord:
        record = self._lookup(artifact_id)
        if record is None:
            raise ArtifactNotFoundError(artifact_id)
        return record

    def find_children_in_hierarchy(self, artifact_id: str) -> list[ArtifactRecord]:
        """Direct children of artifact_id (A.1 -> A.1.1, A.1.2; not A.1.1.1)."""
        return [r for r in self._all_artifacts().values() if is_direct_child(r.id, artifact_id)]

    def _siblings(self, artifact_id: str, parent_id: str) -> list[ArtifactRecord]:
        return [c for c in self.find_children_in_hierarchy(parent_id) if c.id != artifact_id]

    def clear_cache(self) -> None:
        """Forget the memoized listing and the index's lookup tables."""
        self._artifacts = None
        self.index.clear_cache()
        logger.debug("Impact analyzer cache cleared")

    # -------------------------------------------------------------------------
    # Generic analysis
    # -------------------------------------------------------------------------

    def analyze(self, artifact_id: str, operation: ImpactOperation | str) -> ImpactReport:
        """
        Classify artifacts affected by an operation on artifact_id.

        Never raises for an unknown artifact_id; the report is simply empty.
        Raises ValueError for an unknown operation.
        """
        op = ImpactOperation(operation)

        if op is ImpactOperation.CANCEL:
            impacted = self._analyze_cancel_impact(artifact_id)
        elif op is ImpactOperation.DELETE:
            impacted = self._analyze_delete_impact(artifact_id)
        else:
            impacted = self._analyze_remove_dependency_impact(artifact_id)

        logger.debug("%s %s: %d impacted artifacts", op.value, artifact_id, len(impacted))
        return ImpactReport(
            artifact_id=artifact_id,
            operation=op,
            impacted_artifacts=impacted,
            has_impact=len(impacted) > 0,
            analyzed_at=_utc_now(),
        )

    def _analyze_cancel_impact(self, artifact_id: str) -> list[ImpactedArtifact]:
        collector = _ImpactCollector()

        for dependent in self.index.get_blocked_artifacts(artifact_id):
            collector.add(
                dependent,
                ImpactType.BREAKS_DEPENDENCY,
                f"Depends on {artifact_id} which is being canceled",
            )

        for dependency in self.index.get_dependencies(artifact_id):
            collector.add(
                dependency,
                ImpactType.BLOCKS_PARENT_COMPLETION,
                f"{artifact_id} (blocked artifact) is being canceled",
            )

        for child in self.find_children_in_hierarchy(artifact_id):
            collector.add(
                child,
                ImpactType.ORPHANS_CHILDREN,
                f"Parent {artifact_id} is being canceled",
            )

        return collector.items

    def _analyze_delete_impact(self, artifact_id: str) -> list[ImpactedArtifact]:
        # What the deleted artifact itself depended on is not affected
        collector = _ImpactCollector()

        for dependent in self.index.get_blocked_artifacts(artifact_id):
            collector.add(
                dependent,
                ImpactType.BREAKS_DEPENDENCY,
                f"Depends on {artifact_id} which is being deleted",
            )

        for child in self.find_children_in_hierarchy(artifact_id):
            collector.add(
                child,
                ImpactType.ORPHANS_CHILDREN,
                f"Parent {artifact_id} is being deleted",
            )

        return collector.items

    def _analyze_remove_dependency_impact(self, artifact_id: str) -> list[ImpactedArtifact]:
        collector = _ImpactCollector()

        target = self._lookup(artifact_id)
        if target is not None:
            collector.add(
                target,
                ImpactType.BREAKS_DEPENDENCY,
                "Removing dependency may affect artifact readiness state",
            )

        for dependency in self.index.get_dependencies(artifact_id):
            for sharer in self.index.get_blocked_artifacts(dependency.id):
                if sharer.id == artifact_id:
                    continue
                collector.add(
                    sharer,
                    ImpactType.BREAKS_DEPENDENCY,
                    f"Shares dependency {dependency.id} with {artifact_id}",
                )

        return collector.items

    # -------------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------------

    def analyze_cancellation(self, artifact_id: str) -> CancellationImpactReport:
        """
        Detailed impact of cancelling artifact_id.

        Cancelled artifacts count as done for parent completion, dependents
        lose this blocker, and children keep their current state.

        Raises ArtifactNotFoundError if artifact_id is not in the store.
        """
        self._require(artifact_id)

        parents = self._parent_completion_impact(artifact_id)
        dependents = [self._dependent_unblocked(artifact_id, d) for d in self.index.get_blocked_artifacts(artifact_id)]
        children = self.find_children_in_hierarchy(artifact_id)

        return CancellationImpactReport(
            artifact_id=artifact_id,
            parent_completion_affected=parents,
            dependents_unblocked=dependents,
            children=children,
            has_impact=bool(parents or dependents or children),
            summary=self._cancellation_summary(artifact_id, parents, dependents, children),
            analyzed_at=_utc_now(),
        )

    def _parent_completion_impact(self, artifact_id: str) -> list[ParentCompletionImpact]:
        parent_id = get_parent_id(artifact_id)
        if parent_id is None:
            return []
        parent = self._lookup(parent_id)
        if parent is None:
            return []

        remaining = sum(1 for s in self._siblings(artifact_id, parent_id) if not is_terminal(s.artifact))
        can_complete = remaining == 0
        if can_complete:
            message = f"Parent {parent_id} can now be completed (all children done/cancelled)"
        else:
            message = f"Parent {parent_id} still has {remaining} incomplete {_plural(remaining, 'child', 'children')}"

        return [ParentCompletionImpact(parent_id, parent.artifact, remaining, can_complete, message)]

    @staticmethod
    def _dependent_unblocked(artifact_id: str, dependent: ArtifactRecord) -> DependentUnblocked:
        # Structural count: other blockers are not checked for their own state
        remaining = len([b for b in dependent.artifact.blocked_by if b != artifact_id])
        fully_unblocked = remaining == 0
        if fully_unblocked:
            message = "Will be fully unblocked (no remaining blockers)"
        else:
            message = f"Will have {remaining} remaining {_plural(remaining, 'blocker', 'blockers')}"
        return DependentUnblocked(dependent.id, dependent.artifact, remaining, fully_unblocked, message)

    @staticmethod
    def _cancellation_summary(
        artifact_id: str,
        parents: list[ParentCompletionImpact],
        dependents: list[DependentUnblocked],
        children: list[ArtifactRecord],
    ) -> str:
        parts: list[str] = []

        if dependents:
            count = len(dependents)
            parts.append(f"will unblock {count} dependent {_plural(count, 'artifact', 'artifacts')}")

        completable = [p for p in parents if p.can_complete]
        if completable:
            count = len(completable)
            parts.append(f"will allow {count} {_plural(count, 'parent', 'parents')} to be completed")

        if children:
            count = len(children)
            parts.append(f"has {count} {_plural(count, 'child', 'children')} (will remain in current state)")

        if not parts:
            return f"Cancelling {artifact_id} has no impact on other artifacts"
        return f"Cancelling {artifact_id} {', '.join(parts)}"

    # -------------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------------

    def analyze_deletion(self, artifact_id: str) -> DeletionImpactReport:
        """
        Detailed impact of deleting artifact_id.

        Dependents lose a blocked_by target, the parent loses a child, and
        children lose their parent. Only orphaned dependents make the
        deletion require --force.

        Raises ArtifactNotFoundError if artifact_id is not in the store.
        """
        self._require(artifact_id)

        orphaned_dependents = [
            self._orphaned_dependent(artifact_id, d) for d in self.index.get_blocked_artifacts(artifact_id)
        ]

        broken_parent: BrokenParent | None = None
        affected_siblings: list[AffectedSibling] = []
        parent_id = get_parent_id(artifact_id)
        parent = self._lookup(parent_id) if parent_id is not None else None
        if parent is not None:
            siblings = self._siblings(artifact_id, parent.id)
            broken_parent = self._broken_parent(parent, len(siblings))
            affected_siblings = [self._affected_sibling(parent.id, s) for s in siblings]

        orphaned_children = self.find_children_in_hierarchy(artifact_id)

        return DeletionImpactReport(
            artifact_id=artifact_id,
            orphaned_dependents=orphaned_dependents,
            broken_parent=broken_parent,
            affected_siblings=affected_siblings,
            orphaned_children=orphaned_children,
            has_impact=bool(orphaned_dependents or broken_parent or affected_siblings or orphaned_children),
            requires_force=len(orphaned_dependents) > 0,
            summary=self._deletion_summary(artifact_id, orphaned_dependents, broken_parent, orphaned_children),
            analyzed_at=_utc_now(),
        )

    @staticmethod
    def _orphaned_dependent(artifact_id: str, dependent: ArtifactRecord) -> OrphanedDependent:
        remaining = len([b for b in dependent.artifact.blocked_by if b != artifact_id])
        fully_orphaned = remaining == 0
        if fully_orphaned:
            message = "Will lose its only dependency (fully orphaned)"
        else:
            message = f"Will have {remaining} remaining {_plural(remaining, 'dependency', 'dependencies')}"
        return OrphanedDependent(dependent.id, dependent.artifact, fully_orphaned, remaining, message)

    @staticmethod
    def _broken_parent(parent: ArtifactRecord, remaining: int) -> BrokenParent:
        if remaining == 0:
            message = f"Parent {parent.id} will have no remaining children"
        else:
            message = f"Parent {parent.id} will have {remaining} remaining {_plural(remaining, 'child', 'children')}"
        return BrokenParent(parent.id, parent.artifact, remaining, message)

    @staticmethod
    def _affected_sibling(parent_id: str, sibling: ArtifactRecord) -> AffectedSibling:
        can_help = is_terminal(sibling.artifact)
        if can_help:
            message = f"Already done/cancelled, can help complete parent {parent_id}"
        else:
            message = "Still open, parent completion still blocked"
        return AffectedSibling(sibling.id, sibling.artifact, can_help, message)

    @staticmethod
    def _deletion_summary(
        artifact_id: str,
        dependents: list[OrphanedDependent],
        broken_parent: BrokenParent | None,
        children: list[ArtifactRecord],
    ) -> str:
        if not dependents and broken_parent is None and not children:
            return f"Deleting {artifact_id} has no impact on other artifacts"

        # Siblings and the parent record are reported but not counted
        total = len(dependents) + len(children)
        parts = [f"will affect {total} {_plural(total, 'artifact', 'artifacts')}"]
        if broken_parent is not None:
            parts.append(f"break parent {broken_parent.id}")
        if children:
            count = len(children)
            parts.append(f"orphan {count} {_plural(count, 'child', 'children')}")

        return f"Deleting {artifact_id} {', '.join(parts)}"
