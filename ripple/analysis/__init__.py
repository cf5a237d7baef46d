"""
Impact analysis for artifact operations.

- ImpactAnalyzer.analyze(): coarse classification for cancel, delete and
  remove_dependency
- ImpactAnalyzer.analyze_cancellation() / analyze_deletion(): detailed
  reports with parent, sibling, dependent and child breakdowns
"""

from .hierarchy import get_parent_id, id_sort_key, is_direct_child, split_id
from .impact import ImpactAnalyzer
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

__all__ = [
    # Engine
    "ImpactAnalyzer",
    # Vocabulary
    "ImpactOperation",
    "ImpactType",
    # Reports
    "ImpactReport",
    "ImpactedArtifact",
    "CancellationImpactReport",
    "ParentCompletionImpact",
    "DependentUnblocked",
    "DeletionImpactReport",
    "OrphanedDependent",
    "BrokenParent",
    "AffectedSibling",
    # Hierarchy
    "get_parent_id",
    "id_sort_key",
    "is_direct_child",
    "split_id",
]
