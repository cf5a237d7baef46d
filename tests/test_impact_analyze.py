"""
Tests for the generic analyze(artifact_id, operation) entry point.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ripple.analysis import ImpactAnalyzer, ImpactOperation, ImpactType
from ripple.models import Artifact


def _by_id(report) -> dict[str, object]:
    return {i.id: i for i in report.impacted_artifacts}


def test_delete_flags_dependents_and_ignores_own_dependencies(chain_graph: Path, analyzer_for) -> None:
    analyzer = analyzer_for(chain_graph)

    report = analyzer.analyze("A.1.2", "delete")

    impacted = _by_id(report)
    assert report.operation is ImpactOperation.DELETE
    assert report.has_impact
    assert impacted["A.1.3"].impact_type is ImpactType.BREAKS_DEPENDENCY
    assert impacted["A.1.3"].reason == "Depends on A.1.2 which is being deleted"
    # A.1.1 is what A.1.2 depended on; deleting A.1.2 does not touch it
    assert "A.1.1" not in impacted


def test_delete_of_chain_head(chain_graph: Path, analyzer_for) -> None:
    report = analyzer_for(chain_graph).analyze("A.1.1", "delete")

    assert [(i.id, i.impact_type) for i in report.impacted_artifacts] == [
        ("A.1.2", ImpactType.BREAKS_DEPENDENCY),
    ]


def test_delete_never_reports_blocks_parent_completion(complex_graph: Path, analyzer_for) -> None:
    analyzer = analyzer_for(complex_graph)

    for artifact_id in ["A", "A.1", "A.1.1", "A.1.2", "A.2.1", "B.1", "B.1.1"]:
        report = analyzer.analyze(artifact_id, ImpactOperation.DELETE)
        assert all(i.impact_type is not ImpactType.BLOCKS_PARENT_COMPLETION for i in report.impacted_artifacts)


def test_delete_orphans_direct_children_only(complex_graph: Path, analyzer_for) -> None:
    report = analyzer_for(complex_graph).analyze("A", "delete")

    assert [i.id for i in report.impacted_artifacts] == ["A.1", "A.2"]
    assert {i.impact_type for i in report.impacted_artifacts} == {ImpactType.ORPHANS_CHILDREN}
    assert report.impacted_artifacts[0].reason == "Parent A is being deleted"


def test_cancel_classifies_dependents_dependencies_and_children(chain_graph: Path, analyzer_for) -> None:
    analyzer = analyzer_for(chain_graph)

    report = analyzer.analyze("A.1.2", "cancel")

    impacted = _by_id(report)
    assert impacted["A.1.3"].impact_type is ImpactType.BREAKS_DEPENDENCY
    assert impacted["A.1.3"].reason == "Depends on A.1.2 which is being canceled"
    assert impacted["A.1.1"].impact_type is ImpactType.BLOCKS_PARENT_COMPLETION
    assert impacted["A.1.1"].reason == "A.1.2 (blocked artifact) is being canceled"

    children = analyzer.analyze("A.1", "cancel")
    assert [i.id for i in children.impacted_artifacts] == ["A.1.1", "A.1.2", "A.1.3"]
    assert children.impacted_artifacts[0].reason == "Parent A.1 is being canceled"


def test_remove_dependency_reports_target_and_sharers(milestone_graph: Path, analyzer_for) -> None:
    report = analyzer_for(milestone_graph).analyze("A.1.2", "remove_dependency")

    assert [(i.id, i.reason) for i in report.impacted_artifacts] == [
        ("A.1.2", "Removing dependency may affect artifact readiness state"),
        ("A.1.3", "Shares dependency A.1.1 with A.1.2"),
    ]
    assert {i.impact_type for i in report.impacted_artifacts} == {ImpactType.BREAKS_DEPENDENCY}


def test_remove_dependency_without_dependencies_reports_only_target(chain_graph: Path, analyzer_for) -> None:
    report = analyzer_for(chain_graph).analyze("A.1.1", "remove_dependency")

    assert [i.id for i in report.impacted_artifacts] == ["A.1.1"]


@pytest.mark.parametrize("operation", ["cancel", "delete", "remove_dependency"])
def test_unknown_artifact_yields_empty_report(chain_graph: Path, analyzer_for, operation: str) -> None:
    report = analyzer_for(chain_graph).analyze("Z.9", operation)

    assert report.artifact_id == "Z.9"
    assert report.impacted_artifacts == []
    assert report.has_impact is False


def test_unknown_operation_is_rejected(chain_graph: Path, analyzer_for) -> None:
    with pytest.raises(ValueError):
        analyzer_for(chain_graph).analyze("A.1.1", "archive")


def test_first_classification_wins(in_memory_source) -> None:
    # A.1.1 and A.1.2 block each other; A.1.2 is also blocked by its own parent
    source = in_memory_source(
        [
            Artifact(id="A.1", blocked_by=[]),
            Artifact(id="A.1.1", blocked_by=["A.1.2", "A.1"]),
            Artifact(id="A.1.2", blocked_by=["A.1.1"]),
        ]
    )
    analyzer = ImpactAnalyzer(source)

    cancel = analyzer.analyze("A.1.1", "cancel")
    assert [(i.id, i.impact_type) for i in cancel.impacted_artifacts] == [
        ("A.1.2", ImpactType.BREAKS_DEPENDENCY),
        ("A.1", ImpactType.BLOCKS_PARENT_COMPLETION),
    ]

    delete = analyzer.analyze("A.1", "delete")
    assert [(i.id, i.impact_type) for i in delete.impacted_artifacts] == [
        ("A.1.1", ImpactType.BREAKS_DEPENDENCY),
        ("A.1.2", ImpactType.ORPHANS_CHILDREN),
    ]


def test_repeated_calls_agree(complex_graph: Path, analyzer_for) -> None:
    analyzer = analyzer_for(complex_graph)

    first = analyzer.analyze("A.1.2", "cancel").to_dict()
    second = analyzer.analyze("A.1.2", "cancel").to_dict()

    first.pop("analyzed_at")
    second.pop("analyzed_at")
    assert first == second


def test_report_to_dict(chain_graph: Path, analyzer_for) -> None:
    data = analyzer_for(chain_graph).analyze("A.1.1", "delete").to_dict()

    assert data["artifact_id"] == "A.1.1"
    assert data["operation"] == "delete"
    assert data["has_impact"] is True
    assert data["analyzed_at"].endswith("+00:00")
    entry = data["impacted_artifacts"][0]
    assert entry["id"] == "A.1.2"
    assert entry["impact_type"] == "breaks_dependency"
    assert entry["artifact"]["blocked_by"] == ["A.1.1"]


# -----------------------------------------------------------------------------
# Caching
# -----------------------------------------------------------------------------


def test_listing_is_memoized_per_instance(in_memory_source) -> None:
    source = in_memory_source([Artifact(id="A"), Artifact(id="A.1"), Artifact(id="A.2")])
    analyzer = ImpactAnalyzer(source)

    analyzer.find_children_in_hierarchy("A")
    analyzer.find_children_in_hierarchy("A")
    analyzer.analyze("A", "delete")

    # One listing for the analyzer, one for the index tables
    assert source.list_calls == 2

    other = ImpactAnalyzer(source)
    other.find_children_in_hierarchy("A")
    assert source.list_calls == 3


def test_clear_cache_picks_up_new_artifacts(milestone_graph: Path, analyzer_for, write_artifact) -> None:
    analyzer = analyzer_for(milestone_graph)
    assert [r.id for r in analyzer.find_children_in_hierarchy("A.1")] == ["A.1.1", "A.1.2", "A.1.3"]

    write_artifact("A.1.4", blocked_by=["A.1.3"])
    assert len(analyzer.find_children_in_hierarchy("A.1")) == 3
    assert analyzer.analyze("A.1.3", "delete").impacted_artifacts == []

    analyzer.clear_cache()

    assert [r.id for r in analyzer.find_children_in_hierarchy("A.1")] == ["A.1.1", "A.1.2", "A.1.3", "A.1.4"]
    assert [i.id for i in analyzer.analyze("A.1.3", "delete").impacted_artifacts] == ["A.1.4"]


def test_clear_cache_cascades_to_source(in_memory_source) -> None:
    source = in_memory_source([Artifact(id="A")])
    analyzer = ImpactAnalyzer(source)

    analyzer.clear_cache()

    assert source.clear_calls == 1
