"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Callable

import pytest
import yaml

from ripple.analysis.impact import ImpactAnalyzer
from ripple.models import Artifact, ArtifactRecord

ArtifactWriter = Callable[..., Path]


def _artifact_path(root: Path, artifact_id: str) -> Path:
    # A.1.2 -> root/A/A.1/A.1.2.yml, mirroring the hierarchy on disk
    parts = artifact_id.split(".")
    ancestors = [".".join(parts[: i + 1]) for i in range(len(parts) - 1)]
    return root.joinpath(*ancestors, f"{artifact_id}.yml")


@pytest.fixture
def artifacts_dir(tmp_path: Path) -> Path:
    path = tmp_path / ".ripple" / "artifacts"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def write_artifact(artifacts_dir: Path) -> ArtifactWriter:
    """Write one YAML artifact file; returns its path."""

    def _write(
        artifact_id: str,
        *,
        title: str | None = None,
        blocked_by: list[str] | None = None,
        events: list[str] | None = None,
    ) -> Path:
        metadata = {
            "title": title or f"Artifact {artifact_id}",
            "relationships": {"blocks": [], "blocked_by": list(blocked_by or [])},
            "events": [
                {
                    "event": name,
                    "timestamp": f"2025-01-0{i + 1}T10:00:00Z",
                    "actor": "Test User (test@example.com)",
                    "trigger": "manual",
                }
                for i, name in enumerate(events or ["draft"])
            ],
        }
        path = _artifact_path(artifacts_dir, artifact_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump({"metadata": metadata}, sort_keys=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def chain_graph(artifacts_dir: Path, write_artifact: ArtifactWriter) -> Path:
    """
    A
      A.1
        A.1.1 (completed, blocks A.1.2)
        A.1.2 (blocked by A.1.1, blocks A.1.3)
        A.1.3 (blocked by A.1.2)
    """
    write_artifact("A", title="Initiative A")
    write_artifact("A.1", title="Milestone A.1")
    write_artifact("A.1.1", title="Issue A.1.1", events=["draft", "ready", "in_progress", "completed"])
    write_artifact("A.1.2", title="Issue A.1.2", blocked_by=["A.1.1"])
    write_artifact("A.1.3", title="Issue A.1.3", blocked_by=["A.1.2"])
    return artifacts_dir


@pytest.fixture
def milestone_graph(artifacts_dir: Path, write_artifact: ArtifactWriter) -> Path:
    """
    A
      A.1
        A.1.1
        A.1.2 (blocked by A.1.1)
        A.1.3 (blocked by A.1.1)
    """
    write_artifact("A", title="Initiative A")
    write_artifact("A.1", title="Milestone A.1")
    write_artifact("A.1.1", title="Issue A.1.1")
    write_artifact("A.1.2", title="Issue A.1.2", blocked_by=["A.1.1"])
    write_artifact("A.1.3", title="Issue A.1.3", blocked_by=["A.1.1"])
    return artifacts_dir


@pytest.fixture
def complex_graph(artifacts_dir: Path, write_artifact: ArtifactWriter) -> Path:
    """
    A
      A.1
        A.1.1 (completed)
        A.1.2 (blocked by A.1.1)
        A.1.3 (in progress)
      A.2
        A.2.1 (blocked by A.1.2)
        A.2.2 (blocked by A.2.1)
    B
      B.1
        B.1.1
        B.1.2 (blocked by B.1.1)
        B.1.3 (blocked by B.1.1, cancelled)
    """
    write_artifact("A", title="Initiative A")
    write_artifact("A.1", title="Milestone A.1")
    write_artifact("A.1.1", title="Issue A.1.1", events=["draft", "ready", "in_progress", "completed"])
    write_artifact("A.1.2", title="Issue A.1.2", blocked_by=["A.1.1"])
    write_artifact("A.1.3", title="Issue A.1.3", events=["draft", "ready", "in_progress"])
    write_artifact("A.2", title="Milestone A.2")
    write_artifact("A.2.1", title="Issue A.2.1", blocked_by=["A.1.2"])
    write_artifact("A.2.2", title="Issue A.2.2", blocked_by=["A.2.1"])
    write_artifact("B", title="Initiative B")
    write_artifact("B.1", title="Milestone B.1")
    write_artifact("B.1.1", title="Issue B.1.1")
    write_artifact("B.1.2", title="Issue B.1.2", blocked_by=["B.1.1"])
    write_artifact("B.1.3", title="Issue B.1.3", blocked_by=["B.1.1"], events=["draft", "cancelled"])
    return artifacts_dir


class InMemorySource:
    """Artifact source double that counts how often it is listed."""

    def __init__(self, artifacts: list[Artifact]):
        self.artifacts = list(artifacts)
        self.list_calls = 0
        self.clear_calls = 0

    def find_artifacts(self, artifact_filter=None) -> list[ArtifactRecord]:
        self.list_calls += 1
        return [ArtifactRecord(a.id, a) for a in self.artifacts]

    def clear_cache(self) -> None:
        self.clear_calls += 1


@pytest.fixture
def in_memory_source() -> Callable[[list[Artifact]], InMemorySource]:
    return InMemorySource


@pytest.fixture
def analyzer_for() -> Callable[[Path], ImpactAnalyzer]:
    return ImpactAnalyzer.for_directory
