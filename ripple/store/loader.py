"""Artifact loading from an artifacts directory."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import frontmatter
import yaml

from ..analysis.hierarchy import id_sort_key
from ..errors import ArtifactLoadError
from ..models import Artifact, ArtifactRecord, is_terminal

logger = logging.getLogger(__name__)

ARTIFACT_EXTENSIONS = {".yml", ".yaml", ".md"}

_ROOT_SEGMENT = re.compile(r"([A-Z])([-_].*)?")
_NUMERIC_SEGMENT = re.compile(r"([0-9]+)([-_].*)?")


def artifact_id_from_filename(name: str) -> str | None:
    """
    Extract the artifact id from a file name, or None if it carries none.

    "A.1.2.fix-login" and "A.1.2-fix" give "A.1.2"; "README" and "A.1.2x"
    give None.
    """
    root, *rest = name.split(".")
    match = _ROOT_SEGMENT.fullmatch(root)
    if match is None:
        return None
    segments = [match.group(1)]
    if match.group(2):
        return segments[0]

    for part in rest:
        match = _NUMERIC_SEGMENT.fullmatch(part)
        if match is None:
            if part[:1].isdigit():
                return None
            break
        segments.append(match.group(1))
        if match.group(2):
            break
    return ".".join(segments)


def _read_document(path: Path) -> dict[str, Any]:
    """Return the raw mapping stored in an artifact file."""
    try:
        if path.suffix.lower() == ".md":
            post = frontmatter.load(path)
            data = dict(post.metadata)
            if post.content.strip():
                data.setdefault("content", post.content)
            return data
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ArtifactLoadError(path, f"invalid YAML: {e}") from e
    except UnicodeDecodeError as e:
        raise ArtifactLoadError(path, f"not valid UTF-8: {e}") from e
    except OSError as e:
        raise ArtifactLoadError(path, f"cannot read file: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ArtifactLoadError(path, f"expected a mapping, got {type(data).__name__}")
    return data


def load_artifact(path: Path) -> Artifact | None:
    """Load a single artifact file. Returns None if no id can be determined."""
    data = _read_document(path)

    metadata = data.get("metadata")
    if not isinstance(metadata, dict):
        # Flat frontmatter: metadata keys live at the top level
        metadata = data

    stem_name = path.name[: -len(path.suffix)] if path.suffix else path.name
    artifact_id = data.get("id") or metadata.get("id") or artifact_id_from_filename(stem_name)
    if not artifact_id:
        logger.debug("Skipping %s: no artifact id in file name or content", path)
        return None

    try:
        return Artifact.from_metadata(str(artifact_id), metadata, path=path)
    except ValueError as e:
        raise ArtifactLoadError(path, str(e)) from e


def _is_candidate(path: Path, root: Path) -> bool:
    if not path.is_file() or path.suffix.lower() not in ARTIFACT_EXTENSIONS:
        return False
    rel = path.relative_to(root)
    return not any(part.startswith(".") for part in rel.parts)


def load_artifacts(root: Path) -> dict[str, Artifact]:
    """
    Load every artifact under root, keyed by id, in hierarchical id order.

    A missing directory is an empty store. Two files claiming the same id
    is an error.
    """
    if not root.is_dir():
        logger.debug("Artifacts directory %s does not exist", root)
        return {}

    loaded: dict[str, Artifact] = {}
    for path in sorted(root.rglob("*")):
        if not _is_candidate(path, root):
            continue
        artifact = load_artifact(path)
        if artifact is None:
            continue
        existing = loaded.get(artifact.id)
        if existing is not None:
            raise ArtifactLoadError(path, f"duplicate artifact id {artifact.id} (also in {existing.path})")
        loaded[artifact.id] = artifact

    logger.debug("Loaded %d artifacts from %s", len(loaded), root)
    return {aid: loaded[aid] for aid in sorted(loaded, key=id_sort_key)}


@dataclass(frozen=True)
class ArtifactFilter:
    """Optional narrowing of a store listing. All set fields must match."""

    kind: str | None = None
    prefix: str | None = None  # the id itself or anything below it
    terminal: bool | None = None

    def matches(self, artifact: Artifact) -> bool:
        if self.kind is not None and artifact.kind != self.kind:
            return False
        if self.prefix is not None:
            if artifact.id != self.prefix and not artifact.id.startswith(f"{self.prefix}."):
                return False
        if self.terminal is not None and is_terminal(artifact) != self.terminal:
            return False
        return True


class ArtifactStore:
    """Read-only view over the artifact files in one directory."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self._artifacts: dict[str, Artifact] | None = None

    def _load(self) -> dict[str, Artifact]:
        if self._artifacts is None:
            self._artifacts = load_artifacts(self.root)
        return self._artifacts

    def find_artifacts(self, artifact_filter: ArtifactFilter | None = None) -> list[ArtifactRecord]:
        """List artifacts, optionally filtered, in hierarchical id order."""
        records = [ArtifactRecord(aid, artifact) for aid, artifact in self._load().items()]
        if artifact_filter is None:
            return records
        return [r for r in records if artifact_filter.matches(r.artifact)]

    def get(self, artifact_id: str) -> Artifact | None:
        return self._load().get(artifact_id)

    def clear_cache(self) -> None:
        """Forget loaded artifacts so the next query re-reads the directory."""
        self._artifacts = None
