"""Exceptions raised by ripple."""

from __future__ import annotations

from pathlib import Path


class RippleError(Exception):
    """Base class for all ripple errors."""


class ArtifactNotFoundError(RippleError, LookupError):
    """The requested artifact id is not present in the store."""

    def __init__(self, artifact_id: str):
        self.artifact_id = artifact_id
        super().__init__(f"Artifact {artifact_id} not found")


class ArtifactLoadError(RippleError):
    """An artifact file could not be read or parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load artifact {path}: {reason}")
