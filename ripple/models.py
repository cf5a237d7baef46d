"""Data models for tracked work artifacts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

# By id depth: A -> initiative, A.1 -> milestone, A.1.2 and deeper -> issue
ARTIFACT_KINDS = ("initiative", "milestone", "issue")

# Lifecycle event names
EVENT_DRAFT = "draft"
EVENT_COMPLETED = "completed"
EVENT_CANCELLED = "cancelled"

TERMINAL_EVENTS = frozenset({EVENT_COMPLETED, EVENT_CANCELLED})


def _as_text(value: Any) -> str:
    # YAML turns unquoted timestamps into datetime objects
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return "" if value is None else str(value)


def _id_list(value: Any, field_name: str) -> list[str]:
    # A lone id is accepted as shorthand for a one-element list
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value]
    raise ValueError(f"{field_name} must be a list of artifact ids, got {type(value).__name__}")


@dataclass(frozen=True)
class LifecycleEvent:
    """One entry of an artifact's event history."""

    event: str
    timestamp: str = ""
    actor: str = ""
    trigger: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "event": self.event,
            "timestamp": self.timestamp,
            "actor": self.actor,
            "trigger": self.trigger,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LifecycleEvent:
        return cls(
            event=_as_text(data.get("event")),
            timestamp=_as_text(data.get("timestamp")),
            actor=_as_text(data.get("actor")),
            trigger=_as_text(data.get("trigger")),
        )


@dataclass
class Artifact:
    """
    A unit of trackable work, identified by a dotted hierarchical id.

    Only the fields impact analysis needs are lifted out of the raw
    metadata; everything else stays available in `metadata`.
    """

    id: str
    title: str = ""
    blocked_by: list[str] = field(default_factory=list)  # ids this one depends on
    blocks: list[str] = field(default_factory=list)  # informational, not indexed
    events: list[LifecycleEvent] = field(default_factory=list)
    path: Path | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> str:
        depth = self.id.count(".")
        return ARTIFACT_KINDS[min(depth, len(ARTIFACT_KINDS) - 1)]

    @property
    def status(self) -> str:
        """Name of the latest event, or draft for an empty history."""
        if not self.events:
            return EVENT_DRAFT
        return self.events[-1].event

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "kind": self.kind,
            "blocked_by": list(self.blocked_by),
            "blocks": list(self.blocks),
            "events": [e.to_dict() for e in self.events],
        }

    @classmethod
    def from_metadata(
        cls,
        artifact_id: str,
        metadata: dict[str, Any],
        *,
        path: Path | None = None,
    ) -> Artifact:
        """Build an artifact from its metadata mapping. Raises ValueError for malformed id lists."""
        relationships = metadata.get("relationships") or {}
        if not isinstance(relationships, dict):
            relationships = {}
        raw_events = metadata.get("events") or []

        return cls(
            id=artifact_id,
            title=_as_text(metadata.get("title")),
            blocked_by=_id_list(relationships.get("blocked_by"), "blocked_by"),
            blocks=_id_list(relationships.get("blocks"), "blocks"),
            events=[LifecycleEvent.from_dict(e) for e in raw_events if isinstance(e, dict)],
            path=path,
            metadata=metadata,
        )


@dataclass(frozen=True)
class ArtifactRecord:
    """An artifact paired with its id, as returned by store and index lookups."""

    id: str
    artifact: Artifact

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "artifact": self.artifact.to_dict()}


def is_terminal(artifact: Artifact) -> bool:
    """True iff the artifact's history contains a completed or cancelled event."""
    return any(e.event in TERMINAL_EVENTS for e in artifact.events)
