"""Parent/child relationships derived from dotted artifact ids."""

from __future__ import annotations

import re

_NUMERIC_SEGMENT = re.compile(r"[0-9]+")


def split_id(artifact_id: str) -> list[str]:
    """Split "A.1.2" into ["A", "1", "2"]."""
    return artifact_id.split(".")


def get_parent_id(artifact_id: str) -> str | None:
    """Return the parent id ("A.1" for "A.1.2"), or None for a root id."""
    parts = split_id(artifact_id)
    if len(parts) <= 1:
        return None
    return ".".join(parts[:-1])


def is_direct_child(candidate_id: str, parent_id: str) -> bool:
    """True iff candidate_id is parent_id plus exactly one numeric segment."""
    prefix = f"{parent_id}."
    if not candidate_id.startswith(prefix):
        return False
    return _NUMERIC_SEGMENT.fullmatch(candidate_id[len(prefix):]) is not None


def id_sort_key(artifact_id: str) -> tuple[tuple[int, int, str], ...]:
    """Sort key that orders numeric segments numerically (A.2 before A.10)."""
    key = []
    for part in split_id(artifact_id):
        if _NUMERIC_SEGMENT.fullmatch(part):
            key.append((0, int(part), ""))
        else:
            key.append((1, 0, part))
    return tuple(key)
