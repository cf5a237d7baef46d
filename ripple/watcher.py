"""
File system watcher for the artifacts directory.

Long-lived analyzers use this to learn when their cached listing is stale:
- Watchdog-based monitoring of artifact files (.yml, .yaml, .md)
- Debounced, coalesced change notifications (one callback per burst)
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .store.loader import ARTIFACT_EXTENSIONS

logger = logging.getLogger(__name__)

_TRACKED_EVENT_TYPES = {"created", "modified", "deleted", "moved"}


class ArtifactChangeHandler(FileSystemEventHandler):
    """
    Collects artifact file changes and reports them in debounced batches.

    Watchdog calls the on_* methods from its observer thread; flush_pending()
    is called from the watch loop and invokes on_change there.
    """

    DEBOUNCE_SECONDS = 0.5

    def __init__(
        self,
        root: Path,
        on_change: Callable[[list[Path]], None],
        debounce_seconds: float | None = None,
    ):
        super().__init__()
        self.root = Path(root)
        self.on_change = on_change
        self.debounce_seconds = self.DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds

        self._pending: dict[str, float] = {}  # path -> time of last change
        self._lock = threading.Lock()

    def is_relevant(self, path: str) -> bool:
        """Check if a path is an artifact file under the watched root."""
        p = Path(path)
        if p.suffix.lower() not in ARTIFACT_EXTENSIONS:
            return False
        try:
            rel = p.relative_to(self.root)
        except ValueError:
            return False
        # Editor swap files and other hidden entries
        return not any(part.startswith(".") for part in rel.parts)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _TRACKED_EVENT_TYPES:
            return

        paths = [str(event.src_path)]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(str(dest))

        now = time.monotonic()
        with self._lock:
            for path in paths:
                if self.is_relevant(path):
                    self._pending[path] = now

    def flush_pending(self, now: float | None = None) -> list[Path]:
        """Emit pending changes once the burst has been quiet for the debounce window."""
        now = time.monotonic() if now is None else now
        with self._lock:
            if not self._pending:
                return []
            if now - max(self._pending.values()) < self.debounce_seconds:
                return []
            changed = sorted(Path(p) for p in self._pending)
            self._pending.clear()

        logger.debug("Artifact files changed: %s", ", ".join(str(p) for p in changed))
        self.on_change(changed)
        return changed


def watch_artifacts(
    root: Path,
    on_change: Callable[[list[Path]], None],
    recursive: bool = True,
) -> tuple[Observer, ArtifactChangeHandler]:
    """
    Start watching an artifacts directory.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = ArtifactChangeHandler(root, on_change)

    observer = Observer()
    observer.schedule(handler, str(root), recursive=recursive)
    observer.start()

    return observer, handler


def run_watch_loop(
    root: Path,
    on_change: Callable[[list[Path]], None],
    poll_interval: float = 0.25,
) -> None:
    """
    Run the watch loop until interrupted.

    Blocks, flushing debounced changes every poll_interval seconds.
    """
    observer, handler = watch_artifacts(root, on_change)

    try:
        while True:
            time.sleep(poll_interval)
            handler.flush_pending()
    except KeyboardInterrupt:
        observer.stop()

    observer.join()
