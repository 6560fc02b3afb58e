"""
Thread-safe in-memory task store for a vault of markdown files.

Design:
    File map: Dict[Path, CachedFile]   (parsed tasks per file, with mtime)
    Snapshot: Tuple[Task, ...]         (flat, immutable view handed to consumers)

Every update builds a new file map and snapshot off to the side and then
swaps both references under _lock, so a consumer never sees a mix of old and
new tasks. Subscribers are notified after the swap, outside the lock.
The watcher queues paths on _update_queue; a worker thread drains it.
"""

import itertools
import logging
import queue
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple

from models.settings import DEFAULT_SETTINGS, Settings
from models.task import OriginKey, Task
from parsers.task_parser import parse_file, replace_task_with_tasks

log = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


class CacheState(str, Enum):
    COLD = "cold"
    INITIALIZING = "initializing"
    WARM = "warm"


Snapshot = Tuple[Task, ...]
Subscriber = Callable[[Snapshot, CacheState], None]


@dataclass(frozen=True)
class CachedFile:
    """The parsed tasks of one markdown file."""

    file_path: Path
    tasks: Tuple[Task, ...]
    mtime: float


def iter_markdown_files(vault_root: Path, exclude_dirs: Set[str]) -> Iterator[Path]:
    """Yield every markdown file under vault_root outside the excluded directories."""
    for path in vault_root.rglob(f"*{MARKDOWN_SUFFIX}"):
        rel = path.relative_to(vault_root)
        if path.is_file() and not exclude_dirs.intersection(rel.parts[:-1]):
            yield path


def _flatten(files: Dict[Path, CachedFile]) -> Snapshot:
    return tuple(task for path in sorted(files) for task in files[path].tasks)


class VaultCache:
    """
    Holds the latest parsed snapshot of all tasks in a vault.

    Initialize with initialize(), then start the background worker with
    start_worker(). The watcher calls enqueue_refresh() to schedule file
    re-parses without blocking the watcher thread.
    """

    def __init__(self, settings: Settings = DEFAULT_SETTINGS) -> None:
        self._settings = settings
        self._lock = threading.RLock()
        self._files: Dict[Path, CachedFile] = {}
        self._snapshot: Snapshot = ()
        self._state = CacheState.COLD
        self._subscribers: Dict[int, Subscriber] = {}
        self._handles = itertools.count(1)
        self._vault_root: Optional[Path] = None
        self._exclude_dirs: Set[str] = set()
        self._update_queue: "queue.Queue[Optional[Path]]" = queue.Queue()
        self._worker_thread: Optional[threading.Thread] = None
        self._last_full_scan: Optional[datetime] = None

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def initialize(self, vault_root: Path, exclude_dirs: Set[str]) -> None:
        """Parse every markdown file in the vault and publish the first snapshot."""
        self._vault_root = vault_root
        self._exclude_dirs = exclude_dirs
        with self._lock:
            self._state = CacheState.INITIALIZING
        log.info("Scanning %s", vault_root)

        files: Dict[Path, CachedFile] = {}
        for path in iter_markdown_files(vault_root, exclude_dirs):
            cached = self._load_file(path)
            if cached is not None:
                files[path] = cached

        with self._lock:
            notification = self._swap(files, state=CacheState.WARM)
        self._notify(*notification)
        self._last_full_scan = datetime.now()
        log.info("Indexed %d tasks in %d files", len(self._snapshot), len(files))

    def start_worker(self) -> None:
        """Drain enqueue_refresh() requests on a daemon thread."""
        self._worker_thread = threading.Thread(
            target=self._drain_updates, daemon=True, name="task-cache-worker"
        )
        self._worker_thread.start()

    def stop_worker(self) -> None:
        self._update_queue.put(None)
        if self._worker_thread is not None:
            self._worker_thread.join(timeout=5)

    def _load_file(self, path: Path) -> Optional[CachedFile]:
        """Parse a markdown file; failures are logged and the file skipped."""
        try:
            mtime = path.stat().st_mtime
            tasks = parse_file(path, self._settings)
        except Exception:
            log.exception("Failed to parse %s", path)
            return None
        return CachedFile(file_path=path, tasks=tuple(tasks), mtime=mtime)

    def _swap(self, files: Dict[Path, CachedFile], state: Optional[CacheState] = None):
        """
        Replace the file map and snapshot. Caller must hold _lock and pass the
        returned tuple to _notify() after releasing it.
        """
        self._files = files
        self._snapshot = _flatten(files)
        if state is not None:
            self._state = state
        return list(self._subscribers.values()), self._snapshot, self._state

    @staticmethod
    def _notify(subscribers: List[Subscriber], snapshot: Snapshot, state: CacheState) -> None:
        for callback in subscribers:
            try:
                callback(snapshot, state)
            except Exception:
                log.exception("Subscriber %r failed", callback)

    # ------------------------------------------------------------------
    # Background worker
    # ------------------------------------------------------------------

    def _drain_updates(self) -> None:
        # None is the stop marker put by stop_worker().
        for path in iter(self._update_queue.get, None):
            try:
                self.refresh_file(path)
            except Exception:
                log.exception("Refresh of %s failed", path)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def enqueue_refresh(self, path: Path) -> None:
        """Schedule a file re-parse from a watcher callback (non-blocking)."""
        self._update_queue.put(path)

    def refresh_file(self, path: Path, force: bool = False) -> None:
        """
        Re-parse a single file and publish a new snapshot.
        Deleted files are dropped from the snapshot.
        """
        if path.suffix != MARKDOWN_SUFFIX:
            return

        with self._lock:
            notification = self._refresh_locked(path, force)
        if notification is not None:
            self._notify(*notification)

    def _refresh_locked(self, path: Path, force: bool):
        existing = self._files.get(path)

        if not path.exists():
            if existing is None:
                return None
            files = dict(self._files)
            files.pop(path)
            return self._swap(files)

        try:
            mtime = path.stat().st_mtime
        except OSError:
            return None
        if existing and existing.mtime >= mtime and not force:
            return None  # Already up to date
        cached = self._load_file(path)
        if cached is None:
            return None
        files = dict(self._files)
        files[path] = cached
        return self._swap(files)

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> int:
        """Register a callback for every new snapshot. Returns a handle."""
        with self._lock:
            handle = next(self._handles)
            self._subscribers[handle] = callback
            return handle

    def unsubscribe(self, handle: int) -> None:
        with self._lock:
            self._subscribers.pop(handle, None)

    def request_snapshot(self, callback: Subscriber) -> None:
        """Invoke ``callback`` once with the current snapshot and state."""
        with self._lock:
            snapshot, state = self._snapshot, self._state
        callback(snapshot, state)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        with self._lock:
            return self._snapshot

    @property
    def state(self) -> CacheState:
        with self._lock:
            return self._state

    @property
    def settings(self) -> Settings:
        return self._settings

    def find_task(self, origin: OriginKey) -> Optional[Task]:
        """Return the task at the given origin, or None."""
        with self._lock:
            cached = self._files.get(Path(origin.path))
        if cached is None:
            return None
        for task in cached.tasks:
            if task.origin == origin:
                return task
        return None

    # ------------------------------------------------------------------
    # Mutations (write-through to disk)
    # ------------------------------------------------------------------

    def replace_task(self, original: Task, new_tasks: List[Task]) -> bool:
        """
        Write ``new_tasks`` in place of ``original`` and refresh its file.

        Returns:
            True if the file was rewritten
        """
        with self._lock:
            written = replace_task_with_tasks(original, new_tasks, self._settings)
        if written:
            self.refresh_file(Path(original.origin.path), force=True)
        return written

    # ------------------------------------------------------------------
    # Status / diagnostics
    # ------------------------------------------------------------------

    def status(self) -> dict:
        with self._lock:
            return {
                "state": self._state.value,
                "files_indexed": len(self._files),
                "tasks_indexed": len(self._snapshot),
                "subscribers": len(self._subscribers),
                "last_full_scan": self._last_full_scan.isoformat() if self._last_full_scan else None,
                "vault_root": str(self._vault_root) if self._vault_root else None,
                "exclude_dirs": sorted(self._exclude_dirs),
                "global_filter": self._settings.global_filter,
            }
