"""
Polling watcher that keeps a VaultCache in step with the markdown files on disk.

Every POLL_INTERVAL seconds a daemon thread compares markdown mtimes against
the previous poll and enqueues a cache refresh for each file that appeared,
changed or went away. Polling works on mounts that do not deliver inotify
events.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional, Set

from cache.vault_cache import iter_markdown_files

log = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0


class VaultWatcher:
    """
    Feeds changed paths to ``cache.enqueue_refresh``.

    The cache only needs that one method, so tests can pass a recorder.
    """

    def __init__(
        self,
        cache,
        vault_root: Path,
        exclude_dirs: Set[str],
        poll_interval: Optional[float] = None,
    ) -> None:
        self._cache = cache
        self._vault_root = vault_root
        self._exclude_dirs = exclude_dirs
        if poll_interval is None:
            poll_interval = float(os.environ.get("POLL_INTERVAL", DEFAULT_POLL_INTERVAL))
        self._poll_interval = poll_interval
        self._mtimes: Dict[Path, float] = {}
        self._stopping = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Record the current mtimes and begin polling in a daemon thread."""
        self._mtimes = self._scan()
        self._thread = threading.Thread(target=self._run, daemon=True, name="vault-watcher")
        self._thread.start()
        log.info("Watching %s every %.1fs", self._vault_root, self._poll_interval)

    def stop(self) -> None:
        self._stopping.set()
        if self._thread is not None:
            self._thread.join(timeout=self._poll_interval + 2)
        log.info("Vault watcher stopped")

    def _run(self) -> None:
        while not self._stopping.wait(self._poll_interval):
            try:
                self.check_for_changes()
            except Exception:
                log.exception("Poll of %s failed", self._vault_root)

    def check_for_changes(self) -> int:
        """
        Run one poll cycle.

        Returns:
            Number of paths handed to the cache
        """
        current = self._scan()
        previous = self._mtimes

        changed = [path for path, mtime in current.items() if previous.get(path, -1.0) < mtime]
        removed = [path for path in previous if path not in current]

        for path in changed + removed:
            log.debug("Queueing refresh of %s", path)
            self._cache.enqueue_refresh(path)

        self._mtimes = current
        return len(changed) + len(removed)

    def _scan(self) -> Dict[Path, float]:
        mtimes: Dict[Path, float] = {}
        for path in iter_markdown_files(self._vault_root, self._exclude_dirs):
            try:
                mtimes[path] = path.stat().st_mtime
            except OSError:
                # Deleted between listing and stat; the next poll reports it.
                continue
        return mtimes
