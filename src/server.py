"""
vault-tasks server.

Indexes the markdown vault named by VAULT_ROOT, keeps the index fresh with a
polling watcher, and serves it over MCP (stdio) and, unless API_ENABLED is
false, a REST API on API_PORT.

Environment:
    VAULT_ROOT                  vault directory (required)
    EXCLUDE_DIRS                comma-separated directory names to skip
    POLL_INTERVAL               watcher poll period in seconds
    API_ENABLED / API_PORT      REST API switch and port (default 9400)
    TASKS_GLOBAL_FILTER         text a checklist line needs to count as a task
    TASKS_REMOVE_GLOBAL_FILTER  hide that text in rendered results
"""

import logging
import os
import sys
import threading
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from api.tools import register_tools
from cache.vault_cache import VaultCache
from models.settings import DEFAULT_EXCLUDE_DIRS, Settings, parse_exclude_dirs
from watcher.vault_watcher import VaultWatcher

# stdout carries the MCP protocol, so logs go to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    stream=sys.stderr,
)
log = logging.getLogger(__name__)

DEFAULT_API_PORT = 9400


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


def _vault_root_from_env() -> Path:
    raw = os.environ.get("VAULT_ROOT", "")
    if not raw:
        log.error("VAULT_ROOT environment variable is not set")
        sys.exit(1)
    root = Path(raw)
    if not root.is_dir():
        log.error("VAULT_ROOT is not a directory: %s", root)
        sys.exit(1)
    return root


def _serve_rest(cache: VaultCache, port: int) -> threading.Thread:
    import uvicorn

    from api.app import create_app

    def run() -> None:
        log.info("REST API listening on port %d", port)
        uvicorn.run(create_app(cache), host="0.0.0.0", port=port, log_level="warning")

    thread = threading.Thread(target=run, daemon=True, name="rest-api")
    thread.start()
    return thread


def main() -> None:
    vault_root = _vault_root_from_env()
    exclude_dirs = parse_exclude_dirs(os.environ.get("EXCLUDE_DIRS", DEFAULT_EXCLUDE_DIRS))
    settings = Settings.from_env()
    log.info(
        "Vault %s (excluding %s, global filter %r)",
        vault_root,
        ", ".join(sorted(exclude_dirs)) or "nothing",
        settings.global_filter,
    )

    cache = VaultCache(settings)
    cache.initialize(vault_root, exclude_dirs)
    cache.start_worker()
    watcher = VaultWatcher(cache, vault_root, exclude_dirs)
    watcher.start()

    if _env_flag("API_ENABLED", "true"):
        _serve_rest(cache, int(os.environ.get("API_PORT", DEFAULT_API_PORT)))

    mcp = FastMCP("vault-tasks")
    register_tools(mcp, cache)
    try:
        mcp.run(transport="stdio")
    finally:
        watcher.stop()
        cache.stop_worker()


if __name__ == "__main__":
    main()
