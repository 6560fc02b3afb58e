"""
Tests for the MCP tool wrappers in api/tools.py.

The tools return JSON strings; a fake MCP object captures the registered
functions so they can be called directly.
"""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from api.tools import register_tools
from cache.vault_cache import VaultCache
from models.settings import Settings


def _make_vault(tmp_path: Path) -> Path:
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / "Home.md").write_text(
        "# Chores\n"
        "- [ ] Water plants 🔁 FREQ=WEEKLY 📅 2024-01-10\n"
        "- [ ] Take out trash !?\n"
        "- [x] Vacuum ✅ 2024-01-02\n",
        encoding="utf-8",
    )
    return vault


class _FakeMCP:
    """Minimal fake to capture tool registrations."""

    def __init__(self):
        self._tools = {}

    def tool(self, *args, **kwargs):
        """Decorator that records functions by name."""
        def decorator(fn):
            self._tools[fn.__name__] = fn
            return fn
        return decorator

    def get(self, name: str):
        return self._tools[name]


@pytest.fixture
def setup(tmp_path):
    vault = _make_vault(tmp_path)
    cache = VaultCache(Settings())
    cache.initialize(vault, set())

    mcp = _FakeMCP()
    register_tools(mcp, cache)

    return mcp, cache, vault


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

class TestRegistration:
    def test_all_tools_registered(self, setup):
        mcp, _, _ = setup
        assert set(mcp._tools) == {
            "task_query",
            "task_toggle",
            "task_change_priority",
            "task_toggle_waiting",
            "cache_status",
        }


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------

class TestTaskQuery:
    def test_open_tasks(self, setup):
        mcp, _, _ = setup
        data = json.loads(mcp.get("task_query")(query="not done\nsort by priority"))
        assert [t["description"] for t in data["tasks"]] == ["Take out trash", "Water plants"]
        assert data["count"] == 2

    def test_error_is_returned_not_raised(self, setup):
        mcp, _, _ = setup
        data = json.loads(mcp.get("task_query")(query="sort by mood"))
        assert data == {"error": "Tasks query: do not understand query sorting: sort by mood"}


class TestTaskToggle:
    def test_recurring_task_gets_next_occurrence(self, setup):
        mcp, cache, vault = setup
        path = (vault / "Home.md").as_posix()
        data = json.loads(mcp.get("task_toggle")(path=path, section_start=0, section_index=0))

        assert data["replaced"] == f"{path}:0:0"
        upcoming, done = data["tasks"]
        assert upcoming["status"] == "open"
        assert upcoming["due"] == "2024-01-17"
        assert done["status"] == "done"

        lines = (vault / "Home.md").read_text(encoding="utf-8").split("\n")
        assert lines[1] == "- [ ] Water plants 🔁 FREQ=WEEKLY 📅 2024-01-17"
        assert lines[2].startswith("- [x] Water plants 🔁 FREQ=WEEKLY 📅 2024-01-10 ✅ ")
        assert len(cache.snapshot()) == 4

    def test_not_found(self, setup):
        mcp, _, _ = setup
        data = json.loads(mcp.get("task_toggle")(path="nope.md", section_start=0, section_index=0))
        assert data == {"error": "Task 'nope.md:0:0' not found"}


class TestPriorityTools:
    def test_raise_priority(self, setup):
        mcp, _, vault = setup
        path = (vault / "Home.md").as_posix()
        data = json.loads(mcp.get("task_change_priority")(path=path, section_start=0, section_index=1))
        assert data["tasks"][0]["priority"] == "high"
        assert "- [ ] Take out trash !!" in (vault / "Home.md").read_text(encoding="utf-8")

    def test_toggle_waiting(self, setup):
        mcp, _, vault = setup
        path = (vault / "Home.md").as_posix()
        data = json.loads(mcp.get("task_toggle_waiting")(path=path, section_start=0, section_index=1))
        assert data["tasks"][0]["priority"] == "waiting"
        assert "- [ ] Take out trash >>" in (vault / "Home.md").read_text(encoding="utf-8")


class TestCacheStatus:
    def test_status(self, setup):
        mcp, _, vault = setup
        data = json.loads(mcp.get("cache_status")())
        assert data["state"] == "warm"
        assert data["files_indexed"] == 1
        assert data["tasks_indexed"] == 3
        assert data["vault_root"] == str(vault)
