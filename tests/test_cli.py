"""
Tests for cli.py.

Runs main() with a patched argv against a temp vault and checks stdout.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

import cli


def _make_vault(tmp_path: Path) -> Path:
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / "Today.md").write_text(
        "# Errands\n"
        "- [ ] #task Buy milk !! 📅 2024-01-10\n"
        "- [ ] #task Post letter\n"
        "- [x] #task Book dentist ✅ 2024-01-02\n",
        encoding="utf-8",
    )
    return vault


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["cli.py", *argv])
    cli.main()


class TestQueryCommand:
    def test_prints_tasks_and_count(self, tmp_path, monkeypatch, capsys):
        vault = _make_vault(tmp_path)
        _run(monkeypatch, "--vault", str(vault), "--global-filter", "#task",
             "--remove-global-filter", "query", "not done\nsort by priority")
        lines = capsys.readouterr().out.splitlines()
        assert lines == [
            "- [ ] Buy milk !! 📅 2024-01-10 (Today > Errands)",
            "- [ ] Post letter (Today > Errands)",
            "2 tasks",
        ]

    def test_global_filter_settings_from_environment(self, tmp_path, monkeypatch, capsys):
        vault = _make_vault(tmp_path)
        monkeypatch.setenv("TASKS_GLOBAL_FILTER", "#task")
        monkeypatch.setenv("TASKS_REMOVE_GLOBAL_FILTER", "true")
        _run(monkeypatch, "--vault", str(vault), "query", "done\nhide backlinks\nhide task count")
        assert capsys.readouterr().out.splitlines() == ["- [x] Book dentist ✅ 2024-01-02"]

    def test_query_from_file(self, tmp_path, monkeypatch, capsys):
        vault = _make_vault(tmp_path)
        query_file = tmp_path / "done.query"
        query_file.write_text("done\nhide backlinks\nhide task count\n", encoding="utf-8")
        _run(monkeypatch, "--vault", str(vault), "query", "--file", str(query_file))
        assert capsys.readouterr().out.splitlines() == ["- [x] #task Book dentist ✅ 2024-01-02"]

    def test_bad_query_exits(self, tmp_path, monkeypatch, capsys):
        vault = _make_vault(tmp_path)
        with pytest.raises(SystemExit):
            _run(monkeypatch, "--vault", str(vault), "query", "bogus line")
        assert "Tasks query: do not understand query: bogus line" in capsys.readouterr().out


class TestToggleCommand:
    def test_toggle_writes_file(self, tmp_path, monkeypatch, capsys):
        vault = _make_vault(tmp_path)
        note = vault / "Today.md"
        _run(monkeypatch, "--vault", str(vault), "toggle", str(note), "0", "1")
        assert capsys.readouterr().out.startswith("- [x] #task Post letter ✅ ")
        assert "- [x] #task Post letter ✅ " in note.read_text(encoding="utf-8")

    def test_unknown_task_exits(self, tmp_path, monkeypatch):
        vault = _make_vault(tmp_path)
        with pytest.raises(SystemExit):
            _run(monkeypatch, "--vault", str(vault), "toggle", str(vault / "Today.md"), "0", "7")
