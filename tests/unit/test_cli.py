"""Tests for the todo-docs CLI."""

import json
from pathlib import Path

from click.testing import Result
from typer.testing import CliRunner

from tests.unit.builders import dumps, task, task_list
from todo_docs.cli import app

runner = CliRunner()


def _invoke(data_dir: Path, *args: str, stdin: str | None = None) -> Result:
    return runner.invoke(app, [*args, "--data-dir", str(data_dir)], input=stdin)


def test_create_and_list_documents(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "create", "Groceries")
    assert result.exit_code == 0, result.output
    assert "Created document 1: Groceries" in result.stdout
    assert (tmp_path / "todos.db").exists()

    listing = _invoke(tmp_path, "documents", "--json")
    assert listing.exit_code == 0
    assert json.loads(listing.stdout)["documents"][0]["title"] == "Groceries"


def test_save_from_file_and_show(tmp_path: Path) -> None:
    _invoke(tmp_path, "create", "Groceries")
    content_file = tmp_path / "content.json"
    content_file.write_text(dumps(task_list(task("a", "Milk"), task("b", "Eggs", checked=True))))

    saved = _invoke(tmp_path, "save", "1", str(content_file))
    assert saved.exit_code == 0, saved.output
    assert "Saved: 2 tasks, 1 completed" in saved.stdout

    shown = _invoke(tmp_path, "show", "1")
    assert shown.exit_code == 0
    assert "# Groceries" in shown.stdout
    assert "- [x] Eggs" in shown.stdout


def test_save_from_stdin(tmp_path: Path) -> None:
    _invoke(tmp_path, "create", "Doc")
    result = _invoke(tmp_path, "save", "1", "-", stdin=dumps(task_list(task("a", "A"))))
    assert result.exit_code == 0, result.output
    assert "Saved: 1 tasks, 0 completed" in result.stdout


def test_save_invalid_content_exits_with_error(tmp_path: Path) -> None:
    _invoke(tmp_path, "create", "Doc")
    result = _invoke(tmp_path, "save", "1", "-", stdin="not json")
    assert result.exit_code == 1


def test_show_missing_document(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "show", "7")
    assert result.exit_code == 1
    assert "Document not found" in result.output


def test_toggle_and_list_todos(tmp_path: Path) -> None:
    _invoke(tmp_path, "create", "Doc")
    _invoke(tmp_path, "save", "1", "-", stdin=dumps(task_list(task("a", "Write report"))))

    toggled = _invoke(tmp_path, "toggle", "1")
    assert toggled.exit_code == 0, toggled.output
    assert "Task 1 is now done" in toggled.stdout

    done = _invoke(tmp_path, "todos", "--completed", "--json")
    assert [t["text"] for t in json.loads(done.stdout)["results"]] == ["Write report"]

    pending = _invoke(tmp_path, "todos", "--pending", "--json")
    assert json.loads(pending.stdout)["total"] == 0


def test_quick_and_stats(tmp_path: Path) -> None:
    quick = _invoke(tmp_path, "quick", "Call Bob", "--contact", "Alice")
    assert quick.exit_code == 0, quick.output

    stats = _invoke(tmp_path, "stats", "--json")
    data = json.loads(stats.stdout)
    assert (data["total"], data["pending"]) == (1, 1)
    assert data["history"]["total"] == 0


def test_project_assign(tmp_path: Path) -> None:
    _invoke(tmp_path, "create", "Doc")
    created = _invoke(tmp_path, "project", "Home")
    assert "Created project 1: Home" in created.stdout

    assigned = _invoke(tmp_path, "assign", "1", "--project", "1")
    assert assigned.exit_code == 0, assigned.output

    listing = _invoke(tmp_path, "documents", "--json")
    assert json.loads(listing.stdout)["documents"][0]["project_id"] == 1


def test_rename_missing_document_exits_1(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "rename", "3", "New")
    assert result.exit_code == 1


def test_save_missing_file_exits_1(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "save", "1", str(tmp_path / "missing.json"))
    assert result.exit_code == 1
    assert "Cannot read" in result.output
    assert not (tmp_path / "todos.db").exists()
