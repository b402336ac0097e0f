"""Tests for MCP tool core functions."""

import pytest

from tests.unit.builders import dumps, paragraph, task, task_list
from todo_docs.core.documents import create_document
from todo_docs.core.store.sqlite_store import SqliteTaskStore
from todo_docs.mcp.server import (
    todo_list_documents,
    todo_list_todos,
    todo_quick_add,
    todo_read_document,
    todo_save_document,
    todo_summary,
    todo_toggle,
)


@pytest.fixture
def document_id(store: SqliteTaskStore) -> int:
    document = create_document(store, "Groceries")
    result = todo_save_document(
        store,
        document_id=document.id,
        content=dumps(
            paragraph("Shopping"),
            task_list(
                task("a", "Milk #dairy"), task("b", "Eggs", checked=True), task("c", "Bread")
            ),
        ),
    )
    assert result == {"todo_count": 3, "completed_count": 1}
    return document.id


def test_todo_list_documents_returns_counts(store: SqliteTaskStore, document_id: int) -> None:
    result = todo_list_documents(store)
    assert result["count"] == 1
    assert result["total_todos"] == 3
    doc = result["documents"][0]
    assert (doc["id"], doc["title"], doc["completed_count"]) == (document_id, "Groceries", 1)
    assert doc["updated"].endswith("+00:00")


def test_todo_read_document_markdown(store: SqliteTaskStore, document_id: int) -> None:
    result = todo_read_document(store, document_id=document_id)
    assert "error" not in result
    assert result["content"] == "Shopping\n- [ ] Milk #dairy\n- [x] Eggs\n- [ ] Bread\n"


def test_todo_read_document_json_lists_records(store: SqliteTaskStore, document_id: int) -> None:
    result = todo_read_document(store, document_id=document_id, output_format="json")
    assert [t["node_id"] for t in result["todos"]] == ["a", "b", "c"]
    assert result["todos"][1]["completed"] is not None
    assert result["todos"][0]["completed"] is None


def test_todo_read_document_missing(store: SqliteTaskStore) -> None:
    assert todo_read_document(store, document_id=404) == {"error": "Document not found"}


def test_todo_save_document_reports_errors(store: SqliteTaskStore, document_id: int) -> None:
    missing = todo_save_document(store, document_id=404, content=dumps())
    assert missing == {"error": "Document not found"}

    invalid = todo_save_document(store, document_id=document_id, content="{oops")
    assert invalid["error"].startswith("Invalid JSON content")
    assert len(store.list_tasks(document_id)) == 3


def test_todo_list_todos_paginates(store: SqliteTaskStore, document_id: int) -> None:
    result = todo_list_todos(store, limit=2)
    assert (result["count"], result["total"], result["has_more"]) == (2, 3, True)
    assert result["next_offset"] == 2
    assert all(not r["is_completed"] for r in result["results"])

    rest = todo_list_todos(store, limit=2, offset=2)
    assert rest["count"] == 1
    assert rest["has_more"] is False
    assert "next_offset" not in rest
    assert rest["results"][0]["document"] == "Groceries"


def test_todo_list_todos_filters(store: SqliteTaskStore, document_id: int) -> None:
    tagged = todo_list_todos(store, hashtag="#dairy")
    assert [r["text"] for r in tagged["results"]] == ["Milk #dairy"]
    assert tagged["results"][0]["hashtags"] == ["#dairy"]

    assert todo_list_todos(store, project="none")["total"] == 3
    assert todo_list_todos(store, show_completed=True)["total"] == 1


def test_todo_list_todos_invalid_project(store: SqliteTaskStore) -> None:
    result = todo_list_todos(store, project="home")
    assert "error" in result
    assert result["results"] == []


def test_todo_toggle(store: SqliteTaskStore, document_id: int) -> None:
    todo_id = store.list_tasks(document_id)[0].id
    assert todo_toggle(store, todo_id=todo_id) == {"id": todo_id, "is_completed": True}
    assert todo_toggle(store, todo_id=999) == {"error": "Todo item not found"}


def test_todo_quick_add(store: SqliteTaskStore) -> None:
    result = todo_quick_add(store, text="Call Bob", contact_name="Alice")
    assert result["todo"]["text"] == "Call Bob"
    assert todo_list_documents(store)["documents"][0]["title"] == "Quick Tasks"

    assert todo_quick_add(store, text="   ") == {"error": "No task text provided."}


def test_todo_summary(store: SqliteTaskStore, document_id: int) -> None:
    result = todo_summary(store)
    assert (result["total"], result["completed"], result["pending"]) == (3, 1, 2)
    assert result["completion_rate"] == 33


def test_todo_quick_add_reports_undecodable_document(store: SqliteTaskStore) -> None:
    document = create_document(store, "Quick Tasks")
    with store.transaction():
        store.patch_document(document.id, {"content": "[]"})

    result = todo_quick_add(store, text="Call Bob")

    assert result["error"].startswith("Invalid JSON content")
    assert store.list_tasks(document.id) == []
