"""Tests for domain models."""

import pytest

from todo_docs.models.node import TaskDescriptor, TreeNode
from todo_docs.models.todo import SyncResult, TodoItem


def test_tree_node_is_frozen() -> None:
    node = TreeNode(kind="paragraph")
    with pytest.raises(AttributeError):
        node.kind = "heading"  # type: ignore[misc]


def test_tree_node_is_task() -> None:
    assert TreeNode(kind="taskItem").is_task
    assert not TreeNode(kind="listItem").is_task


def test_task_descriptor_is_frozen() -> None:
    descriptor = TaskDescriptor(text="a", is_completed=False, order=0, node_id="n")
    with pytest.raises(AttributeError):
        descriptor.order = 1  # type: ignore[misc]


def test_todo_item_defaults() -> None:
    item = TodoItem(
        id=1, document_id=2, node_id="n", text="t", is_completed=False,
        sort_order=0, created_at=1, updated_at=1,
    )
    assert item.completed_at is None
    assert item.project_id is None
    assert item.source_contact_name is None


def test_sync_result_equality() -> None:
    assert SyncResult(todo_count=1, completed_count=0) == SyncResult(1, 0)
