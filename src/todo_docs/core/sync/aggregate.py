"""Denormalized task counts stored on todo documents."""

from collections.abc import Sequence

from todo_docs.models.node import TaskDescriptor
from todo_docs.models.todo import SyncResult
from todo_docs.protocols import TaskStoreProtocol


def count_tasks(tasks: Sequence[TaskDescriptor]) -> SyncResult:
    """Count extracted tasks and how many of them are checked."""
    return SyncResult(
        todo_count=len(tasks),
        completed_count=sum(1 for t in tasks if t.is_completed),
    )


def update_document_aggregate(
    store: TaskStoreProtocol,
    document_id: int,
    *,
    content: str,
    result: SyncResult,
    now: int,
) -> None:
    """Store the submitted content verbatim together with its task counts."""
    store.patch_document(
        document_id,
        {
            "content": content,
            "todo_count": result.todo_count,
            "completed_count": result.completed_count,
            "updated_at": now,
        },
    )
