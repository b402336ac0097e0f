"""Create, list, rename, reassign and delete todo documents."""

import json

from loguru import logger

from todo_docs.core.clock import now_ms
from todo_docs.core.projects import get_project
from todo_docs.core.store.sqlite_store import SqliteTaskStore
from todo_docs.core.tree.editing import EMPTY_DOCUMENT
from todo_docs.errors import DocumentNotFoundError, ProjectNotFoundError
from todo_docs.models.todo import TodoDocument


def empty_content() -> str:
    """Serialized content of a new document: one empty paragraph."""
    return json.dumps(EMPTY_DOCUMENT)


def create_document(
    store: SqliteTaskStore,
    title: str,
    *,
    project_id: int | None = None,
    now: int | None = None,
) -> TodoDocument:
    """Create an empty document with zero task counts."""
    now = now_ms() if now is None else now
    with store.transaction():
        if project_id is not None and get_project(store, project_id) is None:
            raise ProjectNotFoundError(project_id)
        document_id = store.insert_document(
            {
                "title": title,
                "content": empty_content(),
                "todo_count": 0,
                "completed_count": 0,
                "project_id": project_id,
                "created_at": now,
                "updated_at": now,
            }
        )
    logger.debug("Created document {} ({!r})", document_id, title)
    return require_document(store, document_id)


def require_document(store: SqliteTaskStore, document_id: int) -> TodoDocument:
    """Return a document, raising DocumentNotFoundError if it does not exist."""
    document = store.get_document(document_id)
    if document is None:
        raise DocumentNotFoundError(document_id)
    return document


def list_documents(store: SqliteTaskStore) -> list[TodoDocument]:
    """List documents, most recently updated first."""
    return store.list_documents()


def update_document_title(store: SqliteTaskStore, document_id: int, title: str) -> None:
    with store.transaction():
        require_document(store, document_id)
        store.patch_document(document_id, {"title": title, "updated_at": now_ms()})


def update_document_project(
    store: SqliteTaskStore,
    document_id: int,
    project_id: int | None,
) -> int:
    """Assign a document to a project (or none) and copy the assignment to its tasks.

    Returns:
        Number of task records updated.
    """
    now = now_ms()
    with store.transaction():
        require_document(store, document_id)
        if project_id is not None and get_project(store, project_id) is None:
            raise ProjectNotFoundError(project_id)

        store.patch_document(document_id, {"project_id": project_id, "updated_at": now})
        items = store.list_tasks(document_id)
        for item in items:
            store.patch_task(item.id, {"project_id": project_id, "updated_at": now})

    logger.debug(
        "Assigned document {} to project {} ({} tasks)", document_id, project_id, len(items)
    )
    return len(items)


def delete_document(store: SqliteTaskStore, document_id: int) -> int:
    """Delete a document and all of its task records.

    Returns:
        Number of task records deleted.
    """
    with store.transaction():
        require_document(store, document_id)
        items = store.list_tasks(document_id)
        for item in items:
            store.delete_task(item.id)
        store.delete_document(document_id)

    logger.info("Deleted document {} and {} tasks", document_id, len(items))
    return len(items)
