"""Rich-text todo documents with a synchronized task index."""

from todo_docs.core.store.sqlite_store import SqliteTaskStore
from todo_docs.core.sync.reconciler import save_document_content
from todo_docs.errors import DocumentNotFoundError, InvalidContentError, TodoDocsError
from todo_docs.protocols import TaskStoreProtocol

__all__ = [
    "DocumentNotFoundError",
    "InvalidContentError",
    "SqliteTaskStore",
    "TaskStoreProtocol",
    "TodoDocsError",
    "save_document_content",
]
