"""Exceptions raised by todo-docs operations."""


class TodoDocsError(Exception):
    """Base exception for todo-docs errors."""


class DocumentNotFoundError(TodoDocsError):
    """Raised when a todo document id does not resolve to a document."""

    def __init__(self, document_id: int) -> None:
        super().__init__("Document not found")
        self.document_id = document_id


class InvalidContentError(TodoDocsError):
    """Raised when submitted document content is not a JSON object."""

    def __init__(self, detail: str = "") -> None:
        msg = "Invalid JSON content"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class TodoNotFoundError(TodoDocsError):
    """Raised when a todo item id does not resolve to a record."""

    def __init__(self, todo_id: int) -> None:
        super().__init__("Todo item not found")
        self.todo_id = todo_id


class ProjectNotFoundError(TodoDocsError):
    """Raised when a project id does not resolve to a project."""

    def __init__(self, project_id: int) -> None:
        super().__init__("Project not found")
        self.project_id = project_id
