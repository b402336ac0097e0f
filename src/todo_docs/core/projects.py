"""Projects that documents and their tasks can be assigned to."""

from todo_docs.core.clock import now_ms
from todo_docs.core.store.sqlite_store import SqliteTaskStore
from todo_docs.models.todo import Project


def create_project(store: SqliteTaskStore, name: str) -> Project:
    now = now_ms()
    with store.transaction():
        cursor = store.conn.execute(
            "INSERT INTO projects (name, created_at) VALUES (?, ?)", (name, now)
        )
    return Project(id=cursor.lastrowid or 0, name=name, created_at=now)


def get_project(store: SqliteTaskStore, project_id: int) -> Project | None:
    row = store.conn.execute(
        "SELECT id, name, created_at FROM projects WHERE id = ?", (project_id,)
    ).fetchone()
    return Project(id=row[0], name=row[1], created_at=row[2]) if row else None


def list_projects(store: SqliteTaskStore) -> list[Project]:
    rows = store.conn.execute("SELECT id, name, created_at FROM projects ORDER BY name").fetchall()
    return [Project(id=r[0], name=r[1], created_at=r[2]) for r in rows]


def project_names(store: SqliteTaskStore) -> dict[int, str]:
    """Map project ids to names."""
    return {p.id: p.name for p in list_projects(store)}
