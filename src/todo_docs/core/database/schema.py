"""SQLite schema creation and migration for todo-docs."""

import sqlite3

SCHEMA_VERSION = 1

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS projects (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    created_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS todo_documents (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    todo_count INTEGER NOT NULL DEFAULT 0,
    completed_count INTEGER NOT NULL DEFAULT 0,
    project_id INTEGER,
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL,
    FOREIGN KEY (project_id) REFERENCES projects(id)
);

CREATE INDEX IF NOT EXISTS idx_documents_updated ON todo_documents(updated_at DESC);

CREATE TABLE IF NOT EXISTS todo_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    document_id INTEGER NOT NULL,
    node_id TEXT NOT NULL,
    project_id INTEGER,
    text TEXT NOT NULL DEFAULT '',
    is_completed INTEGER NOT NULL DEFAULT 0,
    sort_order INTEGER NOT NULL,
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL,
    completed_at INTEGER,
    source_chat_id TEXT,
    source_contact_id TEXT,
    source_contact_name TEXT,
    FOREIGN KEY (document_id) REFERENCES todo_documents(id)
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_items_document_node ON todo_items(document_id, node_id);
CREATE INDEX IF NOT EXISTS idx_items_document_order ON todo_items(document_id, sort_order);
CREATE INDEX IF NOT EXISTS idx_items_completed ON todo_items(is_completed, completed_at);
CREATE INDEX IF NOT EXISTS idx_items_project ON todo_items(project_id);

CREATE TABLE IF NOT EXISTS completed_todos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    original_todo_id INTEGER NOT NULL,
    original_document_id INTEGER NOT NULL,
    original_node_id TEXT NOT NULL,
    text TEXT NOT NULL,
    project_id INTEGER,
    project_name TEXT,
    document_title TEXT,
    todo_created_at INTEGER NOT NULL,
    completed_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_completed_at ON completed_todos(completed_at DESC);
CREATE INDEX IF NOT EXISTS idx_completed_project ON completed_todos(project_id, completed_at DESC);

CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes."""
    conn.executescript(_SCHEMA_SQL)
    conn.execute(
        "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
        ("schema_version", str(SCHEMA_VERSION)),
    )
    conn.commit()


def get_schema_version(conn: sqlite3.Connection) -> int | None:
    """Return the current schema version, or None if metadata table doesn't exist."""
    try:
        row = conn.execute(
            "SELECT value FROM metadata WHERE key = 'schema_version'"
        ).fetchone()
    except sqlite3.OperationalError:
        return None
    return int(row[0]) if row else None


def migrate_schema(conn: sqlite3.Connection) -> None:
    """Create or migrate the database schema to the latest version."""
    version = get_schema_version(conn)
    if version is None:
        create_schema(conn)
