"""Configuration constants for todo-docs."""

import os
from pathlib import Path

# Directory with the database. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/todo-docs").expanduser(),
    Path("~/.todo-docs").expanduser(),
    Path("~/.config/todo-docs").expanduser(),
]

# Environment variable overriding the data directory.
DATA_DIR_ENV = "TODO_DOCS_DIR"

DB_FILENAME = "todos.db"

# Environment variable setting the log level (e.g. WARNING); --verbose wins.
LOG_LEVEL_ENV = "TODO_DOCS_LOG_LEVEL"

# Document that receives tasks added outside the editor.
QUICK_TASKS_TITLE = "Quick Tasks"

RECENTLY_COMPLETED_DAYS = 7
RECENTLY_COMPLETED_LIMIT = 20
COMPLETED_HISTORY_LIMIT = 50
COMPLETED_STATS_DAYS = 30


def resolve_data_directory() -> Path:
    """Return the data directory: env override, first existing candidate, or the default."""
    env_dir = os.environ.get(DATA_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser()
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]
