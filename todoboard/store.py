"""
Todo board storage backend (SQLite).

Two independent collections live in one database file:

    tasks  - one row per Task, keyed by its generated id
    users  - one JSON document per user profile, keyed by its generated id

Every mutating call is a single statement committed before it returns, so a
task is always either fully present or absent. Driver failures surface as
StoreUnavailable.
"""
import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .errors import InvalidIdentifier, MissingField, NotFound, StoreUnavailable
from .schema import REQUIRED_FIELDS, Task, is_valid_task_id, make_task_id, utc_now

logger = logging.getLogger(__name__)

DEFAULT_DB = Path.home() / ".local" / "share" / "todoboard" / "todos.db"


@contextmanager
def _connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """Open a WAL-mode connection; commit on success, always close."""
    conn = sqlite3.connect(db_path)
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode = WAL")
        with conn:
            yield conn
    finally:
        conn.close()


def _require(value: Any, name: str) -> str:
    if value is None or str(value).strip() == "":
        raise MissingField(name)
    return str(value)


def _check_id(task_id: Any) -> str:
    if not is_valid_task_id(task_id):
        raise InvalidIdentifier(task_id)
    return task_id


class TaskStore:
    """SQLite-backed accessor for the tasks collection."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize store and create tables if needed."""
        if db_path is None:
            db_path = str(DEFAULT_DB)
        self.db_path = db_path
        try:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailable("initialize store", str(e)) from e
        self._init_schema()

    def _init_schema(self):
        """Create tables if they don't exist."""
        try:
            with _connect(self.db_path) as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS tasks (
                        id TEXT PRIMARY KEY,
                        title TEXT NOT NULL,
                        description TEXT NOT NULL,
                        category TEXT NOT NULL,
                        email TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                """)
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS users (
                        id TEXT PRIMARY KEY,
                        data TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                """)
                conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_category ON tasks(category)")
        except sqlite3.Error as e:
            raise StoreUnavailable("initialize store", str(e)) from e

    def list_all(self) -> List[Task]:
        """List all tasks in insertion order."""
        try:
            with _connect(self.db_path) as conn:
                rows = conn.execute("SELECT * FROM tasks ORDER BY rowid ASC").fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error fetching tasks: {e}")
            raise StoreUnavailable("fetch tasks", str(e)) from e
        return [self._row_to_task(row) for row in rows]

    def get_one(self, task_id: str) -> Optional[Task]:
        """Retrieve a task by id, or None if absent."""
        _check_id(task_id)
        try:
            with _connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT * FROM tasks WHERE id = ?", (task_id,)
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error fetching task {task_id}: {e}")
            raise StoreUnavailable("fetch task", str(e)) from e
        return self._row_to_task(row) if row else None

    def create(self, title: Any, description: Any, category: Any, email: Any) -> Task:
        """Insert a new task. Fields are checked in title, description, category, email order."""
        values = dict(zip(REQUIRED_FIELDS, (title, description, category, email)))
        for name in REQUIRED_FIELDS:
            values[name] = _require(values[name], name)

        task = Task(id=make_task_id(), created_at=utc_now(), **values)
        try:
            with _connect(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT INTO tasks (id, title, description, category, email, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (task.id, task.title, task.description, task.category,
                     task.email, task.created_at.isoformat()),
                )
        except sqlite3.Error as e:
            logger.error(f"Error adding task: {e}")
            raise StoreUnavailable("add task", str(e)) from e
        return task

    def update_category(self, task_id: str, category: Any) -> None:
        """Change one task's category; no other column is touched."""
        category = _require(category, "category")
        _check_id(task_id)
        try:
            with _connect(self.db_path) as conn:
                cur = conn.execute(
                    "UPDATE tasks SET category = ? WHERE id = ?", (category, task_id)
                )
                matched = cur.rowcount
        except sqlite3.Error as e:
            logger.error(f"Error updating task {task_id}: {e}")
            raise StoreUnavailable("update task", str(e)) from e
        if matched == 0:
            raise NotFound(task_id)

    def delete(self, task_id: str) -> None:
        """Remove exactly one task."""
        _check_id(task_id)
        try:
            with _connect(self.db_path) as conn:
                cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
                deleted = cur.rowcount
        except sqlite3.Error as e:
            logger.error(f"Error deleting task {task_id}: {e}")
            raise StoreUnavailable("delete task", str(e)) from e
        if deleted != 1:
            raise NotFound(task_id)

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        """Convert a database row to a Task object."""
        return Task.from_dict(dict(row))


class UserStore:
    """Create-only accessor for free-form user profiles."""

    def __init__(self, tasks: TaskStore):
        # Shares the database file (and schema) with the task collection.
        self.db_path = tasks.db_path

    def create(self, profile: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a profile document and return the insert result."""
        if not isinstance(profile, dict):
            raise MissingField("body")
        user_id = make_task_id()
        try:
            with _connect(self.db_path) as conn:
                conn.execute(
                    "INSERT INTO users (id, data, created_at) VALUES (?, ?, ?)",
                    (user_id, json.dumps(profile, default=str), utc_now().isoformat()),
                )
        except sqlite3.Error as e:
            logger.error(f"Error adding user: {e}")
            raise StoreUnavailable("add user", str(e)) from e
        return {"acknowledged": True, "insertedId": user_id}
