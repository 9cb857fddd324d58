# src/taskgraph/tasks/task_store.py

from __future__ import annotations

import logging
import sqlite3
import time
from typing import Any

from ..core.ports import Clock
from ..errors import NotFoundError
from .db import Database
from .task_models import UNSET, Task, clean_title

logger = logging.getLogger(__name__)

# Smallest step updated_at advances by when the clock has not moved.
_MIN_TICK = 1e-6


class TaskStore:
    """
    SQLite task repository.

    - ids come from AUTOINCREMENT; callers never supply them
    - update() is one UPDATE statement, so a patch is never half-applied
    - delete() sweeps the task's edges in the same transaction as the row
    """

    def __init__(self, db: Database, *, clock: Clock = time.time) -> None:
        self._db = db
        self._clock = clock

    # ---- low-level helpers ----

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            title=str(row["title"]),
            due_date=float(row["due_date"]) if row["due_date"] is not None else None,
            is_completed=bool(row["is_completed"]),
            created_at=float(row["created_at"]),
            updated_at=float(row["updated_at"]),
        )

    @staticmethod
    def _due_to_db(due_date: Any) -> float | None:
        return None if due_date is None else float(due_date)

    def _fetch(self, conn: sqlite3.Connection, task_id: int) -> Task | None:
        row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
        return self._row_to_task(row) if row else None

    # ---- public API ----

    def create(self, title: str, due_date: float | None = None) -> Task:
        title = clean_title(title)
        due = self._due_to_db(due_date)
        now = self._clock()

        with self._db.transaction() as conn:
            cur = conn.execute(
                """
                INSERT INTO tasks(title, due_date, is_completed, created_at, updated_at)
                VALUES (?, ?, 0, ?, ?)
                """,
                (title, due, now, now),
            )
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task = self._fetch(conn, int(rowid))

        if task is None:
            raise RuntimeError(f"Inserted task {rowid} could not be read back")
        logger.debug("Task created id=%s due_date=%s", task.id, task.due_date)
        return task

    def get(self, task_id: int, *, conn: sqlite3.Connection | None = None) -> Task:
        with self._db.snapshot(conn) as c:
            task = self._fetch(c, task_id)
        if task is None:
            raise NotFoundError("task", task_id)
        return task

    def list_all(self, *, conn: sqlite3.Connection | None = None) -> list[Task]:
        with self._db.snapshot(conn) as c:
            rows = c.execute("SELECT * FROM tasks ORDER BY id ASC").fetchall()
        return [self._row_to_task(r) for r in rows]

    def update(
        self,
        task_id: int,
        *,
        title: str | Any = UNSET,
        due_date: float | None | Any = UNSET,
        is_completed: bool | Any = UNSET,
    ) -> Task:
        """
        Apply only the provided fields, then refresh updated_at.

        updated_at always moves strictly forward, even for an empty patch.
        """
        fields: list[str] = []
        params: list[Any] = []

        if title is not UNSET:
            fields.append("title = ?")
            params.append(clean_title(title))

        if due_date is not UNSET:
            fields.append("due_date = ?")
            params.append(self._due_to_db(due_date))

        if is_completed is not UNSET:
            fields.append("is_completed = ?")
            params.append(1 if is_completed else 0)

        changed = list(fields)

        fields.append("updated_at = MAX(?, updated_at + ?)")
        params.extend([self._clock(), _MIN_TICK])
        params.append(int(task_id))

        sql = f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?"

        with self._db.transaction() as conn:
            cur = conn.execute(sql, params)
            if cur.rowcount != 1:
                raise NotFoundError("task", task_id)
            task = self._fetch(conn, task_id)

        if task is None:
            raise NotFoundError("task", task_id)
        logger.debug("Task updated id=%s fields=%s", task_id, changed)
        return task

    def delete(self, task_id: int) -> bool:
        """
        Remove the task and every edge that names it, as one transaction.

        Returns False if there was no such task.
        """
        with self._db.transaction() as conn:
            edges = conn.execute(
                "DELETE FROM task_dependencies WHERE task_id = ? OR depends_on_task_id = ?",
                (int(task_id), int(task_id)),
            ).rowcount
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
            removed = cur.rowcount == 1

        if removed:
            logger.debug("Task deleted id=%s edges_removed=%s", task_id, edges)
        return removed
