# src/taskgraph/tasks/dependency_store.py

from __future__ import annotations

import logging
import sqlite3
import time

from ..core.ports import Clock
from ..errors import CycleError, NotFoundError
from .db import Database
from .task_models import TaskDependency

logger = logging.getLogger(__name__)


class DependencyStore:
    """
    SQLite repository for directed edges "task_id depends on depends_on_task_id".

    Never cascades into tasks. Edges disappear with their endpoint tasks through
    TaskStore.delete (and the ON DELETE CASCADE foreign keys).
    """

    def __init__(self, db: Database, *, clock: Clock = time.time) -> None:
        self._db = db
        self._clock = clock

    # ---- low-level helpers ----

    @staticmethod
    def _row_to_dependency(row: sqlite3.Row) -> TaskDependency:
        return TaskDependency(
            id=int(row["id"]),
            task_id=int(row["task_id"]),
            depends_on_task_id=int(row["depends_on_task_id"]),
            created_at=float(row["created_at"]),
        )

    @staticmethod
    def _task_exists(conn: sqlite3.Connection, task_id: int) -> bool:
        row = conn.execute("SELECT 1 FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
        return row is not None

    @staticmethod
    def _reaches(conn: sqlite3.Connection, *, start: int, target: int) -> bool:
        """True if `target` is reachable from `start` by following existing edges."""
        row = conn.execute(
            """
            WITH RECURSIVE reach(id) AS (
                SELECT ?
                UNION
                SELECT d.depends_on_task_id
                FROM task_dependencies d
                JOIN reach r ON d.task_id = r.id
            )
            SELECT 1 FROM reach WHERE id = ? LIMIT 1
            """,
            (int(start), int(target)),
        ).fetchone()
        return row is not None

    # ---- public API ----

    def create(
        self,
        task_id: int,
        depends_on_task_id: int,
        *,
        reject_cycles: bool = False,
    ) -> TaskDependency:
        """
        Insert an edge after checking both endpoints exist.

        The dependent is checked first, so it is the one reported when both are
        missing. If an endpoint is deleted between the check and the insert, the
        foreign key rejects the row and sqlite3.IntegrityError propagates.

        With reject_cycles=True the reachability check runs in the same
        transaction as the insert.
        """
        now = self._clock()

        with self._db.transaction() as conn:
            for tid in (task_id, depends_on_task_id):
                if not self._task_exists(conn, tid):
                    raise NotFoundError("task", tid)

            if reject_cycles and self._reaches(conn, start=depends_on_task_id, target=task_id):
                raise CycleError(task_id, depends_on_task_id)

            cur = conn.execute(
                """
                INSERT INTO task_dependencies(task_id, depends_on_task_id, created_at)
                VALUES (?, ?, ?)
                """,
                (int(task_id), int(depends_on_task_id), now),
            )
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for task_dependencies insert")

        dep = TaskDependency(
            id=int(rowid),
            task_id=int(task_id),
            depends_on_task_id=int(depends_on_task_id),
            created_at=now,
        )
        logger.debug(
            "Dependency created id=%s task_id=%s depends_on=%s",
            dep.id,
            dep.task_id,
            dep.depends_on_task_id,
        )
        return dep

    def get(self, dependency_id: int) -> TaskDependency:
        with self._db.snapshot() as conn:
            row = conn.execute(
                "SELECT * FROM task_dependencies WHERE id = ?", (int(dependency_id),)
            ).fetchone()
        if row is None:
            raise NotFoundError("dependency", dependency_id)
        return self._row_to_dependency(row)

    def list_all(self, *, conn: sqlite3.Connection | None = None) -> list[TaskDependency]:
        with self._db.snapshot(conn) as c:
            rows = c.execute("SELECT * FROM task_dependencies ORDER BY id ASC").fetchall()
        return [self._row_to_dependency(r) for r in rows]

    def list_for_task(
        self,
        task_id: int,
        *,
        conn: sqlite3.Connection | None = None,
    ) -> tuple[list[TaskDependency], list[TaskDependency]]:
        """Return (dependencies, dependents): outgoing and incoming edges of one task."""
        with self._db.snapshot(conn) as c:
            rows = c.execute(
                """
                SELECT *
                FROM task_dependencies
                WHERE task_id = ? OR depends_on_task_id = ?
                ORDER BY id ASC
                """,
                (int(task_id), int(task_id)),
            ).fetchall()

        edges = [self._row_to_dependency(r) for r in rows]
        # A self-loop row (never created through TaskService) shows up on both sides.
        dependencies = [e for e in edges if e.task_id == task_id]
        dependents = [e for e in edges if e.depends_on_task_id == task_id]
        return dependencies, dependents

    def delete(self, dependency_id: int) -> bool:
        with self._db.transaction() as conn:
            cur = conn.execute("DELETE FROM task_dependencies WHERE id = ?", (int(dependency_id),))
            removed = cur.rowcount == 1
        if removed:
            logger.debug("Dependency deleted id=%s", dependency_id)
        return removed
