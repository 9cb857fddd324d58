# src/taskgraph/tasks/db.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)


class Database:
    """
    SQLite database shared by TaskStore and DependencyStore.

    Both endpoints of an edge reference tasks(id) with ON DELETE CASCADE, and
    foreign keys are switched on for every connection, so the store itself is
    the final authority on referential integrity.

    Thread-safety:
    - every unit of work opens its own SQLite connection
    - writes run inside BEGIN IMMEDIATE, reads inside a deferred snapshot
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3", *, timeout: float = 30.0) -> None:
        self._db_path = Path(db_path)
        self._timeout = float(timeout)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("Database ready db=%s", self._db_path)

    @property
    def path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- connections ----

    def connect(self) -> sqlite3.Connection:
        # isolation_level=None: transactions are opened explicitly below.
        conn = sqlite3.connect(str(self._db_path), timeout=self._timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        conn.execute("PRAGMA foreign_keys=ON")
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Write transaction: BEGIN IMMEDIATE ... COMMIT, ROLLBACK on any error.

        Everything executed on the yielded connection becomes visible at once.
        """
        conn = self.connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    @contextlib.contextmanager
    def snapshot(self, conn: sqlite3.Connection | None = None) -> Iterator[sqlite3.Connection]:
        """
        Read snapshot: several SELECTs observe the same committed state.

        If `conn` is given the caller already owns a transaction; it is reused as-is.
        """
        if conn is not None:
            yield conn
            return

        conn = self.connect()
        try:
            conn.execute("BEGIN")
            try:
                yield conn
            finally:
                if conn.in_transaction:
                    conn.execute("COMMIT")
        finally:
            conn.close()

    # ---- schema ----

    def _ensure_schema(self) -> None:
        conn = self.connect()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL CHECK (length(trim(title)) > 0),
                    due_date REAL,
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL,
                    CHECK (updated_at >= created_at)
                )
                """
            )

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS task_dependencies (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    task_id INTEGER NOT NULL
                        REFERENCES tasks(id) ON DELETE CASCADE,
                    depends_on_task_id INTEGER NOT NULL
                        REFERENCES tasks(id) ON DELETE CASCADE,
                    created_at REAL NOT NULL
                )
                """
            )

            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_task_dependencies_task "
                "ON task_dependencies(task_id)"
            )
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_task_dependencies_depends_on "
                "ON task_dependencies(depends_on_task_id)"
            )
        finally:
            conn.close()
