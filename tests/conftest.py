# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskgraph.cli.bootstrap import create_initial_state
from taskgraph.core.state import AppState
from taskgraph.tasks.db import Database
from taskgraph.tasks.dependency_store import DependencyStore
from taskgraph.tasks.task_service import TaskService
from taskgraph.tasks.task_store import TaskStore

from .fakes import FakeClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskgraph-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        db_path=tmp_path / "tasks.sqlite3",
        db_timeout=5.0,
        reject_cycles=False,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def db(settings: SimpleNamespace) -> Database:
    return Database(settings.db_path, timeout=settings.db_timeout)


@pytest.fixture()
def task_store(db: Database, clock: FakeClock) -> TaskStore:
    return TaskStore(db, clock=clock)


@pytest.fixture()
def dependency_store(db: Database, clock: FakeClock) -> DependencyStore:
    return DependencyStore(db, clock=clock)


@pytest.fixture()
def service(
    db: Database,
    task_store: TaskStore,
    dependency_store: DependencyStore,
    clock: FakeClock,
) -> TaskService:
    """
    TaskService over real SQLite stores.

    NOTE: We keep real SQLite here because transactional behaviour (cascades,
    foreign keys) is part of what we want to test.
    """
    return TaskService(task_store, dependency_store, snapshot=db.snapshot, clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FakeClock) -> AppState:
    return create_initial_state(settings=settings, clock=clock)
