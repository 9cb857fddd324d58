# src/taskgraph/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the database, both stores and the task service into AppState.
"""

from __future__ import annotations

import logging
import time

from ..config import get_settings
from ..core.ports import Clock
from ..core.state import AppState
from ..tasks.db import Database
from ..tasks.dependency_store import DependencyStore
from ..tasks.task_service import TaskService
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    clock: Clock = time.time,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the clock) injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    db = Database(settings.db_path, timeout=getattr(settings, "db_timeout", 30.0))
    service = TaskService(
        TaskStore(db, clock=clock),
        DependencyStore(db, clock=clock),
        snapshot=db.snapshot,
        clock=clock,
        reject_cycles=bool(getattr(settings, "reject_cycles", False)),
    )
    logger.debug("State wired db=%s reject_cycles=%s", db.path, getattr(settings, "reject_cycles", False))
    return AppState(settings=settings, db=db, service=service)
