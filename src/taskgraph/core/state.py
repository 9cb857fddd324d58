# src/taskgraph/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.db import Database
from ..tasks.task_service import TaskService


@dataclass
class AppState:
    # Settings object (real Settings or a test namespace with the same attributes).
    settings: object

    db: Database
    service: TaskService
