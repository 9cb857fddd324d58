# src/taskgraph/errors.py

"""
Error taxonomy raised by the task graph core.

- ValidationError: caller input violates a static rule (empty title, self-dependency).
- NotFoundError: a referenced id does not exist right now.

Storage failures (sqlite3.Error) are not wrapped; they reach the caller as-is.
"""

from __future__ import annotations


class TaskGraphError(Exception):
    """Base class for classified task graph errors."""


class ValidationError(TaskGraphError, ValueError):
    pass


class CycleError(ValidationError):
    def __init__(self, task_id: int, depends_on_task_id: int) -> None:
        super().__init__(
            f"Task {depends_on_task_id} already depends on task {task_id}; "
            "adding this dependency would create a cycle"
        )
        self.task_id = task_id
        self.depends_on_task_id = depends_on_task_id


class NotFoundError(TaskGraphError, LookupError):
    def __init__(self, kind: str, entity_id: int) -> None:
        super().__init__(f"{kind.capitalize()} with id {entity_id} not found")
        self.kind = kind
        self.entity_id = entity_id
