# src/taskgraph/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task service.

The service depends on Protocols instead of the SQLite stores.
This keeps storage swappable and makes orchestration easy to test with fakes.
"""

from typing import Any, Protocol

from ..tasks.task_models import Task, TaskDependency


class Clock(Protocol):
    """Returns "now" as epoch seconds. time.time satisfies it."""

    def __call__(self) -> float: ...


class TaskRepo(Protocol):
    def create(self, title: str, due_date: float | None = None) -> Task: ...
    def get(self, task_id: int, *, conn: Any | None = None) -> Task: ...
    def list_all(self, *, conn: Any | None = None) -> list[Task]: ...
    def update(
            self,
            task_id: int,
            *,
            title: Any = ...,
            due_date: Any = ...,
            is_completed: Any = ...,
    ) -> Task: ...
    def delete(self, task_id: int) -> bool: ...


class DependencyRepo(Protocol):
    def create(
            self,
            task_id: int,
            depends_on_task_id: int,
            *,
            reject_cycles: bool = False,
    ) -> TaskDependency: ...
    def get(self, dependency_id: int) -> TaskDependency: ...
    def list_all(self, *, conn: Any | None = None) -> list[TaskDependency]: ...
    def list_for_task(
            self,
            task_id: int,
            *,
            conn: Any | None = None,
    ) -> tuple[list[TaskDependency], list[TaskDependency]]: ...
    def delete(self, dependency_id: int) -> bool: ...
