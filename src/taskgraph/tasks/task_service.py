# src/taskgraph/tasks/task_service.py

from __future__ import annotations

import contextlib
import logging
import time
from collections import defaultdict
from collections.abc import Callable
from typing import Any, ContextManager

from ..core.ports import Clock, DependencyRepo, TaskRepo
from ..errors import ValidationError
from .task_models import Task, TaskDependency, TaskPatch, TaskWithDependencies, clean_title

logger = logging.getLogger(__name__)


def _no_snapshot() -> ContextManager[Any]:
    return contextlib.nullcontext(None)


class TaskService:
    """
    Task-oriented operations over the two repositories.

    Cross-entity rules live here, not in the stores:
    - titles are trimmed and must be non-empty
    - a task cannot depend on itself
    - optionally (reject_cycles) a task cannot transitively depend on itself

    Status is not computed here. It depends on "now" and is derived by the
    reader from the returned graph (see tasks.status).
    """

    def __init__(
        self,
        tasks: TaskRepo,
        dependencies: DependencyRepo,
        *,
        snapshot: Callable[[], ContextManager[Any]] = _no_snapshot,
        clock: Clock = time.time,
        reject_cycles: bool = False,
    ) -> None:
        self._tasks = tasks
        self._dependencies = dependencies
        self._snapshot = snapshot
        self._clock = clock
        self._reject_cycles = reject_cycles

    def now(self) -> float:
        return self._clock()

    # ---- tasks ----

    def create_task(self, title: str, due_date: float | None = None) -> Task:
        task = self._tasks.create(clean_title(title), due_date)
        logger.info("Task %s created: %r", task.id, task.title)
        return task

    def update_task(self, task_id: int, patch: TaskPatch) -> Task:
        changes = patch.provided()
        if "title" in changes:
            changes["title"] = clean_title(changes["title"])
        task = self._tasks.update(task_id, **changes)
        logger.info("Task %s updated (%s)", task_id, ", ".join(changes) or "touch")
        return task

    def delete_task(self, task_id: int) -> bool:
        removed = self._tasks.delete(task_id)
        if removed:
            logger.info("Task %s deleted", task_id)
        else:
            logger.debug("Task %s not deleted: no such task", task_id)
        return removed

    def get_task(self, task_id: int) -> TaskWithDependencies:
        with self._snapshot() as conn:
            task = self._tasks.get(task_id, conn=conn)
            dependencies, dependents = self._dependencies.list_for_task(task_id, conn=conn)
        return TaskWithDependencies.compose(task, dependencies, dependents)

    def list_tasks(self) -> list[TaskWithDependencies]:
        """All tasks with their outgoing (dependencies) and incoming (dependents) edges."""
        with self._snapshot() as conn:
            tasks = self._tasks.list_all(conn=conn)
            edges = self._dependencies.list_all(conn=conn)

        outgoing: dict[int, list[TaskDependency]] = defaultdict(list)
        incoming: dict[int, list[TaskDependency]] = defaultdict(list)
        for edge in edges:
            outgoing[edge.task_id].append(edge)
            incoming[edge.depends_on_task_id].append(edge)

        return [
            TaskWithDependencies.compose(t, outgoing.get(t.id, []), incoming.get(t.id, []))
            for t in tasks
        ]

    def dependency_candidates(self, task_id: int) -> list[Task]:
        """Tasks that `task_id` could be made to depend on (everything but itself)."""
        with self._snapshot() as conn:
            self._tasks.get(task_id, conn=conn)
            tasks = self._tasks.list_all(conn=conn)
        return [t for t in tasks if t.id != task_id]

    # ---- dependencies ----

    def create_dependency(self, task_id: int, depends_on_task_id: int) -> TaskDependency:
        if task_id == depends_on_task_id:
            raise ValidationError(f"Task {task_id} cannot depend on itself")

        dep = self._dependencies.create(
            task_id,
            depends_on_task_id,
            reject_cycles=self._reject_cycles,
        )
        logger.info("Task %s now depends on task %s (edge %s)", task_id, depends_on_task_id, dep.id)
        return dep

    def delete_dependency(self, dependency_id: int) -> bool:
        removed = self._dependencies.delete(dependency_id)
        if removed:
            logger.info("Dependency %s deleted", dependency_id)
        return removed

    def list_dependencies(self) -> list[TaskDependency]:
        return self._dependencies.list_all()
