# src/taskgraph/tasks/status.py

"""
Status derivation over a materialized task graph.

Everything here is pure: no storage access, no clock reads. Callers pass `now`
explicitly, so the same graph can be evaluated at any point in time and from
any number of threads.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .task_models import Task, TaskFilter, TaskStatus, TaskWithDependencies

TaskIndex = Mapping[int, Task]


def index_tasks(all_tasks: Iterable[Task] | TaskIndex) -> TaskIndex:
    if isinstance(all_tasks, Mapping):
        return all_tasks
    return {t.id: t for t in all_tasks}


def blocking_prerequisites(
    task: TaskWithDependencies,
    all_tasks: Iterable[Task] | TaskIndex,
) -> list[int]:
    """
    Ids of the incomplete prerequisites of `task`, in edge order, without duplicates.

    Edges whose prerequisite no longer exists are ignored.
    """
    by_id = index_tasks(all_tasks)
    blocking: dict[int, None] = {}
    for edge in task.dependencies:
        prereq = by_id.get(edge.depends_on_task_id)
        if prereq is not None and not prereq.is_completed:
            blocking[prereq.id] = None
    return list(blocking)


def derive_status(
    task: TaskWithDependencies,
    all_tasks: Iterable[Task] | TaskIndex,
    *,
    now: float,
) -> TaskStatus:
    """
    completed > blocked > overdue > ready.

    - completed: the task itself is done
    - blocked: some prerequisite exists and is not done
    - overdue: due_date is strictly before `now`
    - ready: anything else
    """
    if task.is_completed:
        return TaskStatus.COMPLETED

    by_id = index_tasks(all_tasks)
    for edge in task.dependencies:
        prereq = by_id.get(edge.depends_on_task_id)
        if prereq is not None and not prereq.is_completed:
            return TaskStatus.BLOCKED

    if task.due_date is not None and task.due_date < now:
        return TaskStatus.OVERDUE

    return TaskStatus.READY


@dataclass(frozen=True, slots=True)
class StatusSummary:
    total: int
    completed: int
    blocked: int
    overdue: int
    ready: int


def summarize(tasks: Iterable[TaskWithDependencies], *, now: float) -> StatusSummary:
    tasks = list(tasks)
    by_id = index_tasks(tasks)
    counts = {s: 0 for s in TaskStatus}
    for t in tasks:
        counts[derive_status(t, by_id, now=now)] += 1
    return StatusSummary(
        total=len(tasks),
        completed=counts[TaskStatus.COMPLETED],
        blocked=counts[TaskStatus.BLOCKED],
        overdue=counts[TaskStatus.OVERDUE],
        ready=counts[TaskStatus.READY],
    )


def filter_tasks(
    tasks: Iterable[TaskWithDependencies],
    task_filter: TaskFilter = TaskFilter.ALL,
) -> list[TaskWithDependencies]:
    """Keep tasks by completion flag: all, pending (not completed) or completed."""
    if task_filter is TaskFilter.COMPLETED:
        return [t for t in tasks if t.is_completed]
    if task_filter is TaskFilter.PENDING:
        return [t for t in tasks if not t.is_completed]
    return list(tasks)
