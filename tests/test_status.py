# tests/test_status.py

from __future__ import annotations

import pytest

from taskgraph.tasks.status import (
    blocking_prerequisites,
    derive_status,
    filter_tasks,
    summarize,
)
from taskgraph.tasks.task_models import (
    TaskDependency,
    TaskFilter,
    TaskStatus,
    TaskWithDependencies,
)

from .fakes import DAY, T0

NOW = T0 + 10 * DAY


def make_task(
    task_id: int,
    *,
    done: bool = False,
    due: float | None = None,
    depends_on: tuple[int, ...] = (),
) -> TaskWithDependencies:
    deps = [
        TaskDependency(id=task_id * 100 + i, task_id=task_id, depends_on_task_id=p, created_at=T0)
        for i, p in enumerate(depends_on)
    ]
    return TaskWithDependencies(
        id=task_id,
        title=f"task {task_id}",
        due_date=due,
        is_completed=done,
        created_at=T0,
        updated_at=T0,
        dependencies=deps,
    )


@pytest.mark.parametrize(
    "due, depends_on",
    [(None, ()), (NOW - DAY, ()), (NOW + DAY, (2,)), (NOW - DAY, (2,))],
)
def test_completed_wins_over_everything(due, depends_on) -> None:
    prereq = make_task(2)
    task = make_task(1, done=True, due=due, depends_on=depends_on)
    assert derive_status(task, [task, prereq], now=NOW) is TaskStatus.COMPLETED


def test_blocked_beats_overdue() -> None:
    prereq = make_task(2)
    task = make_task(1, due=NOW - DAY, depends_on=(2,))
    assert derive_status(task, [task, prereq], now=NOW) is TaskStatus.BLOCKED


def test_completed_prerequisite_does_not_block() -> None:
    prereq = make_task(2, done=True)
    task = make_task(1, depends_on=(2,))
    assert derive_status(task, [task, prereq], now=NOW) is TaskStatus.READY


def test_one_incomplete_prerequisite_is_enough_to_block() -> None:
    tasks = [make_task(2, done=True), make_task(3), make_task(1, depends_on=(2, 3))]
    assert derive_status(tasks[-1], tasks, now=NOW) is TaskStatus.BLOCKED
    assert blocking_prerequisites(tasks[-1], tasks) == [3]


def test_dangling_prerequisite_is_ignored() -> None:
    task = make_task(1, depends_on=(99,))
    assert derive_status(task, [task], now=NOW) is TaskStatus.READY
    assert blocking_prerequisites(task, [task]) == []


def test_duplicate_edges_do_not_change_status() -> None:
    done = make_task(2, done=True)
    once = make_task(1, depends_on=(2,))
    twice = make_task(1, depends_on=(2, 2))
    assert derive_status(once, [once, done], now=NOW) == derive_status(twice, [twice, done], now=NOW)

    pending = make_task(2)
    assert blocking_prerequisites(twice, [twice, pending]) == [2]


def test_overdue_is_strictly_before_now() -> None:
    assert derive_status(make_task(1, due=NOW - DAY), [], now=NOW) is TaskStatus.OVERDUE
    assert derive_status(make_task(1, due=NOW - 0.001), [], now=NOW) is TaskStatus.OVERDUE
    assert derive_status(make_task(1, due=NOW), [], now=NOW) is TaskStatus.READY
    assert derive_status(make_task(1, due=NOW + DAY), [], now=NOW) is TaskStatus.READY
    assert derive_status(make_task(1), [], now=NOW) is TaskStatus.READY


def test_self_loop_row_reads_as_blocked() -> None:
    # A cycle keeps every member blocked; TaskService refuses to create this.
    task = make_task(1, depends_on=(1,))
    assert derive_status(task, [task], now=NOW) is TaskStatus.BLOCKED


def test_summarize_and_filter() -> None:
    tasks = [
        make_task(1, done=True),
        make_task(2),
        make_task(3, depends_on=(2,)),
        make_task(4, due=NOW - DAY),
    ]

    s = summarize(tasks, now=NOW)
    assert (s.total, s.completed, s.ready, s.blocked, s.overdue) == (4, 1, 1, 1, 1)

    assert [t.id for t in filter_tasks(tasks, TaskFilter.COMPLETED)] == [1]
    assert [t.id for t in filter_tasks(tasks, TaskFilter.PENDING)] == [2, 3, 4]
    assert len(filter_tasks(tasks, TaskFilter.ALL)) == 4


def test_task_filter_parse_falls_back_to_all() -> None:
    assert TaskFilter.parse("Pending") is TaskFilter.PENDING
    assert TaskFilter.parse(None) is TaskFilter.ALL
    assert TaskFilter.parse("someday") is TaskFilter.ALL
