# src/taskgraph/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import StrEnum
from typing import Any

from ..errors import ValidationError

# Marks a patch field as "not provided". None is a real value (it clears due_date).
UNSET: Any = object()


class TaskStatus(StrEnum):
    """
    Derived display status of a task. Never stored.

    Precedence when more than one applies: completed > blocked > overdue > ready.
    """

    COMPLETED = "completed"
    BLOCKED = "blocked"
    OVERDUE = "overdue"
    READY = "ready"


class TaskFilter(StrEnum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: str | None) -> TaskFilter:
        if not raw:
            return cls.ALL
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.ALL


@dataclass(slots=True)
class Task:
    id: int
    title: str
    due_date: float | None
    is_completed: bool
    created_at: float
    updated_at: float


@dataclass(slots=True)
class TaskDependency:
    id: int
    task_id: int  # the dependent (blocked) task
    depends_on_task_id: int  # the prerequisite
    created_at: float


@dataclass(slots=True)
class TaskWithDependencies(Task):
    """Read-time projection: a task plus its outgoing and incoming edges."""

    dependencies: list[TaskDependency] = field(default_factory=list)
    dependents: list[TaskDependency] = field(default_factory=list)

    @classmethod
    def compose(
        cls,
        task: Task,
        dependencies: list[TaskDependency],
        dependents: list[TaskDependency],
    ) -> TaskWithDependencies:
        return cls(
            id=task.id,
            title=task.title,
            due_date=task.due_date,
            is_completed=task.is_completed,
            created_at=task.created_at,
            updated_at=task.updated_at,
            dependencies=list(dependencies),
            dependents=list(dependents),
        )


@dataclass(frozen=True, slots=True)
class TaskPatch:
    """
    Partial update of a task.

    Every field defaults to UNSET ("leave as is"). `due_date=None` clears the deadline.
    """

    title: str | Any = UNSET
    due_date: float | None | Any = UNSET
    is_completed: bool | Any = UNSET

    def provided(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


def clean_title(raw: Any) -> str:
    """Trim a title; empty (or non-string) titles are rejected."""
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("Title is required")
    return raw.strip()
