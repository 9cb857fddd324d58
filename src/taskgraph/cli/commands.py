# src/taskgraph/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.state import AppState
from ..errors import TaskGraphError, ValidationError
from ..tasks.status import (
    blocking_prerequisites,
    derive_status,
    filter_tasks,
    index_tasks,
    summarize,
)
from ..tasks.task_models import TaskFilter, TaskPatch, TaskStatus, TaskWithDependencies

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

_CLEAR_WORDS = {"none", "-", "clear"}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Classified task graph errors become the reply; anything else propagates.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except TaskGraphError as e:
            logger.debug("/%s rejected: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- parsing / formatting helpers ----


def _parse_id(raw: str, what: str = "id") -> int:
    try:
        value = int(raw.lstrip("#"))
    except ValueError:
        raise ValidationError(f"Invalid {what}: {raw!r}") from None
    if value <= 0:
        raise ValidationError(f"Invalid {what}: {raw!r}")
    return value


def parse_due(raw: str) -> float | None:
    """
    "2026-10-20" or "2026-10-20T18:00" (local time unless an offset is given).
    "none" / "-" / "clear" -> None.
    """
    raw = raw.strip().lstrip("@")
    if raw.lower() in _CLEAR_WORDS:
        return None
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"Invalid due date: {raw!r} (expected YYYY-MM-DD[THH:MM])") from None
    return dt.timestamp()


def _fmt_ts(ts: float | None) -> str:
    if ts is None:
        return "-"
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d %H:%M")


def _fmt_task(task: TaskWithDependencies, all_tasks, now: float) -> str:
    status = derive_status(task, all_tasks, now=now)
    line = f"#{task.id} [{status}] {task.title}"
    if task.due_date is not None:
        line += f"  (due {_fmt_ts(task.due_date)})"
    waits_on = blocking_prerequisites(task, all_tasks)
    if waits_on:
        line += "  waits on " + ", ".join(f"#{i}" for i in waits_on)
    return line


def _need(args: list[str], n: int, usage: str) -> None:
    if len(args) < n:
        raise ValidationError(f"Usage: {usage}")


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add Buy milk             -> task without deadline
    /add Buy milk @2026-10-20 -> task with deadline (last word starting with @)
    """
    _need(args, 1, "/add <title> [@YYYY-MM-DD]")
    due_date = None
    if len(args) > 1 and args[-1].startswith("@"):
        due_date = parse_due(args[-1])
        args = args[:-1]
    task = state.service.create_task(" ".join(args), due_date)
    return f"Created task #{task.id}: {task.title}"


def cmd_show(state: AppState, args: list[str]) -> str:
    _need(args, 1, "/show <id>")
    task = state.service.get_task(_parse_id(args[0]))
    tasks = state.service.list_tasks()
    now = state.service.now()
    lines = [
        _fmt_task(task, tasks, now),
        f"  created {_fmt_ts(task.created_at)}, updated {_fmt_ts(task.updated_at)}",
    ]
    for e in task.dependencies:
        lines.append(f"  depends on #{e.depends_on_task_id} (edge {e.id})")
    for e in task.dependents:
        lines.append(f"  needed by #{e.task_id} (edge {e.id})")
    return "\n".join(lines)


def cmd_list(state: AppState, args: list[str]) -> str:
    task_filter = TaskFilter.parse(args[0] if args else None)
    tasks = state.service.list_tasks()
    shown = filter_tasks(tasks, task_filter)
    if not shown:
        return "No tasks yet." if task_filter is TaskFilter.ALL else f"No {task_filter} tasks found."
    by_id = index_tasks(tasks)
    now = state.service.now()
    return "\n".join(_fmt_task(t, by_id, now) for t in shown)


def _set_completed(state: AppState, args: list[str], value: bool, usage: str) -> str:
    _need(args, 1, usage)
    task_id = _parse_id(args[0])
    if value:
        task = state.service.get_task(task_id)
        tasks = state.service.list_tasks()
        if derive_status(task, tasks, now=state.service.now()) is TaskStatus.BLOCKED:
            waits_on = ", ".join(f"#{i}" for i in blocking_prerequisites(task, tasks))
            raise ValidationError(f"Task #{task_id} is blocked by {waits_on}")
    task = state.service.update_task(task_id, TaskPatch(is_completed=value))
    return f"Task #{task.id} marked {'completed' if value else 'not completed'}."


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, True, "/done <id>")


def cmd_undo(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, False, "/undo <id>")


def cmd_rename(state: AppState, args: list[str]) -> str:
    _need(args, 2, "/rename <id> <title>")
    task = state.service.update_task(_parse_id(args[0]), TaskPatch(title=" ".join(args[1:])))
    return f"Task #{task.id} renamed to: {task.title}"


def cmd_due(state: AppState, args: list[str]) -> str:
    """
    /due 3 2026-10-20 -> set deadline
    /due 3 none       -> clear deadline
    """
    _need(args, 2, "/due <id> <YYYY-MM-DD|none>")
    task = state.service.update_task(_parse_id(args[0]), TaskPatch(due_date=parse_due(args[1])))
    if task.due_date is None:
        return f"Task #{task.id} has no deadline now."
    return f"Task #{task.id} due {_fmt_ts(task.due_date)}."


def cmd_rm(state: AppState, args: list[str]) -> str:
    _need(args, 1, "/rm <id>")
    task_id = _parse_id(args[0])
    if state.service.delete_task(task_id):
        return f"Task #{task_id} deleted (with its dependencies)."
    return f"No task #{task_id}."


def cmd_dep(state: AppState, args: list[str]) -> str:
    _need(args, 2, "/dep <task_id> <depends_on_id>")
    dep = state.service.create_dependency(
        _parse_id(args[0], "task id"), _parse_id(args[1], "task id")
    )
    return f"Task #{dep.task_id} now depends on #{dep.depends_on_task_id} (edge {dep.id})."


def cmd_undep(state: AppState, args: list[str]) -> str:
    _need(args, 1, "/undep <edge_id>")
    edge_id = _parse_id(args[0], "edge id")
    if state.service.delete_dependency(edge_id):
        return f"Dependency edge {edge_id} deleted."
    return f"No dependency edge {edge_id}."


def cmd_deps(state: AppState, args: list[str]) -> str:
    edges = state.service.list_dependencies()
    if not edges:
        return "No dependencies."
    return "\n".join(
        f"edge {e.id}: #{e.task_id} depends on #{e.depends_on_task_id}" for e in edges
    )


def cmd_candidates(state: AppState, args: list[str]) -> str:
    _need(args, 1, "/candidates <id>")
    task_id = _parse_id(args[0])
    candidates = state.service.dependency_candidates(task_id)
    if not candidates:
        return f"No other tasks for #{task_id} to depend on."
    return "\n".join(f"#{t.id} {t.title}" for t in candidates)


def cmd_stats(state: AppState, args: list[str]) -> str:
    s = summarize(state.service.list_tasks(), now=state.service.now())
    return (
        "Tasks:\n"
        f"  Total: {s.total}\n"
        f"  Completed: {s.completed}\n"
        f"  Ready: {s.ready}\n"
        f"  Blocked: {s.blocked}\n"
        f"  Overdue: {s.overdue}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Create a task: /add <title> [@YYYY-MM-DD].")
registry.register("show", cmd_show, help_text="Show one task with its edges: /show <id>.")
registry.register(
    "list", cmd_list, help_text="List tasks: /list [all|pending|completed].", aliases=["ls"]
)
registry.register("done", cmd_done, help_text="Mark an unblocked task completed: /done <id>.")
registry.register("undo", cmd_undo, help_text="Mark a task not completed: /undo <id>.")
registry.register("rename", cmd_rename, help_text="Change a title: /rename <id> <title>.")
registry.register("due", cmd_due, help_text="Set or clear a deadline: /due <id> <date|none>.")
registry.register("rm", cmd_rm, help_text="Delete a task and its edges: /rm <id>.")
registry.register("dep", cmd_dep, help_text="Add a dependency: /dep <task_id> <depends_on_id>.")
registry.register("undep", cmd_undep, help_text="Remove a dependency edge: /undep <edge_id>.")
registry.register("deps", cmd_deps, help_text="List all dependency edges.")
registry.register(
    "candidates", cmd_candidates, help_text="Tasks one could depend on: /candidates <id>."
)
registry.register("stats", cmd_stats, help_text="Count tasks per status.")
