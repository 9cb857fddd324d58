# tests/test_commands.py

from __future__ import annotations

from taskgraph.cli.commands import CommandRegistry, parse_due, registry
from taskgraph.core.state import AppState


def test_command_registry_routes_and_aliases(state: AppState) -> None:
    reg = CommandRegistry()
    called: list[list[str]] = []

    def h(state, args):
        called.append(args)
        return "ok"

    reg.register("a", h, "a", aliases=["alpha"])

    assert reg.handle(state, "/a x y") == "ok"
    assert reg.handle(state, "/ALPHA") == "ok"
    assert called == [["x", "y"], []]
    assert "/a - a" in reg.build_help()


def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_task_workflow_through_commands(state: AppState) -> None:
    assert registry.handle(state, "/add Write draft") == "Created task #1: Write draft"
    assert registry.handle(state, "/add Review draft") == "Created task #2: Review draft"
    assert "now depends on #1" in (registry.handle(state, "/dep 2 1") or "")

    listing = registry.handle(state, "/list") or ""
    assert "#1 [ready] Write draft" in listing
    assert "#2 [blocked] Review draft" in listing
    assert "waits on #1" in listing

    registry.handle(state, "/done 1")
    assert "#2 [ready]" in (registry.handle(state, "/list pending") or "")
    assert "#2" not in (registry.handle(state, "/list completed") or "")

    stats = registry.handle(state, "/stats") or ""
    assert "Total: 2" in stats and "Completed: 1" in stats and "Ready: 1" in stats

    show = registry.handle(state, "/show 1") or ""
    assert "needed by #2" in show

    assert "deleted" in (registry.handle(state, "/rm 1") or "")
    assert registry.handle(state, "/deps") == "No dependencies."
    assert registry.handle(state, "/rm 1") == "No task #1."


def test_due_date_commands(state: AppState) -> None:
    registry.handle(state, "/add Submit form @2025-01-01")
    assert "[overdue]" in (registry.handle(state, "/list") or "")

    assert "no deadline" in (registry.handle(state, "/due 1 none") or "")
    assert "[ready]" in (registry.handle(state, "/list") or "")

    assert parse_due("none") is None
    assert parse_due("@2026-10-20") is not None


def test_errors_become_replies(state: AppState) -> None:
    registry.handle(state, "/add Only task")
    assert registry.handle(state, "/dep 1 1") == "Error: Task 1 cannot depend on itself"
    assert registry.handle(state, "/dep 1 9") == "Error: Task with id 9 not found"
    assert (registry.handle(state, "/done abc") or "").startswith("Error: Invalid id")
    assert (registry.handle(state, "/due 1 tomorrow") or "").startswith("Error: Invalid due date")
    assert (registry.handle(state, "/rename 1") or "").startswith("Error: Usage")
    assert registry.handle(state, "/show 5") == "Error: Task with id 5 not found"


def test_done_refuses_blocked_task(state: AppState) -> None:
    registry.handle(state, "/add A")
    registry.handle(state, "/add B")
    registry.handle(state, "/add C")
    registry.handle(state, "/dep 3 1")
    registry.handle(state, "/dep 3 2")

    assert registry.handle(state, "/done 3") == "Error: Task #3 is blocked by #1, #2"
    assert state.service.get_task(3).is_completed is False

    registry.handle(state, "/done 1")
    assert registry.handle(state, "/done 3") == "Error: Task #3 is blocked by #2"

    registry.handle(state, "/done 2")
    assert registry.handle(state, "/done 3") == "Task #3 marked completed."
    assert state.service.get_task(3).is_completed is True

    # Reopening a prerequisite is still allowed.
    assert registry.handle(state, "/undo 1") == "Task #1 marked not completed."


def test_candidates_lists_other_tasks(state: AppState) -> None:
    registry.handle(state, "/add Only")
    assert registry.handle(state, "/candidates 1") == "No other tasks for #1 to depend on."

    registry.handle(state, "/add Second")
    registry.handle(state, "/add Third")
    assert registry.handle(state, "/candidates 2") == "#1 Only\n#3 Third"
    assert registry.handle(state, "/candidates 9") == "Error: Task with id 9 not found"
    assert "/candidates" in (registry.handle(state, "/help") or "")
