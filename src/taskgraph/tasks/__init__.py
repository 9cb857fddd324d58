"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskDependency, TaskStatus, TaskPatch)
- db.py: SQLite connection factory + schema shared by both stores
- task_store.py: task rows, with cascading edge cleanup on delete
- dependency_store.py: dependency edges between tasks
- status.py: pure status derivation over a materialized graph
- task_service.py: task-oriented operations and cross-entity invariants
"""
