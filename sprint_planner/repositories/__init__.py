"""
Sprint Planner - Repositories

Collaborator contracts the planner depends on:
- DeveloperRepository: active team members
- TaskRepository: task snapshots and assignment writes
- SprintRepository: sprint creation and task linking

plus in-memory implementations of each.
"""

from .base import DeveloperRepository, TaskRepository, SprintRepository
from .memory import (
    InMemoryDeveloperRepository,
    InMemoryTaskRepository,
    InMemorySprintRepository
)

__all__ = [
    # Contracts
    "DeveloperRepository",
    "TaskRepository",
    "SprintRepository",

    # In-memory
    "InMemoryDeveloperRepository",
    "InMemoryTaskRepository",
    "InMemorySprintRepository",
]
