"""
Shared fixtures for planner tests.
"""

import pytest

from sprint_planner.exceptions import PersistenceError
from sprint_planner.models import Developer, PlanningOptions, TaskType
from sprint_planner.repositories import (
    InMemoryDeveloperRepository,
    InMemorySprintRepository,
    InMemoryTaskRepository
)


class FlakyTaskRepository(InMemoryTaskRepository):
    """Task repository whose writes fail for selected task ids."""

    def __init__(self, *args, failing_ids=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.failing_ids = set(failing_ids)

    def assign(self, task_id, developer_id):
        if task_id in self.failing_ids:
            raise PersistenceError(f"write rejected for {task_id}", task_id=task_id)
        return super().assign(task_id, developer_id)


@pytest.fixture
def alice():
    return Developer(
        id="alice",
        name="Alice",
        velocity=10,
        strengths={"api", "python"},
        preferred_task_types={TaskType.FEATURE, TaskType.BUG},
        code_quality=8,
        collaboration=7,
    )


@pytest.fixture
def bob():
    return Developer(
        id="bob",
        name="Bob",
        velocity=6,
        strengths={"css"},
        preferred_task_types={TaskType.DOCS},
        code_quality=6,
        collaboration=9,
    )


@pytest.fixture
def ten_day_options():
    """80 base hours, no buffer."""
    return PlanningOptions(sprint_duration_days=10, buffer_percentage=0)


@pytest.fixture
def repos(alice, bob):
    developers = InMemoryDeveloperRepository([alice, bob])
    tasks = InMemoryTaskRepository(developers=developers)
    sprints = InMemorySprintRepository(tasks)
    return developers, tasks, sprints


@pytest.fixture
def flaky_task_repository():
    """Factory for task repositories that reject writes for some ids."""
    return FlakyTaskRepository
