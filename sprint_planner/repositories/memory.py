"""
In-Memory Repositories

Dictionary-backed implementations of the repository contracts. Reads return
copies so callers never share state with the store.
"""

import copy
import uuid
from datetime import datetime
from typing import Callable, Optional

from ..exceptions import NotFoundError
from ..models import Developer, Sprint, SprintDraft, Task, TaskStatus
from .base import DeveloperRepository, SprintRepository, TaskRepository


class InMemoryDeveloperRepository(DeveloperRepository):
    """
    Developers kept in insertion order.

    Usage:
        developers = InMemoryDeveloperRepository([Developer(id="d1", name="Alice")])
        developers.list_active()
    """

    def __init__(self, developers: Optional[list[Developer]] = None):
        self._developers: dict[str, Developer] = {}
        self._inactive: set[str] = set()
        for developer in developers or []:
            self.add(developer)

    def add(self, developer: Developer) -> None:
        self._developers[developer.id] = copy.deepcopy(developer)

    def deactivate(self, developer_id: str) -> None:
        if developer_id not in self._developers:
            raise NotFoundError("Developer", developer_id)
        self._inactive.add(developer_id)

    def exists(self, developer_id: str) -> bool:
        return developer_id in self._developers

    def list_active(self) -> list[Developer]:
        return [
            copy.deepcopy(d) for d in self._developers.values()
            if d.id not in self._inactive
        ]


class InMemoryTaskRepository(TaskRepository):
    """Tasks kept in insertion order."""

    def __init__(
        self,
        tasks: Optional[list[Task]] = None,
        developers: Optional[InMemoryDeveloperRepository] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self._tasks: dict[str, Task] = {}
        self._developers = developers
        self._clock = clock
        for task in tasks or []:
            self.add(task)

    def add(self, task: Task) -> None:
        self._tasks[task.id] = copy.deepcopy(task)

    def get(self, task_id: str) -> Optional[Task]:
        task = self._tasks.get(task_id)
        return copy.deepcopy(task) if task else None

    def list_all(self) -> list[Task]:
        return [copy.deepcopy(t) for t in self._tasks.values()]

    def list_by_status(self, statuses: list[TaskStatus]) -> list[Task]:
        wanted = set(statuses)
        return [copy.deepcopy(t) for t in self._tasks.values() if t.status in wanted]

    def assign(self, task_id: str, developer_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        if self._developers is not None and not self._developers.exists(developer_id):
            raise NotFoundError("Developer", developer_id)

        task.assignee_id = developer_id
        task.updated_at = self._clock()
        return copy.deepcopy(task)

    def set_sprint(self, task_id: str, sprint_id: str) -> None:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        task.sprint_id = sprint_id


class InMemorySprintRepository(SprintRepository):
    """Sprints keyed by generated ids; linking also stamps the task's sprint id."""

    def __init__(self, tasks: Optional[InMemoryTaskRepository] = None):
        self._sprints: dict[str, Sprint] = {}
        self._tasks = tasks

    def create(self, draft: SprintDraft) -> Sprint:
        sprint = Sprint(
            id=str(uuid.uuid4()),
            name=draft.name,
            start_date=draft.start_date,
            end_date=draft.end_date,
            status=draft.status,
            capacity_hours=draft.capacity_hours,
            velocity_target=draft.velocity_target,
        )
        self._sprints[sprint.id] = sprint
        return copy.deepcopy(sprint)

    def link_task(self, sprint_id: str, task_id: str) -> None:
        sprint = self._sprints.get(sprint_id)
        if sprint is None:
            raise NotFoundError("Sprint", sprint_id)
        if self._tasks is not None:
            self._tasks.set_sprint(task_id, sprint_id)
        if task_id not in sprint.task_ids:
            sprint.task_ids.append(task_id)

    def get(self, sprint_id: str) -> Optional[Sprint]:
        sprint = self._sprints.get(sprint_id)
        return copy.deepcopy(sprint) if sprint else None
