"""
Repository Contracts

Collaborators the planner reads snapshots from and writes assignments through.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import Developer, Sprint, SprintDraft, Task, TaskStatus


class DeveloperRepository(ABC):
    """Source of team members."""

    @abstractmethod
    def list_active(self) -> list[Developer]:
        """Developers available for planning."""
        pass


class TaskRepository(ABC):
    """Source of tasks and sink for assignments."""

    @abstractmethod
    def list_by_status(self, statuses: list[TaskStatus]) -> list[Task]:
        """Tasks whose status is one of `statuses`."""
        pass

    @abstractmethod
    def assign(self, task_id: str, developer_id: str) -> Task:
        """
        Point a task at a developer.

        Raises:
            NotFoundError: unknown task or developer
            PersistenceError: the write failed
        """
        pass


class SprintRepository(ABC):
    """Sprint storage."""

    @abstractmethod
    def create(self, draft: SprintDraft) -> Sprint:
        pass

    @abstractmethod
    def link_task(self, sprint_id: str, task_id: str) -> None:
        """
        Add a task to a sprint.

        Raises:
            NotFoundError: unknown sprint or task
            PersistenceError: the write failed
        """
        pass

    @abstractmethod
    def get(self, sprint_id: str) -> Optional[Sprint]:
        pass
