"""
Planning Data Model

Developers, tasks and sprints as handed to the planning engine, plus the
options that shape a planning run.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

from .exceptions import ValidationError


HOURS_PER_DAY = 8


class TaskType(Enum):
    """Kind of work a task represents."""
    FEATURE = "feature"
    BUG = "bug"
    REFACTOR = "refactor"
    DOCS = "docs"
    TEST = "test"
    DEVOPS = "devops"


class Priority(Enum):
    """Task priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def weight(self) -> int:
        """Ordering weight, higher is more urgent."""
        if self is Priority.CRITICAL:
            return 4
        elif self is Priority.HIGH:
            return 3
        elif self is Priority.MEDIUM:
            return 2
        return 1


class TaskStatus(Enum):
    """Board column a task sits in."""
    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    DONE = "done"

    @property
    def counts_as_load(self) -> bool:
        """Committed work that still consumes hours."""
        return self in (TaskStatus.TODO, TaskStatus.IN_PROGRESS)


OPEN_STATUSES = [TaskStatus.BACKLOG, TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.REVIEW]
ALL_STATUSES = list(TaskStatus)


class SprintStatus(Enum):
    """Sprint lifecycle state."""
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass
class Developer:
    """A team member that can take on tasks."""
    id: str
    name: str
    velocity: float = 0.0  # story points per sprint
    strengths: set[str] = field(default_factory=set)
    preferred_task_types: set[TaskType] = field(default_factory=set)
    code_quality: float = 5.0  # 0-10
    collaboration: float = 5.0  # 0-10
    email: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "velocity": self.velocity,
            "strengths": sorted(self.strengths),
            "preferred_task_types": sorted(t.value for t in self.preferred_task_types),
            "code_quality": self.code_quality,
            "collaboration": self.collaboration,
        }


@dataclass
class Task:
    """A unit of work with an effort estimate in hours."""
    id: str
    title: str
    estimated_effort_hours: float
    description: str = ""
    type: TaskType = TaskType.FEATURE
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.BACKLOG
    assignee_id: Optional[str] = None
    story_points: float = 0.0
    dependencies: list[str] = field(default_factory=list)
    sprint_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.estimated_effort_hours <= 0:
            raise ValidationError(
                f"Task {self.id} has non-positive effort ({self.estimated_effort_hours}h)"
            )

    @property
    def is_assigned(self) -> bool:
        return self.assignee_id is not None

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE

    @property
    def has_dependencies(self) -> bool:
        return len(self.dependencies) > 0

    @property
    def search_text(self) -> str:
        """Lowercased text used for skill matching."""
        return f"{self.title} {self.description}".lower()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "priority": self.priority.value,
            "status": self.status.value,
            "estimated_effort_hours": self.estimated_effort_hours,
            "story_points": self.story_points,
            "assignee_id": self.assignee_id,
            "dependencies": list(self.dependencies),
            "sprint_id": self.sprint_id,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


def planning_order(tasks: list[Task]) -> list[Task]:
    """Sort tasks by priority weight (desc), then effort (asc)."""
    return sorted(tasks, key=lambda t: (-t.priority.weight, t.estimated_effort_hours))


def validate_dates(start_date: Union[date, datetime], end_date: Union[date, datetime]) -> None:
    if end_date < start_date:
        raise ValidationError(
            f"Sprint ends ({end_date.isoformat()}) before it starts ({start_date.isoformat()})"
        )


@dataclass
class SprintDraft:
    """Payload for creating a sprint."""
    name: str
    start_date: date
    end_date: date
    status: SprintStatus = SprintStatus.PLANNING
    capacity_hours: float = 0.0
    velocity_target: float = 0.0

    def __post_init__(self):
        validate_dates(self.start_date, self.end_date)


@dataclass
class Sprint:
    """A persisted sprint."""
    id: str
    name: str
    start_date: date
    end_date: date
    status: SprintStatus = SprintStatus.PLANNING
    capacity_hours: float = 0.0
    velocity_target: float = 0.0
    task_ids: list[str] = field(default_factory=list)

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "status": self.status.value,
            "capacity_hours": self.capacity_hours,
            "velocity_target": self.velocity_target,
            "task_ids": list(self.task_ids),
        }


class PlanningOptions(BaseModel):
    """Knobs for a capacity calculation."""
    sprint_duration_days: float = Field(default=14, gt=0)
    buffer_percentage: float = Field(default=20, ge=0, le=100)


class SprintOptions(BaseModel):
    """Knobs for an end-to-end sprint planning run."""
    sprint_duration_days: Optional[float] = Field(default=None, gt=0)
    buffer_percentage: float = Field(default=20, ge=0, le=100)
    auto_assign_tasks: bool = True
    balance_workload: bool = True

    def planning_options(self, start_date: date, end_date: date) -> PlanningOptions:
        """Resolve capacity options, deriving the duration from the sprint dates."""
        duration = self.sprint_duration_days
        if duration is None:
            duration = max(1, (end_date - start_date).days)
        return PlanningOptions(
            sprint_duration_days=duration,
            buffer_percentage=self.buffer_percentage,
        )
