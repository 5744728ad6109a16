"""
Task Assignment Engine

Greedy, capacity-bounded placement of unassigned tasks onto developers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .analyzer import DeveloperCapacity
from .exceptions import NotFoundError, PersistenceError
from .logging import get_logger
from .models import Task, planning_order
from .repositories import TaskRepository


logger = get_logger(__name__)


@dataclass
class ItemOutcome:
    """Result of one persistence call inside a batch."""
    item_id: str
    ok: bool
    message: str = ""
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.item_id,
            "ok": self.ok,
            "message": self.message,
            "error": self.error,
        }


class DecisionStatus(Enum):
    ASSIGNED = "assigned"
    SKIPPED = "skipped"  # no developer had room
    FAILED = "failed"    # the repository rejected the write


@dataclass
class AssignmentDecision:
    """What happened to one task during an assignment run."""
    task_id: str
    task_title: str
    status: DecisionStatus
    effort_hours: float
    developer_id: Optional[str] = None
    developer_name: Optional[str] = None
    score: Optional[float] = None
    load_percentage: Optional[float] = None
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "task_id": self.task_id,
            "task_title": self.task_title,
            "status": self.status.value,
            "effort_hours": self.effort_hours,
            "developer_id": self.developer_id,
            "developer_name": self.developer_name,
            "score": round(self.score, 3) if self.score is not None else None,
            "load_percentage": round(self.load_percentage, 1) if self.load_percentage is not None else None,
            "message": self.message,
        }


@dataclass
class AssignmentResult:
    """Ordered decision log plus the capacities after assignment."""
    decisions: list[AssignmentDecision] = field(default_factory=list)
    capacities: list[DeveloperCapacity] = field(default_factory=list)

    @property
    def assigned(self) -> int:
        return len([d for d in self.decisions if d.status == DecisionStatus.ASSIGNED])

    @property
    def skipped(self) -> list[AssignmentDecision]:
        return [d for d in self.decisions if d.status == DecisionStatus.SKIPPED]

    @property
    def failures(self) -> list[AssignmentDecision]:
        return [d for d in self.decisions if d.status == DecisionStatus.FAILED]

    @property
    def recommendations(self) -> list[str]:
        return [d.message for d in self.decisions if d.status == DecisionStatus.ASSIGNED]

    @property
    def outcomes(self) -> list[ItemOutcome]:
        return [
            ItemOutcome(
                item_id=d.task_id,
                ok=d.status != DecisionStatus.FAILED,
                message=d.message,
                error=d.message if d.status == DecisionStatus.FAILED else None,
            )
            for d in self.decisions
        ]

    def to_dict(self) -> dict:
        return {
            "assigned": self.assigned,
            "skipped": len(self.skipped),
            "failed": len(self.failures),
            "decisions": [d.to_dict() for d in self.decisions],
            "capacities": [c.to_dict() for c in self.capacities],
        }


class TaskAssignmentEngine:
    """
    Assigns tasks one at a time to the best-scoring developer with room.

    Tasks are processed by priority (critical first), smaller efforts first
    within a priority. No backtracking: a task that fits nowhere is skipped.

    Usage:
        engine = TaskAssignmentEngine(task_repository)
        result = engine.assign(unassigned_tasks, plan.developers)
        print(f"Assigned {result.assigned} tasks")
    """

    def __init__(
        self,
        task_repository: TaskRepository,
        load_weight: float = 0.4,
        skill_weight: float = 0.4,
        velocity_weight: float = 0.2
    ):
        self.task_repository = task_repository
        self.load_weight = load_weight
        self.skill_weight = skill_weight
        self.velocity_weight = velocity_weight

    def score(self, capacity: DeveloperCapacity) -> float:
        """Prefer lightly loaded, well matched, high velocity developers."""
        load_factor = 1 - (capacity.current_load_hours / capacity.available_hours)
        velocity_factor = min(1.0, capacity.velocity / 10)
        return (
            load_factor * self.load_weight +
            capacity.skill_match * self.skill_weight +
            velocity_factor * self.velocity_weight
        )

    def find_best_developer(
        self,
        task: Task,
        capacities: list[DeveloperCapacity]
    ) -> Optional[tuple[DeveloperCapacity, float]]:
        """Highest scorer among developers that can absorb the task; earliest wins ties."""
        best = None
        best_score = 0.0

        for capacity in capacities:
            if not capacity.can_absorb(task.estimated_effort_hours):
                continue
            score = self.score(capacity)
            if best is None or score > best_score:
                best = capacity
                best_score = score

        if best is None:
            return None
        return best, best_score

    def assign(
        self,
        tasks: list[Task],
        capacities: list[DeveloperCapacity]
    ) -> AssignmentResult:
        """
        Assign tasks and persist each assignment.

        Args:
            tasks: Unassigned tasks to place
            capacities: Current developer capacities; copied, never mutated

        Returns:
            AssignmentResult with one decision per task in processing order
        """
        working = [c.copy() for c in capacities]
        result = AssignmentResult(capacities=working)

        for task in planning_order(tasks):
            effort = task.estimated_effort_hours
            match = self.find_best_developer(task, working)

            if match is None:
                result.decisions.append(AssignmentDecision(
                    task_id=task.id,
                    task_title=task.title,
                    status=DecisionStatus.SKIPPED,
                    effort_hours=effort,
                    message=f'No developer has capacity for "{task.title}" ({effort:g}h)',
                ))
                continue

            developer, score = match
            try:
                self.task_repository.assign(task.id, developer.developer_id)
            except (NotFoundError, PersistenceError) as e:
                logger.warning(
                    "task_assignment_failed",
                    task_id=task.id,
                    developer_id=developer.developer_id,
                    error=str(e),
                )
                result.decisions.append(AssignmentDecision(
                    task_id=task.id,
                    task_title=task.title,
                    status=DecisionStatus.FAILED,
                    effort_hours=effort,
                    developer_id=developer.developer_id,
                    developer_name=developer.name,
                    score=score,
                    message=f'Failed to assign "{task.title}" to {developer.name}: {e}',
                ))
                continue

            developer.current_load_hours += effort
            load = developer.load_percentage
            result.decisions.append(AssignmentDecision(
                task_id=task.id,
                task_title=task.title,
                status=DecisionStatus.ASSIGNED,
                effort_hours=effort,
                developer_id=developer.developer_id,
                developer_name=developer.name,
                score=score,
                load_percentage=load,
                message=f'Assigned "{task.title}" to {developer.name} ({load:.0f}% capacity)',
            ))
            logger.info(
                "task_assigned",
                task_id=task.id,
                developer_id=developer.developer_id,
                score=round(score, 3),
                load_percentage=round(load, 1),
            )

        return result
