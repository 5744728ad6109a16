"""
Workload Balancer

Moves tasks from overloaded developers to underloaded ones after assignment.
"""

from dataclasses import dataclass, field
from typing import Optional

from .analyzer import CapacityPlan, DeveloperCapacity
from .assignment import ItemOutcome
from .exceptions import NotFoundError, PersistenceError
from .logging import get_logger
from .models import Task
from .repositories import TaskRepository


logger = get_logger(__name__)


@dataclass
class BalanceResult:
    """Moves made by a balancing pass."""
    rebalanced: int = 0
    recommendations: list[str] = field(default_factory=list)
    outcomes: list[ItemOutcome] = field(default_factory=list)
    capacities: list[DeveloperCapacity] = field(default_factory=list)

    @property
    def failures(self) -> list[ItemOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def total_load(self) -> float:
        return sum(c.current_load_hours for c in self.capacities)

    def to_dict(self) -> dict:
        return {
            "rebalanced": self.rebalanced,
            "recommendations": self.recommendations,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "capacities": [c.to_dict() for c in self.capacities],
        }


class WorkloadBalancer:
    """
    Single-pass greedy redistribution.

    Overloaded and underloaded developers are classified once up front. Each
    overloaded developer gives away their smallest tasks first, to the first
    underloaded developer with room, until they drop to the target load.

    Usage:
        balancer = WorkloadBalancer(task_repository)
        result = balancer.rebalance(plan, sprint_tasks)
    """

    def __init__(
        self,
        task_repository: TaskRepository,
        overload_threshold: float = 90.0,
        underload_threshold: float = 70.0,
        target_load: float = 85.0
    ):
        self.task_repository = task_repository
        self.overload_threshold = overload_threshold
        self.underload_threshold = underload_threshold
        self.target_load = target_load

    def find_target(
        self,
        task: Task,
        candidates: list[DeveloperCapacity]
    ) -> Optional[DeveloperCapacity]:
        """First candidate that can take the task without exceeding capacity."""
        for candidate in candidates:
            if candidate.can_absorb(task.estimated_effort_hours):
                return candidate
        return None

    def rebalance(self, plan: CapacityPlan, tasks: list[Task]) -> BalanceResult:
        """
        Redistribute work and persist each move.

        Args:
            plan: Capacity plan after assignment; not mutated
            tasks: Tasks in scope, carrying their current assignee

        Returns:
            BalanceResult with updated working capacities
        """
        working = plan.copy_capacities()
        result = BalanceResult(capacities=working)

        overloaded = [c for c in working if c.load_percentage > self.overload_threshold]
        underloaded = [c for c in working if c.load_percentage < self.underload_threshold]

        for source in overloaded:
            own_tasks = sorted(
                [t for t in tasks if t.assignee_id == source.developer_id and t.status.counts_as_load],
                key=lambda t: t.estimated_effort_hours,
            )

            for task in own_tasks:
                target = self.find_target(task, underloaded)
                if target is None:
                    continue

                effort = task.estimated_effort_hours
                try:
                    self.task_repository.assign(task.id, target.developer_id)
                except (NotFoundError, PersistenceError) as e:
                    logger.warning(
                        "task_rebalance_failed",
                        task_id=task.id,
                        from_developer=source.developer_id,
                        to_developer=target.developer_id,
                        error=str(e),
                    )
                    result.outcomes.append(ItemOutcome(
                        item_id=task.id,
                        ok=False,
                        message=f'Could not move "{task.title}" to {target.name}',
                        error=str(e),
                    ))
                    continue

                source.current_load_hours -= effort
                target.current_load_hours += effort
                result.rebalanced += 1

                message = f'Moved "{task.title}" from {source.name} to {target.name}'
                result.recommendations.append(message)
                result.outcomes.append(ItemOutcome(item_id=task.id, ok=True, message=message))
                logger.info(
                    "task_rebalanced",
                    task_id=task.id,
                    from_developer=source.developer_id,
                    to_developer=target.developer_id,
                    effort_hours=effort,
                )

                if source.load_percentage <= self.target_load:
                    break

        return result
