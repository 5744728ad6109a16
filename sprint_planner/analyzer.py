"""
Team Capacity Analyzer

Calculates per-developer capacity, load and skill fit, and rolls them up into
a team capacity plan with a health classification.
"""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from .exceptions import ValidationError
from .logging import get_logger
from .models import Developer, HOURS_PER_DAY, PlanningOptions, Task
from .recommendations import Recommendation, RecommendationGenerator


logger = get_logger(__name__)


class SprintHealth(Enum):
    """Team capacity health."""
    HEALTHY = "healthy"        # 0-80%
    AT_RISK = "at-risk"        # 80-95%
    OVERLOADED = "overloaded"  # 95%+


def load_percentage(load_hours: float, capacity_hours: float) -> float:
    """Load as a percentage of capacity. Any load on zero capacity is unbounded."""
    if capacity_hours <= 0:
        return 0.0 if load_hours <= 0 else math.inf
    return (load_hours / capacity_hours) * 100


def rounded_percentage(percentage: float) -> Optional[float]:
    """Percentage for serialization; unbounded load has no JSON number, so None."""
    if math.isinf(percentage):
        return None
    return round(percentage, 1)


def classify_health(percentage: float) -> SprintHealth:
    """Map a load percentage to a health status."""
    if percentage > 95:
        return SprintHealth.OVERLOADED
    elif percentage > 80:
        return SprintHealth.AT_RISK
    return SprintHealth.HEALTHY


@dataclass
class DeveloperCapacity:
    """Capacity picture for one developer in one sprint."""
    developer_id: str
    name: str
    velocity: float
    available_hours: float
    current_load_hours: float = 0.0
    skill_match: float = 1.0  # 0-1

    @property
    def remaining_hours(self) -> float:
        return max(0.0, self.available_hours - self.current_load_hours)

    @property
    def load_percentage(self) -> float:
        return load_percentage(self.current_load_hours, self.available_hours)

    @property
    def recommended_task_count(self) -> int:
        """Tasks that still fit, assuming roughly one velocity unit of hours each."""
        return math.floor(self.remaining_hours / max(self.velocity, 1))

    def can_absorb(self, effort_hours: float) -> bool:
        return self.current_load_hours + effort_hours <= self.available_hours

    def copy(self) -> "DeveloperCapacity":
        return replace(self)

    def to_dict(self) -> dict:
        return {
            "developer_id": self.developer_id,
            "name": self.name,
            "velocity": self.velocity,
            "available_hours": round(self.available_hours, 1),
            "current_load_hours": round(self.current_load_hours, 1),
            "load_percentage": rounded_percentage(self.load_percentage),
            "skill_match": round(self.skill_match, 2),
            "recommended_task_count": self.recommended_task_count,
        }


@dataclass
class CapacityPlan:
    """Team capacity snapshot for a sprint."""
    total_capacity: float
    available_capacity: float
    team_velocity: float
    developers: list[DeveloperCapacity] = field(default_factory=list)
    health: SprintHealth = SprintHealth.HEALTHY
    recommendations: list[Recommendation] = field(default_factory=list)
    calculated_at: datetime = field(default_factory=datetime.now, compare=False)

    @property
    def total_load(self) -> float:
        return sum(d.current_load_hours for d in self.developers)

    @property
    def load_percentage(self) -> float:
        return load_percentage(self.total_load, self.total_capacity)

    @property
    def average_skill_match(self) -> float:
        if not self.developers:
            return 0.0
        return sum(d.skill_match for d in self.developers) / len(self.developers)

    def get_developer(self, developer_id: str) -> Optional[DeveloperCapacity]:
        for capacity in self.developers:
            if capacity.developer_id == developer_id:
                return capacity
        return None

    def copy_capacities(self) -> list[DeveloperCapacity]:
        """Working copies the assignment engine and balancer may mutate."""
        return [d.copy() for d in self.developers]

    def to_dict(self) -> dict:
        return {
            "calculated_at": self.calculated_at.isoformat(),
            "summary": {
                "total_capacity": round(self.total_capacity, 1),
                "available_capacity": round(self.available_capacity, 1),
                "team_velocity": self.team_velocity,
                "load_percentage": rounded_percentage(self.load_percentage),
                "health": self.health.value,
            },
            "developers": [d.to_dict() for d in self.developers],
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


class CapacityCalculator:
    """
    Computes a fresh capacity plan from developers and tasks.

    Usage:
        calculator = CapacityCalculator()
        plan = calculator.calculate(
            developers=[Developer(...)],
            tasks=[Task(...)],
            options=PlanningOptions(sprint_duration_days=10, buffer_percentage=20)
        )
    """

    def __init__(self, recommendation_generator: Optional[RecommendationGenerator] = None):
        self.recommendation_generator = recommendation_generator or RecommendationGenerator()

    def available_hours(self, options: PlanningOptions) -> float:
        base_hours = options.sprint_duration_days * HOURS_PER_DAY
        return base_hours * (1 - options.buffer_percentage / 100)

    def current_load(self, developer: Developer, tasks: list[Task]) -> float:
        """Hours of todo and in-progress work assigned to the developer."""
        return sum(
            t.estimated_effort_hours for t in tasks
            if t.assignee_id == developer.id and t.status.counts_as_load
        )

    def task_skill_match(self, developer: Developer, task: Task) -> float:
        """Preferred type earns 0.5; each strength mentioned in the task earns 0.1, up to 0.5."""
        match = 0.5 if task.type in developer.preferred_task_types else 0.0

        text = task.search_text
        matches = len([s for s in developer.strengths if s.lower() in text])
        return match + min(0.5, matches * 0.1)

    def skill_match(self, developer: Developer, unassigned_tasks: list[Task]) -> float:
        """Mean task fit over the unassigned pool; 1.0 when the pool is empty."""
        if not unassigned_tasks:
            return 1.0
        total = sum(self.task_skill_match(developer, t) for t in unassigned_tasks)
        return total / len(unassigned_tasks)

    def analyze_developer(
        self,
        developer: Developer,
        tasks: list[Task],
        options: PlanningOptions
    ) -> DeveloperCapacity:
        unassigned = [t for t in tasks if not t.is_assigned]
        return DeveloperCapacity(
            developer_id=developer.id,
            name=developer.name,
            velocity=developer.velocity,
            available_hours=self.available_hours(options),
            current_load_hours=self.current_load(developer, tasks),
            skill_match=self.skill_match(developer, unassigned),
        )

    def calculate(
        self,
        developers: list[Developer],
        tasks: list[Task],
        options: Optional[PlanningOptions] = None
    ) -> CapacityPlan:
        """
        Build a capacity plan.

        Args:
            developers: Active team members
            tasks: Assigned and unassigned tasks in scope
            options: Sprint duration and buffer

        Raises:
            ValidationError: if there are no developers
        """
        if not developers:
            raise ValidationError("Cannot plan capacity without developers")

        options = options or PlanningOptions()
        capacities = [self.analyze_developer(d, tasks, options) for d in developers]

        total_capacity = sum(c.available_hours for c in capacities)
        total_load = sum(c.current_load_hours for c in capacities)

        plan = CapacityPlan(
            total_capacity=total_capacity,
            available_capacity=max(0.0, total_capacity - total_load),
            team_velocity=sum(c.velocity for c in capacities),
            developers=capacities,
            health=classify_health(load_percentage(total_load, total_capacity)),
            recommendations=self.recommendation_generator.generate(capacities),
        )

        logger.debug(
            "capacity_plan_calculated",
            developers=len(capacities),
            tasks=len(tasks),
            total_capacity=total_capacity,
            total_load=total_load,
            health=plan.health.value,
        )
        return plan
