"""
Capacity Recommendations

Turns a capacity snapshot into warnings and suggestions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .analyzer import DeveloperCapacity


class RecommendationType(Enum):
    WARNING = "warning"
    SUGGESTION = "suggestion"
    OPTIMIZATION = "optimization"


class RecommendationPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class Recommendation:
    """A single capacity recommendation."""
    type: RecommendationType
    message: str
    priority: RecommendationPriority
    action: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "message": self.message,
            "action": self.action,
            "priority": self.priority.value,
        }


class RecommendationGenerator:
    """
    Evaluates every rule against a capacity snapshot.

    Rules are independent and may co-occur. Per-developer findings come
    first (in developer order), team-level findings after them.
    """

    def __init__(
        self,
        overload_threshold: float = 90.0,
        spare_threshold: float = 50.0,
        min_skill_match: float = 0.6
    ):
        self.overload_threshold = overload_threshold
        self.spare_threshold = spare_threshold
        self.min_skill_match = min_skill_match

    def for_developer(self, capacity: "DeveloperCapacity") -> list[Recommendation]:
        recommendations = []
        load = capacity.load_percentage

        if load > self.overload_threshold:
            recommendations.append(Recommendation(
                type=RecommendationType.WARNING,
                message=f"{capacity.name} is overloaded ({load:.0f}% capacity)",
                action="Consider redistributing tasks or extending sprint duration",
                priority=RecommendationPriority.HIGH,
            ))
        if load < self.spare_threshold:
            recommendations.append(Recommendation(
                type=RecommendationType.SUGGESTION,
                message=f"{capacity.name} has available capacity ({100 - load:.0f}% free)",
                action="Consider assigning additional tasks",
                priority=RecommendationPriority.MEDIUM,
            ))

        return recommendations

    def for_team(self, capacities: list["DeveloperCapacity"]) -> list[Recommendation]:
        recommendations = []
        if not capacities:
            return recommendations

        velocities = [c.velocity for c in capacities]
        avg_velocity = sum(velocities) / len(velocities)
        velocity_variance = sum((v - avg_velocity) ** 2 for v in velocities) / len(velocities)

        if velocity_variance > avg_velocity * 0.5:
            recommendations.append(Recommendation(
                type=RecommendationType.OPTIMIZATION,
                message="Team velocity is unbalanced",
                action="Consider pairing or knowledge sharing to balance skills",
                priority=RecommendationPriority.MEDIUM,
            ))

        avg_skill_match = sum(c.skill_match for c in capacities) / len(capacities)
        if avg_skill_match < self.min_skill_match:
            recommendations.append(Recommendation(
                type=RecommendationType.SUGGESTION,
                message="Low skill-task alignment detected",
                action="Review task assignments for better skill matching",
                priority=RecommendationPriority.MEDIUM,
            ))

        return recommendations

    def generate(self, capacities: list["DeveloperCapacity"]) -> list[Recommendation]:
        """All recommendations for a team snapshot."""
        recommendations = []
        for capacity in capacities:
            recommendations.extend(self.for_developer(capacity))
        recommendations.extend(self.for_team(capacities))
        return recommendations
