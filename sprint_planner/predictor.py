"""
Sprint Success Predictor

Combines capacity, complexity, velocity, skill and dependency signals into a
success probability with a per-factor breakdown.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .analyzer import CapacityPlan, SprintHealth
from .models import Task
from .velocity import VelocityEstimator


class RiskLevel(Enum):
    """Sprint risk level."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


UTILIZATION_WEIGHT = 0.25
COMPLEXITY_WEIGHT = 0.20
VELOCITY_WEIGHT = 0.20
SKILL_WEIGHT = 0.15
DEPENDENCY_WEIGHT = 0.20

LOW_IMPACT_THRESHOLD = 15


@dataclass
class SuccessFactor:
    """One weighted signal feeding the probability."""
    name: str
    score: float  # 0-100
    weight: float
    description: str

    @property
    def impact(self) -> float:
        """Weighted contribution to the probability."""
        return self.score * self.weight

    def to_dict(self) -> dict:
        return {
            "factor": self.name,
            "score": round(self.score, 1),
            "weight": self.weight,
            "impact": round(self.impact, 2),
            "description": self.description,
        }


@dataclass
class SuccessPrediction:
    """Sprint success prediction."""
    probability: int  # 0-100
    factors: list[SuccessFactor] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    predicted_at: datetime = field(default_factory=datetime.now, compare=False)

    @property
    def on_track(self) -> bool:
        return self.probability >= 70

    @property
    def risk_level(self) -> RiskLevel:
        if self.probability < 50:
            return RiskLevel.CRITICAL
        elif self.probability < 70:
            return RiskLevel.HIGH
        elif self.probability < 85:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def get_factor(self, name: str) -> Optional[SuccessFactor]:
        for factor in self.factors:
            if factor.name == name:
                return factor
        return None

    def to_dict(self) -> dict:
        return {
            "probability": self.probability,
            "on_track": self.on_track,
            "risk_level": self.risk_level.value,
            "factors": [f.to_dict() for f in self.factors],
            "recommendations": self.recommendations,
            "predicted_at": self.predicted_at.isoformat(),
        }


class SprintSuccessPredictor:
    """
    Predicts how likely a sprint is to succeed.

    Usage:
        predictor = SprintSuccessPredictor()
        prediction = predictor.predict(
            plan=capacity_plan,
            tasks=sprint_tasks,
            velocity_history=[21, 24, 23]
        )
    """

    def __init__(self, velocity_estimator: Optional[VelocityEstimator] = None):
        self.velocity_estimator = velocity_estimator or VelocityEstimator()

    def utilization_score(self, plan: CapacityPlan) -> float:
        if plan.health is SprintHealth.HEALTHY:
            return 85
        elif plan.health is SprintHealth.AT_RISK:
            return 65
        return 40

    def complexity_score(self, tasks: list[Task]) -> float:
        """Smaller average tasks are easier to land."""
        if not tasks:
            return 90

        avg_effort = sum(t.estimated_effort_hours for t in tasks) / len(tasks)
        if avg_effort < 5:
            return 90
        elif avg_effort < 10:
            return 75
        elif avg_effort < 20:
            return 60
        return 45

    def skill_alignment_score(self, plan: CapacityPlan) -> float:
        return round(plan.average_skill_match * 100)

    def dependency_score(self, tasks: list[Task]) -> float:
        if not tasks:
            return 100

        with_dependencies = len([t for t in tasks if t.has_dependencies])
        return round((1 - with_dependencies / len(tasks)) * 100)

    def calculate_factors(
        self,
        plan: CapacityPlan,
        tasks: list[Task],
        velocity_history: Optional[list[float]] = None
    ) -> list[SuccessFactor]:
        return [
            SuccessFactor(
                name="Capacity Utilization",
                score=self.utilization_score(plan),
                weight=UTILIZATION_WEIGHT,
                description=f"Team capacity is {plan.health.value}",
            ),
            SuccessFactor(
                name="Task Complexity",
                score=self.complexity_score(tasks),
                weight=COMPLEXITY_WEIGHT,
                description="Based on estimated effort and task types",
            ),
            SuccessFactor(
                name="Velocity Consistency",
                score=self.velocity_estimator.velocity_consistency_score(velocity_history),
                weight=VELOCITY_WEIGHT,
                description="Based on historical sprint performance",
            ),
            SuccessFactor(
                name="Skill Alignment",
                score=self.skill_alignment_score(plan),
                weight=SKILL_WEIGHT,
                description="How well tasks match team skills",
            ),
            SuccessFactor(
                name="Dependencies",
                score=self.dependency_score(tasks),
                weight=DEPENDENCY_WEIGHT,
                description="Risk from task dependencies and external blockers",
            ),
        ]

    def recommend(self, factors: list[SuccessFactor], probability: int) -> list[str]:
        recommendations = []

        if probability < 60:
            recommendations.append("Consider reducing sprint scope")
            recommendations.append("Address high-risk factors before sprint start")

        for factor in factors:
            if factor.impact < LOW_IMPACT_THRESHOLD:
                recommendations.append(f"Improve {factor.name.lower()}")

        if probability > 80:
            recommendations.append("Sprint setup looks excellent - maintain current approach")

        return recommendations

    def predict(
        self,
        plan: CapacityPlan,
        tasks: list[Task],
        velocity_history: Optional[list[float]] = None
    ) -> SuccessPrediction:
        """
        Predict sprint success.

        Args:
            plan: Capacity plan for the sprint
            tasks: Tasks in the sprint
            velocity_history: Team velocity per past sprint, oldest first

        Returns:
            SuccessPrediction with probability 0-100 and factor breakdown
        """
        factors = self.calculate_factors(plan, tasks, velocity_history)
        total = sum(f.impact for f in factors)
        probability = max(0, min(100, round(total)))

        return SuccessPrediction(
            probability=probability,
            factors=factors,
            recommendations=self.recommend(factors, probability),
        )


# Convenience function
def predict_sprint_success(
    plan: CapacityPlan,
    tasks: list[Task],
    velocity_history: Optional[list[float]] = None
) -> SuccessPrediction:
    """
    Quick function to predict sprint success.

    Example:
        prediction = predict_sprint_success(plan, sprint_tasks)

        print(f"Success probability: {prediction.probability}%")
        for factor in prediction.factors:
            print(f"  {factor.name}: {factor.impact:.1f}")
    """
    predictor = SprintSuccessPredictor()
    return predictor.predict(plan, tasks, velocity_history)
