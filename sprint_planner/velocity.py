"""
Velocity Estimator

Trend, prediction and confidence from historical per-sprint velocity.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .models import Developer, HOURS_PER_DAY, Task


DEFAULT_CONFIDENCE = 0.3
DEFAULT_CONSISTENCY_SCORE = 75
MIN_HISTORY = 3
CRITICAL_SKILLS = ["Frontend", "Backend", "Testing", "DevOps"]


@dataclass
class VelocityMetrics:
    """Velocity summary for a developer or a team."""
    current_velocity: float
    average_velocity: float
    trend: str  # "increasing", "stable", "decreasing"
    predicted_velocity: float
    confidence: float  # 0-1
    sprints_analyzed: int = 0

    def to_dict(self) -> dict:
        return {
            "current": round(self.current_velocity, 1),
            "average": round(self.average_velocity, 1),
            "trend": self.trend,
            "predicted": round(self.predicted_velocity, 1),
            "confidence": round(self.confidence, 2),
            "sprints_analyzed": self.sprints_analyzed,
        }


@dataclass
class SprintVelocityRecord:
    """Planned vs. actual velocity for one finished sprint."""
    sprint_id: str
    sprint_name: str
    planned_velocity: float
    actual_velocity: float
    completion_rate: float  # 1.0 == delivered what was planned
    date: Optional[datetime] = None


@dataclass
class TeamVelocityMetrics:
    """Team-wide velocity picture."""
    total_velocity: float
    average_velocity: float
    velocity_distribution: dict[str, float] = field(default_factory=dict)
    team_trend: str = "stable"  # "improving", "stable", "declining"
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total": self.total_velocity,
            "average": round(self.average_velocity, 1),
            "distribution": dict(self.velocity_distribution),
            "trend": self.team_trend,
            "recommendations": self.recommendations,
        }


@dataclass
class CompletionEstimate:
    """How long a developer is expected to take on a task."""
    estimated_days: int
    confidence: str  # "low", "medium", "high"


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def coefficient_of_variation(values: list[float]) -> Optional[float]:
    """Population standard deviation over mean; None when the mean is not positive."""
    mean = _mean(values)
    if mean <= 0:
        return None
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance) / mean


class VelocityEstimator:
    """
    Estimates velocity trend and next-sprint velocity from history.

    Usage:
        estimator = VelocityEstimator()
        metrics = estimator.estimate([21, 24, 23, 27])
        print(metrics.trend, metrics.predicted_velocity)
    """

    def calculate_trend(self, velocities: list[float]) -> str:
        """Compare the mean of the last 3 sprints with the 3 before them."""
        if len(velocities) < MIN_HISTORY:
            return "stable"

        recent = velocities[-3:]
        older = velocities[-6:-3]
        if not older:
            return "stable"

        recent_avg = _mean(recent)
        older_avg = _mean(older)

        if older_avg == 0:
            return "increasing" if recent_avg > 0 else "stable"

        change = (recent_avg - older_avg) / older_avg * 100
        if change > 10:
            return "increasing"
        elif change < -10:
            return "decreasing"
        return "stable"

    def predict_next(self, velocities: list[float], baseline: float = 0.0) -> float:
        """Least-squares projection to the next sprint, kept near the recent average."""
        if not velocities:
            return baseline
        if len(velocities) < 2:
            return velocities[0]

        n = len(velocities)
        xs = range(1, n + 1)
        sum_x = sum(xs)
        sum_y = sum(velocities)
        sum_xy = sum(x * y for x, y in zip(xs, velocities))
        sum_xx = sum(x * x for x in xs)

        slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
        intercept = (sum_y - slope * sum_x) / n
        prediction = slope * (n + 1) + intercept

        recent_avg = _mean(velocities[-3:])
        return max(recent_avg * 0.5, min(recent_avg * 1.5, prediction))

    def calculate_confidence(self, velocities: list[float]) -> float:
        """Consistency of the series, boosted by how much of it there is."""
        if len(velocities) < MIN_HISTORY:
            return DEFAULT_CONFIDENCE

        cv = coefficient_of_variation(velocities)
        if cv is None:
            confidence = 0.1
        else:
            confidence = max(0.1, min(1.0, 1 - cv))

        data_bonus = min(0.2, len(velocities) * 0.02)
        return min(1.0, confidence + data_bonus)

    def estimate(
        self,
        velocities: list[float],
        baseline: Optional[float] = None
    ) -> VelocityMetrics:
        """
        Summarize a chronological velocity series.

        Args:
            velocities: Actual velocity per sprint, oldest first
            baseline: Velocity to report when there is no history yet
        """
        if not velocities:
            fallback = baseline or 0.0
            return VelocityMetrics(
                current_velocity=fallback,
                average_velocity=fallback,
                trend="stable",
                predicted_velocity=fallback,
                confidence=DEFAULT_CONFIDENCE,
                sprints_analyzed=0,
            )

        return VelocityMetrics(
            current_velocity=velocities[-1],
            average_velocity=_mean(velocities),
            trend=self.calculate_trend(velocities),
            predicted_velocity=self.predict_next(velocities),
            confidence=self.calculate_confidence(velocities),
            sprints_analyzed=len(velocities),
        )

    def estimate_developer(
        self,
        developer: Developer,
        history: list[SprintVelocityRecord]
    ) -> VelocityMetrics:
        """Metrics for one developer; falls back to their profile velocity."""
        return self.estimate([r.actual_velocity for r in history], baseline=developer.velocity)

    def velocity_consistency_score(self, velocities: Optional[list[float]]) -> float:
        """0-100 score, higher for steadier velocity. 75 without enough history."""
        if not velocities or len(velocities) < MIN_HISTORY:
            return DEFAULT_CONSISTENCY_SCORE

        cv = coefficient_of_variation(velocities)
        if cv is None:
            return DEFAULT_CONSISTENCY_SCORE
        return max(0.0, min(100.0, (1 - cv) * 100))

    def team_metrics(
        self,
        developers: list[Developer],
        history: Optional[list[SprintVelocityRecord]] = None
    ) -> TeamVelocityMetrics:
        """Aggregate profile velocities and judge the team trend from history."""
        history = history or []
        total = sum(d.velocity for d in developers)
        average = total / len(developers) if developers else 0.0

        trend = self.calculate_trend([r.actual_velocity for r in history])
        team_trend = {"increasing": "improving", "decreasing": "declining"}.get(trend, "stable")

        return TeamVelocityMetrics(
            total_velocity=total,
            average_velocity=average,
            velocity_distribution={d.id: d.velocity for d in developers},
            team_trend=team_trend,
            recommendations=self._team_recommendations(developers, history),
        )

    def _team_recommendations(
        self,
        developers: list[Developer],
        history: list[SprintVelocityRecord]
    ) -> list[str]:
        recommendations = []
        if not developers:
            return recommendations

        velocities = [d.velocity for d in developers]
        average = _mean(velocities)

        if max(velocities) > average * 2:
            recommendations.append(
                "Consider knowledge sharing from high-velocity developers to improve team consistency"
            )
        if min(velocities) < average * 0.5:
            recommendations.append(
                "Identify blockers for low-velocity developers and provide additional support"
            )

        if history:
            recent = history[-3:]
            completion = _mean([r.completion_rate for r in recent])
            if completion < 0.8:
                recommendations.append(
                    "Sprint completion rate is low - consider reducing sprint scope or addressing blockers"
                )
            if completion > 1.1:
                recommendations.append(
                    "Team is consistently over-delivering - consider increasing sprint capacity"
                )

        skill_counts: dict[str, int] = {}
        for developer in developers:
            for skill in developer.strengths:
                skill_counts[skill] = skill_counts.get(skill, 0) + 1

        for skill in CRITICAL_SKILLS:
            if skill_counts.get(skill, 0) < 2:
                recommendations.append(
                    f"Consider cross-training team members in {skill} to reduce bottlenecks"
                )

        return recommendations

    def sprint_commitment(
        self,
        developers: list[Developer],
        sprint_duration_days: float,
        buffer_percentage: float = 20
    ) -> dict:
        """Story points and hours the team can commit to, before and after buffer."""
        total_points = sum(d.velocity for d in developers)
        total_hours = sprint_duration_days * HOURS_PER_DAY * len(developers)
        multiplier = 1 - buffer_percentage / 100

        return {
            "total_story_points": total_points,
            "total_hours": total_hours,
            "recommended_story_points": math.floor(total_points * multiplier),
            "recommended_hours": math.floor(total_hours * multiplier),
        }

    def estimate_task_completion(self, task: Task, developer: Developer) -> CompletionEstimate:
        """Calendar days a developer needs for a task, adjusted for quality and collaboration."""
        velocity_per_day = developer.velocity / 14  # two-week sprints

        if task.story_points > 0 and velocity_per_day > 0:
            days = task.story_points / velocity_per_day
        else:
            days = task.estimated_effort_hours / HOURS_PER_DAY

        adjustment = (developer.code_quality / 10 + developer.collaboration / 10) / 2
        if adjustment > 0:
            days = days / adjustment

        if developer.velocity > 8 and developer.code_quality > 7:
            confidence = "high"
        elif developer.velocity > 5 and developer.code_quality > 5:
            confidence = "medium"
        else:
            confidence = "low"

        return CompletionEstimate(estimated_days=math.ceil(days), confidence=confidence)
