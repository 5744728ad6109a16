"""
Tests for the velocity estimator.
"""

import pytest

from sprint_planner.models import Developer, Task
from sprint_planner.velocity import (
    SprintVelocityRecord,
    VelocityEstimator,
    coefficient_of_variation
)


def make_history(actuals, completion_rate=1.0):
    return [
        SprintVelocityRecord(
            sprint_id=f"s{i}",
            sprint_name=f"Sprint {i}",
            planned_velocity=actual,
            actual_velocity=actual,
            completion_rate=completion_rate,
        )
        for i, actual in enumerate(actuals)
    ]


class TestTrend:
    """Tests for trend detection."""

    def test_steady_history_is_stable(self):
        assert VelocityEstimator().calculate_trend([5] * 6) == "stable"

    def test_increasing(self):
        """Test a >10% rise against the previous three sprints."""
        assert VelocityEstimator().calculate_trend([10, 10, 10, 15, 15, 15]) == "increasing"

    def test_decreasing(self):
        assert VelocityEstimator().calculate_trend([15, 15, 15, 10, 10, 10]) == "decreasing"

    def test_short_history_is_stable(self):
        """Test fewer than 3 sprints or no older window."""
        estimator = VelocityEstimator()

        assert estimator.calculate_trend([1, 20]) == "stable"
        assert estimator.calculate_trend([5, 6, 7]) == "stable"

    def test_partial_older_window(self):
        """Test the older window may hold fewer than 3 sprints."""
        assert VelocityEstimator().calculate_trend([4, 5, 6, 7]) == "increasing"

    def test_rise_from_zero(self):
        """Test an older average of zero does not divide by zero."""
        estimator = VelocityEstimator()

        assert estimator.calculate_trend([0, 0, 0, 1, 1, 1]) == "increasing"
        assert estimator.calculate_trend([0] * 6) == "stable"


class TestPrediction:
    """Tests for next-sprint prediction and confidence."""

    def test_steady_history(self):
        """Test steady velocity predicts itself with high confidence."""
        metrics = VelocityEstimator().estimate([5] * 6)

        assert metrics.trend == "stable"
        assert metrics.predicted_velocity == pytest.approx(5)
        assert metrics.confidence > 0.8
        assert metrics.sprints_analyzed == 6

    def test_prediction_is_clamped(self):
        """Test the linear projection stays within 1.5x of the recent average."""
        # Projection is 10, recent average is 6
        assert VelocityEstimator().predict_next([2, 4, 6, 8]) == pytest.approx(9)

    def test_single_sprint(self):
        assert VelocityEstimator().predict_next([7]) == 7

    def test_empty_history_uses_baseline(self):
        """Test an empty series falls back to the baseline."""
        metrics = VelocityEstimator().estimate([], baseline=6)

        assert metrics.predicted_velocity == 6
        assert metrics.average_velocity == 6
        assert metrics.confidence == pytest.approx(0.3)
        assert metrics.sprints_analyzed == 0

    def test_sparse_history_confidence(self):
        """Test fewer than 3 sprints gives the default confidence."""
        assert VelocityEstimator().calculate_confidence([3, 9]) == pytest.approx(0.3)

    def test_zero_history_confidence(self):
        """Test a zero mean floors consistency at 0.1 before the data bonus."""
        assert VelocityEstimator().calculate_confidence([0, 0, 0]) == pytest.approx(0.16)

    def test_confidence_bounds(self):
        """Test confidence stays within 0-1 for volatile series."""
        confidence = VelocityEstimator().calculate_confidence([1, 50, 2, 60, 1])
        assert 0 <= confidence <= 1

    def test_developer_baseline(self):
        """Test a developer without history falls back to their profile velocity."""
        developer = Developer(id="d1", name="Dana", velocity=12)

        metrics = VelocityEstimator().estimate_developer(developer, [])

        assert metrics.current_velocity == 12

    def test_metrics_to_dict(self):
        data = VelocityEstimator().estimate([5, 6, 7]).to_dict()

        assert data["current"] == 7
        assert data["trend"] == "stable"


class TestConsistency:
    """Tests for the velocity consistency score."""

    def test_default_without_history(self):
        estimator = VelocityEstimator()

        assert estimator.velocity_consistency_score(None) == 75
        assert estimator.velocity_consistency_score([4, 8]) == 75

    def test_steady_velocity(self):
        assert VelocityEstimator().velocity_consistency_score([5, 5, 5]) == pytest.approx(100)

    def test_score_is_bounded(self):
        score = VelocityEstimator().velocity_consistency_score([1, 1, 1, 100])
        assert score == 0

    def test_coefficient_of_variation(self):
        assert coefficient_of_variation([2, 4]) == pytest.approx(1 / 3)
        assert coefficient_of_variation([0, 0]) is None


class TestTeamMetrics:
    """Tests for team velocity metrics."""

    def test_aggregates_and_recommendations(self):
        """Test totals, trend mapping and support recommendations."""
        developers = [
            Developer(id="d1", name="Dana", velocity=2),
            Developer(id="d2", name="Eli", velocity=10),
        ]
        history = make_history([10, 10, 10, 20, 20, 20], completion_rate=0.5)

        metrics = VelocityEstimator().team_metrics(developers, history)

        assert metrics.total_velocity == 12
        assert metrics.average_velocity == 6
        assert metrics.velocity_distribution == {"d1": 2, "d2": 10}
        assert metrics.team_trend == "improving"
        assert (
            "Identify blockers for low-velocity developers and provide additional support"
            in metrics.recommendations
        )
        assert any("completion rate is low" in r for r in metrics.recommendations)
        assert "Consider cross-training team members in Backend to reduce bottlenecks" in metrics.recommendations

    def test_covered_skills_not_flagged(self):
        """Test skills held by two developers need no cross-training."""
        developers = [
            Developer(id="d1", name="Dana", velocity=8, strengths={"Backend"}),
            Developer(id="d2", name="Eli", velocity=8, strengths={"Backend"}),
        ]

        metrics = VelocityEstimator().team_metrics(developers)

        assert metrics.team_trend == "stable"
        assert not any("Backend" in r for r in metrics.recommendations)

    def test_declining(self):
        developers = [Developer(id="d1", name="Dana", velocity=8)]

        metrics = VelocityEstimator().team_metrics(developers, make_history([20, 20, 20, 10, 10, 10]))

        assert metrics.team_trend == "declining"


class TestPlanningHelpers:
    """Tests for commitment and completion estimates."""

    def test_sprint_commitment(self):
        """Test buffered commitment is floored."""
        developers = [
            Developer(id="d1", name="Dana", velocity=10),
            Developer(id="d2", name="Eli", velocity=15),
        ]

        commitment = VelocityEstimator().sprint_commitment(developers, 10, 20)

        assert commitment["total_story_points"] == 25
        assert commitment["total_hours"] == 160
        assert commitment["recommended_story_points"] == 20
        assert commitment["recommended_hours"] == 128

    def test_completion_from_story_points(self):
        """Test story points are converted through daily velocity."""
        developer = Developer(id="d1", name="Dana", velocity=14, code_quality=10, collaboration=10)
        task = Task(id="t1", title="Story", estimated_effort_hours=10, story_points=3)

        estimate = VelocityEstimator().estimate_task_completion(task, developer)

        assert estimate.estimated_days == 3
        assert estimate.confidence == "high"

    def test_completion_from_hours(self):
        """Test effort hours are used without story points."""
        developer = Developer(id="d1", name="Dana", velocity=0, code_quality=5, collaboration=5)
        task = Task(id="t1", title="Chore", estimated_effort_hours=12)

        estimate = VelocityEstimator().estimate_task_completion(task, developer)

        # 1.5 days at half effectiveness
        assert estimate.estimated_days == 3
        assert estimate.confidence == "low"
