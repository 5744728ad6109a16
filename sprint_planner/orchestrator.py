"""
Sprint Orchestrator

End-to-end sprint creation, analysis, rebalancing and retrospectives on top
of the planning engines.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

from .analyzer import CapacityCalculator, CapacityPlan, SprintHealth
from .assignment import AssignmentResult, ItemOutcome, TaskAssignmentEngine
from .balancer import BalanceResult, WorkloadBalancer
from .config import Config
from .exceptions import NotFoundError, PersistenceError
from .logging import get_logger
from .models import (
    ALL_STATUSES,
    OPEN_STATUSES,
    Developer,
    Sprint,
    SprintDraft,
    SprintOptions,
    SprintStatus,
    Task,
    TaskStatus,
    planning_order,
    validate_dates,
)
from .predictor import SprintSuccessPredictor, SuccessPrediction
from .recommendations import RecommendationPriority
from .repositories import DeveloperRepository, SprintRepository, TaskRepository
from .velocity import SprintVelocityRecord, VelocityEstimator


logger = get_logger(__name__)

STALE_AFTER = timedelta(days=3)
HIGH_EFFORT_HOURS = 20


def as_utc(moment: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken as local time."""
    return moment.astimezone(timezone.utc)


@dataclass
class SprintAnalytics:
    """Planning-time read of a sprint."""
    velocity_trend: str  # "improving", "stable", "declining"
    team_efficiency: int  # 0-100
    success_probability: int  # 0-100
    risk_factors: list[str] = field(default_factory=list)
    recommendations: list[dict] = field(default_factory=list)
    prediction: Optional[SuccessPrediction] = None
    plan: Optional[CapacityPlan] = None

    def to_dict(self) -> dict:
        return {
            "velocity_trend": self.velocity_trend,
            "team_efficiency": self.team_efficiency,
            "success_probability": self.success_probability,
            "risk_factors": self.risk_factors,
            "recommendations": self.recommendations,
            "prediction": self.prediction.to_dict() if self.prediction else None,
            "capacity": self.plan.to_dict() if self.plan else None,
        }


@dataclass
class OptimizedSprint:
    """Everything produced by an automated sprint planning run."""
    sprint: Sprint
    analytics: SprintAnalytics
    assigned_count: int = 0
    linked: list[ItemOutcome] = field(default_factory=list)
    assignment: Optional[AssignmentResult] = None
    balance: Optional[BalanceResult] = None

    @property
    def failures(self) -> list[ItemOutcome]:
        failures = [o for o in self.linked if not o.ok]
        if self.assignment:
            failures.extend(o for o in self.assignment.outcomes if not o.ok)
        if self.balance:
            failures.extend(self.balance.failures)
        return failures

    def to_dict(self) -> dict:
        return {
            "sprint": self.sprint.to_dict(),
            "analytics": self.analytics.to_dict(),
            "assigned": self.assigned_count,
            "linked": [o.to_dict() for o in self.linked],
            "assignment": self.assignment.to_dict() if self.assignment else None,
            "balance": self.balance.to_dict() if self.balance else None,
        }


@dataclass
class Retrospective:
    """End-of-sprint summary."""
    sprint_id: str
    velocity_achieved: float
    velocity_target: float
    completion_rate: float  # 0-100
    team_performance: dict[str, float] = field(default_factory=dict)
    blockers: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    celebrations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "sprint_id": self.sprint_id,
            "velocity": {
                "achieved": self.velocity_achieved,
                "target": self.velocity_target,
            },
            "completion_rate": round(self.completion_rate, 1),
            "team_performance": dict(self.team_performance),
            "blockers": self.blockers,
            "improvements": self.improvements,
            "celebrations": self.celebrations,
        }


class SprintOrchestrator:
    """
    Runs the planning pipeline against repository snapshots.

    Holds no planning state of its own: every call reloads developers and
    tasks and recomputes the capacity plan.

    Usage:
        orchestrator = SprintOrchestrator(developers, tasks, sprints)
        result = orchestrator.create_optimized_sprint(
            "Sprint 12", date(2026, 3, 2), date(2026, 3, 16)
        )
        print(result.analytics.success_probability)
    """

    def __init__(
        self,
        developers: DeveloperRepository,
        tasks: TaskRepository,
        sprints: SprintRepository,
        config: Optional[Config] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.developers = developers
        self.tasks = tasks
        self.sprints = sprints
        self.config = config
        self.clock = clock

        self.calculator = CapacityCalculator()
        self.assignment_engine = TaskAssignmentEngine(tasks)
        self.balancer = WorkloadBalancer(tasks)
        self.predictor = SprintSuccessPredictor()
        self.velocity_estimator = VelocityEstimator()

    def _sprint_options(self, options: Optional[SprintOptions]) -> SprintOptions:
        if options is not None:
            return options
        if self.config is not None:
            return self.config.sprint_options()
        return SprintOptions()

    def _get_sprint(self, sprint_id: str) -> Sprint:
        sprint = self.sprints.get(sprint_id)
        if sprint is None:
            raise NotFoundError("Sprint", sprint_id)
        return sprint

    def _sprint_tasks(self, sprint: Sprint) -> list[Task]:
        linked = set(sprint.task_ids)
        return [t for t in self.tasks.list_by_status(ALL_STATUSES) if t.id in linked]

    def _sprint_snapshot(
        self,
        sprint: Sprint,
        options: Optional[SprintOptions]
    ) -> tuple[list[Developer], list[Task], CapacityPlan]:
        """Fresh developers, sprint tasks and capacity plan for an existing sprint."""
        planning = self._sprint_options(options).planning_options(sprint.start_date, sprint.end_date)
        developers = self.developers.list_active()
        tasks = self._sprint_tasks(sprint)
        plan = self.calculator.calculate(developers, tasks, planning)
        return developers, tasks, plan

    def select_tasks(
        self,
        tasks: list[Task],
        plan: CapacityPlan,
        buffer_percentage: float
    ) -> list[Task]:
        """Highest priority first; skip any task that no longer fits the buffered capacity."""
        max_effort = plan.available_capacity * (1 - buffer_percentage / 100)

        selected = []
        total_effort = 0.0
        for task in planning_order(tasks):
            if total_effort + task.estimated_effort_hours <= max_effort:
                selected.append(task)
                total_effort += task.estimated_effort_hours

        return selected

    def _link_tasks(self, sprint: Sprint, tasks: list[Task]) -> list[ItemOutcome]:
        outcomes = []
        for task in tasks:
            try:
                self.sprints.link_task(sprint.id, task.id)
            except (NotFoundError, PersistenceError) as e:
                logger.warning("sprint_link_failed", sprint_id=sprint.id, task_id=task.id, error=str(e))
                outcomes.append(ItemOutcome(
                    item_id=task.id,
                    ok=False,
                    message=f'Could not add "{task.title}" to {sprint.name}',
                    error=str(e),
                ))
                continue
            outcomes.append(ItemOutcome(item_id=task.id, ok=True, message=f'Added "{task.title}"'))
        return outcomes

    def _analytics(
        self,
        developers: list[Developer],
        tasks: list[Task],
        plan: CapacityPlan,
        velocity_history: Optional[list[SprintVelocityRecord]]
    ) -> SprintAnalytics:
        history = velocity_history or []
        team = self.velocity_estimator.team_metrics(developers, history)
        prediction = self.predictor.predict(plan, tasks, [r.actual_velocity for r in history])

        risk_factors = []
        if plan.health is SprintHealth.OVERLOADED:
            risk_factors.append("Team capacity is overallocated")
        if any(r.priority is RecommendationPriority.HIGH for r in plan.recommendations):
            risk_factors.append("High priority capacity issues detected")

        if developers:
            efficiency = round(sum(d.code_quality for d in developers) / len(developers) * 10)
        else:
            efficiency = 0

        return SprintAnalytics(
            velocity_trend=team.team_trend,
            team_efficiency=efficiency,
            success_probability=prediction.probability,
            risk_factors=risk_factors,
            recommendations=[r.to_dict() for r in plan.recommendations],
            prediction=prediction,
            plan=plan,
        )

    def create_optimized_sprint(
        self,
        name: str,
        start_date: date,
        end_date: date,
        options: Optional[SprintOptions] = None,
        velocity_history: Optional[list[SprintVelocityRecord]] = None
    ) -> OptimizedSprint:
        """
        Create a sprint sized to the team, fill it and staff it.

        Args:
            name: Sprint name
            start_date: First day of the sprint
            end_date: Last day of the sprint
            options: Duration, buffer and which optional stages to run
            velocity_history: Past team sprints, oldest first

        Raises:
            ValidationError: end before start, or no active developers
        """
        validate_dates(start_date, end_date)
        options = self._sprint_options(options)
        planning = options.planning_options(start_date, end_date)

        developers = self.developers.list_active()
        open_tasks = self.tasks.list_by_status(OPEN_STATUSES)
        plan = self.calculator.calculate(developers, open_tasks, planning)

        sprint = self.sprints.create(SprintDraft(
            name=name,
            start_date=start_date,
            end_date=end_date,
            status=SprintStatus.PLANNING,
            capacity_hours=plan.total_capacity,
            velocity_target=plan.team_velocity,
        ))
        logger.info(
            "sprint_created",
            sprint_id=sprint.id,
            capacity_hours=plan.total_capacity,
            velocity_target=plan.team_velocity,
        )

        candidates = [
            t for t in open_tasks
            if t.status in (TaskStatus.BACKLOG, TaskStatus.TODO) and t.sprint_id is None
        ]
        selected = self.select_tasks(candidates, plan, options.buffer_percentage)
        linked = self._link_tasks(sprint, selected)
        linked_ids = {o.item_id for o in linked if o.ok}

        assignment = None
        if options.auto_assign_tasks:
            unassigned = [t for t in selected if t.id in linked_ids and not t.is_assigned]
            assignment = self.assignment_engine.assign(unassigned, plan.developers)

        sprint = self._get_sprint(sprint.id)

        balance = None
        if options.balance_workload:
            developers, tasks, sprint_plan = self._sprint_snapshot(sprint, options)
            balance = self.balancer.rebalance(sprint_plan, tasks)

        developers, tasks, sprint_plan = self._sprint_snapshot(sprint, options)
        analytics = self._analytics(developers, tasks, sprint_plan, velocity_history)

        assigned_count = assignment.assigned if assignment else 0
        logger.info(
            "sprint_planned",
            sprint_id=sprint.id,
            selected=len(selected),
            assigned=assigned_count,
            rebalanced=balance.rebalanced if balance else 0,
            success_probability=analytics.success_probability,
        )

        return OptimizedSprint(
            sprint=sprint,
            analytics=analytics,
            assigned_count=assigned_count,
            linked=linked,
            assignment=assignment,
            balance=balance,
        )

    def auto_assign_tasks(
        self,
        sprint_id: str,
        options: Optional[SprintOptions] = None
    ) -> AssignmentResult:
        """Assign the sprint's unassigned open tasks."""
        sprint = self._get_sprint(sprint_id)
        _, tasks, plan = self._sprint_snapshot(sprint, options)
        unassigned = [t for t in tasks if not t.is_assigned and not t.is_done]
        return self.assignment_engine.assign(unassigned, plan.developers)

    def balance_sprint_workload(
        self,
        sprint_id: str,
        options: Optional[SprintOptions] = None
    ) -> BalanceResult:
        """Move work off overloaded developers in an existing sprint."""
        sprint = self._get_sprint(sprint_id)
        _, tasks, plan = self._sprint_snapshot(sprint, options)
        return self.balancer.rebalance(plan, tasks)

    def predict_sprint_success(
        self,
        sprint_id: str,
        options: Optional[SprintOptions] = None,
        velocity_history: Optional[list[SprintVelocityRecord]] = None
    ) -> SuccessPrediction:
        sprint = self._get_sprint(sprint_id)
        _, tasks, plan = self._sprint_snapshot(sprint, options)
        history = [r.actual_velocity for r in velocity_history or []]
        return self.predictor.predict(plan, tasks, history)

    def analyze_current_sprint(
        self,
        sprint_id: str,
        options: Optional[SprintOptions] = None,
        velocity_history: Optional[list[SprintVelocityRecord]] = None
    ) -> SprintAnalytics:
        sprint = self._get_sprint(sprint_id)
        developers, tasks, plan = self._sprint_snapshot(sprint, options)
        return self._analytics(developers, tasks, plan, velocity_history)

    def identify_blockers(self, tasks: list[Task]) -> list[str]:
        blockers = []
        now = as_utc(self.clock())

        stuck = [
            t for t in tasks
            if t.status == TaskStatus.IN_PROGRESS
            and t.updated_at is not None
            and now - as_utc(t.updated_at) > STALE_AFTER
        ]
        if stuck:
            blockers.append(f"{len(stuck)} tasks have been in progress for over 3 days")

        large = [t for t in tasks if t.estimated_effort_hours > HIGH_EFFORT_HOURS]
        if large:
            blockers.append(f"{len(large)} tasks have high effort estimates (>20 hours)")

        return blockers

    def _improvements(self, tasks: list[Task], completion_rate: float) -> list[str]:
        improvements = []

        if completion_rate < 80:
            improvements.append("Consider breaking down large tasks into smaller, manageable pieces")
            improvements.append("Implement daily standups to identify blockers early")

        if any(not t.is_assigned for t in tasks):
            improvements.append("Ensure all tasks are assigned at sprint start")

        improvements.append("Conduct mid-sprint reviews to adjust scope if needed")
        improvements.append("Improve estimation accuracy through planning poker sessions")
        return improvements

    def _celebrations(self, tasks: list[Task], completion_rate: float) -> list[str]:
        celebrations = []

        if completion_rate >= 90:
            celebrations.append("Excellent sprint completion rate!")

        done = len([t for t in tasks if t.is_done])
        if done > 0:
            celebrations.append(f"Successfully completed {done} tasks")

        celebrations.append("Team collaboration and communication")
        celebrations.append("Continuous improvement mindset")
        return celebrations

    def generate_retrospective(self, sprint_id: str) -> Retrospective:
        """
        Summarize a sprint.

        Raises:
            NotFoundError: unknown sprint
        """
        sprint = self._get_sprint(sprint_id)
        tasks = self._sprint_tasks(sprint)
        completed = [t for t in tasks if t.is_done]

        completion_rate = len(completed) / len(tasks) * 100 if tasks else 0.0

        performance = {}
        for developer in self.developers.list_active():
            performance[developer.id] = sum(
                t.story_points for t in completed if t.assignee_id == developer.id
            )

        return Retrospective(
            sprint_id=sprint.id,
            velocity_achieved=sum(t.story_points for t in completed),
            velocity_target=sprint.velocity_target,
            completion_rate=completion_rate,
            team_performance=performance,
            blockers=self.identify_blockers(tasks),
            improvements=self._improvements(tasks, completion_rate),
            celebrations=self._celebrations(tasks, completion_rate),
        )
