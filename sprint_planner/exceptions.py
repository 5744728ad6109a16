"""
Sprint Planner Errors

Error kinds raised by the planning engine and its repository collaborators.
"""

from typing import Optional


class PlannerError(Exception):
    """Base exception for planning errors."""


class ValidationError(PlannerError, ValueError):
    """Input rejected before any computation ran."""


class NotFoundError(PlannerError, LookupError):
    """An id did not resolve to a developer, task or sprint."""

    def __init__(self, kind: str, item_id: str) -> None:
        super().__init__(f"{kind} {item_id} not found")
        self.kind = kind
        self.item_id = item_id


class PersistenceError(PlannerError):
    """A repository call failed for a specific task."""

    def __init__(self, message: str, task_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.task_id = task_id
