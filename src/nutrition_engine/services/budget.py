"""Remaining macro budget for a day."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from nutrition_engine.domain.errors import NoActiveGoal
from nutrition_engine.domain.macros import MacroVector
from nutrition_engine.domain.plans import Goal
from nutrition_engine.services.consumption import ConsumptionService

_logger = logging.getLogger(__name__)


class GoalRepository(Protocol):
    """Read interface for user goals."""

    def get_active_goal(self, owner_id: UUID) -> Goal | None:
        """Return the owner's active goal, if any."""


def remaining_budget(target: MacroVector, consumed: MacroVector) -> MacroVector:
    """Return target minus consumed, floored at zero per field."""
    return target.subtract_floored(consumed)


@dataclass
class BudgetService:
    """Service computing what is left of the daily goal."""

    goal_repository: GoalRepository
    consumption_service: ConsumptionService

    def remaining(self, owner_id: UUID, day: date) -> MacroVector:
        """Return the remaining budget, raising NoActiveGoal without a goal."""
        goal = self.goal_repository.get_active_goal(owner_id)
        if goal is None or not goal.is_active:
            _logger.info("No active goal for owner %s", owner_id)
            raise NoActiveGoal(owner_id)
        consumed = self.consumption_service.consumed_on(owner_id, day)
        return remaining_budget(goal.target, consumed)
