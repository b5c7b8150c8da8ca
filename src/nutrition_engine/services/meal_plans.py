"""Planned macro totals for meal plans."""

import logging
from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from nutrition_engine.domain.errors import Diagnostic, InvalidServings
from nutrition_engine.domain.macros import MacroVector, sum_macros
from nutrition_engine.domain.plans import DailyTotals, DateRange
from nutrition_engine.services.recipes import RecipeService
from nutrition_engine.services.shopping import MealPlanRepository

_logger = logging.getLogger(__name__)


@dataclass
class PlannedTotals:
    """Planned macros per day with skipped entries."""

    daily: list[DailyTotals]
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class MealPlanService:
    """Service computing the macros a meal plan adds up to."""

    repository: MealPlanRepository
    recipe_service: RecipeService

    def planned_totals(self, owner_id: UUID, date_range: DateRange) -> PlannedTotals:
        """Return the planned macros for every day in the range."""
        entries = self.repository.list_meal_plan_entries(owner_id, date_range)
        contributions: dict[date, list[MacroVector]] = {
            day: [] for day in date_range.days()
        }
        diagnostics: list[Diagnostic] = []
        for entry in entries:
            if entry.owner_id != owner_id or entry.day not in contributions:
                continue
            if entry.servings <= 0:
                raise InvalidServings(
                    f"Plan entry {entry.id} has servings {entry.servings}"
                )
            recipe = self.recipe_service.recipe_repository.get_recipe(entry.recipe_id)
            if recipe is None:
                _logger.warning("Planned recipe %s not found", entry.recipe_id)
                diagnostics.append(
                    Diagnostic(
                        code="missing_recipe",
                        message=f"Planned recipe {entry.recipe_id} not found",
                        ref=str(entry.recipe_id),
                    )
                )
                continue
            serving = self.recipe_service.per_serving_macros(recipe)
            contributions[entry.day].append(serving.scale(entry.servings))
        return PlannedTotals(
            daily=[
                DailyTotals(day=day, macros=sum_macros(vectors))
                for day, vectors in contributions.items()
            ],
            diagnostics=diagnostics,
        )
