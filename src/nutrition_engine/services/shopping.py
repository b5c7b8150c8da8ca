"""Shopping list aggregation over planned meals."""

import logging
import math
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from nutrition_engine.domain.catalog import Ingredient, Recipe
from nutrition_engine.domain.errors import Diagnostic, InvalidAmount, InvalidServings
from nutrition_engine.domain.plans import DateRange, MealPlanEntry
from nutrition_engine.domain.suggestions import ShoppingList, ShoppingListItem
from nutrition_engine.services.recipes import IngredientRepository, RecipeRepository

_logger = logging.getLogger(__name__)


class MealPlanRepository(Protocol):
    """Read interface for planned meals."""

    def list_meal_plan_entries(
        self, owner_id: UUID, date_range: DateRange
    ) -> list[MealPlanEntry]:
        """Return an owner's planned meals within the range."""


@dataclass
class _Line:
    ingredient: Ingredient
    unit: str
    amounts: list[float] = field(default_factory=list)


@dataclass
class _Expander:
    """Walks recipes down to plain ingredients, scaling amounts on the way."""

    ingredient_repository: IngredientRepository
    recipe_repository: RecipeRepository
    lines: dict[tuple[UUID, str], _Line] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    _ingredients: dict[UUID, Ingredient | None] = field(
        default_factory=dict, init=False
    )
    _recipes: dict[UUID, Recipe | None] = field(default_factory=dict, init=False)
    _flagged: set[tuple[str, str]] = field(default_factory=set, init=False)

    def recipe(self, recipe_id: UUID) -> Recipe | None:
        if recipe_id not in self._recipes:
            self._recipes[recipe_id] = self.recipe_repository.get_recipe(recipe_id)
        return self._recipes[recipe_id]

    def ingredient(self, ingredient_id: UUID) -> Ingredient | None:
        if ingredient_id not in self._ingredients:
            self._ingredients[ingredient_id] = (
                self.ingredient_repository.get_ingredient(ingredient_id)
            )
        return self._ingredients[ingredient_id]

    def expand(self, recipe: Recipe, ratio: float, path: frozenset[UUID]) -> None:
        path = path | {recipe.id}
        for line in recipe.ingredients:
            if line.amount <= 0:
                raise InvalidAmount(
                    f"Recipe {recipe.id} has non-positive amount {line.amount}"
                )
            if not line.is_sub_recipe:
                self._emit(line.ref, line.amount * ratio, line.unit)
                continue
            if line.ref in path:
                self.flag(
                    "cycle_detected",
                    f"Recipe {line.ref} expands into itself via {recipe.id}",
                    line.ref,
                )
                continue
            sub_recipe = self.recipe(line.ref)
            if sub_recipe is None:
                self.flag(
                    "missing_recipe", f"Sub-recipe {line.ref} not found", line.ref
                )
                continue
            if sub_recipe.servings < 1:
                self.flag(
                    "invalid_recipe",
                    f"Sub-recipe {line.ref} has {sub_recipe.servings} servings",
                    line.ref,
                )
                continue
            self.expand(sub_recipe, ratio * line.amount / sub_recipe.servings, path)

    def _emit(self, ingredient_id: UUID, amount: float, unit: str) -> None:
        ingredient = self.ingredient(ingredient_id)
        if ingredient is None:
            self.flag(
                "missing_ingredient",
                f"Ingredient {ingredient_id} not found",
                ingredient_id,
            )
            return
        key = (ingredient_id, unit)
        if key not in self.lines:
            self.lines[key] = _Line(ingredient=ingredient, unit=unit)
        self.lines[key].amounts.append(amount)

    def flag(self, code: str, message: str, ref: UUID) -> None:
        if (code, str(ref)) in self._flagged:
            return
        self._flagged.add((code, str(ref)))
        _logger.warning("Shopping list: %s", message)
        self.diagnostics.append(Diagnostic(code=code, message=message, ref=str(ref)))


@dataclass
class ShoppingListService:
    """Builds a deduplicated shopping list from planned meals."""

    meal_plan_repository: MealPlanRepository
    ingredient_repository: IngredientRepository
    recipe_repository: RecipeRepository

    def build(self, owner_id: UUID, date_range: DateRange) -> ShoppingList:
        """Return the sorted list of ingredients needed for the range."""
        entries = self.meal_plan_repository.list_meal_plan_entries(owner_id, date_range)
        expander = _Expander(
            ingredient_repository=self.ingredient_repository,
            recipe_repository=self.recipe_repository,
        )
        for entry in entries:
            if entry.owner_id != owner_id or not date_range.contains(entry.day):
                continue
            if entry.servings <= 0:
                raise InvalidServings(
                    f"Plan entry {entry.id} has servings {entry.servings}"
                )
            recipe = expander.recipe(entry.recipe_id)
            if recipe is None:
                expander.flag(
                    "missing_recipe",
                    f"Planned recipe {entry.recipe_id} not found",
                    entry.recipe_id,
                )
                continue
            if recipe.servings < 1:
                expander.flag(
                    "invalid_recipe",
                    f"Recipe {recipe.id} has {recipe.servings} servings",
                    recipe.id,
                )
                continue
            expander.expand(recipe, entry.servings / recipe.servings, frozenset())

        items = [
            ShoppingListItem(
                ingredient_id=line.ingredient.id,
                ingredient_name=line.ingredient.name,
                amount=math.fsum(line.amounts),
                unit=line.unit,
                category=line.ingredient.category,
            )
            for line in expander.lines.values()
        ]
        items.sort(key=lambda item: (item.category, item.ingredient_name, item.unit))
        return ShoppingList(items=items, diagnostics=expander.diagnostics)
