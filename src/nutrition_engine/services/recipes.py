"""Recipe macro calculation and catalog access."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from nutrition_engine.domain.catalog import (
    Ingredient,
    Recipe,
    RecipeDraft,
    RecipeLine,
)
from nutrition_engine.domain.errors import Diagnostic, InvalidAmount, InvalidServings
from nutrition_engine.domain.macros import MacroVector, sum_macros

_logger = logging.getLogger(__name__)


class IngredientRepository(Protocol):
    """Read interface for the shared ingredient catalog."""

    def get_ingredient(self, ingredient_id: UUID) -> Ingredient | None:
        """Return an ingredient by id, if present."""

    def list_ingredients(self) -> list[Ingredient]:
        """Return every catalog ingredient."""


class RecipeRepository(Protocol):
    """Persistence interface for recipes."""

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id, if present."""

    def list_recipes(self, query: str | None = None) -> list[Recipe]:
        """Return recipes, optionally filtered by name."""

    def create_recipe(self, draft: RecipeDraft) -> Recipe:
        """Store a recipe and return it with its id."""


@dataclass(frozen=True)
class MacroReference:
    """Macros of a referenced item and the amount they describe."""

    macros: MacroVector
    serving_size: float


class MacroResolver(Protocol):
    """Maps a recipe line to the macros of what it references."""

    def resolve(self, line: RecipeLine) -> MacroReference | None:
        """Return the referenced macros, or None when unresolvable."""


@dataclass(frozen=True)
class MacroComputation:
    """Recipe totals plus the lines that could not be resolved."""

    total: MacroVector
    diagnostics: list[Diagnostic] = field(default_factory=list)


def compute_recipe_macros(
    lines: Iterable[RecipeLine], resolver: MacroResolver
) -> MacroComputation:
    """Sum the macro contribution of every resolvable line.

    Unresolvable lines are skipped and reported in the diagnostics.
    """
    contributions: list[MacroVector] = []
    diagnostics: list[Diagnostic] = []
    for line in lines:
        if line.amount <= 0:
            raise InvalidAmount(f"Line amount must be positive, got {line.amount}")
        reference = resolver.resolve(line)
        if reference is None:
            diagnostic = _missing_reference(line)
            _logger.warning("Skipping recipe line: %s", diagnostic.message)
            diagnostics.append(diagnostic)
            continue
        ratio = line.amount / reference.serving_size
        contributions.append(reference.macros.scale(ratio))
    return MacroComputation(total=sum_macros(contributions), diagnostics=diagnostics)


def per_serving(total: MacroVector, servings: int) -> MacroVector:
    """Divide recipe totals by its servings."""
    if isinstance(servings, bool) or servings < 1:
        raise InvalidServings(f"Servings must be >= 1, got {servings!r}")
    return total.scale(1 / servings)


@dataclass
class CatalogResolver(MacroResolver):
    """Resolve lines against ingredient and recipe lookups.

    Sub-recipes count in servings. Their cached totals are used unless
    ``recompute_sub_recipes`` is set, in which case they are recomputed
    recursively; a recipe that reaches itself contributes nothing and is
    reported as ``cycle_detected``.
    """

    get_ingredient: Callable[[UUID], Ingredient | None]
    get_recipe: Callable[[UUID], Recipe | None]
    recompute_sub_recipes: bool = False
    _visiting: set[UUID] = field(default_factory=set, init=False, repr=False)
    _nested: list[Diagnostic] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def from_catalog(
        cls,
        ingredients: Iterable[Ingredient],
        recipes: Iterable[Recipe] = (),
        *,
        recompute_sub_recipes: bool = False,
    ) -> "CatalogResolver":
        """Build a resolver over already-fetched catalog rows."""
        ingredient_map = {ingredient.id: ingredient for ingredient in ingredients}
        recipe_map = {recipe.id: recipe for recipe in recipes}
        return cls(
            get_ingredient=ingredient_map.get,
            get_recipe=recipe_map.get,
            recompute_sub_recipes=recompute_sub_recipes,
        )

    def resolve(self, line: RecipeLine) -> MacroReference | None:
        """Return macros for an ingredient or a sub-recipe serving."""
        if not line.is_sub_recipe:
            ingredient = self.get_ingredient(line.ref)
            if ingredient is None or ingredient.serving_size <= 0:
                return None
            return MacroReference(ingredient.macros, ingredient.serving_size)
        recipe = self.get_recipe(line.ref)
        if recipe is None:
            return None
        totals = self._recipe_totals(recipe)
        return MacroReference(per_serving(totals, recipe.servings), 1.0)

    def compute(self, recipe: Recipe) -> MacroComputation:
        """Compute a recipe's totals from its lines.

        Diagnostics from recomputed sub-recipes are reported with the
        recipe's own.
        """
        self._visiting.add(recipe.id)
        outer = self._nested
        self._nested = []
        try:
            computation = compute_recipe_macros(recipe.ingredients, self)
            return MacroComputation(
                total=computation.total,
                diagnostics=[*computation.diagnostics, *self._nested],
            )
        finally:
            self._visiting.discard(recipe.id)
            self._nested = outer

    def _recipe_totals(self, recipe: Recipe) -> MacroVector:
        if not self.recompute_sub_recipes and recipe.total_macros is not None:
            return recipe.total_macros
        if recipe.id in self._visiting:
            _logger.warning("Recipe %s references itself", recipe.id)
            self._nested.append(
                Diagnostic(
                    code="cycle_detected",
                    message=f"Recipe {recipe.id} references itself",
                    ref=str(recipe.id),
                )
            )
            return MacroVector.zero()
        computation = self.compute(recipe)
        self._nested.extend(computation.diagnostics)
        return computation.total


@dataclass
class RecipeService:
    """Application service for recipe macros."""

    ingredient_repository: IngredientRepository
    recipe_repository: RecipeRepository

    def resolver(self, *, recompute_sub_recipes: bool = False) -> CatalogResolver:
        """Return a resolver backed by the catalog repositories."""
        return CatalogResolver(
            get_ingredient=self.ingredient_repository.get_ingredient,
            get_recipe=self.recipe_repository.get_recipe,
            recompute_sub_recipes=recompute_sub_recipes,
        )

    def recompute(
        self, recipe: Recipe, *, recompute_sub_recipes: bool = False
    ) -> MacroComputation:
        """Compute fresh totals for a recipe, ignoring its snapshot."""
        resolver = self.resolver(recompute_sub_recipes=recompute_sub_recipes)
        return resolver.compute(recipe)

    def totals(self, recipe: Recipe, *, trust_cache: bool = True) -> MacroVector:
        """Return recipe totals from the snapshot or by recomputing."""
        if trust_cache and recipe.total_macros is not None:
            return recipe.total_macros
        return self.recompute(recipe).total

    def per_serving_macros(
        self, recipe: Recipe, *, trust_cache: bool = True
    ) -> MacroVector:
        """Return macros for one serving of a recipe."""
        totals = self.totals(recipe, trust_cache=trust_cache)
        return per_serving(totals, recipe.servings)

    def create_recipe(self, draft: RecipeDraft) -> Recipe:
        """Persist a recipe draft."""
        if isinstance(draft.servings, bool) or draft.servings < 1:
            raise InvalidServings(f"Servings must be >= 1, got {draft.servings!r}")
        recipe = self.recipe_repository.create_recipe(draft)
        _logger.info("Created recipe %s (%s)", recipe.id, recipe.name)
        return recipe


def _missing_reference(line: RecipeLine) -> Diagnostic:
    if line.is_sub_recipe:
        return Diagnostic(
            code="missing_recipe",
            message=f"Sub-recipe {line.ref} could not be resolved",
            ref=str(line.ref),
        )
    return Diagnostic(
        code="missing_ingredient",
        message=f"Ingredient {line.ref} could not be resolved",
        ref=str(line.ref),
    )
