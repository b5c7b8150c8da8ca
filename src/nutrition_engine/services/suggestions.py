"""Daily recipe suggestions for the remaining macro budget."""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol
from uuid import UUID

from nutrition_engine.domain.catalog import Ingredient, Recipe, RecipeDraft, RecipeLine
from nutrition_engine.domain.errors import (
    Diagnostic,
    InvalidServings,
    NoActiveGoal,
    RegenerationNotAllowed,
)
from nutrition_engine.domain.macros import MacroVector, sum_macros
from nutrition_engine.domain.suggestions import Actor, SuggestionBatch, SuggestionResult
from nutrition_engine.domain.synthesis import ExistingRecipeRef, ProposedRecipe
from nutrition_engine.services.audit import AuditService
from nutrition_engine.services.budget import BudgetService
from nutrition_engine.services.recipes import (
    CatalogResolver,
    RecipeService,
    compute_recipe_macros,
)
from nutrition_engine.services.selection import (
    Candidate,
    SelectionPolicy,
    select_combination,
)
from nutrition_engine.services.synthesis import RecipeSynthesizer

_logger = logging.getLogger(__name__)


class SuggestionBatchRepository(Protocol):
    """Persistence interface for daily suggestion batches."""

    def get_batch(self, owner_id: UUID, day: date) -> SuggestionBatch | None:
        """Return the owner's batch for the day, if any."""

    def create_batch_if_absent(
        self, owner_id: UUID, day: date, recipe_ids: list[UUID]
    ) -> SuggestionBatch:
        """Create the day's batch, or return the one that already exists."""

    def delete_batch(self, owner_id: UUID, day: date) -> None:
        """Delete the owner's batch for the day."""


@dataclass
class Selection:
    """Recipes chosen for a budget before anything is persisted."""

    recipes: list[Recipe]
    diagnostics: list[Diagnostic] = field(default_factory=list)
    degraded: bool = False


@dataclass
class SuggestionService:
    """Selects, synthesizes and persists one suggestion batch per day."""

    budget_service: BudgetService
    recipe_service: RecipeService
    batch_repository: SuggestionBatchRepository
    synthesizer: RecipeSynthesizer
    audit_service: AuditService
    policy: SelectionPolicy = field(default_factory=SelectionPolicy)
    synthesis_timeout_seconds: float = 20.0

    async def get_suggestions(self, owner_id: UUID, day: date) -> SuggestionResult:
        """Return the day's batch, creating it on the first request."""
        existing = self.batch_repository.get_batch(owner_id, day)
        if existing is not None:
            return self._from_batch(existing)
        return await self._generate(owner_id, day)

    async def regenerate(
        self, actor: Actor, owner_id: UUID, day: date
    ) -> SuggestionResult:
        """Delete the day's batch and build a new one."""
        if not actor.is_admin:
            raise RegenerationNotAllowed("Only admins can regenerate suggestions")
        previous = self.batch_repository.get_batch(owner_id, day)
        self.batch_repository.delete_batch(owner_id, day)
        result = await self._generate(owner_id, day)
        self.audit_service.record_regeneration(
            actor_id=actor.user_id,
            owner_id=owner_id,
            previous_batch_id=previous.id if previous else None,
            details={
                "day": day.isoformat(),
                "recipe_ids": [str(recipe.id) for recipe in result.recipes],
            },
        )
        return result

    async def suggest(self, remaining: MacroVector) -> Selection:
        """Choose recipes for a remaining budget without persisting a batch."""
        if self.policy.is_negligible(remaining):
            return Selection(recipes=[])

        catalog = self.recipe_service.recipe_repository.list_recipes()
        candidates, diagnostics = self._candidates(catalog)
        outcome = select_combination(remaining, candidates, self.policy)
        if outcome.match is not None:
            return Selection(recipes=outcome.match.recipes, diagnostics=diagnostics)

        fallback = outcome.fallback.recipes if outcome.fallback else []
        ingredients = self.recipe_service.ingredient_repository.list_ingredients()
        try:
            proposals = await asyncio.wait_for(
                self.synthesizer.propose(remaining, ingredients, catalog),
                timeout=self.synthesis_timeout_seconds,
            )
        except TimeoutError:
            _logger.warning(
                "Recipe synthesis timed out after %ss", self.synthesis_timeout_seconds
            )
            diagnostics.append(
                Diagnostic(code="synthesis_unavailable", message="Synthesis timed out")
            )
            return Selection(recipes=fallback, diagnostics=diagnostics, degraded=True)
        except Exception as exc:
            _logger.warning("Recipe synthesis failed: %s", exc)
            diagnostics.append(
                Diagnostic(
                    code="synthesis_unavailable",
                    message=f"Synthesis failed: {exc}",
                )
            )
            return Selection(recipes=fallback, diagnostics=diagnostics, degraded=True)

        known = [candidate.recipe for candidate in candidates]
        recipes = self._materialize(proposals, ingredients, known, diagnostics)
        if not recipes:
            diagnostics.append(
                Diagnostic(
                    code="synthesis_unavailable",
                    message="Synthesis returned no usable recipes",
                )
            )
            return Selection(recipes=fallback, diagnostics=diagnostics, degraded=True)

        combined = sum_macros(
            self.recipe_service.per_serving_macros(recipe) for recipe in recipes
        )
        if not self.policy.fits_ceiling(combined, remaining):
            diagnostics.append(
                Diagnostic(
                    code="budget_exceeded",
                    message="Synthesized suggestions exceed the tolerance band",
                )
            )
        return Selection(recipes=recipes, diagnostics=diagnostics)

    async def _generate(self, owner_id: UUID, day: date) -> SuggestionResult:
        try:
            remaining = self.budget_service.remaining(owner_id, day)
        except NoActiveGoal as exc:
            return SuggestionResult(
                recipes=[],
                batch=None,
                diagnostics=[
                    Diagnostic(
                        code="no_active_goal", message=str(exc), ref=str(owner_id)
                    )
                ],
                available=False,
            )

        selection = await self.suggest(remaining)
        if selection.degraded:
            return SuggestionResult(
                recipes=selection.recipes,
                batch=None,
                diagnostics=selection.diagnostics,
            )

        recipe_ids = [recipe.id for recipe in selection.recipes]
        batch = self.batch_repository.create_batch_if_absent(owner_id, day, recipe_ids)
        if batch.recipe_ids != recipe_ids:
            _logger.info(
                "Suggestion batch for %s on %s already existed", owner_id, day
            )
            stored = self._from_batch(batch)
            return SuggestionResult(
                recipes=stored.recipes,
                batch=batch,
                diagnostics=[
                    *selection.diagnostics,
                    Diagnostic(
                        code="batch_conflict",
                        message="Returned the batch created by a concurrent request",
                        ref=str(batch.id),
                    ),
                    *stored.diagnostics,
                ],
            )
        return SuggestionResult(
            recipes=selection.recipes,
            batch=batch,
            diagnostics=selection.diagnostics,
        )

    def _from_batch(self, batch: SuggestionBatch) -> SuggestionResult:
        recipes: list[Recipe] = []
        diagnostics: list[Diagnostic] = []
        for recipe_id in batch.recipe_ids:
            recipe = self.recipe_service.recipe_repository.get_recipe(recipe_id)
            if recipe is None:
                diagnostics.append(
                    Diagnostic(
                        code="missing_recipe",
                        message=f"Suggested recipe {recipe_id} no longer exists",
                        ref=str(recipe_id),
                    )
                )
                continue
            recipes.append(recipe)
        return SuggestionResult(recipes=recipes, batch=batch, diagnostics=diagnostics)

    def _candidates(
        self, catalog: list[Recipe]
    ) -> tuple[list[Candidate], list[Diagnostic]]:
        candidates: list[Candidate] = []
        diagnostics: list[Diagnostic] = []
        for recipe in catalog:
            try:
                macros = self.recipe_service.per_serving_macros(recipe)
            except InvalidServings as exc:
                diagnostics.append(
                    Diagnostic(
                        code="invalid_recipe", message=str(exc), ref=str(recipe.id)
                    )
                )
                continue
            candidates.append(Candidate(recipe=recipe, macros=macros))
        return candidates, diagnostics

    def _materialize(
        self,
        proposals: list[ProposedRecipe | ExistingRecipeRef],
        ingredients: list[Ingredient],
        catalog: list[Recipe],
        diagnostics: list[Diagnostic],
    ) -> list[Recipe]:
        ingredient_map = {ingredient.id: ingredient for ingredient in ingredients}
        recipe_map = {recipe.id: recipe for recipe in catalog}
        recipes: list[Recipe] = []
        for proposal in proposals:
            if isinstance(proposal, ExistingRecipeRef):
                recipe = recipe_map.get(_parse_uuid(proposal.recipe_id))
                if recipe is None:
                    diagnostics.append(
                        _rejected(proposal.recipe_id, "references an unknown recipe")
                    )
                elif recipe not in recipes:
                    recipes.append(recipe)
                continue
            lines = _validated_lines(proposal, ingredient_map, diagnostics)
            if lines is None:
                continue
            computation = compute_recipe_macros(
                lines, CatalogResolver.from_catalog(ingredient_map.values())
            )
            if computation.diagnostics:
                diagnostics.append(
                    _rejected(proposal.name, "has unresolvable ingredient lines")
                )
                continue
            recipes.append(
                self.recipe_service.create_recipe(
                    RecipeDraft(
                        name=proposal.name,
                        servings=1,
                        ingredients=lines,
                        total_macros=computation.total,
                        instructions=list(proposal.instructions),
                        description=proposal.description,
                    )
                )
            )
        return recipes


def _validated_lines(
    proposal: ProposedRecipe,
    ingredient_map: dict[UUID, Ingredient],
    diagnostics: list[Diagnostic],
) -> list[RecipeLine] | None:
    if not proposal.ingredient_lines:
        diagnostics.append(_rejected(proposal.name, "has no ingredient lines"))
        return None
    lines: list[RecipeLine] = []
    for proposed in proposal.ingredient_lines:
        ingredient = ingredient_map.get(_parse_uuid(proposed.ingredient_id))
        if ingredient is None or ingredient.serving_size <= 0:
            diagnostics.append(
                _rejected(
                    proposal.name,
                    f"references unusable ingredient {proposed.ingredient_id}",
                )
            )
            return None
        if not math.isfinite(proposed.amount) or proposed.amount <= 0:
            diagnostics.append(
                _rejected(proposal.name, f"uses amount {proposed.amount}")
            )
            return None
        lines.append(
            RecipeLine(
                ref=ingredient.id,
                amount=proposed.amount,
                unit=ingredient.serving_unit,
            )
        )
    return lines


def _rejected(ref: str, reason: str) -> Diagnostic:
    _logger.warning("Rejected synthesized proposal %s: %s", ref, reason)
    return Diagnostic(
        code="proposal_rejected",
        message=f"Proposal {ref} {reason}",
        ref=ref,
    )


def _parse_uuid(value: str) -> UUID | None:
    try:
        return UUID(value)
    except ValueError:
        return None
