"""Recipe synthesis through an LLM collaborator."""

import json
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from nutrition_engine.domain.catalog import Ingredient, Recipe
from nutrition_engine.domain.errors import SynthesisUnavailable
from nutrition_engine.domain.macros import MacroVector
from nutrition_engine.domain.synthesis import (
    ExistingRecipeRef,
    ProposedRecipe,
    SynthesisExtract,
)
from nutrition_engine.services.recipes import per_serving

SYNTHESIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "new_recipes": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "description": {"anyOf": [{"type": "string"}, {"type": "null"}]},
                    "ingredient_lines": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "ingredient_id": {"type": "string"},
                                "amount": {"type": "number"},
                            },
                            "required": ["ingredient_id", "amount"],
                            "additionalProperties": False,
                        },
                    },
                    "instructions": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["name", "description", "ingredient_lines", "instructions"],
                "additionalProperties": False,
            },
        },
        "existing_recipes": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"recipe_id": {"type": "string"}},
                "required": ["recipe_id"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["new_recipes", "existing_recipes"],
    "additionalProperties": False,
}

SYNTHESIS_INSTRUCTIONS = (
    "You are a nutrition expert suggesting recipes that fill a user's remaining "
    "daily macros. Rules: use only the listed ingredients and reference them by "
    "id; amounts are in each ingredient's serving unit. You may reuse a system "
    "recipe by id instead of inventing one. Prefer fewer recipes that match "
    "well over many. The combined macros may exceed the remaining targets by at "
    "most 5-10%. Match calories and protein as closely as possible. Return "
    "empty lists if nothing sensible fits."
)


class SynthesisClient(Protocol):
    """Interface for LLM structured generation."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Return structured data matching ``schema``."""


class RecipeSynthesizer(Protocol):
    """Collaborator that proposes recipes for a remaining budget."""

    async def propose(
        self,
        remaining: MacroVector,
        ingredients: list[Ingredient],
        existing_recipes: list[Recipe],
    ) -> list[ProposedRecipe | ExistingRecipeRef]:
        """Return new recipes and references to existing ones."""


@dataclass
class LlmRecipeSynthesizer(RecipeSynthesizer):
    """Synthesizer that prompts an LLM and validates its output shape."""

    client: SynthesisClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def propose(
        self,
        remaining: MacroVector,
        ingredients: list[Ingredient],
        existing_recipes: list[Recipe],
    ) -> list[ProposedRecipe | ExistingRecipeRef]:
        """Ask the model for proposals and parse them."""
        raw = await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            instructions=SYNTHESIS_INSTRUCTIONS,
            prompt=build_prompt(remaining, ingredients, existing_recipes),
            schema=SYNTHESIS_SCHEMA,
        )
        try:
            extract = SynthesisExtract.model_validate(raw)
        except ValidationError as exc:
            raise SynthesisUnavailable("Synthesis payload did not validate") from exc
        return extract.candidates()


def build_prompt(
    remaining: MacroVector,
    ingredients: list[Ingredient],
    existing_recipes: list[Recipe],
) -> str:
    """Render the budget and catalogs as the user prompt."""
    ingredient_rows = [
        {
            "id": str(ingredient.id),
            "name": ingredient.name,
            "serving_size": ingredient.serving_size,
            "serving_unit": ingredient.serving_unit,
            "macros": ingredient.macros.as_dict(),
        }
        for ingredient in ingredients
    ]
    recipe_rows = [_recipe_row(recipe) for recipe in existing_recipes]
    return (
        f"Remaining macros for today: {json.dumps(remaining.as_dict())}\n"
        f"System recipes: {json.dumps(recipe_rows)}\n"
        f"Available ingredients: {json.dumps(ingredient_rows)}\n"
        "Suggest recipes that together fit the remaining macros."
    )


def _recipe_row(recipe: Recipe) -> dict[str, object]:
    row: dict[str, object] = {"id": str(recipe.id), "name": recipe.name}
    if recipe.total_macros is not None and recipe.servings >= 1:
        row["macros_per_serving"] = per_serving(
            recipe.total_macros, recipe.servings
        ).as_dict()
    return row
