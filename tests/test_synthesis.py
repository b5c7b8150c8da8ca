"""Tests for the LLM recipe synthesizer."""

import asyncio
import json
from uuid import uuid4

import pytest

from nutrition_engine.domain.errors import SynthesisUnavailable
from nutrition_engine.domain.macros import MacroVector
from nutrition_engine.domain.synthesis import ExistingRecipeRef, ProposedRecipe
from nutrition_engine.services.synthesis import (
    SYNTHESIS_INSTRUCTIONS,
    LlmRecipeSynthesizer,
    build_prompt,
)
from tests.conftest import FakeSynthesisClient, make_ingredient, make_recipe

REMAINING = MacroVector(calories=600, protein=45, carbs=60, fat=20, fiber=8)


def _synthesizer(client: FakeSynthesisClient) -> LlmRecipeSynthesizer:
    return LlmRecipeSynthesizer(
        client=client, model="gpt-4.1-mini", reasoning_effort=None, store=False
    )


def test_propose_parses_existing_and_new_recipes() -> None:
    recipe_id = str(uuid4())
    client = FakeSynthesisClient(
        payload={
            "new_recipes": [
                {
                    "name": "Salmon rice bowl",
                    "description": None,
                    "ingredient_lines": [{"ingredient_id": "abc", "amount": 150}],
                    "instructions": ["Cook rice.", "Sear salmon."],
                    "calories": 9999,
                }
            ],
            "existing_recipes": [{"recipe_id": recipe_id}],
        }
    )

    proposals = asyncio.run(_synthesizer(client).propose(REMAINING, [], []))

    assert isinstance(proposals[0], ExistingRecipeRef)
    assert proposals[0].recipe_id == recipe_id
    assert isinstance(proposals[1], ProposedRecipe)
    assert proposals[1].ingredient_lines[0].amount == 150
    assert client.requests[0]["instructions"] == SYNTHESIS_INSTRUCTIONS


def test_invalid_payload_raises_unavailable() -> None:
    client = FakeSynthesisClient(payload={"new_recipes": [{"name": ""}]})

    with pytest.raises(SynthesisUnavailable):
        asyncio.run(_synthesizer(client).propose(REMAINING, [], []))


def test_prompt_lists_catalogs_and_budget() -> None:
    rice = make_ingredient(
        "Rice", MacroVector(calories=130, protein=2.7, carbs=28, fat=0.3)
    )
    bowl = make_recipe(
        "Bowl", servings=2, total_macros=MacroVector(calories=800, protein=60)
    )

    prompt = build_prompt(REMAINING, [rice], [bowl])

    assert str(rice.id) in prompt
    assert str(bowl.id) in prompt
    assert json.dumps(REMAINING.as_dict()) in prompt
    assert '"calories": 400.0' in prompt


def test_non_finite_amount_in_payload_raises_unavailable() -> None:
    payload = json.loads(
        '{"new_recipes": [{"name": "Stew", "description": null, '
        '"ingredient_lines": [{"ingredient_id": "abc", "amount": NaN}], '
        '"instructions": []}], "existing_recipes": []}'
    )
    client = FakeSynthesisClient(payload=payload)

    with pytest.raises(SynthesisUnavailable):
        asyncio.run(_synthesizer(client).propose(REMAINING, [], []))
