"""Tests for recipe macro calculation."""

from uuid import uuid4

import pytest

from nutrition_engine.domain.catalog import RecipeDraft, RecipeLine
from nutrition_engine.domain.errors import InvalidAmount, InvalidServings
from nutrition_engine.domain.macros import MacroVector
from nutrition_engine.services.recipes import (
    CatalogResolver,
    compute_recipe_macros,
    per_serving,
)
from tests.conftest import make_ingredient, make_recipe


def test_chicken_contribution_scales_by_serving_ratio(chicken) -> None:
    resolver = CatalogResolver.from_catalog([chicken])
    lines = [RecipeLine(ref=chicken.id, amount=200, unit="g")]

    result = compute_recipe_macros(lines, resolver)

    assert result.total.calories == pytest.approx(330)
    assert result.total.protein == pytest.approx(62)
    assert result.total.carbs == 0
    assert result.total.fat == pytest.approx(7.2)
    assert result.total.fiber == 0
    assert result.diagnostics == []


def test_amount_equal_to_serving_size_gives_exact_macros(chicken) -> None:
    resolver = CatalogResolver.from_catalog([chicken])
    lines = [RecipeLine(ref=chicken.id, amount=100, unit="g")]

    result = compute_recipe_macros(lines, resolver)

    assert result.total == chicken.macros


def test_contribution_is_linear_in_amount(chicken) -> None:
    resolver = CatalogResolver.from_catalog([chicken])
    single = compute_recipe_macros(
        [RecipeLine(ref=chicken.id, amount=75, unit="g")], resolver
    ).total
    triple = compute_recipe_macros(
        [RecipeLine(ref=chicken.id, amount=225, unit="g")], resolver
    ).total

    assert triple.calories == pytest.approx(single.calories * 3)
    assert triple.protein == pytest.approx(single.protein * 3)


def test_missing_ingredient_is_skipped_with_diagnostic(chicken) -> None:
    resolver = CatalogResolver.from_catalog([chicken])
    missing = uuid4()
    lines = [
        RecipeLine(ref=chicken.id, amount=100, unit="g"),
        RecipeLine(ref=missing, amount=50, unit="g"),
    ]

    result = compute_recipe_macros(lines, resolver)

    assert result.total == chicken.macros
    assert [item.code for item in result.diagnostics] == ["missing_ingredient"]
    assert result.diagnostics[0].ref == str(missing)


def test_non_positive_amount_rejected(chicken) -> None:
    resolver = CatalogResolver.from_catalog([chicken])

    with pytest.raises(InvalidAmount):
        compute_recipe_macros(
            [RecipeLine(ref=chicken.id, amount=0, unit="g")], resolver
        )


def test_per_serving_divides_totals() -> None:
    total = MacroVector(calories=800, protein=60, carbs=40, fat=20, fiber=8)

    assert per_serving(total, 4) == MacroVector(
        calories=200, protein=15, carbs=10, fat=5, fiber=2
    )


@pytest.mark.parametrize("servings", [0, -1])
def test_per_serving_rejects_invalid_servings(servings: int) -> None:
    with pytest.raises(InvalidServings):
        per_serving(MacroVector(calories=100), servings)


def test_sub_recipe_counts_in_servings(chicken) -> None:
    stock = make_recipe(
        "Stock",
        servings=4,
        total_macros=MacroVector(calories=400, protein=40),
    )
    resolver = CatalogResolver.from_catalog([chicken], [stock])
    lines = [
        RecipeLine(ref=chicken.id, amount=100, unit="g"),
        RecipeLine(ref=stock.id, amount=2, unit="serving", is_sub_recipe=True),
    ]

    result = compute_recipe_macros(lines, resolver)

    assert result.total.calories == pytest.approx(165 + 200)
    assert result.total.protein == pytest.approx(31 + 20)


def test_recompute_ignores_stale_snapshot(engine, chicken) -> None:
    engine.ingredients.add(chicken)
    recipe = make_recipe(
        "Grilled chicken",
        lines=[RecipeLine(ref=chicken.id, amount=200, unit="g")],
        total_macros=MacroVector(calories=1),
    )

    assert engine.recipe_service.totals(recipe).calories == 1
    fresh = engine.recipe_service.totals(recipe, trust_cache=False)
    assert fresh.calories == pytest.approx(330)


def test_recompute_sub_recipe_cycle_terminates(engine, chicken) -> None:
    engine.ingredients.add(chicken)
    first_id, second_id = uuid4(), uuid4()
    first = make_recipe(
        "First",
        lines=[
            RecipeLine(ref=chicken.id, amount=100, unit="g"),
            RecipeLine(ref=second_id, amount=1, unit="serving", is_sub_recipe=True),
        ],
        recipe_id=first_id,
    )
    second = make_recipe(
        "Second",
        lines=[
            RecipeLine(ref=first_id, amount=1, unit="serving", is_sub_recipe=True)
        ],
        recipe_id=second_id,
    )
    engine.recipes.add(first, second)

    result = engine.recipe_service.recompute(first, recompute_sub_recipes=True)

    assert result.total.calories == pytest.approx(165)
    assert [item.code for item in result.diagnostics] == ["cycle_detected"]
    assert result.diagnostics[0].ref == str(first_id)


def test_create_recipe_rejects_zero_servings(engine) -> None:
    draft = RecipeDraft(
        name="Empty", servings=0, ingredients=[], total_macros=MacroVector()
    )

    with pytest.raises(InvalidServings):
        engine.recipe_service.create_recipe(draft)
    assert engine.recipes.created == []


def test_recompute_reports_nested_missing_ingredient(engine, chicken) -> None:
    engine.ingredients.add(chicken)
    missing = uuid4()
    sauce = make_recipe(
        "Sauce",
        lines=[RecipeLine(ref=missing, amount=30, unit="g")],
        total_macros=MacroVector(calories=500),
    )
    engine.recipes.add(sauce)
    dinner = make_recipe(
        "Dinner",
        lines=[
            RecipeLine(ref=chicken.id, amount=100, unit="g"),
            RecipeLine(ref=sauce.id, amount=1, unit="serving", is_sub_recipe=True),
        ],
    )

    result = engine.recipe_service.recompute(dinner, recompute_sub_recipes=True)

    assert result.total == chicken.macros
    assert [item.code for item in result.diagnostics] == ["missing_ingredient"]
    assert result.diagnostics[0].ref == str(missing)
