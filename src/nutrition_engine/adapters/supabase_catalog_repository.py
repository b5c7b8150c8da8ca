"""Supabase repositories for the ingredient and recipe catalogs."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_engine.adapters.supabase_rows import macros_from_row, macros_to_row
from nutrition_engine.domain.catalog import (
    DEFAULT_CATEGORY,
    Ingredient,
    Recipe,
    RecipeDraft,
    RecipeLine,
)
from nutrition_engine.services.recipes import IngredientRepository, RecipeRepository

_RECIPE_COLUMNS = "*, recipe_ingredients(*)"


@dataclass
class SupabaseIngredientRepository(IngredientRepository):
    """Supabase-backed ingredient catalog."""

    client: Client

    def get_ingredient(self, ingredient_id: UUID) -> Ingredient | None:
        """Return an ingredient by id, if present."""
        response = (
            self.client.table("ingredients")
            .select("*")
            .eq("id", str(ingredient_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_ingredient(response.data[0])

    def list_ingredients(self) -> list[Ingredient]:
        """Return every catalog ingredient ordered by name."""
        response = (
            self.client.table("ingredients").select("*").order("name").execute()
        )
        return [_parse_ingredient(row) for row in response.data or []]


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase-backed recipe catalog."""

    client: Client

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe with its ingredient lines."""
        response = (
            self.client.table("recipes")
            .select(_RECIPE_COLUMNS)
            .eq("id", str(recipe_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_recipe(response.data[0])

    def list_recipes(self, query: str | None = None) -> list[Recipe]:
        """Return recipes, filtered by a case-insensitive name match."""
        request = self.client.table("recipes").select(_RECIPE_COLUMNS)
        if query:
            request = request.ilike("name", f"%{query}%")
        response = request.order("name").execute()
        return [_parse_recipe(row) for row in response.data or []]

    def create_recipe(self, draft: RecipeDraft) -> Recipe:
        """Insert a recipe and its lines."""
        response = (
            self.client.table("recipes")
            .insert(
                {
                    "name": draft.name,
                    "description": draft.description,
                    "servings": draft.servings,
                    "instructions": draft.instructions,
                    "creator_id": str(draft.creator_id) if draft.creator_id else None,
                    **macros_to_row(draft.total_macros, prefix="total_"),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create recipe")
        recipe_id = UUID(response.data[0]["id"])
        lines = [
            {
                "recipe_id": str(recipe_id),
                "ingredient_id": None if line.is_sub_recipe else str(line.ref),
                "sub_recipe_id": str(line.ref) if line.is_sub_recipe else None,
                "amount": line.amount,
                "unit": line.unit,
            }
            for line in draft.ingredients
        ]
        if lines:
            self.client.table("recipe_ingredients").insert(lines).execute()
        return Recipe(
            id=recipe_id,
            name=draft.name,
            servings=draft.servings,
            ingredients=list(draft.ingredients),
            total_macros=draft.total_macros,
            instructions=list(draft.instructions),
            creator_id=draft.creator_id,
            description=draft.description,
        )


def _parse_ingredient(row: dict[str, object]) -> Ingredient:
    return Ingredient(
        id=UUID(row["id"]),
        name=str(row.get("name", "")),
        serving_size=float(row.get("serving_size") or 0.0),
        serving_unit=str(row.get("serving_unit") or "g"),
        macros=macros_from_row(row),
        verified=bool(row.get("verified", False)),
        category=str(row.get("category") or DEFAULT_CATEGORY),
    )


def _parse_recipe(row: dict[str, object]) -> Recipe:
    lines = [_parse_line(line) for line in row.get("recipe_ingredients") or []]
    has_totals = row.get("total_calories") is not None
    creator_raw = row.get("creator_id")
    return Recipe(
        id=UUID(row["id"]),
        name=str(row.get("name", "")),
        servings=int(row.get("servings", 1)),
        ingredients=lines,
        total_macros=macros_from_row(row, prefix="total_") if has_totals else None,
        instructions=[str(step) for step in row.get("instructions") or []],
        creator_id=UUID(creator_raw) if creator_raw else None,
        description=row.get("description"),
    )


def _parse_line(row: dict[str, object]) -> RecipeLine:
    sub_recipe_id = row.get("sub_recipe_id")
    ref = sub_recipe_id or row.get("ingredient_id")
    return RecipeLine(
        ref=UUID(str(ref)),
        amount=float(row.get("amount") or 0.0),
        unit=str(row.get("unit") or ""),
        is_sub_recipe=bool(sub_recipe_id),
    )
