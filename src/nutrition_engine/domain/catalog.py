"""Domain models for the ingredient and recipe catalogs."""

from dataclasses import dataclass, field
from uuid import UUID

from nutrition_engine.domain.macros import MacroVector

DEFAULT_CATEGORY = "Other"
SERVING_UNIT = "serving"


@dataclass(frozen=True)
class Ingredient:
    """Catalog ingredient with macros per ``serving_size`` units."""

    id: UUID
    name: str
    serving_size: float
    serving_unit: str
    macros: MacroVector
    verified: bool = False
    category: str = DEFAULT_CATEGORY


@dataclass(frozen=True)
class RecipeLine:
    """One ingredient line of a recipe.

    ``ref`` points at an ingredient, or at another recipe when
    ``is_sub_recipe`` is set; sub-recipe amounts are counted in servings.
    """

    ref: UUID
    amount: float
    unit: str
    is_sub_recipe: bool = False


@dataclass(frozen=True)
class Recipe:
    """Catalog recipe.

    ``total_macros`` is the snapshot stored when the recipe was created; it is
    not refreshed when referenced ingredients change.
    """

    id: UUID
    name: str
    servings: int
    ingredients: list[RecipeLine]
    total_macros: MacroVector | None = None
    instructions: list[str] = field(default_factory=list)
    creator_id: UUID | None = None
    description: str | None = None


@dataclass(frozen=True)
class RecipeDraft:
    """Recipe content before it is stored and assigned an id."""

    name: str
    servings: int
    ingredients: list[RecipeLine]
    total_macros: MacroVector
    instructions: list[str] = field(default_factory=list)
    creator_id: UUID | None = None
    description: str | None = None
