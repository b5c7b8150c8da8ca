"""Domain models for suggestion batches and shopping lists."""

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from nutrition_engine.domain.catalog import Recipe
from nutrition_engine.domain.errors import Diagnostic


@dataclass(frozen=True)
class SuggestionBatch:
    """Recipes offered to an owner for one day."""

    id: UUID
    owner_id: UUID
    day: date
    recipe_ids: list[UUID]


@dataclass(frozen=True)
class SuggestionResult:
    """Suggested recipes plus what happened while producing them."""

    recipes: list[Recipe]
    batch: SuggestionBatch | None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    available: bool = True


@dataclass(frozen=True)
class Actor:
    """Caller identity for operations that need authorization."""

    user_id: UUID
    is_admin: bool = False


@dataclass(frozen=True)
class ShoppingListItem:
    """Aggregated quantity of one ingredient in one unit."""

    ingredient_id: UUID
    ingredient_name: str
    amount: float
    unit: str
    category: str


@dataclass(frozen=True)
class ShoppingList:
    """Category-sorted shopping list with diagnostics."""

    items: list[ShoppingListItem]
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def cycle_detected(self) -> bool:
        """Return True when a recipe expanded into itself."""
        return any(item.code == "cycle_detected" for item in self.diagnostics)
