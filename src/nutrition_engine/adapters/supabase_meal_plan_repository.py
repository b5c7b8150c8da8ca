"""Supabase repository for meal plan entries."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_engine.adapters.supabase_rows import parse_day
from nutrition_engine.domain.plans import DateRange, MealPlanEntry, MealTime
from nutrition_engine.services.shopping import MealPlanRepository


@dataclass
class SupabaseMealPlanRepository(MealPlanRepository):
    """Supabase implementation for planned meals."""

    client: Client

    def list_meal_plan_entries(
        self, owner_id: UUID, date_range: DateRange
    ) -> list[MealPlanEntry]:
        """Return planned meals in the inclusive range."""
        response = (
            self.client.table("meal_plan_entries")
            .select("id, owner_id, day, recipe_id, servings, meal_time")
            .eq("owner_id", str(owner_id))
            .gte("day", date_range.start.isoformat())
            .lte("day", date_range.end.isoformat())
            .order("day", desc=False)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]


def _parse_entry(row: dict[str, object]) -> MealPlanEntry:
    return MealPlanEntry(
        id=UUID(row["id"]),
        owner_id=UUID(row["owner_id"]),
        day=parse_day(row.get("day")),
        recipe_id=UUID(row["recipe_id"]),
        servings=float(row.get("servings", 0.0)),
        meal_time=MealTime(row.get("meal_time") or MealTime.DINNER),
    )
