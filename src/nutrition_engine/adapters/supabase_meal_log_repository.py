"""Supabase repository for meal logs."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_engine.adapters.supabase_rows import macros_from_row, parse_day
from nutrition_engine.domain.plans import DateRange, MealLogEntry
from nutrition_engine.services.consumption import MealLogRepository


@dataclass
class SupabaseMealLogRepository(MealLogRepository):
    """Supabase implementation for meal log queries."""

    client: Client

    def list_meal_logs(
        self, owner_id: UUID, date_range: DateRange
    ) -> list[MealLogEntry]:
        """Return meal logs whose day falls in the inclusive range."""
        response = (
            self.client.table("meal_logs")
            .select(
                "id, owner_id, day, total_calories, total_protein, total_carbs, "
                "total_fat, total_fiber"
            )
            .eq("owner_id", str(owner_id))
            .gte("day", date_range.start.isoformat())
            .lte("day", date_range.end.isoformat())
            .order("day", desc=False)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> MealLogEntry:
    return MealLogEntry(
        id=UUID(row["id"]),
        owner_id=UUID(row["owner_id"]),
        day=parse_day(row.get("day")),
        total_macros=macros_from_row(row, prefix="total_"),
    )
