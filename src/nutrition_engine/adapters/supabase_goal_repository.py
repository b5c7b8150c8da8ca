"""Supabase repository for user goals."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_engine.adapters.supabase_rows import macros_from_row
from nutrition_engine.domain.plans import Goal
from nutrition_engine.services.budget import GoalRepository


@dataclass
class SupabaseGoalRepository(GoalRepository):
    """Supabase implementation for goal lookups."""

    client: Client

    def get_active_goal(self, owner_id: UUID) -> Goal | None:
        """Return the owner's most recent active goal."""
        response = (
            self.client.table("goals")
            .select("*")
            .eq("owner_id", str(owner_id))
            .eq("is_active", True)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return Goal(
            id=UUID(row["id"]),
            owner_id=UUID(row["owner_id"]),
            target=macros_from_row(row, prefix="target_"),
            is_active=bool(row.get("is_active", True)),
        )
