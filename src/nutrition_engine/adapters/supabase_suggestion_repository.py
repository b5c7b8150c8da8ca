"""Supabase repository for daily suggestion batches."""

import logging
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from nutrition_engine.adapters.supabase_rows import parse_day
from nutrition_engine.domain.suggestions import SuggestionBatch
from nutrition_engine.services.suggestions import SuggestionBatchRepository

_logger = logging.getLogger(__name__)

_UNIQUE_VIOLATION = "23505"


@dataclass
class SupabaseSuggestionBatchRepository(SuggestionBatchRepository):
    """Supabase-backed batches, unique per owner and day."""

    client: Client

    def get_batch(self, owner_id: UUID, day: date) -> SuggestionBatch | None:
        """Return the owner's batch for the day, if any."""
        response = (
            self.client.table("suggestion_batches")
            .select("id, owner_id, day, recipe_ids")
            .eq("owner_id", str(owner_id))
            .eq("day", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_batch(response.data[0])

    def create_batch_if_absent(
        self, owner_id: UUID, day: date, recipe_ids: list[UUID]
    ) -> SuggestionBatch:
        """Insert the day's batch, reading back the winner on a conflict."""
        try:
            response = (
                self.client.table("suggestion_batches")
                .insert(
                    {
                        "owner_id": str(owner_id),
                        "day": day.isoformat(),
                        "recipe_ids": [str(recipe_id) for recipe_id in recipe_ids],
                    }
                )
                .execute()
            )
        except APIError as exc:
            if exc.code != _UNIQUE_VIOLATION:
                raise
            _logger.info("Batch for %s on %s created concurrently", owner_id, day)
            existing = self.get_batch(owner_id, day)
            if existing is None:
                msg = "Failed to read conflicting suggestion batch"
                raise RuntimeError(msg) from exc
            return existing
        if not response.data:
            raise RuntimeError("Failed to create suggestion batch")
        return _parse_batch(response.data[0])

    def delete_batch(self, owner_id: UUID, day: date) -> None:
        """Delete the owner's batch for the day."""
        (
            self.client.table("suggestion_batches")
            .delete()
            .eq("owner_id", str(owner_id))
            .eq("day", day.isoformat())
            .execute()
        )


def _parse_batch(row: dict[str, object]) -> SuggestionBatch:
    return SuggestionBatch(
        id=UUID(row["id"]),
        owner_id=UUID(row["owner_id"]),
        day=parse_day(row.get("day")),
        recipe_ids=[UUID(str(value)) for value in row.get("recipe_ids") or []],
    )
