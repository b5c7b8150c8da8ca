"""Supabase repository for audit events."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_engine.services.audit import AuditRepository


@dataclass
class SupabaseAuditRepository(AuditRepository):
    """Supabase-backed audit repository."""

    client: Client

    def create_event(  # noqa: PLR0913
        self,
        actor_id: UUID,
        owner_id: UUID,
        entity_type: str,
        entity_id: UUID | None,
        event_type: str,
        details: dict[str, object],
    ) -> None:
        """Create an audit event row."""
        self.client.table("audit_events").insert(
            {
                "actor_id": str(actor_id),
                "owner_id": str(owner_id),
                "entity_type": entity_type,
                "entity_id": str(entity_id) if entity_id else None,
                "event_type": event_type,
                "details_json": details,
            }
        ).execute()
