"""Audit trail for privileged engine operations."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID


class AuditRepository(Protocol):
    """Persistence interface for audit events."""

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


@dataclass
class AuditService:
    """Service for recording audit events."""

    repository: AuditRepository

    def record_regeneration(
        self,
        actor_id: UUID,
        owner_id: UUID,
        previous_batch_id: UUID | None,
        details: dict[str, object],
    ) -> None:
        """Record that an owner's suggestion batch was regenerated."""
        self.repository.create_event(
            actor_id=actor_id,
            owner_id=owner_id,
            entity_type="suggestion_batch",
            entity_id=previous_batch_id,
            event_type="regenerated",
            details=details,
        )
