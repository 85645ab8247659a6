"""Audit store and actor directory protocols. Application layer depends on these; infrastructure implements them."""

from typing import List, Optional, Protocol

from app.domain.models.audit_record import ActorSummary, AuditRecordDraft, PersistedAuditRecord


class AuditStore(Protocol):
    """Append-only store of audit records. No update or delete exists."""

    async def append(self, draft: AuditRecordDraft) -> PersistedAuditRecord:
        """
        Assign id, sequence and (if unset) occurred_at, then persist atomically.
        Raises StorageFailureError; a failed append leaves no trace.
        """
        ...

    async def get(self, record_id: str) -> Optional[PersistedAuditRecord]:
        """Return the record with this id, or None."""
        ...

    async def find_by_subject(self, subject_id: str) -> List[PersistedAuditRecord]:
        """Records for subject ordered by (occurred_at, sequence). Empty list when none."""
        ...

    async def find_by_parent(self, parent_id: str) -> List[PersistedAuditRecord]:
        """Direct children of parent ordered by (occurred_at, sequence). Empty list when none."""
        ...


class ActorDirectory(Protocol):
    """Lookup of actor display fields for trail projections."""

    async def get_actor(self, actor_id: str) -> Optional[ActorSummary]:
        """Return actor summary or None if unknown. Raises ProjectionError on lookup failure."""
        ...
