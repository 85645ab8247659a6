"""Domain models. Pure business entities."""

from app.domain.models.audit_record import (
    ActorSummary,
    AuditAction,
    AuditRecordDraft,
    PersistedAuditRecord,
    TrailEntry,
    Transport,
)

__all__ = [
    "ActorSummary",
    "AuditAction",
    "AuditRecordDraft",
    "PersistedAuditRecord",
    "TrailEntry",
    "Transport",
]
