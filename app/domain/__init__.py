"""Domain layer: models, schemas, validators, exceptions. Pure business logic only."""

from app.domain.exceptions import AuditValidationError, DomainError
from app.domain.models import (
    ActorSummary,
    AuditAction,
    AuditRecordDraft,
    PersistedAuditRecord,
    TrailEntry,
    Transport,
)
from app.domain.schemas import (
    AuditRecordCreateRequest,
    AuditRecordResponse,
    LinkedAuditRecordCreateRequest,
    TrailEntryResponse,
)
from app.domain.validators import build_draft, validate_identifier

__all__ = [
    "ActorSummary",
    "AuditAction",
    "AuditRecordCreateRequest",
    "AuditRecordDraft",
    "AuditRecordResponse",
    "AuditValidationError",
    "DomainError",
    "LinkedAuditRecordCreateRequest",
    "PersistedAuditRecord",
    "TrailEntry",
    "TrailEntryResponse",
    "Transport",
    "build_draft",
    "validate_identifier",
]
