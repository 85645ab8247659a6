"""Domain schemas. Request/response and validation."""

from app.domain.schemas.audit import (
    ActorResponse,
    AuditRecordCreateRequest,
    AuditRecordResponse,
    ErrorResponse,
    LinkedAuditRecordCreateRequest,
    TrailEntryResponse,
)

__all__ = [
    "ActorResponse",
    "AuditRecordCreateRequest",
    "AuditRecordResponse",
    "ErrorResponse",
    "LinkedAuditRecordCreateRequest",
    "TrailEntryResponse",
]
