"""Pydantic schemas for the audit API. Request fields are lenient so the engine names what is missing."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.domain.models.audit_record import (
    AuditAction,
    PersistedAuditRecord,
    TrailEntry,
    Transport,
)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class AuditRecordCreateRequest(BaseModel):
    """Request schema for POST /audit. Required-ness is enforced by the engine, not here."""

    actor_id: Optional[str] = None
    subject_kind: Optional[str] = None
    subject_id: Optional[str] = None
    action: Optional[str] = Field(None, description="CREATE, UPDATE or DELETE")
    payload: Optional[Dict[str, Any]] = None
    transport: Optional[str] = Field(None, description="GET, POST, PUT, PATCH or DELETE")
    occurred_at: Optional[datetime] = None


class LinkedAuditRecordCreateRequest(AuditRecordCreateRequest):
    """Request schema for POST /audit/linked."""

    parent_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class AuditRecordResponse(BaseModel):
    """Persisted audit record as returned by the API."""

    id: str
    actor_id: str
    subject_kind: str
    subject_id: str
    action: AuditAction
    transport: Optional[Transport] = None
    payload: Dict[str, Any]
    parent_id: Optional[str] = None
    occurred_at: datetime
    sequence: int

    model_config = {"from_attributes": True}

    @classmethod
    def from_record(cls, record: PersistedAuditRecord) -> "AuditRecordResponse":
        return cls.model_validate(record)


class ActorResponse(BaseModel):
    actor_id: str
    name: Optional[str] = None
    email: Optional[str] = None

    model_config = {"from_attributes": True}


class TrailEntryResponse(AuditRecordResponse):
    """Trail record with optional actor/parent projections; None when not expanded."""

    actor: Optional[ActorResponse] = None
    parent: Optional[AuditRecordResponse] = None

    @classmethod
    def from_entry(cls, entry: TrailEntry) -> "TrailEntryResponse":
        base = AuditRecordResponse.from_record(entry.record).model_dump()
        return cls(
            **base,
            actor=ActorResponse.model_validate(entry.actor) if entry.actor else None,
            parent=AuditRecordResponse.from_record(entry.parent) if entry.parent else None,
        )


class ErrorResponse(BaseModel):
    detail: str
    fields: List[str] = Field(default_factory=list)

