"""Audit API router: trail and children reads, plain and linked record creation."""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_audit_service
from app.application.audit_trail_service import AuditTrailService
from app.domain.schemas.audit import (
    AuditRecordCreateRequest,
    AuditRecordResponse,
    ErrorResponse,
    LinkedAuditRecordCreateRequest,
    TrailEntryResponse,
)

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get(
    "/trail/{subject_id}",
    response_model=List[TrailEntryResponse],
    responses=_ERROR_RESPONSES,
)
async def get_trail(
    subject_id: str,
    audit_service: Annotated[AuditTrailService, Depends(get_audit_service)],
    expand: Annotated[bool, Query(description="Populate actor and parent projections")] = True,
):
    """Chronological audit trail for one subject. An unknown subject yields an empty list."""
    entries = await audit_service.trail_for(subject_id, expand=expand)
    return [TrailEntryResponse.from_entry(e) for e in entries]


@router.get(
    "/children/{parent_id}",
    response_model=List[AuditRecordResponse],
    responses=_ERROR_RESPONSES,
)
async def get_children(
    parent_id: str,
    audit_service: Annotated[AuditTrailService, Depends(get_audit_service)],
):
    """Direct children of an audit record (one level only)."""
    children = await audit_service.children_of(parent_id)
    return [AuditRecordResponse.from_record(c) for c in children]


@router.post(
    "",
    response_model=AuditRecordResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
)
async def create_audit_record(
    body: AuditRecordCreateRequest,
    audit_service: Annotated[AuditTrailService, Depends(get_audit_service)],
):
    """Create an unlinked audit record."""
    record = await audit_service.record(
        body.actor_id,
        body.subject_kind,
        body.subject_id,
        body.action,
        body.payload,
        body.transport,
        occurred_at=body.occurred_at,
    )
    return AuditRecordResponse.from_record(record)


@router.post(
    "/linked",
    response_model=AuditRecordResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
)
async def create_linked_audit_record(
    body: LinkedAuditRecordCreateRequest,
    audit_service: Annotated[AuditTrailService, Depends(get_audit_service)],
):
    """Create an audit record linked to an earlier record via parent_id."""
    record = await audit_service.record_linked(
        body.actor_id,
        body.subject_kind,
        body.subject_id,
        body.action,
        body.payload,
        body.parent_id,
        body.transport,
        occurred_at=body.occurred_at,
    )
    return AuditRecordResponse.from_record(record)
