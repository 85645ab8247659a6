"""Audit hooks for CRUD services: turns entity snapshots into CREATE/UPDATE/DELETE records."""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from app.application.audit_trail_service import AuditTrailService
from app.application.change_tracker import changes_to_payload, diff
from app.domain.exceptions import AuditValidationError
from app.domain.models.audit_record import AuditAction, PersistedAuditRecord, Transport
from app.domain.validators.audit_validator import validate_identifier, validate_payload_for_action


@dataclass(frozen=True)
class EntityUpdate:
    """One entity's before/after snapshots inside a bulk update."""

    subject_id: str
    old_state: Mapping[str, Any]
    new_state: Mapping[str, Any]


@dataclass
class BulkUpdateResult:
    """Parent record of the bulk operation plus the linked per-entity records."""

    parent: PersistedAuditRecord
    children: List[PersistedAuditRecord] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)


class EntityAuditService:
    """
    Consumer-side helpers a CRUD service calls after it mutates an entity.
    The entity itself is persisted elsewhere; this only writes its audit records.
    """

    def __init__(self, audit: AuditTrailService, logger: logging.Logger) -> None:
        self._audit = audit
        self._logger = logger

    async def record_created(
        self,
        actor_id: str,
        subject_kind: str,
        subject_id: str,
        state: Mapping[str, Any],
        transport: Transport = Transport.POST,
    ) -> PersistedAuditRecord:
        return await self._audit.record(
            actor_id, subject_kind, subject_id, AuditAction.CREATE, dict(state), transport
        )

    async def record_updated(
        self,
        actor_id: str,
        subject_kind: str,
        subject_id: str,
        old_state: Mapping[str, Any],
        new_state: Mapping[str, Any],
        transport: Transport = Transport.PUT,
        parent_id: Optional[str] = None,
    ) -> Optional[PersistedAuditRecord]:
        """Diff the snapshots and record the change. Returns None when nothing changed."""
        changes = diff(old_state, new_state)
        if not changes:
            self._logger.info(
                "audit_update_skipped",
                extra={"subject_kind": subject_kind, "subject_id": subject_id},
            )
            return None
        payload = changes_to_payload(changes)
        if parent_id is not None:
            return await self._audit.record_linked(
                actor_id, subject_kind, subject_id, AuditAction.UPDATE, payload, parent_id, transport
            )
        return await self._audit.record(
            actor_id, subject_kind, subject_id, AuditAction.UPDATE, payload, transport
        )

    async def record_deleted(
        self,
        actor_id: str,
        subject_kind: str,
        subject_id: str,
        final_state: Mapping[str, Any],
        transport: Transport = Transport.DELETE,
    ) -> PersistedAuditRecord:
        return await self._audit.record(
            actor_id, subject_kind, subject_id, AuditAction.DELETE, dict(final_state), transport
        )

    async def record_bulk_update(
        self,
        actor_id: str,
        subject_kind: str,
        updates: Sequence[EntityUpdate],
        transport: Transport = Transport.PATCH,
    ) -> BulkUpdateResult:
        """
        Write one parent record for the bulk operation (its subject is a fresh operation id),
        then one UPDATE linked to it per entity that actually changed.

        Every update is checked before the first write: a malformed entry raises
        AuditValidationError and nothing is recorded.
        """
        planned: List[Tuple[str, Optional[Dict[str, Any]]]] = []
        for index, update in enumerate(updates):
            try:
                subject_id = validate_identifier(update.subject_id, "subject_id")
                changes = diff(update.old_state, update.new_state)
                payload = changes_to_payload(changes) if changes else None
                if payload is not None:
                    validate_payload_for_action(AuditAction.UPDATE, payload)
            except AuditValidationError as e:
                self._logger.warning(
                    "audit_bulk_update_rejected",
                    extra={"index": index, "fields": e.fields, "reason": e.message},
                )
                raise
            planned.append((subject_id, payload))

        operation_id = str(uuid.uuid4())
        summary: Dict[str, Any] = {
            "bulk_operation": {"to": True},
            "subject_count": {"to": len(updates)},
        }
        parent = await self._audit.record(
            actor_id, subject_kind, operation_id, AuditAction.UPDATE, summary, transport
        )
        result = BulkUpdateResult(parent=parent)
        for subject_id, payload in planned:
            if payload is None:
                result.unchanged.append(subject_id)
                continue
            child = await self._audit.record_linked(
                actor_id, subject_kind, subject_id, AuditAction.UPDATE, payload, parent.id, transport
            )
            result.children.append(child)
        self._logger.info(
            "audit_bulk_update_recorded",
            extra={
                "audit_id": parent.id,
                "children": len(result.children),
                "unchanged": len(result.unchanged),
            },
        )
        return result
