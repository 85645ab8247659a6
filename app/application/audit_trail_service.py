"""Audit trail application service. Validates and appends records; answers trail and children queries."""

import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.application.audit_store import ActorDirectory, AuditStore
from app.application.exceptions import ProjectionError, StorageFailureError
from app.domain.exceptions import AuditValidationError
from app.domain.models.audit_record import (
    ActorSummary,
    AuditRecordDraft,
    PersistedAuditRecord,
    TrailEntry,
)
from app.domain.validators.audit_validator import build_draft, validate_identifier
from app.observability.metrics import MetricsCollector

STORE_LATENCY_METRIC = "audit_store_latency_ms"


class AuditTrailService:
    """
    The only component with audit business rules. No HTTP, no FastAPI.
    Holds no mutable state of its own; all durable state lives in the injected store.
    Validation happens before any I/O. Store failures propagate to the caller; trail
    projections are best-effort and never fail a read.
    """

    def __init__(
        self,
        store: AuditStore,
        logger: logging.Logger,
        actor_directory: Optional[ActorDirectory] = None,
        metrics: Optional[MetricsCollector] = None,
        verify_parent: bool = False,
    ) -> None:
        self._store = store
        self._logger = logger
        self._actors = actor_directory
        self._metrics = metrics
        self._verify_parent = verify_parent

    async def record(
        self,
        actor_id: Any,
        subject_kind: Any,
        subject_id: Any,
        action: Any,
        payload: Any,
        transport: Any = None,
        *,
        occurred_at: Optional[datetime] = None,
    ) -> PersistedAuditRecord:
        """Validate and append a plain (unlinked) audit record."""
        draft = self._validate(
            actor_id=actor_id,
            subject_kind=subject_kind,
            subject_id=subject_id,
            action=action,
            payload=payload,
            transport=transport,
            occurred_at=occurred_at,
        )
        return await self._append(draft)

    async def record_linked(
        self,
        actor_id: Any,
        subject_kind: Any,
        subject_id: Any,
        action: Any,
        payload: Any,
        parent_id: Any,
        transport: Any = None,
        *,
        occurred_at: Optional[datetime] = None,
    ) -> PersistedAuditRecord:
        """Validate and append a record linked to parent_id. A missing parent always fails."""
        if parent_id is None or not isinstance(parent_id, str) or not parent_id.strip():
            self._reject(["parent_id"], "missing parent")
            raise AuditValidationError("missing parent", ["parent_id"])

        draft = self._validate(
            actor_id=actor_id,
            subject_kind=subject_kind,
            subject_id=subject_id,
            action=action,
            payload=payload,
            transport=transport,
            parent_id=parent_id,
            occurred_at=occurred_at,
        )
        if self._verify_parent:
            parent = await self._timed("get", self._store.get(draft.parent_id))
            if parent is None:
                self._reject(["parent_id"], "unknown parent")
                raise AuditValidationError(
                    "parent_id does not reference an existing audit record", ["parent_id"]
                )
        return await self._append(draft)

    async def trail_for(self, subject_id: str, expand: bool = True) -> List[TrailEntry]:
        """
        Full chronological trail for a subject. With expand, each entry carries the
        actor summary and parent record when they can be resolved.
        """
        subject_id = validate_identifier(subject_id, "subject_id")
        records = await self._timed("find_by_subject", self._store.find_by_subject(subject_id))
        if not expand:
            return [TrailEntry(record=r) for r in records]

        actors = await self._resolve_actors({r.actor_id for r in records})
        parents = await self._resolve_parents(
            {r.parent_id for r in records if r.parent_id},
            known={r.id: r for r in records},
        )
        return [
            TrailEntry(
                record=r,
                actor=actors.get(r.actor_id),
                parent=parents.get(r.parent_id) if r.parent_id else None,
            )
            for r in records
        ]

    async def children_of(self, parent_id: str) -> List[PersistedAuditRecord]:
        """Direct children of a record. Not the transitive closure; callers recurse for subtrees."""
        parent_id = validate_identifier(parent_id, "parent_id")
        return await self._timed("find_by_parent", self._store.find_by_parent(parent_id))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _validate(self, **fields: Any) -> AuditRecordDraft:
        try:
            return build_draft(**fields)
        except AuditValidationError as e:
            self._reject(e.fields, e.message)
            raise

    def _reject(self, fields: List[str], message: str) -> None:
        self._logger.warning(
            "audit_record_rejected",
            extra={"fields": fields, "reason": message},
        )
        if self._metrics:
            self._metrics.increment("audit_validation_failures")

    async def _append(self, draft: AuditRecordDraft) -> PersistedAuditRecord:
        try:
            persisted = await self._timed("append", self._store.append(draft))
        except StorageFailureError as e:
            self._logger.error(
                "audit_store_failed",
                extra={
                    "subject_id": draft.subject_id,
                    "action": draft.action.value,
                    "error": e.message,
                },
            )
            if self._metrics:
                self._metrics.increment("audit_storage_failures")
            raise

        self._logger.info(
            "audit_record_persisted",
            extra={
                "audit_id": persisted.id,
                "subject_kind": persisted.subject_kind,
                "subject_id": persisted.subject_id,
                "action": persisted.action.value,
                "parent_id": persisted.parent_id,
                "sequence": persisted.sequence,
            },
        )
        if self._metrics:
            self._metrics.increment("audit_records_persisted", action=persisted.action.value)
        return persisted

    async def _timed(self, operation: str, awaitable):
        started = time.perf_counter()
        try:
            return await awaitable
        finally:
            if self._metrics:
                self._metrics.observe_latency(
                    STORE_LATENCY_METRIC,
                    (time.perf_counter() - started) * 1000,
                    operation=operation,
                )

    async def _resolve_actors(self, actor_ids: set) -> Dict[str, ActorSummary]:
        resolved: Dict[str, ActorSummary] = {}
        if self._actors is None:
            return resolved
        for actor_id in actor_ids:
            try:
                actor = await self._actors.get_actor(actor_id)
            except ProjectionError as e:
                self._projection_failed("actor", actor_id, e)
                continue
            if actor is not None:
                resolved[actor_id] = actor
        return resolved

    async def _resolve_parents(
        self,
        parent_ids: set,
        known: Dict[str, PersistedAuditRecord],
    ) -> Dict[str, PersistedAuditRecord]:
        resolved: Dict[str, PersistedAuditRecord] = {}
        for parent_id in parent_ids:
            if parent_id in known:
                resolved[parent_id] = known[parent_id]
                continue
            try:
                parent = await self._timed("get", self._store.get(parent_id))
            except StorageFailureError as e:
                self._projection_failed("parent", parent_id, e)
                continue
            if parent is not None:
                resolved[parent_id] = parent
        return resolved

    def _projection_failed(self, projection: str, reference: str, error: Exception) -> None:
        self._logger.warning(
            "projection_failed",
            extra={"projection": projection, "reference": reference, "error": str(error)},
        )
        if self._metrics:
            self._metrics.increment("audit_projection_failures", projection=projection)
