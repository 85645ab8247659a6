"""DB-backed audit store. Persists audit records to PostgreSQL (audit_records table)."""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.exceptions import ProjectionError, StorageFailureError
from app.domain.models.audit_record import (
    ActorSummary,
    AuditAction,
    AuditRecordDraft,
    PersistedAuditRecord,
    Transport,
)
from app.infrastructure.database.models import AuditRecordRow, UserRow


def _to_record(row: AuditRecordRow) -> PersistedAuditRecord:
    occurred_at = row.occurred_at
    if occurred_at and occurred_at.tzinfo is None:
        occurred_at = occurred_at.replace(tzinfo=timezone.utc)
    return PersistedAuditRecord(
        id=row.id,
        actor_id=row.actor_id,
        subject_kind=row.subject_kind,
        subject_id=row.subject_id,
        action=AuditAction(row.action),
        payload=row.payload,
        occurred_at=occurred_at,
        sequence=row.sequence,
        transport=Transport(row.transport) if row.transport else None,
        parent_id=row.parent_id,
    )


class DbAuditStore:
    """Persists audit records to PostgreSQL, one session per operation. Implements AuditStore protocol."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, draft: AuditRecordDraft) -> PersistedAuditRecord:
        """Insert one row in its own transaction; sequence comes from the identity column."""
        row = AuditRecordRow(
            id=str(uuid.uuid4()),
            actor_id=draft.actor_id,
            subject_kind=draft.subject_kind,
            subject_id=draft.subject_id,
            action=draft.action.value,
            transport=draft.transport.value if draft.transport else None,
            payload=draft.payload,
            parent_id=draft.parent_id,
            occurred_at=draft.occurred_at or datetime.now(timezone.utc),
        )
        async with self._session_factory() as session:
            try:
                session.add(row)
                await session.flush()
                await session.commit()
                await session.refresh(row)
            except SQLAlchemyError as e:
                await session.rollback()
                raise StorageFailureError(f"Audit append failed: {e}") from e
        return _to_record(row)

    async def get(self, record_id: str) -> Optional[PersistedAuditRecord]:
        stmt = select(AuditRecordRow).where(AuditRecordRow.id == record_id)
        async with self._session_factory() as session:
            try:
                result = await session.execute(stmt)
            except SQLAlchemyError as e:
                raise StorageFailureError(f"Audit lookup failed: {e}") from e
            row = result.scalar_one_or_none()
        return _to_record(row) if row is not None else None

    async def find_by_subject(self, subject_id: str) -> List[PersistedAuditRecord]:
        return await self._find(AuditRecordRow.subject_id == subject_id)

    async def find_by_parent(self, parent_id: str) -> List[PersistedAuditRecord]:
        return await self._find(AuditRecordRow.parent_id == parent_id)

    async def _find(self, condition) -> List[PersistedAuditRecord]:
        stmt = (
            select(AuditRecordRow)
            .where(condition)
            .order_by(AuditRecordRow.occurred_at.asc(), AuditRecordRow.sequence.asc())
        )
        async with self._session_factory() as session:
            try:
                result = await session.execute(stmt)
            except SQLAlchemyError as e:
                raise StorageFailureError(f"Audit query failed: {e}") from e
            return [_to_record(row) for row in result.scalars().all()]


class DbActorDirectory:
    """Reads actor display fields from the users table. Implements ActorDirectory protocol."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_actor(self, actor_id: str) -> Optional[ActorSummary]:
        stmt = select(UserRow).where(UserRow.id == actor_id)
        async with self._session_factory() as session:
            try:
                result = await session.execute(stmt)
            except SQLAlchemyError as e:
                raise ProjectionError(f"Actor lookup failed: {e}") from e
            row = result.scalar_one_or_none()
        if row is None:
            return None
        return ActorSummary(actor_id=row.id, name=row.name, email=row.email)
