"""In-memory audit store and actor directory. Default backend for dev and tests."""

import asyncio
import copy
import dataclasses
import itertools
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional

from app.domain.models.audit_record import ActorSummary, AuditRecordDraft, PersistedAuditRecord


def _detached(record: PersistedAuditRecord) -> PersistedAuditRecord:
    """Copy with its own payload, so callers cannot mutate what the store holds."""
    return dataclasses.replace(record, payload=copy.deepcopy(record.payload))


class InMemoryAuditStore:
    """Append-only dict store with subject and parent indexes. Implements AuditStore protocol."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._sequence = itertools.count(1)
        self._records: Dict[str, PersistedAuditRecord] = {}
        self._by_subject: Dict[str, List[str]] = {}
        self._by_parent: Dict[str, List[str]] = {}

    async def append(self, draft: AuditRecordDraft) -> PersistedAuditRecord:
        """Assign id, sequence and occurred_at under the lock, then index the record."""
        async with self._lock:
            record = PersistedAuditRecord(
                id=str(uuid.uuid4()),
                actor_id=draft.actor_id,
                subject_kind=draft.subject_kind,
                subject_id=draft.subject_id,
                action=draft.action,
                payload=copy.deepcopy(draft.payload),
                occurred_at=draft.occurred_at or datetime.now(timezone.utc),
                sequence=next(self._sequence),
                transport=draft.transport,
                parent_id=draft.parent_id,
            )
            self._records[record.id] = record
            self._by_subject.setdefault(record.subject_id, []).append(record.id)
            if record.parent_id:
                self._by_parent.setdefault(record.parent_id, []).append(record.id)
            return _detached(record)

    async def get(self, record_id: str) -> Optional[PersistedAuditRecord]:
        record = self._records.get(record_id)
        return _detached(record) if record is not None else None

    async def find_by_subject(self, subject_id: str) -> List[PersistedAuditRecord]:
        return self._ordered(self._by_subject.get(subject_id, []))

    async def find_by_parent(self, parent_id: str) -> List[PersistedAuditRecord]:
        return self._ordered(self._by_parent.get(parent_id, []))

    def __len__(self) -> int:
        return len(self._records)

    def _ordered(self, ids: List[str]) -> List[PersistedAuditRecord]:
        return sorted((_detached(self._records[i]) for i in ids), key=lambda r: r.order_key)


class InMemoryActorDirectory:
    """Seedable actor lookup. Implements ActorDirectory protocol."""

    def __init__(self, actors: Optional[Mapping[str, ActorSummary]] = None) -> None:
        self._actors: Dict[str, ActorSummary] = dict(actors or {})

    def add(self, actor: ActorSummary) -> None:
        self._actors[actor.actor_id] = actor

    async def get_actor(self, actor_id: str) -> Optional[ActorSummary]:
        return self._actors.get(actor_id)
