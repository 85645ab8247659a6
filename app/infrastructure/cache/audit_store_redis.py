"""Redis-backed audit store. Records as JSON strings, subject/parent indexes as sorted sets scored by sequence."""

import json
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from redis.exceptions import RedisError

from app.application.exceptions import StorageFailureError
from app.domain.models.audit_record import AuditRecordDraft, PersistedAuditRecord
from app.infrastructure.cache.redis_client import RedisClient

RECORD_PREFIX = "audit:record:"
SUBJECT_INDEX_PREFIX = "audit:subject:"
CHILDREN_INDEX_PREFIX = "audit:children:"
SEQUENCE_KEY = "audit:sequence"


def _record_key(record_id: str) -> str:
    return f"{RECORD_PREFIX}{record_id}"


class RedisAuditStore:
    """Persists audit records to Redis. Implements AuditStore protocol. Keys never expire."""

    def __init__(self, redis_client: RedisClient) -> None:
        self._redis = redis_client

    async def append(self, draft: AuditRecordDraft) -> PersistedAuditRecord:
        """
        Sequence comes from INCR; the record and its index entries are written in one
        transaction, so a failure leaves at most an unused sequence number.
        """
        try:
            sequence = await self._redis.incr(SEQUENCE_KEY)
            record = PersistedAuditRecord(
                id=str(uuid.uuid4()),
                actor_id=draft.actor_id,
                subject_kind=draft.subject_kind,
                subject_id=draft.subject_id,
                action=draft.action,
                payload=draft.payload,
                occurred_at=draft.occurred_at or datetime.now(timezone.utc),
                sequence=sequence,
                transport=draft.transport,
                parent_id=draft.parent_id,
            )
            indexes: Dict[str, float] = {f"{SUBJECT_INDEX_PREFIX}{record.subject_id}": sequence}
            if record.parent_id:
                indexes[f"{CHILDREN_INDEX_PREFIX}{record.parent_id}"] = sequence
            await self._redis.set_with_indexes(
                _record_key(record.id),
                json.dumps(record.to_dict()),
                indexes,
                member=record.id,
            )
        except RedisError as e:
            raise StorageFailureError(f"Audit append failed: {e}") from e
        return record

    async def get(self, record_id: str) -> Optional[PersistedAuditRecord]:
        try:
            raw = await self._redis.get(_record_key(record_id))
        except RedisError as e:
            raise StorageFailureError(f"Audit lookup failed: {e}") from e
        if not raw:
            return None
        return PersistedAuditRecord.from_dict(json.loads(raw))

    async def find_by_subject(self, subject_id: str) -> List[PersistedAuditRecord]:
        return await self._load_index(f"{SUBJECT_INDEX_PREFIX}{subject_id}")

    async def find_by_parent(self, parent_id: str) -> List[PersistedAuditRecord]:
        return await self._load_index(f"{CHILDREN_INDEX_PREFIX}{parent_id}")

    async def _load_index(self, index_key: str) -> List[PersistedAuditRecord]:
        try:
            ids = await self._redis.zrange_all(index_key)
            raws = await self._redis.mget([_record_key(i) for i in ids])
        except RedisError as e:
            raise StorageFailureError(f"Audit query failed: {e}") from e
        records = [PersistedAuditRecord.from_dict(json.loads(raw)) for raw in raws if raw]
        return sorted(records, key=lambda r: r.order_key)
