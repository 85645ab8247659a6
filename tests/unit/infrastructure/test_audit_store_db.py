"""DbAuditStore / DbActorDirectory tests with a mocked AsyncSession: mapping, commit, rollback on failure."""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.application.exceptions import ProjectionError, StorageFailureError
from app.domain.models.audit_record import AuditAction, AuditRecordDraft, Transport
from app.infrastructure.database.audit_store_db import DbActorDirectory, DbAuditStore
from app.infrastructure.database.models import AuditRecordRow, UserRow
from app.infrastructure.database.session import Base, init_models


class FakeSessionFactory:
    """Stands in for async_sessionmaker: every call yields the same mocked session."""

    def __init__(self, session):
        self.session = session

    def __call__(self):
        return self

    async def __aenter__(self):
        return self.session

    async def __aexit__(self, exc_type, exc, tb):
        return False


@pytest.fixture
def session():
    s = AsyncMock()
    s.add = MagicMock()
    return s


@pytest.fixture
def store(session):
    return DbAuditStore(FakeSessionFactory(session))


def _draft() -> AuditRecordDraft:
    return AuditRecordDraft(
        actor_id=str(uuid.uuid4()),
        subject_kind="User",
        subject_id=str(uuid.uuid4()),
        action=AuditAction.CREATE,
        payload={"name": "John"},
        transport=Transport.POST,
    )


def _row(**overrides) -> AuditRecordRow:
    values = dict(
        id=str(uuid.uuid4()),
        sequence=3,
        actor_id=str(uuid.uuid4()),
        subject_kind="User",
        subject_id=str(uuid.uuid4()),
        action="DELETE",
        transport=None,
        payload={"name": "John"},
        parent_id=None,
        occurred_at=datetime(2024, 1, 1, 12, 0),
    )
    values.update(overrides)
    return AuditRecordRow(**values)


def _result(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    result.scalar_one_or_none.return_value = rows[0] if rows else None
    return result


@pytest.mark.asyncio
async def test_append_commits_and_maps_row(store, session):
    session.refresh = AsyncMock(side_effect=lambda row: setattr(row, "sequence", 42))
    draft = _draft()

    record = await store.append(draft)

    session.add.assert_called_once()
    session.commit.assert_awaited_once()
    assert record.sequence == 42
    assert record.subject_id == draft.subject_id
    assert record.action is AuditAction.CREATE
    assert record.transport is Transport.POST
    assert record.occurred_at.tzinfo is not None


@pytest.mark.asyncio
async def test_append_failure_rolls_back(store, session):
    session.commit = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("db down")))

    with pytest.raises(StorageFailureError):
        await store.append(_draft())

    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_find_by_subject_maps_rows(store, session):
    row = _row()
    session.execute = AsyncMock(return_value=_result([row]))

    records = await store.find_by_subject(row.subject_id)

    assert len(records) == 1
    assert records[0].id == row.id
    assert records[0].action is AuditAction.DELETE
    assert records[0].transport is None
    assert records[0].occurred_at.tzinfo == timezone.utc


@pytest.mark.asyncio
async def test_get_missing_returns_none(store, session):
    session.execute = AsyncMock(return_value=_result([]))
    assert await store.get(str(uuid.uuid4())) is None


@pytest.mark.asyncio
async def test_query_failure_raises_storage_failure(store, session):
    session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("timeout")))
    with pytest.raises(StorageFailureError):
        await store.find_by_parent(str(uuid.uuid4()))


@pytest.mark.asyncio
async def test_actor_directory_maps_user(session):
    user = UserRow(id=str(uuid.uuid4()), name="Admin", email="admin@example.com")
    session.execute = AsyncMock(return_value=_result([user]))
    directory = DbActorDirectory(FakeSessionFactory(session))

    actor = await directory.get_actor(user.id)

    assert actor.name == "Admin"
    assert actor.email == "admin@example.com"


@pytest.mark.asyncio
async def test_actor_directory_failure_is_projection_error(session):
    session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("timeout")))
    directory = DbActorDirectory(FakeSessionFactory(session))
    with pytest.raises(ProjectionError):
        await directory.get_actor(str(uuid.uuid4()))


@pytest.mark.asyncio
async def test_init_models_creates_only_audit_table():
    conn = AsyncMock()
    engine = MagicMock()
    engine.begin.return_value.__aenter__ = AsyncMock(return_value=conn)
    engine.begin.return_value.__aexit__ = AsyncMock(return_value=False)

    await init_models(engine)

    conn.run_sync.assert_awaited_once()
    args, kwargs = conn.run_sync.call_args
    assert args[0] == Base.metadata.create_all
    assert kwargs["tables"] == [AuditRecordRow.__table__]
    assert UserRow.__table__ not in kwargs["tables"]
