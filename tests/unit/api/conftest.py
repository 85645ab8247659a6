"""Fixtures for API unit tests: fresh app per test, in-memory store and actors, AsyncClient."""

import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from app.config.settings import AppSettings
from app.domain.models.audit_record import ActorSummary
from app.infrastructure.memory.audit_store_memory import InMemoryActorDirectory, InMemoryAuditStore
from app.main import create_app


@pytest.fixture
def actor_id():
    return str(uuid.uuid4())


@pytest.fixture
def audit_store():
    return InMemoryAuditStore()


@pytest.fixture
def actor_directory(actor_id):
    return InMemoryActorDirectory(
        {actor_id: ActorSummary(actor_id=actor_id, name="Admin", email="admin@example.com")}
    )


@pytest.fixture
def app_with_overrides(audit_store, actor_directory):
    """App with store and actor directory overridden for testing."""
    from app.api import dependencies

    app = create_app(AppSettings(environment="test", store_backend="memory"))
    app.dependency_overrides[dependencies.get_audit_store] = lambda: audit_store
    app.dependency_overrides[dependencies.get_actor_directory] = lambda: actor_directory
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
