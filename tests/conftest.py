"""Pytest configuration and fixtures."""

from typing import AsyncGenerator

import httpx
import pytest
from httpx import AsyncClient, ASGITransport

from chunk_relay.core.dependencies import (
    get_session_locks,
    get_session_store,
    get_source_repo,
    get_storage_repo,
)
from chunk_relay.main import app
from chunk_relay.middleware.rate_limit import limiter
from chunk_relay.repositories.kv_store import InMemoryKeyValueStore
from chunk_relay.repositories.session_repo import (
    ActiveSessionRegistry,
    SessionLocks,
    SessionRepository,
)
from chunk_relay.repositories.source_repo import SourceRepository
from chunk_relay.services.completion_service import CompletionService
from chunk_relay.services.relay_service import RelayService
from chunk_relay.services.session_service import SessionService
from tests.fakes import FakeSource, FakeStorage


@pytest.fixture(autouse=True)
def disable_rate_limit():
    """Keep the session-creation rate limit out of the way."""
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def session_repo(store) -> SessionRepository:
    return SessionRepository(store, max_retries=5)


@pytest.fixture
def registry(store) -> ActiveSessionRegistry:
    return ActiveSessionRegistry(store)


@pytest.fixture
def locks() -> SessionLocks:
    return SessionLocks()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def source() -> FakeSource:
    """60-byte source relayed in 25-byte chunks by the service fixtures."""
    return FakeSource(size=60, data=bytes(range(60)))


@pytest.fixture
async def source_client(source) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=source.transport()) as http:
        yield http


@pytest.fixture
def source_repo(source_client) -> SourceRepository:
    return SourceRepository(source_client)


@pytest.fixture
def session_service(session_repo, registry, storage, source_repo, locks) -> SessionService:
    return SessionService(session_repo, registry, storage, source_repo, locks, chunk_size=25)


@pytest.fixture
def relay_service(session_repo, registry, storage, source_repo, locks) -> RelayService:
    return RelayService(session_repo, registry, storage, source_repo, locks)


@pytest.fixture
def completion_service(session_repo, storage, locks) -> CompletionService:
    return CompletionService(session_repo, storage, locks)


@pytest.fixture
async def client(store, storage, source_repo, locks) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client wired to the in-memory store and fakes."""
    app.dependency_overrides[get_session_store] = lambda: store
    app.dependency_overrides[get_storage_repo] = lambda: storage
    app.dependency_overrides[get_source_repo] = lambda: source_repo
    app.dependency_overrides[get_session_locks] = lambda: locks

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
