"""Reusable FastAPI dependencies."""

from functools import lru_cache
from fastapi import Depends
from ..config import get_http_client, get_redis, settings
from ..repositories.kv_store import InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore
from ..repositories.session_repo import ActiveSessionRegistry, SessionLocks, SessionRepository
from ..repositories.source_repo import SourceRepository
from ..repositories.storage_repo import StorageRepository
from ..services.completion_service import CompletionService
from ..services.relay_service import RelayService
from ..services.session_service import SessionService
from ..utils.constants import SessionStoreBackend


@lru_cache
def get_session_store() -> KeyValueStore:
    """Dependency to get the configured session store."""
    backend = SessionStoreBackend(settings.session_store.lower())
    if backend is SessionStoreBackend.MEMORY:
        return InMemoryKeyValueStore()
    return RedisKeyValueStore(get_redis())


@lru_cache
def get_session_locks() -> SessionLocks:
    """Dependency to get the process-wide session locks."""
    return SessionLocks()


@lru_cache
def get_storage_repo() -> StorageRepository:
    """Dependency to get storage repository."""
    return StorageRepository()


def get_source_repo() -> SourceRepository:
    """Dependency to get source repository."""
    return SourceRepository(get_http_client())


def get_session_repo(store: KeyValueStore = Depends(get_session_store)) -> SessionRepository:
    """Dependency to get session repository."""
    return SessionRepository(store, max_retries=settings.session_commit_retries)


def get_active_registry(store: KeyValueStore = Depends(get_session_store)) -> ActiveSessionRegistry:
    """Dependency to get the active-session registry."""
    return ActiveSessionRegistry(store, key=settings.active_session_key)


def get_session_service(
    sessions: SessionRepository = Depends(get_session_repo),
    registry: ActiveSessionRegistry = Depends(get_active_registry),
    storage_repo: StorageRepository = Depends(get_storage_repo),
    source_repo: SourceRepository = Depends(get_source_repo),
    locks: SessionLocks = Depends(get_session_locks),
) -> SessionService:
    return SessionService(sessions, registry, storage_repo, source_repo, locks)


def get_relay_service(
    sessions: SessionRepository = Depends(get_session_repo),
    registry: ActiveSessionRegistry = Depends(get_active_registry),
    storage_repo: StorageRepository = Depends(get_storage_repo),
    source_repo: SourceRepository = Depends(get_source_repo),
    locks: SessionLocks = Depends(get_session_locks),
) -> RelayService:
    return RelayService(sessions, registry, storage_repo, source_repo, locks)


def get_completion_service(
    sessions: SessionRepository = Depends(get_session_repo),
    storage_repo: StorageRepository = Depends(get_storage_repo),
    locks: SessionLocks = Depends(get_session_locks),
) -> CompletionService:
    return CompletionService(sessions, storage_repo, locks)
