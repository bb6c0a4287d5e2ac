"""Session repository and active-session registry over a key-value store."""

import asyncio
from typing import Callable, Dict, Optional
from .kv_store import KeyValueStore
from ..core.exceptions import SessionNotFound, SessionUpdateConflict
from ..models.upload_session import UploadSession
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SessionRepository:
    """Repository for upload session documents."""

    def __init__(self, store: KeyValueStore, max_retries: int = 10):
        """
        Initialize repository.
        Args:
            store: Key-value store holding one JSON document per session id
            max_retries: Attempts made by update() before giving up on conflicts
        """
        self.store = store
        self.max_retries = max_retries

    async def get(self, session_id: str) -> Optional[UploadSession]:
        """Get session by ID."""
        raw = await self.store.get(session_id)
        return UploadSession.from_json(raw) if raw else None

    async def create(self, session_id: str, session: UploadSession) -> None:
        """Persist a new session; an existing document with the same id is kept."""
        if not await self.store.compare_and_set(session_id, None, session.to_json()):
            raise SessionUpdateConflict(
                "Session id already in use", session=session_id
            )

    async def update(
        self, session_id: str, mutate: Callable[[UploadSession], None]
    ) -> UploadSession:
        """
        Apply ``mutate`` to the stored session with optimistic concurrency.
        The document is only written if nobody changed it since it was read;
        on conflict the mutation is re-applied to the fresh document.
        Exceptions raised by ``mutate`` abort the update without writing.
        """
        for attempt in range(1, self.max_retries + 1):
            raw = await self.store.get(session_id)
            if raw is None:
                raise SessionNotFound(session=session_id)

            session = UploadSession.from_json(raw)
            mutate(session)
            updated = session.to_json()
            if updated == raw:
                return session
            if await self.store.compare_and_set(session_id, raw, updated):
                return session

            logger.debug("Session write conflict", session=session_id, attempt=attempt)

        raise SessionUpdateConflict(session=session_id, attempts=self.max_retries)

    async def delete(self, session_id: str) -> None:
        """Delete session by ID."""
        await self.store.delete(session_id)


class ActiveSessionRegistry:
    """
    Single-slot registry naming the one session allowed to accept chunks.
    Only one session can be active per store; multi-session operation would
    need a set of ids keyed by session with per-key locks instead.
    """

    def __init__(self, store: KeyValueStore, key: str = "active_session"):
        self.store = store
        self.key = key

    async def current(self) -> Optional[str]:
        return await self.store.get(self.key)

    async def acquire(self, session_id: str) -> bool:
        """Claim the slot if it is free."""
        return await self.store.compare_and_set(self.key, None, session_id)

    async def release(self, session_id: str) -> bool:
        """Free the slot if it is held by ``session_id``."""
        return await self.store.compare_and_set(self.key, session_id, None)


class SessionLocks:
    """Per-session asyncio locks for steps that must run once at a time."""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock

    def discard(self, session_id: str) -> None:
        self._locks.pop(session_id, None)
