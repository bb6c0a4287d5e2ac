"""Session service: creation, clearing and inspection of relay sessions."""

from datetime import datetime, timezone
from typing import Optional
from ..config import settings
from ..core.exceptions import (
    MissingParameter,
    SessionAlreadyActive,
    SessionNotFound,
    StorageError,
)
from ..models.upload_session import UploadSession
from ..repositories.session_repo import ActiveSessionRegistry, SessionLocks, SessionRepository
from ..repositories.source_repo import SourceRepository
from ..repositories.storage_repo import StorageRepository
from ..schemas.relay import ClearSessionResponse, SessionCreatedResponse, SessionDebugResponse
from ..utils.helpers import derive_filename, format_file_size, generate_session_id
from ..utils.logger import get_logger
from .chunk_planner import plan_chunks

logger = get_logger(__name__)


class SessionService:
    """Service for the session lifecycle."""

    def __init__(
        self,
        sessions: SessionRepository,
        registry: ActiveSessionRegistry,
        storage_repo: StorageRepository,
        source_repo: SourceRepository,
        locks: SessionLocks,
        chunk_size: Optional[int] = None,
    ):
        self.sessions = sessions
        self.registry = registry
        self.storage_repo = storage_repo
        self.source_repo = source_repo
        self.locks = locks
        self.chunk_size = chunk_size or settings.chunk_size_bytes

    async def create_session(self, url: Optional[str]) -> SessionCreatedResponse:
        """
        Probe the source URL and open a new relay session.
        No multipart upload is created here; the first chunk relay does that.
        """
        if not url:
            raise MissingParameter("Missing url", parameter="url")

        if await self.registry.current():
            raise SessionAlreadyActive()

        metadata = await self.source_repo.probe(url)
        plan = plan_chunks(metadata.size, self.chunk_size)
        filename = derive_filename(url, metadata.content_type)

        session_id = generate_session_id()
        session = UploadSession.new(
            source_url=url,
            total_size=plan.total_size,
            content_type=metadata.content_type,
            chunk_size=plan.chunk_size,
            total_chunks=plan.total_chunks,
            filename=filename,
        )
        await self.sessions.create(session_id, session)

        # Another creator may have claimed the slot since the check above
        if not await self.registry.acquire(session_id):
            await self.sessions.delete(session_id)
            raise SessionAlreadyActive()

        logger.info(
            "Session created",
            session=session_id,
            url=url,
            size=format_file_size(plan.total_size),
            total_chunks=plan.total_chunks,
            filename=filename,
        )
        return SessionCreatedResponse(
            session=session_id,
            total_chunks=plan.total_chunks,
            chunk_size=plan.chunk_size,
            size=plan.total_size,
            type=metadata.content_type,
            filename=filename,
        )

    async def clear_session(self, session_id: Optional[str]) -> ClearSessionResponse:
        """
        Abort any unfinished multipart upload, delete the session and free the slot.
        The abort is best-effort: its failure is reported, never raised.
        """
        if not session_id:
            raise MissingParameter("Missing session", parameter="session")

        result = ClearSessionResponse(session=session_id)
        async with self.locks.get(session_id):
            session = await self.sessions.get(session_id)
            if session and session.multipart_upload_id and not session.completed:
                upload = self.storage_repo.resume_multipart_upload(
                    session.resolved_key, session.multipart_upload_id
                )
                try:
                    await upload.abort()
                    result.aborted = True
                except StorageError as e:
                    result.cleanup_failed = True
                    result.cleanup_error = str(e)
                    logger.warning(
                        "Multipart abort failed",
                        session=session_id,
                        key=session.resolved_key,
                        error=str(e),
                    )

            await self.sessions.delete(session_id)
        await self.registry.release(session_id)
        self.locks.discard(session_id)

        logger.info("Session cleared", session=session_id, aborted=result.aborted)
        return result

    async def debug_session(self, session_id: Optional[str]) -> SessionDebugResponse:
        """Return the stored session document and the active pointer."""
        if not session_id:
            raise MissingParameter("Missing session", parameter="session")

        session = await self.sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session=session_id)

        return SessionDebugResponse(
            session=session_id,
            session_data=session.model_dump(mode="json"),
            active_session=await self.registry.current(),
            timestamp=datetime.now(timezone.utc),
        )
