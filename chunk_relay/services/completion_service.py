"""Completion service: finalize the multipart upload and report progress."""

from datetime import datetime, timezone
from typing import Optional
from ..core.exceptions import CompletionFailed, MissingParameter, SessionNotFound, StorageError
from ..models.upload_session import UploadSession
from ..repositories.session_repo import SessionLocks, SessionRepository
from ..repositories.storage_repo import StorageRepository
from ..schemas.relay import ProgressResponse
from ..utils.logger import get_logger

logger = get_logger(__name__)


def _ready_to_complete(session: UploadSession) -> bool:
    return (
        not session.completed
        and session.all_uploaded
        and session.multipart_upload_id is not None
    )


def _mark_completed(session: UploadSession) -> None:
    if not session.completed:
        session.completed = True
        session.completed_at = datetime.now(timezone.utc)
        session.destination_key = session.resolved_key


class CompletionService:
    """Service for completing uploads."""

    def __init__(
        self,
        sessions: SessionRepository,
        storage_repo: StorageRepository,
        locks: SessionLocks,
    ):
        self.sessions = sessions
        self.storage_repo = storage_repo
        self.locks = locks

    async def progress(self, session_id: Optional[str]) -> ProgressResponse:
        """
        Complete the upload if every chunk is in, then report progress.
        The trigger is re-evaluated on every call, so a failed completion
        can be retried by calling again.
        """
        if not session_id:
            raise MissingParameter("Missing session", parameter="session")

        session = await self._load(session_id)
        if _ready_to_complete(session):
            async with self.locks.get(session_id):
                session = await self._load(session_id)
                if _ready_to_complete(session):
                    session = await self._complete(session_id, session)

        key = session.resolved_key
        return ProgressResponse(
            session=session_id,
            uploaded_chunks=session.uploaded_count,
            total_chunks=session.total_chunks,
            completed=session.completed,
            storage_uploaded=await self._object_visible(key),
            filename=session.filename,
            storage_key=key,
            folder=session.folder,
            multipart_upload_id=session.multipart_upload_id,
            completed_at=session.completed_at,
        )

    async def _load(self, session_id: str) -> UploadSession:
        session = await self.sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session=session_id)
        return session

    async def _complete(self, session_id: str, session: UploadSession) -> UploadSession:
        key = session.resolved_key
        upload = self.storage_repo.resume_multipart_upload(key, session.multipart_upload_id)
        parts = session.ordered_parts()
        try:
            await upload.complete(parts)
        except StorageError as e:
            raise CompletionFailed(reason=str(e), session=session_id, key=key)

        session = await self.sessions.update(session_id, _mark_completed)
        logger.info(
            "Upload completed",
            session=session_id,
            key=key,
            parts=len(parts),
            size=session.total_size,
        )
        return session

    async def _object_visible(self, key: str) -> bool:
        try:
            return await self.storage_repo.object_exists(key)
        except StorageError as e:
            logger.warning("Storage existence check failed", key=key, error=str(e))
            return False
