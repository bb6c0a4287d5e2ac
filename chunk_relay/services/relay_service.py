"""Relay service: move one chunk from the source into the multipart upload."""

from typing import Optional, Union
from ..core.exceptions import (
    FolderConflict,
    InvalidChunkIndex,
    MissingParameter,
    MultipartInitFailed,
    PartUploadFailed,
    RelayError,
    SessionInactive,
    SessionNotFound,
    StorageError,
)
from ..models.upload_session import UploadSession
from ..repositories.session_repo import ActiveSessionRegistry, SessionLocks, SessionRepository
from ..repositories.source_repo import SourceRepository
from ..repositories.storage_repo import StorageRepository
from ..schemas.relay import ChunkUploadResponse
from ..utils.helpers import build_destination_key, normalize_folder
from ..utils.logger import get_logger
from .chunk_planner import plan_chunks

logger = get_logger(__name__)


def parse_chunk_index(chunk: Union[int, str, None]) -> Optional[int]:
    """Parse a chunk index, returning None unless it is a well-formed integer."""
    if chunk is None or isinstance(chunk, bool):
        return None
    if isinstance(chunk, int):
        return chunk
    try:
        value = float(str(chunk).strip())
    except ValueError:
        return None
    if not value.is_integer():
        return None
    return int(value)


class RelayService:
    """Service for relaying chunks into storage."""

    def __init__(
        self,
        sessions: SessionRepository,
        registry: ActiveSessionRegistry,
        storage_repo: StorageRepository,
        source_repo: SourceRepository,
        locks: SessionLocks,
    ):
        self.sessions = sessions
        self.registry = registry
        self.storage_repo = storage_repo
        self.source_repo = source_repo
        self.locks = locks

    async def upload_chunk(
        self,
        session_id: Optional[str],
        chunk: Union[int, str, None],
        folder: Optional[str] = None,
    ) -> ChunkUploadResponse:
        """
        Relay chunk ``chunk`` of the active session.
        1. Validate the request against the active session
        2. Lazily create the multipart upload (binding the folder)
        3. Fetch the byte range from the source
        4. Upload it as part chunk+1 and record the ETag
        Already-relayed chunks return immediately without touching the network.
        """
        index = parse_chunk_index(chunk)
        if not session_id or index is None:
            raise MissingParameter("Missing session or chunk", session=session_id, chunk=chunk)

        if await self.registry.current() != session_id:
            raise SessionInactive(session=session_id)

        session = await self.sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session=session_id)

        if not 0 <= index < session.total_chunks:
            raise InvalidChunkIndex(chunk=index, total_chunks=session.total_chunks)

        if session.uploaded[index]:
            return ChunkUploadResponse(chunk=index, already=True, folder=session.folder)

        session = await self._ensure_multipart_upload(
            session_id, session, normalize_folder(folder)
        )

        start, end = plan_chunks(session.total_size, session.chunk_size).byte_range(index)
        data = await self.source_repo.fetch_range(session.source_url, start, end, chunk=index)

        part_number = index + 1
        upload = self.storage_repo.resume_multipart_upload(
            session.destination_key, session.multipart_upload_id
        )
        try:
            etag = await upload.upload_part(part_number, data)
        except StorageError as e:
            raise PartUploadFailed(reason=str(e), chunk=index, part_number=part_number)

        session = await self.sessions.update(
            session_id, lambda s: s.record_part(index, etag)
        )
        logger.info(
            "Chunk relayed",
            session=session_id,
            chunk=index,
            part_number=part_number,
            bytes=end - start,
            uploaded_chunks=session.uploaded_count,
            total_chunks=session.total_chunks,
        )
        return ChunkUploadResponse(chunk=index, folder=session.folder)

    async def _ensure_multipart_upload(
        self, session_id: str, session: UploadSession, folder: str
    ) -> UploadSession:
        """Return the session with a multipart upload id, creating one if needed."""
        if session.multipart_upload_id:
            self._check_folder(session, folder)
            return session

        async with self.locks.get(session_id):
            session = await self.sessions.get(session_id)
            if session is None:
                raise SessionNotFound(session=session_id)
            if session.multipart_upload_id:
                self._check_folder(session, folder)
                return session

            target_folder = folder or session.folder
            key = build_destination_key(target_folder, session.filename)
            try:
                upload_id = await self.storage_repo.create_multipart_upload(
                    key, session.content_type
                )
            except StorageError as e:
                raise MultipartInitFailed(reason=str(e), key=key)

            def bind(s: UploadSession) -> None:
                if s.multipart_upload_id is None:
                    s.folder = target_folder
                    s.destination_key = key
                    s.multipart_upload_id = upload_id

            try:
                session = await self.sessions.update(session_id, bind)
            except RelayError:
                await self._abort_quietly(key, upload_id)
                raise

            if session.multipart_upload_id != upload_id:
                # Another worker stored its upload first
                await self._abort_quietly(key, upload_id)
                self._check_folder(session, folder)
            else:
                logger.info(
                    "Multipart upload initialized",
                    session=session_id,
                    key=key,
                    upload_id=upload_id,
                )
            return session

    @staticmethod
    def _check_folder(session: UploadSession, folder: str) -> None:
        if folder and folder != session.folder:
            raise FolderConflict(
                folder=folder, current_folder=session.folder, key=session.destination_key
            )

    async def _abort_quietly(self, key: str, upload_id: str) -> None:
        try:
            await self.storage_repo.resume_multipart_upload(key, upload_id).abort()
        except StorageError as e:
            logger.warning("Redundant multipart abort failed", key=key, upload_id=upload_id, error=str(e))
