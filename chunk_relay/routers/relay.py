"""Relay routes: session creation, chunk relay, progress and cleanup."""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, Response, status
from ..config import settings
from ..core.dependencies import get_completion_service, get_relay_service, get_session_service
from ..middleware.rate_limit import limiter
from ..schemas.relay import (
    ChunkUploadResponse,
    ClearSessionResponse,
    ProgressResponse,
    SessionCreatedResponse,
    SessionDebugResponse,
    ErrorResponse,
)
from ..services.completion_service import CompletionService
from ..services.relay_service import RelayService
from ..services.session_service import SessionService

router = APIRouter(
    tags=["relay"],
    responses={code: {"model": ErrorResponse} for code in (400, 403, 404, 409, 500)},
)


@router.get("/", response_model=SessionCreatedResponse)
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def create_session(
    request: Request,
    url: Optional[str] = Query(None, description="Source file URL"),
    service: SessionService = Depends(get_session_service),
):
    """
    Start a relay session for the file at ``url``.
    Only one session may be active at a time.
    """
    return await service.create_session(url)


@router.get("/upload", response_model=ChunkUploadResponse)
async def upload_chunk(
    session: Optional[str] = Query(None),
    chunk: Optional[str] = Query(None, description="0-indexed chunk number"),
    folder: Optional[str] = Query(None, description="Destination folder"),
    service: RelayService = Depends(get_relay_service),
):
    """Relay one chunk of the active session into storage."""
    return await service.upload_chunk(session, chunk, folder)


@router.get("/progress", response_model=ProgressResponse)
async def get_progress(
    session: Optional[str] = Query(None),
    service: CompletionService = Depends(get_completion_service),
):
    """Report progress, completing the upload once every chunk is relayed."""
    return await service.progress(session)


@router.get("/clear", response_model=ClearSessionResponse)
async def clear_session(
    session: Optional[str] = Query(None),
    service: SessionService = Depends(get_session_service),
):
    """Abort any unfinished upload and release the session slot."""
    return await service.clear_session(session)


@router.get("/debug", response_model=SessionDebugResponse)
async def debug_session(
    session: Optional[str] = Query(None),
    service: SessionService = Depends(get_session_service),
):
    """Dump the stored session document."""
    return await service.debug_session(session)


@router.options("/{path:path}", include_in_schema=False)
async def preflight(path: str):
    """Answer OPTIONS requests that are not CORS preflights."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)
