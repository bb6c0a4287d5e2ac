"""Relay request/response schemas."""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class SessionCreatedResponse(BaseModel):
    """Response from creating a relay session."""

    session: str = Field(..., description="Session identifier")
    total_chunks: int = Field(..., description="Number of chunks to relay")
    chunk_size: int = Field(..., description="Size of each chunk in bytes")
    size: int = Field(..., description="Total source size in bytes")
    type: str = Field(..., description="Source content type")
    filename: str = Field(..., description="Destination filename")
    message: str = Field(
        default=(
            "Session started. Use /upload?session=...&chunk=...&folder=... "
            "to relay chunks (GET request only)."
        )
    )


class ChunkUploadResponse(BaseModel):
    """Result of relaying one chunk."""

    chunk: int
    uploaded: bool = True
    already: bool = Field(default=False, description="Chunk was relayed by an earlier call")
    folder: str = ""


class ProgressResponse(BaseModel):
    """Progress report, produced after any due completion ran."""

    session: str
    uploaded_chunks: int
    total_chunks: int
    completed: bool
    storage_uploaded: bool = Field(
        ..., description="Destination object is visible in storage"
    )
    filename: str
    storage_key: str
    folder: str = ""
    multipart_upload_id: Optional[str] = None
    completed_at: Optional[datetime] = None


class ClearSessionResponse(BaseModel):
    """Result of clearing a session."""

    session: str
    cleared: bool = True
    aborted: bool = Field(default=False, description="A multipart abort was accepted by storage")
    cleanup_failed: bool = False
    cleanup_error: Optional[str] = None
    message: str = "Session and data cleared"


class SessionDebugResponse(BaseModel):
    """Raw session document for troubleshooting."""

    session: str
    session_data: Dict[str, Any]
    active_session: Optional[str] = None
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    code: str
    details: Optional[Dict[str, Any]] = None
