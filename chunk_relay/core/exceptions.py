"""Relay error kinds and their HTTP status codes."""

from typing import Any, Dict, Optional
from fastapi import status


class RelayError(Exception):
    """
    Base class for every recoverable relay failure.
    Carries a human-readable message plus structured details for the caller.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "RelayError"
    default_message: str = "Relay operation failed"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details: Dict[str, Any] = {k: v for k, v in details.items() if v is not None}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Render the error as a response body."""
        body: Dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class InvalidSize(RelayError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "InvalidSize"
    default_message = "Invalid file size"


class SourceUnreachable(RelayError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "SourceUnreachable"
    default_message = "File URL not accessible"


class SessionAlreadyActive(RelayError):
    status_code = status.HTTP_409_CONFLICT
    code = "SessionAlreadyActive"
    default_message = "A session is already active"


class MissingParameter(RelayError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "MissingParameter"
    default_message = "Missing required parameter"


class SessionInactive(RelayError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "SessionInactive"
    default_message = "Session inactive or expired"


class SessionNotFound(RelayError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "SessionNotFound"
    default_message = "Session not found"


class InvalidChunkIndex(RelayError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "InvalidChunkIndex"
    default_message = "Invalid chunk index"


class FolderConflict(RelayError):
    status_code = status.HTTP_409_CONFLICT
    code = "FolderConflict"
    default_message = "Destination folder is already fixed for this session"


class SessionUpdateConflict(RelayError):
    status_code = status.HTTP_409_CONFLICT
    code = "SessionUpdateConflict"
    default_message = "Session was modified concurrently, retry the request"


class MultipartInitFailed(RelayError):
    code = "MultipartInitFailed"
    default_message = "Failed to initialize multipart upload"


class ChunkDownloadFailed(RelayError):
    code = "ChunkDownloadFailed"
    default_message = "Error downloading chunk"


class PartUploadFailed(RelayError):
    code = "PartUploadFailed"
    default_message = "Failed to upload part"


class CompletionFailed(RelayError):
    code = "CompletionFailed"
    default_message = "Failed to complete multipart upload"


class StorageError(Exception):
    """Raised by the storage repository when the backend call fails."""
