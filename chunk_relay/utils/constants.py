"""Application constants and enums."""

from enum import Enum

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_FILENAME = "file"

# Extensions appended to extensionless filenames, keyed by MIME type
CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "video/mp4": "mp4",
    "application/pdf": "pdf",
    "application/zip": "zip",
    "text/plain": "txt",
}


class StorageProvider(str, Enum):
    """Storage provider enum."""

    S3 = "s3"
    R2 = "r2"
    ORACLE = "oracle"
    WASABI = "wasabi"


class SessionStoreBackend(str, Enum):
    """Session store backend enum."""

    REDIS = "redis"
    MEMORY = "memory"
