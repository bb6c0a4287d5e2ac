"""Helper functions for common operations."""

import secrets
import time
from typing import Optional
from urllib.parse import unquote, urlparse
from .constants import CONTENT_TYPE_EXTENSIONS, DEFAULT_FILENAME


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_bytes < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.2f} PB"


def normalize_folder(folder: Optional[str]) -> str:
    """Strip leading and trailing slashes from a destination folder."""
    return (folder or "").strip("/")


def build_destination_key(folder: Optional[str], filename: str) -> str:
    """Join folder and filename into an object key."""
    folder = normalize_folder(folder)
    return f"{folder}/{filename}" if folder else filename


def derive_filename(file_url: str, content_type: Optional[str] = None) -> str:
    """
    Guess a filename from the last URL path segment.
    Extensionless names get an extension derived from the content type.
    """
    try:
        path = urlparse(file_url).path
    except ValueError:
        return DEFAULT_FILENAME

    filename = unquote(path.rsplit("/", 1)[-1]) or DEFAULT_FILENAME
    if "." not in filename and content_type:
        mime = content_type.split(";", 1)[0].strip().lower()
        ext = CONTENT_TYPE_EXTENSIONS.get(mime)
        if ext:
            filename = f"{filename}.{ext}"
    return filename


def generate_session_id() -> str:
    """
    Generate a session identifier.
    Format: session_<random>_<epoch milliseconds>
    """
    return f"session_{secrets.token_hex(6)}_{int(time.time() * 1000)}"


def format_range_header(start: int, end: int) -> str:
    """Build an HTTP Range header value for the half-open range [start, end)."""
    return f"bytes={start}-{end - 1}"
