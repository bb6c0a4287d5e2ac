"""Source repository: metadata probes and range reads against the source URL."""

import math
from dataclasses import dataclass
from typing import Optional
import httpx
from ..core.exceptions import ChunkDownloadFailed, InvalidSize, SourceUnreachable
from ..utils.constants import DEFAULT_CONTENT_TYPE
from ..utils.helpers import format_range_header


@dataclass(frozen=True)
class SourceMetadata:
    """Headers of interest returned by the metadata probe."""

    size: int
    content_type: str


def _parse_content_length(raw: Optional[str]) -> int:
    """Parse a Content-Length header, rejecting missing or non-positive values."""
    if raw is None:
        raise InvalidSize("Source did not declare a content length")
    try:
        size = float(raw.strip())
    except ValueError:
        raise InvalidSize(size=raw)
    if not math.isfinite(size) or size <= 0 or not size.is_integer():
        raise InvalidSize(size=raw)
    return int(size)


class SourceRepository:
    """Repository for reading the source file over HTTP."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def probe(self, url: str) -> SourceMetadata:
        """
        Issue a HEAD request and extract size and content type.
        Raises SourceUnreachable if the request fails, InvalidSize if no usable size.
        """
        try:
            response = await self.client.head(url, follow_redirects=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise SourceUnreachable(url=url, reason=str(e))

        if not response.is_success:
            raise SourceUnreachable(url=url, status=response.status_code)

        size = _parse_content_length(response.headers.get("content-length"))
        content_type = response.headers.get("content-type") or DEFAULT_CONTENT_TYPE
        return SourceMetadata(size=size, content_type=content_type)

    async def fetch_range(self, url: str, start: int, end: int, chunk: int) -> bytes:
        """
        Fetch the half-open byte range [start, end) of the source.
        The body is streamed and abandoned as soon as it outgrows the range, so a
        source that ignores Range never gets buffered whole.
        Raises ChunkDownloadFailed on transport errors, non-2xx statuses or wrong lengths.
        """
        byte_range = format_range_header(start, end)
        expected = end - start
        try:
            async with self.client.stream(
                "GET", url, headers={"Range": byte_range}, follow_redirects=True
            ) as response:
                if not response.is_success:
                    raise ChunkDownloadFailed(
                        reason=f"HTTP {response.status_code}: {response.reason_phrase}",
                        status=response.status_code,
                        chunk=chunk,
                        range=byte_range,
                    )

                declared = response.headers.get("content-length", "").strip()
                if declared.isdigit() and int(declared) > expected:
                    raise ChunkDownloadFailed(
                        reason=f"Expected {expected} bytes, source declared {declared}",
                        status=response.status_code,
                        chunk=chunk,
                        range=byte_range,
                    )

                data = bytearray()
                async for piece in response.aiter_bytes():
                    data.extend(piece)
                    if len(data) > expected:
                        raise ChunkDownloadFailed(
                            reason=f"Expected {expected} bytes, received more",
                            status=response.status_code,
                            chunk=chunk,
                            range=byte_range,
                        )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ChunkDownloadFailed(
                "Failed to download chunk", reason=str(e), chunk=chunk, range=byte_range
            )

        if len(data) != expected:
            raise ChunkDownloadFailed(
                reason=f"Expected {expected} bytes, received {len(data)}",
                status=response.status_code,
                chunk=chunk,
                range=byte_range,
            )
        return bytes(data)
