"""Shared httpx client for reading source URLs."""

import httpx
from typing import Optional
from .settings import settings

_http_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """Get or create the source HTTP client."""
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                settings.source_read_timeout, connect=settings.source_connect_timeout
            ),
        )
    return _http_client


async def close_http_client() -> None:
    """Close the source HTTP client."""
    global _http_client
    if _http_client:
        await _http_client.aclose()
        _http_client = None
