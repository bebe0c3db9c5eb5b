"""Shared httpx.AsyncClient used by every OAuth client.

Timeouts live here; providers never set their own connect timeout.
"""

import httpx

from socialfeed.constants import HTTP_CONNECT_TIMEOUT, HTTP_TOTAL_TIMEOUT

_client: httpx.AsyncClient | None = None


def _build_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(HTTP_TOTAL_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT),
        headers={"Accept": "application/json"},
    )


def get_http_client() -> httpx.AsyncClient:
    """Return the shared client, creating it lazily on first use."""
    global _client
    if _client is None or _client.is_closed:
        _client = _build_client()
    return _client


async def close_http_client() -> None:
    """Close the shared client. Hosts call this on shutdown."""
    global _client
    if _client:
        await _client.aclose()
        _client = None
