"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y redirects de cada probe.
- Facilita testeo: respx o un cliente inyectado sustituyen la red.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings
from core.domain.errors import UnexpectedStatus


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the gate's defaults."""

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json,text/html;q=0.9,*/*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
    )


def is_available_status(status_code: int) -> bool:
    """2xx and 3xx mean "serving" / "published"."""

    return 200 <= status_code < 400


async def get_available(client: httpx.AsyncClient, url: str) -> httpx.Response:
    """GET `url` and raise unless the status is in [200, 400).

    Network-level failures surface as `httpx.HTTPError` subclasses.
    """

    resp = await client.get(url)
    if not is_available_status(resp.status_code):
        raise UnexpectedStatus(url, resp.status_code)
    return resp
