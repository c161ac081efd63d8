"""Liveness polling for a freshly deployed app server."""

from __future__ import annotations

import asyncio

import httpx
import structlog

from adapters.http_client import build_async_client, get_available
from core.config import AppSettings
from core.domain.errors import LivenessTimeout
from core.domain.models import ProbeResult
from core.retry import Sleep, retry_with_policy

logger = structlog.get_logger(__name__)


async def check_up(
    url: str,
    *,
    settings: AppSettings | None = None,
    client: httpx.AsyncClient | None = None,
    sleep: Sleep = asyncio.sleep,
) -> ProbeResult:
    """Poll `url` until it answers with a status in [200, 400).

    Raises `LivenessTimeout` once the retry budget (10 attempts, 10 s apart
    by default) is spent. Nothing after this stage should run in that case.
    """

    settings = settings or AppSettings()
    if client is None:
        async with build_async_client(settings) as owned:
            return await _poll(url, owned, settings, sleep)
    return await _poll(url, client, settings, sleep)


async def _poll(url: str, client: httpx.AsyncClient, settings: AppSettings, sleep: Sleep) -> ProbeResult:
    policy = settings.liveness_policy()
    attempts = 0

    async def check_app_server() -> None:
        nonlocal attempts
        attempts += 1
        await get_available(client, url)

    try:
        await retry_with_policy(check_app_server, policy, sleep=sleep)
    except Exception as exc:
        raise LivenessTimeout(url, attempts, exc) from exc

    logger.info("App server is up", url=url, attempts=attempts)
    return ProbeResult(target=url, ok=True, attempts=attempts)
