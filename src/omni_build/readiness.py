# src/omni_build/readiness.py
"""Block until renderer urls are reachable.

http(s) urls are polled with GET until they answer 2xx/3xx; ``file://`` urls
wait for the file to appear. Every url gets its own timeout and all urls are
awaited together: any timeout fails the whole wait.
"""

import asyncio
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx
from apathetic_logging import ANSIColors

from .constants import DEFAULT_WAIT_POLL_INTERVAL, DEFAULT_WAIT_TIMEOUT
from .errors import ReadinessTimeoutError
from .logs import AppLogger, getAppLogger


HTTP_SCHEMES = ("http://", "https://")
FILE_SCHEME = "file://"

# single request ceiling while polling; the per-url timeout still applies
REQUEST_TIMEOUT = 2.0


async def _poll_http(
    client: httpx.AsyncClient, url: str, poll_interval: float
) -> None:
    while True:
        try:
            response = await client.get(url, headers={"accept": "*/*"})
        except httpx.HTTPError:
            pass
        else:
            if 200 <= response.status_code < 400:  # noqa: PLR2004
                return
        await asyncio.sleep(poll_interval)


async def _poll_file(url: str, poll_interval: float) -> None:
    path = Path(unquote(urlparse(url).path))
    while not path.exists():
        await asyncio.sleep(poll_interval)


async def _wait_one(
    client: httpx.AsyncClient,
    url: str,
    timeout: float,
    poll_interval: float,
    logger: AppLogger,
) -> None:
    logger.info("🚦 Wait for renderer: %s", logger.colorize(url, ANSIColors.CYAN))
    if url.startswith(FILE_SCHEME):
        waiter = _poll_file(url, poll_interval)
    else:
        waiter = _poll_http(client, url, poll_interval)

    try:
        await asyncio.wait_for(waiter, timeout)
    except asyncio.TimeoutError as e:
        raise ReadinessTimeoutError(url, timeout) from e
    logger.debug("Renderer ready: %s", url)


async def wait_for_renderer(
    urls: str | Sequence[str],
    timeout: float | None = None,
    *,
    logger: AppLogger | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    poll_interval: float = DEFAULT_WAIT_POLL_INTERVAL,
) -> None:
    """Wait for every url in `urls` to become reachable.

    Args:
        urls: One url or several; unsupported schemes are warned about
            and skipped.
        timeout: Seconds allowed per url (default 5).
        transport: Optional httpx transport, used by tests.

    Raises:
        ReadinessTimeoutError: a url was not reachable in time.
    """
    logger = logger or getAppLogger()
    timeout = timeout or DEFAULT_WAIT_TIMEOUT
    url_list = [urls] if isinstance(urls, str) else list(urls)

    valid: list[str] = []
    for url in url_list:
        if url.startswith(HTTP_SCHEMES) or url.startswith(FILE_SCHEME):
            valid.append(url)
        else:
            logger.warning("Invalid renderer url: %s, ignored.", url)

    if not valid:
        return

    async with httpx.AsyncClient(
        transport=transport, timeout=REQUEST_TIMEOUT
    ) as client:
        tasks = [
            asyncio.ensure_future(
                _wait_one(client, url, timeout, poll_interval, logger)
            )
            for url in valid
        ]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
