import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from src.config.settings import settings
from src.modules.fetcher.exceptions import FetchError, FetchErrorKind

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({429, 502, 503})

Sleep = Callable[[float], Awaitable[None]]


def build_headers(user_agent: str | None = None) -> dict[str, str]:
    return {
        "User-Agent": user_agent or settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "Accept-Encoding": "gzip, deflate, br",
        "Connection": "keep-alive",
    }


def create_client(**kwargs) -> httpx.AsyncClient:
    """Build the AsyncClient used for one scrape run."""
    kwargs.setdefault("headers", build_headers())
    kwargs.setdefault("timeout", settings.request_timeout)
    kwargs.setdefault("follow_redirects", True)
    return httpx.AsyncClient(**kwargs)


class FetcherService:
    """GETs pages, retrying rate limits, gateway errors and network failures."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_retries: int | None = None,
        initial_delay: float | None = None,
        timeout: float | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self._max_retries = settings.max_retries if max_retries is None else max_retries
        self._initial_delay = (
            settings.initial_retry_delay if initial_delay is None else initial_delay
        )
        self._timeout = settings.request_timeout if timeout is None else timeout
        self._sleep = sleep

    async def _get(self, url: str) -> httpx.Response:
        response = await asyncio.wait_for(self._client.get(url), timeout=self._timeout)
        response.raise_for_status()
        return response

    async def fetch(self, url: str) -> str:
        attempts = self._max_retries + 1
        delay = self._initial_delay
        for attempt in range(1, attempts + 1):
            try:
                response = await self._get(url)
                return response.text
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if status not in RETRYABLE_STATUSES or attempt == attempts:
                    raise FetchError(url, FetchErrorKind.HTTP_STATUS, status) from exc
                cause = f"HTTP {status}"
            except (httpx.RequestError, asyncio.TimeoutError) as exc:
                if attempt == attempts:
                    raise FetchError(
                        url, FetchErrorKind.NETWORK, detail=str(exc) or type(exc).__name__
                    ) from exc
                cause = f"network error ({type(exc).__name__})"

            logger.warning(
                "Attempt %d/%d failed for %s: %s, retrying in %.2fs",
                attempt, attempts, url, cause, delay,
            )
            await self._sleep(delay)
            delay *= 2

        # only reached when max_retries < 0
        raise FetchError(url, FetchErrorKind.NETWORK)
