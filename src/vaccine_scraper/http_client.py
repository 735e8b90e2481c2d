"""HTTP client with retry, timeout and server back-off support."""

from __future__ import annotations

import asyncio
from typing import Dict, Optional

import httpx

from .config import ScraperConfig
from .exceptions import FetchTimeoutError, HttpError, NetworkError, ScraperError
from .logging_config import get_logger
from .models import FetchStats
from .parser_utils import parse_retry_after

logger = get_logger("http_client")


class HTTPClient:
    """Fetches pages with exponential backoff and Retry-After compliance.

    Every failure (transport error, timeout or non-2xx status) is retried up
    to ``max_retries`` times. A 429 response, or any failed response carrying
    a ``Retry-After`` header, makes the client wait for the server-directed
    duration and try once more without spending the normal retry budget.
    """

    def __init__(self, config: Optional[ScraperConfig] = None) -> None:
        self.config = config or ScraperConfig()
        self.timeout = httpx.Timeout(self.config.timeout_seconds)
        self.headers = {
            "User-Agent": self.config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-GB,en;q=0.5",
            "Cache-Control": "no-cache",
        }

    async def fetch(self, url: str, *, stats: Optional[FetchStats] = None) -> str:
        """Fetch ``url`` and return the response body as text.

        Raises:
            NetworkError: transport failure or timeout after all retries
            HttpError: non-2xx status after all retries
        """
        response = await self.get_async(url, stats=stats)
        return response.text

    async def get_async(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        stats: Optional[FetchStats] = None,
    ) -> httpx.Response:
        merged_headers = {**self.headers, **(headers or {})}
        failures = 0
        server_wait_used = False

        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            while True:
                if stats:
                    stats.http_requests += 1

                error: ScraperError
                try:
                    response = await client.get(url, headers=merged_headers)
                except httpx.TimeoutException:
                    error = FetchTimeoutError(url, self.config.timeout_seconds)
                except httpx.RequestError as exc:
                    error = NetworkError(url, str(exc) or type(exc).__name__)
                else:
                    if response.is_success:
                        return response

                    error = HttpError(url, response.status_code, response.reason_phrase)
                    wait = self._server_directed_delay(response)
                    if wait is not None and not server_wait_used:
                        server_wait_used = True
                        if stats:
                            stats.server_waits += 1
                        logger.warning(
                            "Server requested a %.1fs pause for %s (status %s), retrying once after waiting",
                            wait,
                            url,
                            response.status_code,
                        )
                        await asyncio.sleep(wait)
                        continue

                failures += 1
                if failures > self.config.max_retries:
                    logger.error("GET %s failed after %s attempts: %s", url, failures, error)
                    raise error

                delay = self._calculate_retry_delay(failures)
                if stats:
                    stats.retry_attempts += 1
                logger.warning(
                    "GET %s failed (%s). Retrying in %.2fs (attempt %s/%s)",
                    url,
                    error,
                    delay,
                    failures,
                    self.config.max_retries,
                )
                await asyncio.sleep(delay)

    def _server_directed_delay(self, response: httpx.Response) -> Optional[float]:
        header = response.headers.get("Retry-After") if self.config.respect_retry_after else None
        if response.status_code != 429 and header is None:
            return None

        seconds = parse_retry_after(header)
        if seconds is None:
            seconds = self.config.rate_limit_fallback_seconds
        return min(seconds, self.config.retry_after_max_seconds)

    def _calculate_retry_delay(self, retry_number: int) -> float:
        delay = self.config.retry_base_delay * (
            self.config.retry_exponential_base ** (retry_number - 1)
        )
        return min(delay, self.config.retry_max_delay)
