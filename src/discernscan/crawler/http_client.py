"""
Async HTTP client with retries, jittered backoff and metrics-friendly timing.

Shared by the content extractor (page fetches) and the search provider.
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import aiohttp
import structlog

from discernscan.config.config import HttpSettings
from discernscan.exceptions import TransportError

logger = structlog.get_logger(__name__)

RETRYABLE_STATUSES = frozenset({429, 502, 503, 504})


@dataclass
class CrawlerResponse:
    """Response from an HTTP fetch with timing and attempt information."""

    status: int
    headers: Dict[str, str]
    body: bytes
    start_ts: float
    end_ts: float
    attempts: int
    url: str
    final_url: str
    charset: Optional[str] = field(default=None)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str:
        """Lower-cased media type without parameters, or ``""``."""
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value.split(";", 1)[0].strip().lower()
        return ""

    def text(self) -> str:
        """Decode the body with the declared charset, falling back to UTF-8 for unknown labels."""
        try:
            return self.body.decode(self.charset or "utf-8", errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")


class HttpClient:
    """Thin aiohttp wrapper used for every outbound request."""

    def __init__(self, settings: HttpSettings):
        self.settings = settings
        self.session: Optional[aiohttp.ClientSession] = None
        self._is_initialized = False

    async def initialize(self) -> None:
        """Initialize the HTTP client session."""
        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=self.settings.timeout)
            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers={
                    "User-Agent": self.settings.user_agent,
                    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                },
            )
            self._is_initialized = True
            logger.debug("HTTP client session initialized")

    async def close(self) -> None:
        if self.session:
            await self.session.close()
            self.session = None
        self._is_initialized = False
        logger.debug("HTTP client closed")

    async def __aenter__(self) -> "HttpClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _perform_request(
        self, url: str, timeout: float, params: Optional[Mapping[str, Any]] = None
    ) -> aiohttp.ClientResponse:
        assert self.session is not None
        try:
            async with asyncio.timeout(timeout):
                return await self.session.get(url, params=params, max_redirects=self.settings.max_redirects)
        except asyncio.TimeoutError:
            raise asyncio.TimeoutError(f"Request timed out after {timeout}s")

    def _calculate_backoff_delay(self, attempt: int) -> float:
        """Exponential backoff with ±20% jitter: base, 2*base, 4*base, ..."""
        base_delay = self.settings.backoff_base_seconds * 2 ** (attempt - 1)
        return base_delay * random.uniform(0.8, 1.2)

    async def fetch(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> CrawlerResponse:
        """
        Fetch ``url`` with retries on 429/5xx gateway statuses and connection errors.

        Non-retryable statuses are returned as-is; callers decide what a non-2xx
        response means. Raises ``TransportError`` when every attempt failed
        without producing a response.
        """
        if not self._is_initialized:
            raise RuntimeError("HTTP client not initialized. Call initialize() first.")

        timeout = self.settings.timeout
        max_retries = self.settings.max_retries

        start_time = time.time()
        attempt = 0
        last_error: Optional[BaseException] = None

        while attempt < max_retries + 1:
            attempt += 1
            try:
                response = await self._perform_request(url, timeout, params)

                if response.status in RETRYABLE_STATUSES and attempt <= max_retries:
                    logger.info(
                        "Retrying request",
                        url=url,
                        status=response.status,
                        attempt=attempt,
                        max_retries=max_retries,
                    )
                    response.close()
                    await asyncio.sleep(self._calculate_backoff_delay(attempt))
                    continue

                content = await response.read()
                result = CrawlerResponse(
                    status=response.status,
                    headers=dict(response.headers),
                    body=content,
                    start_ts=start_time,
                    end_ts=time.time(),
                    attempts=attempt,
                    url=url,
                    final_url=str(response.url),
                    charset=response.charset,
                )
                logger.debug("Fetched", url=url, status=result.status, attempts=attempt)
                return result

            except asyncio.TimeoutError as e:
                last_error = e
                logger.warning("Request timed out", url=url, attempt=attempt, max_retries=max_retries, timeout=timeout)
            except aiohttp.ClientError as e:
                last_error = e
                logger.warning("Request failed", url=url, attempt=attempt, max_retries=max_retries, error=str(e))

            if attempt < max_retries + 1:
                await asyncio.sleep(self._calculate_backoff_delay(attempt))

        raise TransportError(f"Request failed after {attempt} attempts: {last_error}", url=url)
