"""
Google web search through SerpApi.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import structlog

from discernscan.config.config import SearchSettings
from discernscan.crawler.http_client import HttpClient
from discernscan.exceptions import ConfigurationError, SearchError, TransportError
from discernscan.protocols import SearchMetadata, SearchResponse, SearchResultItem

logger = structlog.get_logger(__name__)

MISSING_SNIPPET = "No description available"
NO_RESULTS_MESSAGE = "No results found for this query"


@runtime_checkable
class SearchProvider(Protocol):
    async def search(self, keyword: str, quantity: int) -> SearchResponse: ...


class SerpApiSearchProvider:
    """
    Ranked organic results from SerpApi's Google engine.

    Asks for ``quantity + quantity_compensation`` results, because the engine
    tends to return fewer than requested, then trims to ``quantity``.
    """

    def __init__(self, http_client: HttpClient, settings: SearchSettings) -> None:
        if settings.api_key is None or not settings.api_key.get_secret_value():
            raise ConfigurationError("SerpApi key is not configured")
        self.http_client = http_client
        self.settings = settings
        self.logger = logger.bind(component="SerpApiSearchProvider")

    def _params(self, keyword: str, num: int) -> Dict[str, Any]:
        assert self.settings.api_key is not None
        params: Dict[str, Any] = {
            "engine": "google",
            "q": keyword,
            "num": str(num),
            "api_key": self.settings.api_key.get_secret_value(),
        }
        if self.settings.country:
            params["gl"] = self.settings.country
        if self.settings.language:
            params["hl"] = self.settings.language
        if self.settings.google_domain:
            params["google_domain"] = self.settings.google_domain
        return params

    async def search(self, keyword: str, quantity: int) -> SearchResponse:
        keyword = keyword.strip() if keyword else ""
        if not keyword:
            raise ValueError("keyword must not be empty")
        if not 1 <= quantity <= self.settings.max_quantity:
            raise ValueError(f"quantity must be between 1 and {self.settings.max_quantity}, got {quantity}")

        adjusted = quantity + self.settings.quantity_compensation
        self.logger.info("Searching", keyword=keyword, quantity=quantity, adjusted=adjusted)

        try:
            response = await self.http_client.fetch(self.settings.endpoint, params=self._params(keyword, adjusted))
        except TransportError as e:
            raise SearchError(f"Search request failed: {e.message}") from e

        if not response.ok:
            try:
                message = self._decode(response.text()).get("error")
            except SearchError:
                message = None
            raise SearchError(message or f"Search provider returned HTTP {response.status}")

        data = self._decode(response.text())

        organic: List[Dict[str, Any]] = data.get("organic_results") or []
        if not organic:
            message = data.get("error") or NO_RESULTS_MESSAGE
            self.logger.info("No organic results", keyword=keyword, message=message)
            return SearchResponse(
                results=(),
                metadata=SearchMetadata(requested=quantity, adjusted=adjusted, received=0, returned=0, message=message),
            )

        results = self._to_items(organic, limit=quantity)
        returned = len(results)
        received = len(organic)
        if returned < quantity:
            message = (
                f"Requested {quantity} results (adjusted to {adjusted}), "
                f"but the provider returned only {received}"
            )
        else:
            message = f"{returned} results found as requested"

        self.logger.info("Search completed", keyword=keyword, received=received, returned=returned)
        return SearchResponse(
            results=tuple(results),
            metadata=SearchMetadata(
                requested=quantity,
                adjusted=adjusted,
                received=received,
                returned=returned,
                message=message,
            ),
        )

    @staticmethod
    def _decode(body: str) -> Dict[str, Any]:
        if not body.strip():
            return {}
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise SearchError(f"Search provider returned invalid JSON: {e.msg}") from e
        return data if isinstance(data, dict) else {}

    def _to_items(self, organic: List[Dict[str, Any]], limit: int) -> List[SearchResultItem]:
        items: List[SearchResultItem] = []
        for entry in organic:
            if len(items) >= limit:
                break
            link: Optional[str] = entry.get("link")
            if not link:
                continue
            try:
                item = SearchResultItem(
                    ranking=len(items) + 1,
                    title=entry.get("title") or link,
                    url=link,
                    snippet=entry.get("snippet") or MISSING_SNIPPET,
                )
            except ValueError:
                self.logger.debug("Skipping result with invalid URL", link=link)
                continue
            items.append(item)
        return items
