"""
ContentExtractor: turns a result URL into analyzable text.

Documents are fetched and stripped to text. Video URLs are reduced to their
page metadata plus, where a transcript provider exists for the platform, the
spoken transcript.
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Mapping, Optional

import structlog

from ..config.config import ExtractionSettings
from ..crawler.http_client import CrawlerResponse, HttpClient
from ..exceptions import EmptyContent, TransportError, UnsupportedContentType
from ..protocols import ContentType
from .html import PageMetadata, collapse_whitespace, parse_page_metadata, strip_html, truncate
from .models import ExtractedContent
from .transcripts import TranscriptProvider, TranscriptUnavailable
from .video import classify_video_url

logger = structlog.get_logger(__name__)

HTML_CONTENT_TYPES = frozenset({"text/html", "application/xhtml+xml"})
PLAIN_TEXT_CONTENT_TYPES = frozenset({"text/plain"})


class ContentExtractor:
    """
    Fetches a URL and produces ``ExtractedContent``.

    Raises ``TransportError`` for network failures and non-2xx responses, and
    ``ExtractionError`` subclasses when the resource cannot be reduced to text.
    """

    def __init__(
        self,
        http_client: HttpClient,
        settings: ExtractionSettings,
        transcript_providers: Optional[Mapping[str, TranscriptProvider]] = None,
    ) -> None:
        self.http_client = http_client
        self.settings = settings
        self.transcript_providers: Dict[str, TranscriptProvider] = dict(transcript_providers or {})
        self.logger = logger.bind(component="ContentExtractor")

    async def extract(self, url: str, *, title: Optional[str] = None) -> ExtractedContent:
        platform = classify_video_url(url)
        if platform is not None:
            return await self._extract_video(url, platform, title)
        return await self._extract_document(url, title)

    async def _fetch_ok(self, url: str) -> CrawlerResponse:
        response = await self.http_client.fetch(url)
        if not response.ok:
            raise TransportError(f"HTTP {response.status} fetching {url}", url=url, status=response.status)
        return response

    async def _extract_document(self, url: str, title: Optional[str]) -> ExtractedContent:
        response = await self._fetch_ok(url)
        content_type = response.content_type
        loop = asyncio.get_running_loop()

        if content_type in HTML_CONTENT_TYPES:
            body = response.text()
            text = await loop.run_in_executor(None, strip_html, body)
            kind = ContentType.HTML
            if title is None:
                metadata = await loop.run_in_executor(None, parse_page_metadata, body)
                title = metadata.title
        elif content_type in PLAIN_TEXT_CONTENT_TYPES:
            text = collapse_whitespace(response.text())
            kind = ContentType.TEXT
        else:
            raise UnsupportedContentType(content_type, url=url)

        if not text:
            raise EmptyContent(f"No text content at {url}", url=url)

        text = truncate(text, self.settings.max_content_chars)
        self.logger.debug("Extracted document", url=url, content_type=content_type, chars=len(text))
        return ExtractedContent(url=url, text=text, content_type=kind, title=title)

    async def _extract_video(self, url: str, platform: str, title: Optional[str]) -> ExtractedContent:
        notes: List[str] = []
        page_error: Optional[TransportError] = None
        metadata = PageMetadata(title=None, description=None)

        try:
            response = await self._fetch_ok(url)
        except TransportError as e:
            page_error = e
            notes.append(f"Video page could not be fetched: {e.message}")
        else:
            if response.content_type in HTML_CONTENT_TYPES:
                loop = asyncio.get_running_loop()
                metadata = await loop.run_in_executor(None, parse_page_metadata, response.text())

        transcript: Optional[str] = None
        provider = self.transcript_providers.get(platform) if self.settings.transcripts_enabled else None
        if provider is None:
            notes.append(f"No transcript available for {platform} videos; assessment uses page metadata only.")
        else:
            try:
                transcript = await provider.fetch(url)
            except TranscriptUnavailable as e:
                notes.append(f"Transcript unavailable ({e}); assessment uses page metadata only.")
                self.logger.info("Transcript unavailable", url=url, platform=platform, reason=str(e))

        video_title = metadata.title or title
        parts: List[str] = []
        if video_title:
            parts.append(f"Video title: {video_title}")
        if metadata.description:
            parts.append(f"Video description: {metadata.description}")
        if transcript:
            parts.append(f"Transcript: {transcript}")
        if not parts:
            if page_error is not None:
                raise page_error
            raise EmptyContent(f"No metadata or transcript for video {url}", url=url)
        if notes:
            parts.append("Note: " + " ".join(notes))

        text = truncate("\n".join(parts), self.settings.max_content_chars)
        self.logger.debug(
            "Extracted video",
            url=url,
            platform=platform,
            transcript=transcript is not None,
            chars=len(text),
        )
        return ExtractedContent(
            url=url,
            text=text,
            content_type=ContentType.VIDEO,
            title=video_title,
            platform=platform,
            transcript_included=transcript is not None,
            notes=tuple(notes),
        )
