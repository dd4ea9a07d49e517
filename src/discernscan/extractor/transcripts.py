"""
Transcript providers for video platforms.
"""

from __future__ import annotations

import asyncio
from typing import Protocol, Sequence, runtime_checkable

import structlog
from youtube_transcript_api import CouldNotRetrieveTranscript, YouTubeTranscriptApi

from .html import collapse_whitespace
from .video import extract_youtube_video_id

logger = structlog.get_logger(__name__)


class TranscriptUnavailable(Exception):
    """No transcript could be obtained; the caller degrades to metadata only."""


@runtime_checkable
class TranscriptProvider(Protocol):
    """Fetches the spoken text of a single video."""

    platform: str

    async def fetch(self, url: str) -> str:
        """Return transcript text or raise ``TranscriptUnavailable``."""
        ...


class YouTubeTranscriptProvider:
    """Transcripts via ``youtube-transcript-api``.

    The library is synchronous, so each fetch runs in the default executor and
    is abandoned after ``timeout`` seconds.
    """

    platform = "youtube"

    def __init__(
        self,
        languages: Sequence[str] = ("en",),
        api: YouTubeTranscriptApi | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.languages = list(languages)
        self.timeout = timeout
        self._api = api or YouTubeTranscriptApi()

    def _fetch_sync(self, video_id: str) -> str:
        fetched = self._api.fetch(video_id, languages=self.languages)
        return collapse_whitespace(" ".join(snippet.text for snippet in fetched))

    async def fetch(self, url: str) -> str:
        video_id = extract_youtube_video_id(url)
        if video_id is None:
            raise TranscriptUnavailable(f"Could not find a YouTube video id in {url}")

        loop = asyncio.get_running_loop()
        try:
            text = await asyncio.wait_for(loop.run_in_executor(None, self._fetch_sync, video_id), self.timeout)
        except CouldNotRetrieveTranscript as e:
            raise TranscriptUnavailable(f"{type(e).__name__}: no transcript for video {video_id}") from e
        except asyncio.TimeoutError as e:
            raise TranscriptUnavailable(f"Transcript request timed out after {self.timeout}s") from e
        except Exception as e:
            logger.warning("Transcript fetch failed", video_id=video_id, error=str(e), exc_info=True)
            raise TranscriptUnavailable(f"Transcript request failed: {type(e).__name__}: {e}") from e

        if not text:
            raise TranscriptUnavailable(f"Transcript for video {video_id} is empty")
        logger.debug("Fetched transcript", video_id=video_id, chars=len(text))
        return text
