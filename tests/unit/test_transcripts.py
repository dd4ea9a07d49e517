"""
Tests for the YouTube transcript provider.
"""

from __future__ import annotations

import time
from types import SimpleNamespace
from unittest.mock import MagicMock
from xml.etree.ElementTree import ParseError

import pytest
from youtube_transcript_api import TranscriptsDisabled

from discernscan.extractor.transcripts import (
    TranscriptProvider,
    TranscriptUnavailable,
    YouTubeTranscriptProvider,
)

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def snippets(*texts):
    return [SimpleNamespace(text=text, start=float(i), duration=1.0) for i, text in enumerate(texts)]


@pytest.mark.unit
class TestYouTubeTranscriptProvider:
    def test_satisfies_protocol(self):
        provider = YouTubeTranscriptProvider(api=MagicMock())
        assert isinstance(provider, TranscriptProvider)
        assert provider.platform == "youtube"

    @pytest.mark.asyncio
    async def test_joins_snippets(self):
        api = MagicMock()
        api.fetch.return_value = snippets("Hello and welcome.", "  Today:\nblood pressure. ")
        provider = YouTubeTranscriptProvider(languages=["pt", "en"], api=api)

        text = await provider.fetch(VIDEO_URL)

        assert text == "Hello and welcome. Today: blood pressure."
        api.fetch.assert_called_once_with("dQw4w9WgXcQ", languages=["pt", "en"])

    @pytest.mark.asyncio
    async def test_short_link(self):
        api = MagicMock()
        api.fetch.return_value = snippets("Short link transcript.")
        provider = YouTubeTranscriptProvider(api=api)

        assert await provider.fetch("https://youtu.be/dQw4w9WgXcQ") == "Short link transcript."
        assert api.fetch.call_args.args[0] == "dQw4w9WgXcQ"

    @pytest.mark.asyncio
    async def test_disabled_transcripts_are_unavailable(self):
        api = MagicMock()
        api.fetch.side_effect = TranscriptsDisabled("dQw4w9WgXcQ")
        provider = YouTubeTranscriptProvider(api=api)

        with pytest.raises(TranscriptUnavailable, match="TranscriptsDisabled"):
            await provider.fetch(VIDEO_URL)

    @pytest.mark.asyncio
    async def test_network_errors_are_unavailable(self):
        api = MagicMock()
        api.fetch.side_effect = ConnectionError("reset by peer")
        provider = YouTubeTranscriptProvider(api=api)

        with pytest.raises(TranscriptUnavailable, match="reset by peer"):
            await provider.fetch(VIDEO_URL)

    @pytest.mark.asyncio
    async def test_empty_transcript_is_unavailable(self):
        api = MagicMock()
        api.fetch.return_value = snippets("  ", "")
        provider = YouTubeTranscriptProvider(api=api)

        with pytest.raises(TranscriptUnavailable, match="empty"):
            await provider.fetch(VIDEO_URL)

    @pytest.mark.asyncio
    async def test_url_without_video_id(self):
        api = MagicMock()
        provider = YouTubeTranscriptProvider(api=api)

        with pytest.raises(TranscriptUnavailable):
            await provider.fetch("https://www.youtube.com/feed/trending")
        api.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_unexpected_library_errors_are_unavailable(self):
        api = MagicMock()
        api.fetch.side_effect = ParseError("no element found: line 1, column 0")
        provider = YouTubeTranscriptProvider(api=api)

        with pytest.raises(TranscriptUnavailable, match="ParseError"):
            await provider.fetch(VIDEO_URL)

    @pytest.mark.asyncio
    async def test_stalled_fetch_times_out(self):
        api = MagicMock()

        def stall(video_id, languages):
            time.sleep(0.5)
            return snippets("too late")

        api.fetch.side_effect = stall
        provider = YouTubeTranscriptProvider(api=api, timeout=0.05)

        started = time.monotonic()
        with pytest.raises(TranscriptUnavailable, match="timed out"):
            await provider.fetch(VIDEO_URL)
        assert time.monotonic() - started < 0.4
