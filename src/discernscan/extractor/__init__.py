"""Content extraction: documents, video metadata and transcripts."""

from __future__ import annotations

from .manager import ContentExtractor
from .models import ExtractedContent
from .transcripts import TranscriptProvider, TranscriptUnavailable, YouTubeTranscriptProvider
from .video import classify_video_url, extract_youtube_video_id, is_video_url

__all__ = [
    "ContentExtractor",
    "ExtractedContent",
    "TranscriptProvider",
    "TranscriptUnavailable",
    "YouTubeTranscriptProvider",
    "classify_video_url",
    "extract_youtube_video_id",
    "is_video_url",
]
