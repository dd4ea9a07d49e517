"""
Data models for extraction results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from discernscan.protocols import ContentType


@dataclass(slots=True, frozen=True)
class ExtractedContent:
    """Analyzable text for one URL."""

    url: str
    text: str
    content_type: ContentType
    title: str | None = None
    platform: str | None = None
    transcript_included: bool = False
    notes: Tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("ExtractedContent.text must not be empty")

    @property
    def is_video(self) -> bool:
        return self.content_type is ContentType.VIDEO
