"""
URL patterns for video platforms.

Pure predicates over a fixed pattern table; nothing here touches the network.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Pattern, Tuple

YOUTUBE = "youtube"
TIKTOK = "tiktok"
FACEBOOK = "facebook"
INSTAGRAM = "instagram"
VIMEO = "vimeo"

_YOUTUBE_ID = r"(?P<id>[A-Za-z0-9_-]{6,})"

VIDEO_URL_PATTERNS: Dict[str, Tuple[Pattern[str], ...]] = {
    YOUTUBE: (
        re.compile(r"^https?://(?:www\.|m\.|music\.)?youtube\.com/watch\?(?:.*&)?v=" + _YOUTUBE_ID, re.I),
        re.compile(r"^https?://(?:www\.|m\.)?youtube\.com/(?:shorts|embed|live|v)/" + _YOUTUBE_ID, re.I),
        re.compile(r"^https?://(?:www\.)?youtube-nocookie\.com/embed/" + _YOUTUBE_ID, re.I),
        re.compile(r"^https?://youtu\.be/" + _YOUTUBE_ID, re.I),
    ),
    TIKTOK: (
        re.compile(r"^https?://(?:www\.|m\.)?tiktok\.com/@[^/?#]+/video/\d+", re.I),
        re.compile(r"^https?://(?:vm|vt)\.tiktok\.com/[A-Za-z0-9]+", re.I),
    ),
    FACEBOOK: (
        re.compile(r"^https?://(?:www\.|m\.|web\.)?facebook\.com/watch/?\?(?:.*&)?v=\d+", re.I),
        re.compile(r"^https?://(?:www\.|m\.|web\.)?facebook\.com/[^/?#]+/videos/(?:[^/?#]+/)?\d+", re.I),
        re.compile(r"^https?://(?:www\.|m\.|web\.)?facebook\.com/reel/\d+", re.I),
        re.compile(r"^https?://fb\.watch/[A-Za-z0-9_-]+", re.I),
    ),
    INSTAGRAM: (re.compile(r"^https?://(?:www\.)?instagram\.com/(?:reel|reels)/[A-Za-z0-9_-]+", re.I),),
    VIMEO: (re.compile(r"^https?://(?:www\.|player\.)?vimeo\.com/(?:video/)?\d+", re.I),),
}


def classify_video_url(url: str) -> Optional[str]:
    """Return the platform name when ``url`` points at a single video, else ``None``."""
    for platform, patterns in VIDEO_URL_PATTERNS.items():
        if any(p.search(url) for p in patterns):
            return platform
    return None


def is_video_url(url: str) -> bool:
    return classify_video_url(url) is not None


def extract_youtube_video_id(url: str) -> Optional[str]:
    for pattern in VIDEO_URL_PATTERNS[YOUTUBE]:
        match = pattern.search(url)
        if match:
            return match.group("id")
    return None
