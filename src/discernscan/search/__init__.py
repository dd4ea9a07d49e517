"""Web search providers."""

from __future__ import annotations

from .serpapi import SearchProvider, SerpApiSearchProvider

__all__ = ["SearchProvider", "SerpApiSearchProvider"]
