"""Scoring summaries and exports."""

from __future__ import annotations

from .aggregator import category_score, quality_label, summarize
from .exporter import BaseExporter, CsvExporter, TextReportExporter, get_exporter

__all__ = [
    "BaseExporter",
    "CsvExporter",
    "TextReportExporter",
    "category_score",
    "get_exporter",
    "quality_label",
    "summarize",
]
