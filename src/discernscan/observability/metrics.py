"""
Defines Prometheus metrics for the analysis pipeline.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Re-importing this module (e.g. across a test session) must not try to
# register the same collector twice.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    return {
        "urls_processed": Counter(
            "discernscan_urls_processed_total",
            "URLs that reached a terminal state",
            ["outcome"],
        ),
        "urls_rejected": Counter(
            "discernscan_urls_rejected_total",
            "Rejected URLs by pipeline stage and error kind",
            ["stage", "error_kind"],
        ),
        "evaluation_duration_seconds": Histogram(
            "discernscan_evaluation_duration_seconds",
            "Wall time of one rubric evaluation including retries",
            buckets=(1, 5, 10, 20, 30, 60, 120, 300, 600),
        ),
        "evaluation_attempts": Counter(
            "discernscan_evaluation_attempts_total",
            "Evaluator calls by strategy and result",
            ["strategy", "result"],
        ),
        "total_score": Histogram(
            "discernscan_total_score",
            "Distribution of accepted DISCERN total scores",
            buckets=(15, 20, 30, 40, 50, 60, 70, 75),
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()
