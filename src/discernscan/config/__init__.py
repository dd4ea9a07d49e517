"""Configuration models and loaders."""

from __future__ import annotations

from .config import (
    Config,
    EvaluatorSettings,
    ExtractionSettings,
    HttpSettings,
    MonitoringConfig,
    PipelineSettings,
    SearchSettings,
    load_config,
)

__all__ = [
    "Config",
    "EvaluatorSettings",
    "ExtractionSettings",
    "HttpSettings",
    "MonitoringConfig",
    "PipelineSettings",
    "SearchSettings",
    "load_config",
]
