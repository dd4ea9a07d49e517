"""
DiscernScan - DISCERN quality scoring for health information found on the web.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config
from .container import DependencyContainer
from .pipeline import AnalysisPipeline

__all__ = ["__version__", "Config", "DependencyContainer", "AnalysisPipeline"]
