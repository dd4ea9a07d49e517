"""
Error taxonomy for DiscernScan.

Per-URL errors derive from ``AnalysisError`` and are caught by the analysis
pipeline, which records them and moves on to the next URL. Only batch-level
errors (``NoSuccessfulAnalyses``), configuration and search errors reach the
caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from discernscan.protocols import AnalysisFailure


class DiscernScanError(Exception):
    """Base class for all DiscernScan errors."""


class ConfigurationError(DiscernScanError):
    """Required configuration (credentials, settings) is missing or invalid."""


class SearchError(DiscernScanError):
    """The search provider could not be queried."""


class AnalysisError(DiscernScanError):
    """A failure scoped to a single URL."""

    #: Whether retrying the same call may succeed.
    transient: bool = False

    def __init__(self, message: str, *, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url

    @property
    def kind(self) -> str:
        return type(self).__name__


class TransportError(AnalysisError):
    """Network or HTTP failure talking to a remote resource."""

    transient = True

    def __init__(self, message: str, *, url: Optional[str] = None, status: Optional[int] = None) -> None:
        super().__init__(message, url=url)
        self.status = status


class ExtractionError(AnalysisError):
    """Content could not be turned into analyzable text."""


class UnsupportedContentType(ExtractionError):
    def __init__(self, content_type: str, *, url: Optional[str] = None) -> None:
        super().__init__(f"Unsupported content type: {content_type or 'unknown'}", url=url)
        self.content_type = content_type


class EmptyContent(ExtractionError):
    """Extraction produced no text."""


class EvaluationError(AnalysisError):
    """The rubric evaluator did not produce a usable result."""


class MalformedResponse(EvaluationError):
    """Evaluator output contained no parseable JSON object."""

    transient = True


class SchemaViolation(EvaluationError):
    """Evaluator output parsed but does not match the DISCERN result shape."""


class EvaluatorReportedError(EvaluationError):
    """Evaluator answered with an ``{"error": ...}`` payload."""


class EvaluationTimeout(EvaluationError):
    """An asynchronous evaluation job did not finish within the polling budget."""

    transient = True


class EvaluationFailed(EvaluationError):
    """Retries exhausted; wraps the last transient error."""

    def __init__(self, last_error: BaseException, *, attempts: int, url: Optional[str] = None) -> None:
        super().__init__(f"Evaluation failed after {attempts} attempts: {last_error}", url=url)
        self.last_error = last_error
        self.attempts = attempts


class NoSuccessfulAnalyses(DiscernScanError):
    """No URL in the batch produced an accepted result."""

    def __init__(self, failures: Sequence["AnalysisFailure"] = (), message: Optional[str] = None) -> None:
        self.failures = list(failures)
        if message is None:
            message = f"No URL could be analyzed ({len(self.failures)} failed)"
        super().__init__(message)
