"""
Core dataclasses and enums shared across DiscernScan.

This module defines the data contracts that flow between the search provider,
content extractor, rubric evaluator, analysis pipeline and report layer:

- ``SearchResultItem`` / ``SearchResponse``: ranked search results and the
  provider's shortfall metadata
- ``DiscernScoreItem`` / ``DiscernResult``: one scored DISCERN assessment
- ``AnalysisSuccess`` / ``AnalysisFailure``: per-URL disposition
- ``AnalysisReport``: the outcome of one pipeline run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlparse

# ============================================================================
# Enums
# ============================================================================


class ContentType(str, Enum):
    """Kinds of analyzed content."""

    HTML = "HTML"
    PDF = "PDF"
    VIDEO = "VIDEO"
    TEXT = "TEXT"


class URLState(str, Enum):
    """Per-URL processing states in the analysis pipeline."""

    PENDING = "pending"
    EXTRACTING = "extracting"
    EVALUATING = "evaluating"
    VALIDATING = "validating"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (URLState.ACCEPTED, URLState.REJECTED)


# ============================================================================
# Search
# ============================================================================


@dataclass(frozen=True)
class SearchResultItem:
    """One ranked search result."""

    ranking: int
    title: str
    url: str
    snippet: str = ""

    def __post_init__(self) -> None:
        if self.ranking < 1:
            raise ValueError("ranking must be >= 1")
        parsed = urlparse(self.url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"url must be absolute: {self.url!r}")


@dataclass(frozen=True)
class SearchMetadata:
    """Provider bookkeeping about how many results were asked for and returned."""

    requested: int
    adjusted: int
    received: int
    returned: int
    message: str = ""


@dataclass(frozen=True)
class SearchResponse:
    results: Tuple[SearchResultItem, ...]
    metadata: SearchMetadata

    @property
    def shortfall(self) -> bool:
        """True when the provider returned fewer results than requested."""
        return self.metadata.returned < self.metadata.requested


# ============================================================================
# DISCERN results
# ============================================================================


@dataclass(frozen=True)
class DiscernScoreItem:
    """Score and justification for one criterion."""

    criteria_id: int
    score: int
    justification: str

    def to_dict(self) -> Dict[str, Any]:
        return {"criteriaId": self.criteria_id, "score": self.score, "justification": self.justification}


@dataclass(frozen=True)
class DiscernResult:
    """A complete DISCERN assessment of one URL.

    Instances are built by the rubric evaluator and only handed to callers
    after ``discernscan.validation.validate_result`` accepted them.
    """

    url: str
    title: str
    type: str
    total_score: int
    scores: Tuple[DiscernScoreItem, ...]
    observations: str = ""

    @property
    def computed_total(self) -> int:
        return sum(item.score for item in self.scores)

    def score_for(self, criteria_id: int) -> Optional[DiscernScoreItem]:
        for item in self.scores:
            if item.criteria_id == criteria_id:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase wire shape."""
        return {
            "url": self.url,
            "title": self.title,
            "type": self.type,
            "totalScore": self.total_score,
            "scores": [item.to_dict() for item in self.scores],
            "observations": self.observations,
        }


# ============================================================================
# Pipeline outcomes
# ============================================================================


@dataclass(frozen=True)
class AnalysisSuccess:
    result: DiscernResult
    accepted: bool = field(default=True, init=False)

    @property
    def url(self) -> str:
        return self.result.url


@dataclass(frozen=True)
class AnalysisFailure:
    """A rejected URL and the reason it was rejected."""

    url: str
    error_kind: str
    message: str
    stage: URLState
    title: str = ""
    accepted: bool = field(default=False, init=False)


AnalysisOutcome = Union[AnalysisSuccess, AnalysisFailure]


@dataclass
class AnalysisReport:
    """Accepted results plus every rejected or skipped URL of one run."""

    outcomes: List[AnalysisOutcome] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def results(self) -> List[DiscernResult]:
        return [o.result for o in self.outcomes if isinstance(o, AnalysisSuccess)]

    @property
    def failures(self) -> List[AnalysisFailure]:
        return [o for o in self.outcomes if isinstance(o, AnalysisFailure)]

    @property
    def processed_count(self) -> int:
        return len(self.outcomes)


@dataclass(frozen=True)
class ProgressEvent:
    """Emitted by the pipeline on every per-URL state transition."""

    index: int
    total: int
    url: str
    state: URLState
    message: str = ""


@dataclass(frozen=True)
class SearchAnalysis:
    """Search results for a keyword together with their analysis report."""

    keyword: str
    search: SearchResponse
    report: AnalysisReport
