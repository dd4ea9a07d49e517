"""
Builders for DISCERN evaluator payloads and results used across tests.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from discernscan.criteria import DISCERN_CRITERIA
from discernscan.protocols import DiscernResult, DiscernScoreItem, SearchResultItem


def score_items(scores: Optional[Sequence[int]] = None) -> List[Tuple[int, int, str]]:
    scores = list(scores) if scores is not None else [3] * len(DISCERN_CRITERIA)
    return [(c.id, s, f"Justification for criterion {c.id}.") for c, s in zip(DISCERN_CRITERIA, scores)]


def build_payload(scores: Optional[Sequence[int]] = None, **overrides: Any) -> Dict[str, Any]:
    """A well-formed evaluator answer as a dict."""
    items = score_items(scores)
    payload: Dict[str, Any] = {
        "scores": [{"criteriaId": cid, "score": s, "justification": j} for cid, s, j in items],
        "totalScore": sum(s for _, s, _ in items),
        "observations": "Clear overview with few sources.",
        "type": "HTML",
    }
    payload.update(overrides)
    return payload


def payload_text(scores: Optional[Sequence[int]] = None, **overrides: Any) -> str:
    return json.dumps(build_payload(scores, **overrides))


def make_result(
    url: str = "https://example.org/article",
    scores: Optional[Iterable[int]] = None,
    *,
    title: str = "Example article",
    total: Optional[int] = None,
    observations: str = "Clear overview with few sources.",
    type: str = "HTML",
) -> DiscernResult:
    items = tuple(
        DiscernScoreItem(cid, s, j) for cid, s, j in score_items(list(scores) if scores is not None else None)
    )
    return DiscernResult(
        url=url,
        title=title,
        type=type,
        total_score=total if total is not None else sum(i.score for i in items),
        scores=items,
        observations=observations,
    )


def make_items(*urls: str) -> List[SearchResultItem]:
    return [SearchResultItem(ranking=i, title=f"Result {i}", url=url) for i, url in enumerate(urls, start=1)]
