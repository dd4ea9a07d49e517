"""
Structural invariants a DiscernResult must satisfy before it is accepted.
"""

from __future__ import annotations

from collections import Counter

from discernscan.criteria import CRITERION_IDS, MAX_SCORE, MAX_TOTAL_SCORE, MIN_SCORE, MIN_TOTAL_SCORE
from discernscan.exceptions import SchemaViolation
from discernscan.protocols import DiscernResult


def validate_result(result: DiscernResult) -> None:
    """Raise ``SchemaViolation`` unless ``result`` is a complete, consistent assessment."""
    url = result.url
    if len(result.scores) != len(CRITERION_IDS):
        raise SchemaViolation(f"Expected {len(CRITERION_IDS)} scores, got {len(result.scores)}", url=url)

    counts = Counter(item.criteria_id for item in result.scores)
    duplicates = sorted(cid for cid, n in counts.items() if n > 1)
    if duplicates:
        raise SchemaViolation(f"Duplicate criteria ids: {duplicates}", url=url)
    if set(counts) != CRITERION_IDS:
        missing = sorted(CRITERION_IDS - set(counts))
        unknown = sorted(set(counts) - CRITERION_IDS)
        raise SchemaViolation(f"Criteria ids do not match 1-15 (missing={missing}, unknown={unknown})", url=url)

    for item in result.scores:
        if not MIN_SCORE <= item.score <= MAX_SCORE:
            raise SchemaViolation(f"Criterion {item.criteria_id} score {item.score} outside 1-5", url=url)
        if not item.justification.strip():
            raise SchemaViolation(f"Criterion {item.criteria_id} has no justification", url=url)

    if result.total_score <= 0:
        raise SchemaViolation("totalScore must be positive", url=url)
    if result.total_score != result.computed_total:
        raise SchemaViolation(
            f"totalScore {result.total_score} does not match sum of scores {result.computed_total}", url=url
        )
    if not MIN_TOTAL_SCORE <= result.total_score <= MAX_TOTAL_SCORE:
        raise SchemaViolation(f"totalScore {result.total_score} outside 15-75", url=url)
