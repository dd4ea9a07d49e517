"""
Category sub-scores and quality labels for DISCERN results.

All functions are pure.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Any, Dict

from discernscan.criteria import CRITERIA_BY_ID, MAX_SCORE, CriterionCategory
from discernscan.protocols import DiscernResult

LOW_QUALITY = "Low Quality"
MEDIUM_QUALITY = "Medium Quality"
HIGH_QUALITY = "High Quality"

LOW_QUALITY_BELOW = 30
HIGH_QUALITY_FROM = 50


def category_score(result: DiscernResult, category: CriterionCategory | str) -> int:
    """
    Percentage of the maximum achievable score within ``category``.

    ``round(100 * sum / (count * 5))`` with halves rounded up; 0 when the result
    has no scores in the category.
    """
    category = CriterionCategory(category)
    scores = [
        item.score
        for item in result.scores
        if item.criteria_id in CRITERIA_BY_ID and CRITERIA_BY_ID[item.criteria_id].category is category
    ]
    if not scores:
        return 0
    ratio = Fraction(100 * sum(scores), len(scores) * MAX_SCORE)
    return math.floor(ratio + Fraction(1, 2))


def quality_label(total_score: int) -> str:
    if total_score < LOW_QUALITY_BELOW:
        return LOW_QUALITY
    if total_score < HIGH_QUALITY_FROM:
        return MEDIUM_QUALITY
    return HIGH_QUALITY


def summarize(result: DiscernResult) -> Dict[str, Any]:
    """Label plus per-category percentages for one result."""
    return {
        "url": result.url,
        "title": result.title,
        "type": result.type,
        "totalScore": result.total_score,
        "qualityLabel": quality_label(result.total_score),
        "categories": {category.value: category_score(result, category) for category in CriterionCategory},
    }
