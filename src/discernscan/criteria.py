"""
The DISCERN instrument: 15 fixed questions for rating consumer health information.

The catalog is a process-wide constant. It is built once at import time from
frozen dataclasses and exposed through read-only containers, so concurrent
pipeline runs can share it without synchronization.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple


class CriterionCategory(str, Enum):
    """Groups of criteria used for sub-scoring."""

    RELIABILITY = "reliability"
    QUALITY = "quality"
    TREATMENT = "treatment"


@dataclass(frozen=True)
class DiscernCriterion:
    """One DISCERN question."""

    id: int
    question: str
    category: CriterionCategory
    description: str


DISCERN_CRITERIA: Tuple[DiscernCriterion, ...] = (
    DiscernCriterion(
        id=1,
        question="Are the aims clear?",
        category=CriterionCategory.RELIABILITY,
        description="The publication makes clear what it is about, what it is meant to cover and who might find it useful.",
    ),
    DiscernCriterion(
        id=2,
        question="Does it achieve its aims?",
        category=CriterionCategory.RELIABILITY,
        description="The publication provides the information it set out to provide in its aims.",
    ),
    DiscernCriterion(
        id=3,
        question="Is it relevant?",
        category=CriterionCategory.RELIABILITY,
        description="The publication is relevant to the reader and addresses questions readers might ask.",
    ),
    DiscernCriterion(
        id=4,
        question="Is it clear what sources of information were used to compile the publication?",
        category=CriterionCategory.RELIABILITY,
        description="The main claims are accompanied by references to the sources used as evidence.",
    ),
    DiscernCriterion(
        id=5,
        question="Is it clear when the information used or reported in the publication was produced?",
        category=CriterionCategory.RELIABILITY,
        description="Dates of the main sources of information, revisions and publication are given.",
    ),
    DiscernCriterion(
        id=6,
        question="Is it balanced and unbiased?",
        category=CriterionCategory.QUALITY,
        description="The publication is written objectively and draws on evidence from a range of sources.",
    ),
    DiscernCriterion(
        id=7,
        question="Does it provide details of additional sources of support and information?",
        category=CriterionCategory.QUALITY,
        description="The publication suggests further sources of help, such as support groups or other publications.",
    ),
    DiscernCriterion(
        id=8,
        question="Does it refer to areas of uncertainty?",
        category=CriterionCategory.QUALITY,
        description="The publication mentions gaps in knowledge or differences in expert opinion.",
    ),
    DiscernCriterion(
        id=9,
        question="Does it describe how each treatment works?",
        category=CriterionCategory.TREATMENT,
        description="The publication explains how each treatment acts on the body to achieve its effect.",
    ),
    DiscernCriterion(
        id=10,
        question="Does it describe the benefits of each treatment?",
        category=CriterionCategory.TREATMENT,
        description="The publication describes the benefits of each treatment, including control of symptoms.",
    ),
    DiscernCriterion(
        id=11,
        question="Does it describe the risks of each treatment?",
        category=CriterionCategory.TREATMENT,
        description="The publication describes side effects, complications and other risks of each treatment.",
    ),
    DiscernCriterion(
        id=12,
        question="Does it describe what would happen if no treatment is used?",
        category=CriterionCategory.TREATMENT,
        description="The publication describes the risks and benefits of postponing or not having treatment.",
    ),
    DiscernCriterion(
        id=13,
        question="Does it describe how the treatment choices affect overall quality of life?",
        category=CriterionCategory.TREATMENT,
        description="The publication describes the effects of treatment choices on day-to-day activity.",
    ),
    DiscernCriterion(
        id=14,
        question="Is it clear that there may be more than one possible treatment choice?",
        category=CriterionCategory.TREATMENT,
        description="The publication makes clear that more than one treatment choice may be possible.",
    ),
    DiscernCriterion(
        id=15,
        question="Does it provide support for shared decision-making?",
        category=CriterionCategory.TREATMENT,
        description="The publication suggests things to discuss with family, friends and health professionals.",
    ),
)

CRITERIA_BY_ID: Mapping[int, DiscernCriterion] = MappingProxyType({c.id: c for c in DISCERN_CRITERIA})

CRITERION_IDS = frozenset(CRITERIA_BY_ID)

MIN_SCORE = 1
MAX_SCORE = 5
MIN_TOTAL_SCORE = MIN_SCORE * len(DISCERN_CRITERIA)
MAX_TOTAL_SCORE = MAX_SCORE * len(DISCERN_CRITERIA)


def criteria_for(category: CriterionCategory | str) -> Tuple[DiscernCriterion, ...]:
    """Return the criteria belonging to ``category`` in id order."""
    category = CriterionCategory(category)
    return tuple(c for c in DISCERN_CRITERIA if c.category is category)


def get_criterion(criteria_id: int) -> DiscernCriterion:
    try:
        return CRITERIA_BY_ID[criteria_id]
    except KeyError:
        raise KeyError(f"Unknown DISCERN criterion id: {criteria_id}") from None
