"""
Prompt construction for DISCERN evaluations.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Sequence

from discernscan.criteria import DISCERN_CRITERIA, DiscernCriterion

SYSTEM_PROMPT = (
    "You are a health information reviewer trained in the DISCERN instrument, a validated "
    "questionnaire for judging the quality of written and video consumer health information "
    "about treatment choices. Rate the supplied content against each DISCERN question on a "
    "scale from 1 (no, the criterion is not met) to 5 (yes, fully met), with 2-4 for partial "
    "fulfilment. Base every score only on the supplied content and justify it in one or two "
    "sentences. Reply with a single JSON object and nothing else."
)

OUTPUT_SCHEMA: Dict[str, Any] = {
    "scores": [{"criteriaId": "integer 1-15", "score": "integer 1-5", "justification": "string"}],
    "totalScore": "integer, sum of the 15 scores (15-75)",
    "observations": "string, overall remarks about the content",
    "type": "one of HTML, PDF, VIDEO, TEXT",
}

ERROR_INSTRUCTION = (
    'If the content cannot be assessed (for example it is not health information or is '
    'unreadable), reply with {"error": "<reason>"} instead.'
)


def render_criteria(criteria: Sequence[DiscernCriterion] = DISCERN_CRITERIA) -> str:
    return "\n".join(f"{c.id}. [{c.category.value}] {c.question} {c.description}" for c in criteria)


def build_user_prompt(content: str, title: str, url: str, *, is_video: bool) -> str:
    """Render the evaluation request for one URL."""
    source = "a video (metadata and, where available, transcript)" if is_video else "a web document"
    return (
        "Assess the following health content with the DISCERN method.\n\n"
        f"URL: {url}\n"
        f"Title: {title}\n"
        f"Source kind: {source}\n"
        f"isVideo: {json.dumps(is_video)}\n\n"
        "CONTENT:\n"
        f"{content}\n\n"
        "DISCERN CRITERIA:\n"
        f"{render_criteria()}\n\n"
        "Return exactly one score object per criterion (15 in total) using this JSON shape:\n"
        f"{json.dumps(OUTPUT_SCHEMA, indent=2)}\n\n"
        f"{ERROR_INSTRUCTION}\n"
        "IMPORTANT: return ONLY the JSON object, without any additional explanation."
    )
