"""
Strict parsing of evaluator output into ``DiscernResult``.

The model's reply is untrusted text. It is reduced to the outermost JSON
object, checked against a pydantic schema and normalized. Range and
consistency invariants are enforced afterwards by
``discernscan.validation.validate_result``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from discernscan.exceptions import EvaluatorReportedError, MalformedResponse, SchemaViolation
from discernscan.extractor.video import is_video_url
from discernscan.protocols import ContentType, DiscernResult, DiscernScoreItem

TYPE_ALIASES: Dict[str, ContentType] = {
    "html": ContentType.HTML,
    "web": ContentType.HTML,
    "webpage": ContentType.HTML,
    "web page": ContentType.HTML,
    "website": ContentType.HTML,
    "article": ContentType.HTML,
    "text/html": ContentType.HTML,
    "pdf": ContentType.PDF,
    "application/pdf": ContentType.PDF,
    "video": ContentType.VIDEO,
    "vídeo": ContentType.VIDEO,
    "youtube": ContentType.VIDEO,
    "youtube video": ContentType.VIDEO,
    "tiktok": ContentType.VIDEO,
    "vimeo": ContentType.VIDEO,
    "text": ContentType.TEXT,
    "txt": ContentType.TEXT,
    "plain text": ContentType.TEXT,
    "text/plain": ContentType.TEXT,
}


class ScorePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    criteriaId: int
    score: int
    justification: str = ""


class EvaluationPayload(BaseModel):
    """Shape of a successful evaluator answer."""

    model_config = ConfigDict(extra="ignore")

    scores: List[ScorePayload]
    totalScore: int = Field(gt=0)
    observations: Optional[str] = None
    type: Optional[str] = None


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Decode the text between the first ``{`` and the last ``}``.

    Raises ``MalformedResponse`` when there is no such span or it is not JSON.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise MalformedResponse("No JSON object found in evaluator response")
    try:
        data = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Invalid JSON in evaluator response: {e.msg}") from e
    if not isinstance(data, dict):
        raise MalformedResponse("Evaluator response is not a JSON object")
    return data


def normalize_type(raw: Optional[str], url: str) -> str:
    """Map the evaluator's free-form type to a ``ContentType`` value."""
    if raw:
        key = raw.strip().lower()
        if key.upper() in ContentType.__members__:
            return ContentType[key.upper()].value
        if key in TYPE_ALIASES:
            return TYPE_ALIASES[key].value
    return (ContentType.VIDEO if is_video_url(url) else ContentType.HTML).value


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors()[:5]:
        loc = ".".join(str(p) for p in item["loc"]) or "<root>"
        parts.append(f"{loc}: {item['msg']}")
    return "; ".join(parts)


def parse_evaluation(text: str, *, url: str, title: str) -> DiscernResult:
    data = extract_json_object(text)

    error = data.get("error")
    if error and "scores" not in data:
        raise EvaluatorReportedError(f"Evaluator reported an error: {error}", url=url)

    try:
        payload = EvaluationPayload.model_validate(data)
    except ValidationError as e:
        raise SchemaViolation(f"Evaluator response does not match the result schema: {_describe(e)}", url=url) from e

    return DiscernResult(
        url=url,
        title=title,
        type=normalize_type(payload.type, url),
        total_score=payload.totalScore,
        scores=tuple(
            DiscernScoreItem(criteria_id=s.criteriaId, score=s.score, justification=s.justification.strip())
            for s in payload.scores
        ),
        observations=(payload.observations or "").strip(),
    )
