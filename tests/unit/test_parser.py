"""
Tests for evaluator output parsing.
"""

from __future__ import annotations

import json

import pytest

from discernscan.exceptions import EvaluatorReportedError, MalformedResponse, SchemaViolation
from discernscan.evaluator.parser import extract_json_object, normalize_type, parse_evaluation

from tests.helpers.factories import build_payload, payload_text

URL = "https://example.org/article"
VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


@pytest.mark.unit
class TestExtractJsonObject:
    def test_plain_object(self):
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_surrounding_prose_and_fences(self):
        text = 'Here is the assessment:\n```json\n{"a": {"b": [1, 2]}}\n```\nLet me know.'
        assert extract_json_object(text) == {"a": {"b": [1, 2]}}

    @pytest.mark.parametrize("text", ["", "no json here", "} backwards {", "[1, 2, 3]"])
    def test_missing_object(self, text):
        with pytest.raises(MalformedResponse):
            extract_json_object(text)

    def test_invalid_json(self):
        with pytest.raises(MalformedResponse, match="Invalid JSON"):
            extract_json_object('{"scores": [1, 2,}')

    def test_malformed_is_transient(self):
        with pytest.raises(MalformedResponse) as exc_info:
            extract_json_object("nothing")
        assert exc_info.value.transient


@pytest.mark.unit
class TestNormalizeType:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("HTML", "HTML"),
            ("video", "VIDEO"),
            ("Pdf", "PDF"),
            ("web page", "HTML"),
            ("YouTube video", "VIDEO"),
            ("text/plain", "TEXT"),
        ],
    )
    def test_known_values(self, raw, expected):
        assert normalize_type(raw, URL) == expected

    def test_unknown_falls_back_to_url(self):
        assert normalize_type("podcast", URL) == "HTML"
        assert normalize_type("podcast", VIDEO_URL) == "VIDEO"

    def test_missing_falls_back_to_url(self):
        assert normalize_type(None, VIDEO_URL) == "VIDEO"
        assert normalize_type("", URL) == "HTML"


@pytest.mark.unit
class TestParseEvaluation:
    def test_well_formed(self):
        result = parse_evaluation(payload_text(), url=URL, title="Diabetes basics")

        assert result.url == URL
        assert result.title == "Diabetes basics"
        assert result.type == "HTML"
        assert result.total_score == 45
        assert len(result.scores) == 15
        assert result.scores[0].criteria_id == 1
        assert result.scores[0].justification == "Justification for criterion 1."
        assert result.observations == "Clear overview with few sources."

    def test_url_and_title_come_from_caller(self):
        text = payload_text(url="https://evil.example/", title="Model title")
        result = parse_evaluation(text, url=URL, title="Caller title")

        assert result.url == URL
        assert result.title == "Caller title"

    def test_extra_keys_ignored(self):
        payload = build_payload(confidence=0.9)
        payload["scores"][0]["weight"] = 2
        result = parse_evaluation(json.dumps(payload), url=URL, title="t")
        assert len(result.scores) == 15

    def test_reported_error(self):
        with pytest.raises(EvaluatorReportedError, match="content not accessible") as exc_info:
            parse_evaluation('{"error": "content not accessible"}', url=URL, title="t")
        assert exc_info.value.url == URL
        assert not exc_info.value.transient

    def test_missing_scores_is_schema_violation(self):
        payload = build_payload()
        del payload["scores"]
        with pytest.raises(SchemaViolation, match="scores"):
            parse_evaluation(json.dumps(payload), url=URL, title="t")

    def test_non_integer_score_is_schema_violation(self):
        payload = build_payload()
        payload["scores"][2]["score"] = "high"
        with pytest.raises(SchemaViolation):
            parse_evaluation(json.dumps(payload), url=URL, title="t")

    def test_zero_total_is_schema_violation(self):
        with pytest.raises(SchemaViolation, match="totalScore"):
            parse_evaluation(payload_text(totalScore=0), url=URL, title="t")

    def test_type_is_normalized(self):
        result = parse_evaluation(payload_text(type="Vídeo"), url=VIDEO_URL, title="t")
        assert result.type == "VIDEO"

    def test_missing_type_uses_url(self):
        payload = build_payload()
        del payload["type"]
        result = parse_evaluation(json.dumps(payload), url=VIDEO_URL, title="t")
        assert result.type == "VIDEO"

    def test_parse_does_not_enforce_ranges(self):
        result = parse_evaluation(payload_text([9] * 15), url=URL, title="t")
        assert result.scores[0].score == 9
