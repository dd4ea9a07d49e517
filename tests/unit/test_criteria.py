"""
Tests for the DISCERN criteria catalog.
"""

from __future__ import annotations

import dataclasses

import pytest

from discernscan.criteria import (
    CRITERIA_BY_ID,
    CRITERION_IDS,
    DISCERN_CRITERIA,
    MAX_TOTAL_SCORE,
    MIN_TOTAL_SCORE,
    CriterionCategory,
    criteria_for,
    get_criterion,
)


@pytest.mark.unit
class TestCatalog:
    def test_fifteen_unique_criteria(self):
        assert len(DISCERN_CRITERIA) == 15
        assert CRITERION_IDS == frozenset(range(1, 16))
        assert [c.id for c in DISCERN_CRITERIA] == list(range(1, 16))

    @pytest.mark.parametrize(
        "category, expected_ids",
        [
            (CriterionCategory.RELIABILITY, [1, 2, 3, 4, 5]),
            (CriterionCategory.QUALITY, [6, 7, 8]),
            (CriterionCategory.TREATMENT, [9, 10, 11, 12, 13, 14, 15]),
        ],
    )
    def test_category_membership(self, category, expected_ids):
        assert [c.id for c in criteria_for(category)] == expected_ids

    def test_criteria_for_accepts_string(self):
        assert criteria_for("quality") == criteria_for(CriterionCategory.QUALITY)

    def test_total_score_bounds(self):
        assert MIN_TOTAL_SCORE == 15
        assert MAX_TOTAL_SCORE == 75

    def test_every_criterion_has_text(self):
        for criterion in DISCERN_CRITERIA:
            assert criterion.question.endswith("?")
            assert criterion.description

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            CRITERIA_BY_ID[16] = DISCERN_CRITERIA[0]  # type: ignore[index]
        with pytest.raises(dataclasses.FrozenInstanceError):
            DISCERN_CRITERIA[0].question = "changed"  # type: ignore[misc]

    def test_get_criterion(self):
        assert get_criterion(4).category is CriterionCategory.RELIABILITY
        with pytest.raises(KeyError):
            get_criterion(16)
