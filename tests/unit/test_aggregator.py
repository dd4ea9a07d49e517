"""
Tests for category sub-scores and quality labels.
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from discernscan.criteria import CriterionCategory
from discernscan.report.aggregator import (
    HIGH_QUALITY,
    LOW_QUALITY,
    MEDIUM_QUALITY,
    category_score,
    quality_label,
    summarize,
)

from tests.helpers.factories import make_result

scores_strategy = st.lists(st.integers(min_value=1, max_value=5), min_size=15, max_size=15)


@pytest.mark.unit
class TestCategoryScore:
    def test_sample_result_categories(self, sample_result):
        # reliability 21/25, quality 7/15, treatment 22/35
        assert category_score(sample_result, CriterionCategory.RELIABILITY) == 84
        assert category_score(sample_result, CriterionCategory.QUALITY) == 47
        assert category_score(sample_result, CriterionCategory.TREATMENT) == 63

    def test_all_fives_is_one_hundred(self):
        result = make_result(scores=[5] * 15)
        for category in CriterionCategory:
            assert category_score(result, category) == 100

    def test_all_ones_is_twenty(self):
        result = make_result(scores=[1] * 15)
        for category in CriterionCategory:
            assert category_score(result, category) == 20

    def test_accepts_category_name(self, sample_result):
        assert category_score(sample_result, "reliability") == 84

    def test_no_scores_in_category_is_zero(self, sample_result):
        import dataclasses

        result = dataclasses.replace(sample_result, scores=sample_result.scores[:5])
        assert category_score(result, CriterionCategory.TREATMENT) == 0

    @given(scores_strategy)
    def test_category_score_within_bounds(self, scores):
        result = make_result(scores=scores)
        for category in CriterionCategory:
            assert 20 <= category_score(result, category) <= 100

    @given(scores_strategy)
    def test_category_score_matches_formula(self, scores):
        result = make_result(scores=scores)
        reliability = scores[:5]
        expected = int(100 * sum(reliability) / 25 + 0.5)
        assert category_score(result, CriterionCategory.RELIABILITY) == expected


@pytest.mark.unit
class TestQualityLabel:
    @pytest.mark.parametrize(
        "total, label",
        [
            (15, LOW_QUALITY),
            (29, LOW_QUALITY),
            (30, MEDIUM_QUALITY),
            (49, MEDIUM_QUALITY),
            (50, HIGH_QUALITY),
            (75, HIGH_QUALITY),
        ],
    )
    def test_thresholds(self, total, label):
        assert quality_label(total) == label

    @given(st.integers(min_value=15, max_value=75))
    def test_label_is_monotonic(self, total):
        order = [LOW_QUALITY, MEDIUM_QUALITY, HIGH_QUALITY]
        assert order.index(quality_label(total)) <= order.index(quality_label(min(total + 1, 75)))


@pytest.mark.unit
def test_summarize(sample_result):
    summary = summarize(sample_result)
    assert summary["totalScore"] == 50
    assert summary["qualityLabel"] == HIGH_QUALITY
    assert summary["categories"] == {"reliability": 84, "quality": 47, "treatment": 63}
