"""
Unit tests for time and confidence estimation.

path_confidence (0-1) and analysis_confidence (0-100) are separate metrics
and are tested separately.
"""

import pytest

from gapmap.adaptive.estimator import (
    analysis_confidence,
    breakdown_time,
    estimated_time,
    path_confidence,
)


class TestEstimatedTime:
    def test_mastery_discounts_time(self, abc_nodes):
        a, b, _ = abc_nodes
        # A: 1 * 15 * (1 - 0.45) = 8.25, B: 5 * 15 = 75
        assert estimated_time([a, b], {"A": 0.9}) == pytest.approx(83.25)

    def test_empty_path_takes_no_time(self):
        assert estimated_time([], {}) == 0


class TestPathConfidence:
    def test_averages_step_scores(self, abc_nodes):
        # A->B: ratio 5 (0.5) + A mastered (0.2) = 0.7; B->C: ratio 2 (0.8)
        assert path_confidence(abc_nodes, {"A": 0.9}) == pytest.approx(0.75)

    def test_single_node_path_has_zero_confidence(self, abc_nodes):
        assert path_confidence(abc_nodes[:1], {"A": 1.0}) == 0

    def test_stays_within_unit_interval(self, curriculum_nodes):
        full = {n.id: 1.0 for n in curriculum_nodes}
        for mastery in ({}, full):
            assert 0 <= path_confidence(curriculum_nodes, mastery) <= 1
            assert 0 <= path_confidence(list(reversed(curriculum_nodes)), mastery) <= 1


class TestAnalysisConfidence:
    def test_averages_gap_and_prerequisite_confidence(self):
        assert analysis_confidence(30, 1) == pytest.approx((70 + 90) / 2)

    def test_clamped_to_zero(self):
        assert analysis_confidence(150, 20) == 0

    def test_clamped_to_hundred(self):
        assert analysis_confidence(-10, 0) == 100


def test_breakdown_time_splits_thirty_sixty_ten(abc_nodes):
    c = abc_nodes[2]
    breakdown = breakdown_time([c], {})
    # C: 10 * 15 = 150 minutes
    assert (breakdown.prerequisites, breakdown.main_content, breakdown.review) == (45, 90, 15)
    assert breakdown.total == 150
