"""
Tests for the saturating score and (category, start, end) dedup.
"""

import math

import pytest

from scamsentry.config import ScoringConfig
from scamsentry.model import Category, Match
from scamsentry.scoring import ScoreNormalizer, dedupe_matches, score, total_weight


class TestScoreNormalizer:

    def setup_method(self):
        self.norm = ScoreNormalizer()

    def test_zero(self):
        assert self.norm.score(0) == 0.0

    def test_half(self):
        assert self.norm.score(0.50) == 50.13

    def test_one(self):
        expected = round(95 * (1 - math.exp(-1.5)), 2)
        assert self.norm.score(1.00) == expected
        assert expected == pytest.approx(73.82, abs=0.03)

    def test_below_min_snaps_to_zero(self):
        # 95 * (1 - e^-0.075) ~= 6.86
        assert self.norm.raw(0.05) == 6.86
        assert self.norm.score(0.05) == 0.0

    def test_bounds_and_monotonic(self):
        prev = -1.0
        for i in range(0, 301):
            w = i / 100
            s = self.norm.score(w)
            assert 0.0 <= s <= 95.0
            assert s >= prev
            prev = s

    def test_strictly_increasing_above_noise(self):
        weights = [0.1 * i for i in range(1, 31)]
        scores = [self.norm.score(w) for w in weights]
        assert all(b > a for a, b in zip(scores, scores[1:]))

    def test_saturates_at_max(self):
        assert self.norm.score(1000) == 95.0
        assert self.norm.score(float("inf")) == 95.0

    @pytest.mark.parametrize("bad", [float("nan"), -1.0, None])
    def test_bad_weights_clamped(self, bad):
        assert self.norm.score(bad) == 0.0

    def test_custom_config(self):
        norm = ScoreNormalizer(ScoringConfig(k_factor=2.0, max_score=100.0, min_score=0.0))
        assert norm.score(0.01) == round(100 * (1 - math.exp(-0.02)), 2)

    def test_module_level_score(self):
        assert score(0.5) == 50.13


class TestDedup:

    def test_same_key_keeps_higher_weight(self):
        a = Match("verify", 0.40, Category.PHISHING, 3, 9)
        b = Match("VERIFY", 0.70, Category.PHISHING, 3, 9)
        kept = dedupe_matches([a, b])
        assert kept == [b]

    def test_first_seen_order_and_distinct_keys(self):
        a = Match("urgent", 0.5, Category.URGENCY, 0, 6)
        b = Match("urgent", 0.5, Category.PHISHING, 0, 6)
        c = Match("urgent", 0.9, Category.URGENCY, 0, 6)
        d = Match("now", 0.5, Category.URGENCY, 7, 10)
        kept = dedupe_matches([a, b, c, d])
        assert [(m.category, m.weight) for m in kept] == [
            (Category.URGENCY, 0.9), (Category.PHISHING, 0.5), (Category.URGENCY, 0.5)]

    def test_total_weight(self):
        ms = [Match("a", 0.25, Category.URGENCY, 0, 1), Match("b", 0.5, Category.URL, 2, 3)]
        assert total_weight(ms, 0.15) == pytest.approx(0.9)

    def test_total_weight_rounds_half_up_sum(self):
        # 0.15 + 0.255 + 0.5 = 0.905
        ms = [Match("a", 0.255, Category.URGENCY, 0, 1), Match("b", 0.5, Category.URL, 2, 3)]
        assert total_weight(ms, 0.15) == 0.91
        assert total_weight([], -0.3) == 0.0
        assert total_weight([], float("nan")) == 0.0
