"""Tests for the Score Aggregator."""

import itertools

import pytest

from aeo_grader.analysis.scoring import aggregate_scores, round_half_up
from aeo_grader.analysis.types import Score, Sentiment, Verdict


def _v(mentioned=False, cited=False, sentiment=Sentiment.NEUTRAL) -> Verdict:
    return Verdict(prompt="q", brand_mentioned=mentioned, brand_cited=cited, sentiment=sentiment)


class TestRoundHalfUp:
    def test_halves_round_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1

    def test_regular_rounding(self):
        assert round_half_up(66.666) == 67
        assert round_half_up(33.333) == 33
        assert round_half_up(0.0) == 0


class TestAggregateScores:
    def test_empty_is_all_zero(self):
        score = aggregate_scores([])
        assert score == Score()
        assert score.total_queries == 0
        assert score.overall == 0

    @pytest.mark.parametrize("n", [1, 2, 3, 7, 20])
    def test_perfect_run_maxes_every_score(self, n):
        score = aggregate_scores([_v(True, True, Sentiment.POSITIVE)] * n)
        assert (score.overall, score.recognition, score.market, score.quality, score.sentiment) == (
            100,
            20,
            10,
            20,
            40,
        )
        assert score.total_queries == n

    def test_nothing_mentioned(self):
        score = aggregate_scores([_v(), _v(sentiment=Sentiment.NEGATIVE)])
        assert score.overall == 0
        assert score.recognition == 0
        assert score.quality == 0
        assert score.sentiment == 0

    def test_mixed_scenario(self):
        verdicts = [
            _v(True, True, Sentiment.POSITIVE),
            _v(False, False, Sentiment.NEGATIVE),
            _v(True, False, Sentiment.NEUTRAL),
        ]
        score = aggregate_scores(verdicts)
        assert score.total_queries == 3
        assert score.mentioned_count == 2
        assert score.cited_count == 1
        assert score.positive_count == 1
        assert score.overall == 67  # round(100 × 2/3)
        assert score.recognition == 13  # round(20 × 2/3)
        assert score.market == 7  # round(10 × 2/3)
        assert score.quality == 10  # round(20 × 3/6)
        assert score.sentiment == 13  # round(40 × 1/3)

    def test_half_rounds_up_not_to_even(self):
        # market = 10 × 1/4 = 2.5 → 3 ; quality = 20 × 1/8 = 2.5 → 3
        score = aggregate_scores([_v(True), _v(), _v(), _v()])
        assert score.market == 3
        assert score.quality == 3
        assert score.overall == 25

    def test_sub_scores_independent_of_overall(self):
        score = aggregate_scores([_v(True, True, Sentiment.POSITIVE)])
        assert score.recognition + score.market + score.quality + score.sentiment == 90
        assert score.overall == 100

    def test_mixed_sentiment_not_positive(self):
        score = aggregate_scores([_v(True, sentiment=Sentiment.MIXED)])
        assert score.positive_count == 0
        assert score.sentiment == 0

    def test_bounds_hold_for_all_small_combinations(self):
        kinds = [
            _v(),
            _v(True),
            _v(True, True),
            _v(True, True, Sentiment.POSITIVE),
            _v(sentiment=Sentiment.POSITIVE),
        ]
        for size in range(1, 4):
            for combo in itertools.product(kinds, repeat=size):
                score = aggregate_scores(list(combo))
                assert 0 <= score.overall <= 100
                assert 0 <= score.recognition <= 20
                assert 0 <= score.market <= 10
                assert 0 <= score.quality <= 20
                assert 0 <= score.sentiment <= 40

    def test_to_dict_keys(self):
        d = aggregate_scores([_v(True)]).to_dict()
        assert set(d) == {
            "overall",
            "recognition",
            "market",
            "quality",
            "sentiment",
            "totalQueries",
            "mentionedCount",
            "citedCount",
            "positiveCount",
        }
        assert d["totalQueries"] == 1
