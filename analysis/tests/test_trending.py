"""
Tests for trending fund scoring.
Fixed clock and synthetic view logs.
"""

import math
import pytest
from datetime import datetime, timedelta

from analysis.config import TrendingConfig
from analysis.models import FundData
from analysis.trending import (
    time_weighted_views,
    calculate_velocity,
    recency_factor,
    score_fund,
    normalize_scores,
    build_trending_list,
    trending_rank,
    is_fund_trending
)


NOW = datetime(2025, 8, 1, 12, 0, 0)


def _hours_ago(*hours):
    return [NOW - timedelta(hours=h) for h in hours]


def _fund(fund_id):
    return FundData(id=fund_id, name=f'Fund {fund_id}', slug=f'fund-{fund_id}', type='HEDGE_FUND')


class TestTimeDecay:
    """Tests for time-weighted views and recency."""

    def test_half_life(self):
        """A view one half-life old counts half."""
        assert time_weighted_views(_hours_ago(0, 24), NOW) == pytest.approx(1.5)

    def test_custom_half_life(self):
        """Half-life comes from config."""
        config = TrendingConfig(decay_half_life_hours=12)

        assert time_weighted_views(_hours_ago(24), NOW, config) == pytest.approx(0.25)

    def test_recency_factor(self):
        """exp(-hours × ln2 / half-life)."""
        last_view = NOW - timedelta(hours=48)

        assert recency_factor(last_view, NOW) == pytest.approx(math.exp(-48 * math.log(2) / 24))
        assert recency_factor(last_view, NOW) == pytest.approx(0.25)

    def test_recency_never_viewed(self):
        """No views, no recency."""
        assert recency_factor(None, NOW) == 0.0


class TestVelocity:
    """Tests for calculate_velocity function."""

    def test_growing(self):
        """Four recent views against two the day before."""
        views = _hours_ago(1, 2, 3, 4, 30, 40)

        assert calculate_velocity(views, NOW) == pytest.approx(2.0)

    def test_declining(self):
        """One recent view against four the day before."""
        views = _hours_ago(1, 25, 26, 27, 28)

        assert calculate_velocity(views, NOW) == pytest.approx(0.25)

    def test_no_previous_activity(self):
        """No previous window doubles the recent count."""
        assert calculate_velocity(_hours_ago(1, 2, 3), NOW) == 6.0

    def test_no_views(self):
        """No views at all has zero velocity."""
        assert calculate_velocity([], NOW) == 0.0


class TestScoring:
    """Tests for score_fund and normalize_scores."""

    def test_score_formula(self):
        """Raw score blends decayed views, velocity and recency."""
        views = _hours_ago(0, 24)
        score = score_fund('F1', views, NOW)

        # twv = 1.5; both views fall in the latest 24h window (start inclusive)
        # and none before it, so velocity = 2 × 2 = 4; recency = 1.0
        expected = 1.5 * 0.4 + 4.0 * 10 * 0.35 + 1.0 * 50 * 0.25
        assert score.raw_score == pytest.approx(expected)
        assert score.view_count == 2
        assert score.last_view_at == NOW

    def test_old_views_ignored(self):
        """Views older than the recent window do not count."""
        score = score_fund('F1', _hours_ago(200, 300), NOW)

        assert score.view_count == 0
        assert score.raw_score == 0.0
        assert score.last_view_at is None

    def test_normalize_percentiles(self):
        """Highest raw score gets 100, then (n - i) / n × 100."""
        scores = [
            score_fund('LOW', _hours_ago(100), NOW),
            score_fund('HIGH', _hours_ago(0, 1, 2, 3), NOW),
            score_fund('MID', _hours_ago(10, 20), NOW),
        ]

        normalized = normalize_scores(scores)

        assert [s.fund_id for s in normalized] == ['HIGH', 'MID', 'LOW']
        assert [s.normalized_score for s in normalized] == pytest.approx([100.0, 200 / 3, 100 / 3])

    def test_normalize_empty(self):
        """Nothing to normalize."""
        assert normalize_scores([]) == []


class TestTrendingList:
    """Tests for build_trending_list and rank lookups."""

    def _view_log(self):
        return {
            'HOT': _hours_ago(*range(0, 10)),
            'WARM': _hours_ago(*range(20, 80, 10)),
            'COLD': _hours_ago(1, 2),
            'GHOST': _hours_ago(*range(0, 8)),
        }

    def test_min_views_and_unknown_funds_dropped(self):
        """Funds below min views or without metadata are excluded."""
        funds = [_fund('HOT'), _fund('WARM'), _fund('COLD')]

        entries = build_trending_list(self._view_log(), funds, NOW)

        assert [e.fund_id for e in entries] == ['HOT', 'WARM']
        assert [e.rank for e in entries] == [1, 2]
        assert entries[0].name == 'Fund HOT'

    def test_max_funds_in_list(self):
        """The list is capped by config."""
        funds = [_fund('HOT'), _fund('WARM'), _fund('GHOST')]
        config = TrendingConfig(max_funds_in_list=1)

        entries = build_trending_list(self._view_log(), funds, NOW, config)

        assert len(entries) == 1
        assert entries[0].rank == 1

    def test_rank_lookup(self):
        """trending_rank and is_fund_trending read the built list."""
        funds = [_fund('HOT'), _fund('WARM'), _fund('COLD')]
        entries = build_trending_list(self._view_log(), funds, NOW)

        assert trending_rank(entries, 'WARM') == 2
        assert trending_rank(entries, 'COLD') is None
        assert is_fund_trending(entries, 'HOT')
        assert not is_fund_trending(entries, 'WARM', top_n=1)
        assert not is_fund_trending(entries, 'COLD')


class TestTrendingConfig:
    """Tests for TrendingConfig validation."""

    def test_invalid_half_life(self):
        """Half-life must be positive."""
        with pytest.raises(ValueError, match="decay_half_life_hours"):
            TrendingConfig(decay_half_life_hours=0)


class TestFutureViews:
    """Views stamped after the scoring time are ignored."""

    def test_score_ignores_future_views(self):
        """Future views add neither count, decay weight nor recency."""
        future = [NOW + timedelta(hours=5), NOW + timedelta(hours=30)]

        score = score_fund('F1', _hours_ago(2) + future, NOW)
        baseline = score_fund('F1', _hours_ago(2), NOW)

        assert score.view_count == 1
        assert score.last_view_at == NOW - timedelta(hours=2)
        assert score.raw_score == pytest.approx(baseline.raw_score)
        assert score.recency_factor <= 1.0

    def test_velocity_ignores_future_views(self):
        """Only views up to now count in the recent window."""
        views = _hours_ago(1, 30) + [NOW + timedelta(hours=1)]

        assert calculate_velocity(views, NOW) == pytest.approx(1.0)

    def test_future_views_do_not_qualify(self):
        """Min-views threshold counts past views only."""
        view_log = {'F1': _hours_ago(1, 2) + [NOW + timedelta(hours=h) for h in range(1, 6)]}

        assert build_trending_list(view_log, [_fund('F1')], NOW) == []
