"""
Trending fund scoring.
Pure time-decayed view scoring; the view log and clock are passed in.
"""

import math
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from analysis.config import TrendingConfig
from analysis.models import FundData


@dataclass
class TrendingScore:
    fund_id: str
    raw_score: float
    normalized_score: float
    view_count: int
    velocity: float
    recency_factor: float
    last_view_at: Optional[datetime]


@dataclass
class TrendingListEntry:
    fund_id: str
    name: str
    slug: str
    type: str
    strategy: Optional[str]
    aum: Optional[float]
    score: float
    view_count: int
    velocity: float
    rank: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _hours(delta: timedelta) -> float:
    return delta.total_seconds() / 3600


def time_weighted_views(
    view_times: Sequence[datetime],
    now: datetime,
    config: TrendingConfig = TrendingConfig()
) -> float:
    """
    Sum of views decayed by age.

    Formula: Σ 0.5^(age_hours / half_life_hours)
    """
    return sum(
        0.5 ** (_hours(now - viewed_at) / config.decay_half_life_hours)
        for viewed_at in view_times
    )


def calculate_velocity(
    view_times: Sequence[datetime],
    now: datetime,
    config: TrendingConfig = TrendingConfig()
) -> float:
    """
    Compare the latest velocity window with the one before it.

    Returns:
        recent / previous count ratio (>1 growing, <1 declining); with no
        previous activity, twice the recent count
    """
    window = timedelta(hours=config.velocity_window_hours)
    recent_start = now - window
    previous_start = now - 2 * window

    recent = sum(1 for t in view_times if recent_start <= t <= now)
    previous = sum(1 for t in view_times if previous_start <= t < recent_start)

    if previous == 0:
        return float(recent * 2)

    return recent / previous


def recency_factor(
    last_view_at: Optional[datetime],
    now: datetime,
    config: TrendingConfig = TrendingConfig()
) -> float:
    """Exponential decay since the last view; 0 if never viewed."""
    if last_view_at is None:
        return 0.0

    hours_since = _hours(now - last_view_at)

    return math.exp(-hours_since * math.log(2) / config.decay_half_life_hours)


def score_fund(
    fund_id: str,
    view_times: Sequence[datetime],
    now: datetime,
    config: TrendingConfig = TrendingConfig()
) -> TrendingScore:
    """
    Calculate the raw trending score of one fund.

    Only views inside the recent window (ending at now) are considered.

    Formula: raw = twv × w_views + velocity × 10 × w_velocity + recency × 50 × w_recency
    """
    window_start = now - timedelta(hours=config.recent_window_hours)
    views = sorted((t for t in view_times if window_start <= t <= now), reverse=True)

    last_view_at = views[0] if views else None

    twv = time_weighted_views(views, now, config)
    velocity = calculate_velocity(views, now, config)
    recency = recency_factor(last_view_at, now, config)

    raw_score = (
        twv * config.weight_views
        + velocity * 10 * config.weight_velocity
        + recency * 50 * config.weight_recency
    )

    return TrendingScore(
        fund_id=fund_id,
        raw_score=raw_score,
        normalized_score=0.0,
        view_count=len(views),
        velocity=velocity,
        recency_factor=recency,
        last_view_at=last_view_at
    )


def normalize_scores(scores: List[TrendingScore]) -> List[TrendingScore]:
    """
    Percentile-normalize scores to 0-100, highest raw score first.

    Formula: normalized = (n - index) / n × 100
    """
    if not scores:
        return []

    ordered = sorted(scores, key=lambda s: s.raw_score, reverse=True)
    n = len(ordered)

    return [
        replace(score, normalized_score=(n - i) / n * 100)
        for i, score in enumerate(ordered)
    ]


def build_trending_list(
    view_log: Dict[str, Sequence[datetime]],
    funds: List[FundData],
    now: datetime,
    config: TrendingConfig = TrendingConfig()
) -> List[TrendingListEntry]:
    """
    Build the ranked trending list.

    Args:
        view_log: View timestamps per fund id
        funds: Fund metadata; funds missing here are dropped from the list
        now: Scoring time
        config: Trending weights and windows

    Returns:
        Trending entries ranked 1..N, at most config.max_funds_in_list
    """
    window_start = now - timedelta(hours=config.recent_window_hours)

    qualifying = {
        fund_id: times
        for fund_id, times in view_log.items()
        if sum(1 for t in times if window_start <= t <= now) >= config.min_views_for_trending
    }

    scores = [score_fund(fund_id, times, now, config) for fund_id, times in qualifying.items()]
    top = normalize_scores(scores)[:config.max_funds_in_list]

    funds_by_id = {f.id: f for f in funds}

    entries: List[TrendingListEntry] = []
    for score in top:
        fund = funds_by_id.get(score.fund_id)
        if fund is None:
            continue

        entries.append(TrendingListEntry(
            fund_id=score.fund_id,
            name=fund.name,
            slug=fund.slug,
            type=fund.type,
            strategy=fund.strategy,
            aum=fund.aum,
            score=score.normalized_score,
            view_count=score.view_count,
            velocity=score.velocity,
            rank=len(entries) + 1
        ))

    return entries


def trending_rank(entries: List[TrendingListEntry], fund_id: str) -> Optional[int]:
    """1-based trending rank of a fund, or None if not listed."""
    for entry in entries:
        if entry.fund_id == fund_id:
            return entry.rank

    return None


def is_fund_trending(entries: List[TrendingListEntry], fund_id: str, top_n: int = 20) -> bool:
    """Whether a fund is within the top N of the trending list."""
    rank = trending_rank(entries, fund_id)

    return rank is not None and rank <= top_n
