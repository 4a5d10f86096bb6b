"""
Side-by-side fund comparison and comparison reports.
Composes the calculation primitives into per-fund records, rankings and insights.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from analysis.calculations.returns import calculate_cagr, calculate_period_returns, to_cumulative_returns
from analysis.calculations.volatility import calculate_volatility, calculate_sharpe_ratio, calculate_sortino
from analysis.calculations.drawdown import calculate_max_drawdown
from analysis.config import DEFAULT_RISK_FREE_RATE, CorrelationThresholds
from analysis.correlation import calculate_correlation_matrix
from analysis.insights import generate_insights
from analysis.models import (
    ComparisonReport,
    FundComparison,
    FundData,
    FundReturns,
    MetricRanking,
    RankingEntry
)


# Every metric a comparison record can carry, in display order
COMPARISON_METRICS = [
    'ytd_return',
    'one_year_return',
    'three_year_return',
    'five_year_return',
    'inception_return',
    'cagr',
    'volatility',
    'max_drawdown',
    'sharpe_ratio',
    'sortino_ratio',
    'beta',
    'alpha',
    'aum',
    'management_fee',
    'performance_fee',
    'min_investment',
]

# Metrics ranked in reports; True means higher is better
RANKED_METRICS = {
    'cagr': True,
    'sharpe_ratio': True,
    'sortino_ratio': True,
    'max_drawdown': False,
    'volatility': False,
}


def _fund_metrics(
    fund: FundData,
    returns: Sequence[float],
    years: float,
    as_of: date,
    risk_free_rate: float
) -> Dict[str, Optional[float]]:
    """Calculate every comparison metric for one fund."""
    period_returns = calculate_period_returns(returns, as_of)

    cumulative = to_cumulative_returns(returns) if len(returns) > 0 else []

    return {
        'ytd_return': period_returns['ytd_return'],
        'one_year_return': period_returns['one_year_return'],
        'three_year_return': period_returns['three_year_return'],
        'five_year_return': period_returns['five_year_return'],
        'inception_return': period_returns['inception_return'],
        'cagr': calculate_cagr(returns, years),
        'volatility': calculate_volatility(returns),
        'max_drawdown': calculate_max_drawdown(cumulative) if cumulative else None,
        'sharpe_ratio': calculate_sharpe_ratio(returns, risk_free_rate),
        'sortino_ratio': calculate_sortino(returns, risk_free_rate),
        # Benchmark-relative metrics live in get_risk_adjusted_metrics
        'beta': None,
        'alpha': None,
        'aum': fund.aum,
        'management_fee': fund.management_fee,
        'performance_fee': fund.performance_fee,
        'min_investment': fund.min_investment,
    }


def compare_funds(
    funds: List[FundData],
    funds_returns: List[FundReturns],
    selected_metrics: Optional[List[str]] = None,
    as_of: Optional[date] = None,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE
) -> List[FundComparison]:
    """
    Compare multiple funds side-by-side.

    Args:
        funds: Fund metadata, in output order
        funds_returns: Return histories (matched to funds by id; a fund
            without an entry is compared with an empty history)
        selected_metrics: Optional metric keys to keep, in caller order;
            unknown keys are ignored
        as_of: Date that determines the YTD window (defaults to today)
        risk_free_rate: Annual risk-free rate for Sharpe and Sortino

    Returns:
        One FundComparison per fund
    """
    if as_of is None:
        as_of = date.today()

    returns_by_fund = {fr.fund_id: fr for fr in funds_returns}

    comparisons = []
    for fund in funds:
        fund_returns = returns_by_fund.get(fund.id)
        returns = fund_returns.returns if fund_returns is not None else []
        years = fund_returns.years if fund_returns is not None else 0

        metrics = _fund_metrics(fund, returns, years, as_of, risk_free_rate)

        if selected_metrics is not None:
            metrics = {key: metrics[key] for key in selected_metrics if key in metrics}

        comparisons.append(FundComparison(
            fund_id=fund.id,
            fund_name=fund.name,
            metrics=metrics
        ))

    return comparisons


def rank_funds(
    comparisons: List[FundComparison],
    metric: str,
    higher_is_better: bool = True
) -> MetricRanking:
    """
    Rank funds on a single metric.

    Missing values always rank last; ties keep input order. When lower is
    better the magnitude is ranked, so the smallest drawdown is rank 1.

    Args:
        comparisons: Per-fund comparison records
        metric: Metric key to rank on
        higher_is_better: Sort direction

    Returns:
        MetricRanking with ranks 1..N
    """
    values = [(c.fund_id, c.metrics.get(metric)) for c in comparisons]

    present = [v for v in values if v[1] is not None]
    missing = [v for v in values if v[1] is None]

    if higher_is_better:
        present.sort(key=lambda v: v[1], reverse=True)
    else:
        present.sort(key=lambda v: abs(v[1]))

    ordered = present + missing

    return MetricRanking(
        metric=metric,
        rankings=[
            RankingEntry(fund_id=fund_id, value=value, rank=i + 1)
            for i, (fund_id, value) in enumerate(ordered)
        ]
    )


def generate_comparison_report(
    funds: List[FundData],
    funds_returns: List[FundReturns],
    as_of: Optional[date] = None,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
    thresholds: CorrelationThresholds = CorrelationThresholds()
) -> ComparisonReport:
    """
    Generate a full comparison report with rankings and insights.

    Args:
        funds: Fund metadata
        funds_returns: Return histories, matched to funds by id
        as_of: Date that determines the YTD window (defaults to today)
        risk_free_rate: Annual risk-free rate
        thresholds: Correlation bounds for insight flagging

    Returns:
        ComparisonReport
    """
    comparisons = compare_funds(funds, funds_returns, as_of=as_of, risk_free_rate=risk_free_rate)

    # Matrix rows follow fund order so insights can index comparisons
    returns_by_fund = {fr.fund_id: fr for fr in funds_returns}
    ordered_returns = [
        returns_by_fund.get(fund.id, FundReturns(fund_id=fund.id, returns=[], years=0))
        for fund in funds
    ]
    correlation = calculate_correlation_matrix(ordered_returns)

    rankings = [
        rank_funds(comparisons, metric, higher_is_better)
        for metric, higher_is_better in RANKED_METRICS.items()
    ]

    insights = generate_insights(comparisons, correlation.matrix, thresholds)

    return ComparisonReport(
        generated_at=datetime.now(),
        funds=comparisons,
        correlation_matrix=correlation.matrix,
        rankings=rankings,
        insights=insights
    )
