"""
Deterministic insight sentences for comparison reports.
Template-filled from computed metrics; no external text generation.
"""

from typing import Callable, List, Optional

from analysis.config import CorrelationThresholds
from analysis.models import FundComparison


def _best_by(
    comparisons: List[FundComparison],
    metric: str,
    key: Callable[[float], float]
) -> Optional[FundComparison]:
    """First fund with the highest key(metric), ignoring funds without the metric."""
    candidates = [c for c in comparisons if c.metrics.get(metric) is not None]
    if not candidates:
        return None

    return max(candidates, key=lambda c: key(c.metrics[metric]))


def generate_insights(
    comparisons: List[FundComparison],
    correlation_matrix: List[List[float]],
    thresholds: CorrelationThresholds = CorrelationThresholds()
) -> List[str]:
    """
    Generate textual insights from comparison data.

    Insights, in order:
    - fund with the highest CAGR
    - fund with the best Sharpe ratio
    - fund with the smallest maximum drawdown
    - most correlated pair, if above thresholds.high
    - least correlated pair, if below thresholds.low

    Args:
        comparisons: Per-fund comparison records
        correlation_matrix: Numeric N x N matrix in the same fund order
        thresholds: Correlation flagging bounds

    Returns:
        List of insight sentences
    """
    insights: List[str] = []

    if not comparisons:
        return insights

    best_cagr = _best_by(comparisons, 'cagr', lambda v: v)
    if best_cagr is not None:
        insights.append(
            f"{best_cagr.fund_name} has the highest annualized return "
            f"(CAGR: {best_cagr.metrics['cagr'] * 100:.2f}%)."
        )

    best_sharpe = _best_by(comparisons, 'sharpe_ratio', lambda v: v)
    if best_sharpe is not None:
        insights.append(
            f"{best_sharpe.fund_name} offers the best risk-adjusted returns "
            f"(Sharpe: {best_sharpe.metrics['sharpe_ratio']:.2f})."
        )

    # Drawdowns are <= 0, so the largest value is the smallest loss
    best_dd = _best_by(comparisons, 'max_drawdown', lambda v: v)
    if best_dd is not None:
        insights.append(
            f"{best_dd.fund_name} has experienced the smallest maximum drawdown "
            f"({best_dd.metrics['max_drawdown'] * 100:.2f}%)."
        )

    insights.extend(_correlation_insights(comparisons, correlation_matrix, thresholds))

    return insights


def _correlation_insights(
    comparisons: List[FundComparison],
    matrix: List[List[float]],
    thresholds: CorrelationThresholds
) -> List[str]:
    """Flag the most and least correlated fund pairs."""
    n = min(len(matrix), len(comparisons))
    if n < 2:
        return []

    high = (0, 1, matrix[0][1])
    low = (0, 1, matrix[0][1])

    for i in range(n):
        for j in range(i + 1, n):
            corr = matrix[i][j]
            if corr > high[2]:
                high = (i, j, corr)
            if corr < low[2]:
                low = (i, j, corr)

    insights = []

    if high[2] > thresholds.high:
        i, j, corr = high
        insights.append(
            f"{comparisons[i].fund_name} and {comparisons[j].fund_name} are highly correlated "
            f"({corr * 100:.0f}%), suggesting similar market exposure."
        )

    if low[2] < thresholds.low:
        i, j, corr = low
        insights.append(
            f"{comparisons[i].fund_name} and {comparisons[j].fund_name} have low correlation "
            f"({corr * 100:.0f}%), offering potential diversification benefits."
        )

    return insights
