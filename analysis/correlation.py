"""
Return correlation between funds.
Pearson correlation over the shared trailing window, and the N x N matrix.
"""

from typing import List, Optional, Sequence, Tuple

from analysis.calculations.statistics import covariance, standard_deviation
from analysis.models import CorrelationMatrix, FundReturns


def align_trailing(
    returns1: Sequence[float],
    returns2: Sequence[float]
) -> Tuple[List[float], List[float]]:
    """
    Align two series to their shared most recent periods.

    Older, non-overlapping history is discarded.
    """
    min_length = min(len(returns1), len(returns2))
    if min_length == 0:
        return [], []

    return list(returns1[-min_length:]), list(returns2[-min_length:])


def calculate_correlation(
    returns1: Sequence[float],
    returns2: Sequence[float]
) -> Optional[float]:
    """
    Calculate Pearson correlation between two return series.

    Formula: ρ = Cov(r1, r2) / (σ1 × σ2) over the trailing min(len1, len2) periods

    Args:
        returns1: Monthly returns for fund 1
        returns2: Monthly returns for fund 2

    Returns:
        Correlation (-1 to 1), or None if fewer than 2 aligned periods
        or either leg has zero variance
    """
    aligned1, aligned2 = align_trailing(returns1, returns2)
    if len(aligned1) < 2:
        return None

    cov = covariance(aligned1, aligned2)
    std1 = standard_deviation(aligned1)
    std2 = standard_deviation(aligned2)

    if cov is None or std1 is None or std2 is None or std1 == 0 or std2 == 0:
        return None

    return cov / (std1 * std2)


def calculate_correlation_matrix(funds_returns: List[FundReturns]) -> CorrelationMatrix:
    """
    Build a symmetric correlation matrix across funds.

    The diagonal is 1.0 by definition. Each pair is computed once from the
    upper triangle and mirrored. A pair without a defined correlation is
    stored as 0.0 so matrix consumers always receive numbers.

    Args:
        funds_returns: Return histories, one per fund

    Returns:
        CorrelationMatrix with fund ids in input order
    """
    n = len(funds_returns)
    matrix = [[0.0] * n for _ in range(n)]

    for i in range(n):
        matrix[i][i] = 1.0
        for j in range(i + 1, n):
            corr = calculate_correlation(funds_returns[i].returns, funds_returns[j].returns)
            value = corr if corr is not None else 0.0
            matrix[i][j] = value
            matrix[j][i] = value

    return CorrelationMatrix(
        fund_ids=[fr.fund_id for fr in funds_returns],
        matrix=matrix
    )
