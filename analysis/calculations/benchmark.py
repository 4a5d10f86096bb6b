"""
Benchmark-relative calculation utilities.
Pure functions for beta and CAPM alpha.
"""

import math
from typing import Optional, Sequence

from analysis.calculations.statistics import covariance, variance


def calculate_beta(
    fund_returns: Sequence[float],
    benchmark_returns: Sequence[float]
) -> Optional[float]:
    """
    Calculate beta of a fund against a benchmark.

    Formula: β = Cov(R_fund, R_benchmark) / Var(R_benchmark)

    Args:
        fund_returns: Fund returns as decimals
        benchmark_returns: Benchmark returns for the same periods

    Returns:
        Beta coefficient, or None on length mismatch, fewer than 2 points,
        or zero benchmark variance
    """
    if len(fund_returns) != len(benchmark_returns) or len(fund_returns) < 2:
        return None

    cov = covariance(fund_returns, benchmark_returns)
    bench_var = variance(benchmark_returns)

    if cov is None or bench_var is None or bench_var == 0:
        return None

    return cov / bench_var


def calculate_alpha(
    fund_return: float,
    beta: Optional[float],
    benchmark_return: float,
    risk_free_rate: float
) -> Optional[float]:
    """
    Calculate Jensen's alpha (CAPM residual).

    Formula: α = R_fund - [R_f + β × (R_benchmark - R_f)]

    Args:
        fund_return: Fund return for the period (annualized)
        beta: Fund beta
        benchmark_return: Benchmark return for the period (annualized)
        risk_free_rate: Risk-free rate for the period (annualized)

    Returns:
        Alpha as decimal, or None if beta is missing, NaN or infinite
    """
    if beta is None or not math.isfinite(beta):
        return None

    expected_return = risk_free_rate + beta * (benchmark_return - risk_free_rate)

    return fund_return - expected_return
