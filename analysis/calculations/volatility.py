"""
Volatility and risk-adjusted return utilities.
Pure functions for annualized volatility, Sharpe and Sortino ratios.
"""

import math
import numpy as np
from typing import Optional, Sequence

from analysis.calculations.statistics import mean, standard_deviation


MONTHS_PER_YEAR = 12


def calculate_volatility(monthly_returns: Sequence[float]) -> Optional[float]:
    """
    Calculate annualized volatility from monthly returns.

    Formula: σ_annual = σ_monthly × √12

    Args:
        monthly_returns: Monthly returns as decimals

    Returns:
        Annualized volatility as decimal (0.15 = 15%), or None if fewer than 2 returns
    """
    monthly_std = standard_deviation(monthly_returns)
    if monthly_std is None:
        return None

    return monthly_std * math.sqrt(MONTHS_PER_YEAR)


def calculate_sharpe_ratio(
    returns: Sequence[float],
    risk_free_rate: float,
    annualized: bool = False
) -> Optional[float]:
    """
    Calculate the Sharpe ratio.

    Formula: Sharpe = (μ_annual - R_f) / σ_annual
    with μ_annual = μ_monthly × 12 and σ_annual = σ_monthly × √12

    Args:
        returns: Monthly returns (or annual returns when annualized=True)
        risk_free_rate: Annual risk-free rate as decimal (0.04 = 4%)
        annualized: Whether returns are already annualized

    Returns:
        Sharpe ratio, or None if fewer than 2 returns or zero volatility
    """
    if len(returns) < 2:
        return None

    avg_return = mean(returns)
    std_dev = standard_deviation(returns)

    if avg_return is None or std_dev is None or std_dev == 0:
        return None

    if annualized:
        return (avg_return - risk_free_rate) / std_dev

    annualized_return = avg_return * MONTHS_PER_YEAR
    annualized_std = std_dev * math.sqrt(MONTHS_PER_YEAR)

    return (annualized_return - risk_free_rate) / annualized_std


def downside_deviation(returns: Sequence[float], period_target: float) -> Optional[float]:
    """
    Calculate downside deviation below a per-period target.

    Squared shortfalls min(0, r - target)² are averaged over ALL periods,
    not only the periods below target.

    Returns:
        Downside deviation, or None for an empty series
    """
    if len(returns) == 0:
        return None

    shortfalls = np.minimum(0.0, np.asarray(returns, dtype=float) - period_target)

    return float(np.sqrt(np.mean(shortfalls ** 2)))


def calculate_sortino(
    returns: Sequence[float],
    target_return: float,
    annualized: bool = False
) -> Optional[float]:
    """
    Calculate the Sortino ratio.

    Like Sharpe, but only volatility below the target is penalized.

    Formula: Sortino = (μ_annual - R_target) / σ_downside_annual

    Args:
        returns: Monthly returns (or annual returns when annualized=True)
        target_return: Annual minimum acceptable return (often the risk-free rate)
        annualized: Whether returns are already annualized

    Returns:
        Sortino ratio, or None if fewer than 2 returns, no period falls
        below target, or downside deviation is zero
    """
    if len(returns) < 2:
        return None

    period_target = target_return if annualized else target_return / MONTHS_PER_YEAR

    # No shortfall at all means the ratio is undefined rather than infinite
    if not any(r - period_target < 0 for r in returns):
        return None

    dd = downside_deviation(returns, period_target)
    if dd is None or dd == 0:
        return None

    avg_return = mean(returns)
    if avg_return is None:
        return None

    if annualized:
        return (avg_return - target_return) / dd

    annualized_return = avg_return * MONTHS_PER_YEAR
    annualized_dd = dd * math.sqrt(MONTHS_PER_YEAR)

    return (annualized_return - target_return) / annualized_dd
