"""
Returns calculation utilities.
Pure compounding helpers over monthly return series (decimals, 0.05 = 5%).
"""

from datetime import date
from typing import Dict, List, Optional, Sequence


# Trailing windows in months, keyed by comparison metric name
TRAILING_WINDOWS = {
    'one_year_return': 12,
    'three_year_return': 36,
    'five_year_return': 60,
}


def to_cumulative_returns(returns: Sequence[float], start_value: float = 1.0) -> List[float]:
    """
    Convert periodic returns to cumulative growth factors.

    Formula: c[0] = start_value, c[i] = c[i-1] × (1 + r[i-1])

    Args:
        returns: Periodic returns in chronological order
        start_value: Starting value (default: 1.0)

    Returns:
        List of cumulative values, one longer than returns

    Example:
        [0.05, -0.10, 0.03] -> [1.0, 1.05, 0.945, 0.97335]
    """
    cumulative = [start_value]
    current = start_value

    for r in returns:
        current = current * (1 + r)
        cumulative.append(current)

    return cumulative


def total_return(returns: Sequence[float]) -> float:
    """
    Compound periodic returns into a single total return.

    An empty series is no change, so it returns 0.0.

    Example:
        [0.05, -0.10, 0.03] -> -0.02665
    """
    if len(returns) == 0:
        return 0.0

    growth = 1.0
    for r in returns:
        growth *= (1 + r)

    return growth - 1


def annualize_monthly_return(monthly_return: float) -> float:
    """
    Annualize a monthly return by compounding.

    Formula: (1 + r_monthly)^12 - 1
    """
    return (1 + monthly_return) ** 12 - 1


def to_monthly_return(annual_return: float) -> Optional[float]:
    """
    Convert an annual return to the equivalent monthly return.

    Formula: (1 + r_annual)^(1/12) - 1

    Returns:
        Monthly return, or None when 1 + r_annual is negative
        (fractional power undefined)
    """
    base = 1 + annual_return
    if base < 0:
        return None

    return base ** (1 / 12) - 1


def calculate_cagr(returns: Sequence[float], years: float) -> Optional[float]:
    """
    Calculate Compound Annual Growth Rate.

    Formula: CAGR = ((1 + r₁)(1 + r₂)...(1 + rₙ))^(1/years) - 1

    Args:
        returns: Periodic returns as decimals
        years: Number of years the returns span

    Returns:
        CAGR as decimal, or None if returns are empty, years <= 0,
        or the cumulative growth factor is <= 0 (total wipeout)
    """
    if len(returns) == 0 or years <= 0:
        return None

    growth = 1.0
    for r in returns:
        growth *= (1 + r)

    if growth <= 0:
        return None

    return growth ** (1 / years) - 1


def trailing_window(returns: Sequence[float], months: int) -> List[float]:
    """
    Take the most recent `months` periods of a series.

    Shorter series are returned whole; months <= 0 yields an empty list.
    """
    if months <= 0:
        return []

    return list(returns[-months:])


def months_ytd(as_of: date) -> int:
    """Number of months in the calendar year up to and including as_of."""
    return as_of.month


def calculate_period_returns(
    returns: Sequence[float],
    as_of: Optional[date] = None
) -> Dict[str, Optional[float]]:
    """
    Calculate YTD, trailing and since-inception total returns.

    Args:
        returns: Monthly returns in chronological order
        as_of: Date that determines the YTD window (defaults to today)

    Returns:
        Dictionary with ytd_return, one_year_return, three_year_return,
        five_year_return and inception_return (None if insufficient history)
    """
    if as_of is None:
        as_of = date.today()

    results = {
        'ytd_return': (
            total_return(trailing_window(returns, months_ytd(as_of)))
            if len(returns) >= 1 else None
        )
    }

    for name, months in TRAILING_WINDOWS.items():
        if len(returns) >= months:
            results[name] = total_return(trailing_window(returns, months))
        else:
            results[name] = None

    results['inception_return'] = total_return(returns) if len(returns) > 0 else None

    return results
