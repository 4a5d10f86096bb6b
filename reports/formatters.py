"""
Display formatters for comparison exports.
Deterministic string formatting for percentages, ratios and AUM; None renders "N/A".
"""

from typing import Optional


NOT_AVAILABLE = "N/A"

# Comparison metrics rendered as ratios; every other numeric metric except
# aum and min_investment is a decimal rendered as a percentage
RATIO_METRICS = {'sharpe_ratio', 'sortino_ratio', 'beta', 'calmar_ratio',
                 'treynor_ratio', 'information_ratio', 'omega'}
CURRENCY_METRICS = {'aum', 'min_investment'}


class FormatterError(Exception):
    """Raised when formatter input validation fails."""
    pass


def _check_numeric(value, kind: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FormatterError(f"{kind} value must be numeric, got {type(value)}")


def format_percentage(value: Optional[float], decimal_places: int = 2) -> str:
    """
    Format decimal as a signed percentage.

    Args:
        value: Decimal value (0.0845 = 8.45%)
        decimal_places: Number of decimal places (default: 2)

    Returns:
        Formatted percentage string (e.g., "+8.45%", "-12.00%"), "N/A" for None
    """
    if value is None:
        return NOT_AVAILABLE

    _check_numeric(value, 'Percentage')

    pct = value * 100
    sign = '+' if pct >= 0 else ''

    return f"{sign}{pct:.{decimal_places}f}%"


def format_ratio(value: Optional[float], decimal_places: int = 2) -> str:
    """Format a ratio such as Sharpe or beta (e.g., "1.27"); "N/A" for None."""
    if value is None:
        return NOT_AVAILABLE

    _check_numeric(value, 'Ratio')

    return f"{value:.{decimal_places}f}"


def format_aum(value: Optional[float]) -> str:
    """
    Format assets under management with scale.

    Args:
        value: Dollar amount

    Returns:
        "$1.2B" at or above one billion, "$350M" at or above one million,
        otherwise whole dollars with separators ("$750,000"); "N/A" for None

    Raises:
        FormatterError: If value is not numeric or negative
    """
    if value is None:
        return NOT_AVAILABLE

    _check_numeric(value, 'AUM')

    if value < 0:
        raise FormatterError(f"AUM cannot be negative: {value}")

    if value >= 1e9:
        return f"${value / 1e9:.1f}B"
    elif value >= 1e6:
        return f"${value / 1e6:.0f}M"
    else:
        return f"${value:,.0f}"


def format_metric(metric: str, value: Optional[float]) -> str:
    """
    Format a comparison metric by its kind.

    Args:
        metric: Metric key (e.g., 'cagr', 'sharpe_ratio', 'aum')
        value: Raw metric value

    Returns:
        Display string
    """
    if metric in RATIO_METRICS:
        return format_ratio(value)
    if metric in CURRENCY_METRICS:
        return format_aum(value)
    return format_percentage(value)
