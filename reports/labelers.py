"""
Classification labelers for fund comparison exports.
Deterministic threshold-based classifications for correlation, volatility and drawdown.
"""

from typing import Dict, Optional

from analysis.config import CorrelationThresholds


class LabelerError(Exception):
    """Raised when labeler input validation fails."""
    pass


def classify_correlation(
    correlation: Optional[float],
    thresholds: CorrelationThresholds = CorrelationThresholds()
) -> str:
    """
    Classify a pairwise return correlation.

    Thresholds (defaults):
    - High: > 0.7
    - Moderate: 0.3 - 0.7
    - Low: < 0.3

    Args:
        correlation: Pearson correlation in [-1, 1]
        thresholds: Correlation bounds

    Returns:
        Classification level: "high", "moderate", "low", or "unknown" for None

    Raises:
        LabelerError: If correlation is outside [-1, 1]
    """
    if correlation is None:
        return "unknown"

    # Allow for float rounding at the bounds
    if abs(correlation) > 1.0 + 1e-9:
        raise LabelerError(f"Correlation must be between -1 and 1, got {correlation}")

    if correlation > thresholds.high:
        return "high"
    elif correlation < thresholds.low:
        return "low"
    else:
        return "moderate"


def classify_vol_level(ann_vol: Optional[float]) -> str:
    """
    Classify annualized fund volatility level.

    Thresholds:
    - Low: < 10%
    - Moderate: 10% - 20%
    - High: > 20%

    Args:
        ann_vol: Annualized volatility as decimal (0.15 = 15%)

    Returns:
        Classification level: "low", "moderate", "high", or "unknown" for None

    Raises:
        LabelerError: If volatility is negative
    """
    if ann_vol is None:
        return "unknown"

    if ann_vol < 0:
        raise LabelerError("Volatility must be non-negative")

    if ann_vol < 0.10:
        return "low"
    elif ann_vol <= 0.20:
        return "moderate"
    else:
        return "high"


def classify_drawdown_severity(max_drawdown: Optional[float]) -> str:
    """
    Classify drawdown severity level.

    Thresholds:
    - Minor: > -10%
    - Moderate: -10% to -25%
    - Severe: < -25%

    Args:
        max_drawdown: Maximum drawdown as negative decimal (-0.15 = -15%)

    Returns:
        Severity level: "minor", "moderate", "severe", or "unknown" for None
    """
    if max_drawdown is None:
        return "unknown"

    if max_drawdown > 0:
        raise LabelerError("Drawdown should be negative or zero")

    dd_pct = abs(max_drawdown)

    if dd_pct < 0.10:
        return "minor"
    elif dd_pct <= 0.25:
        return "moderate"
    else:
        return "severe"


def label_fund(metrics: Dict[str, Optional[float]]) -> Dict[str, str]:
    """Volatility and drawdown labels for one fund's comparison metrics."""
    return {
        'volatility_level': classify_vol_level(metrics.get('volatility')),
        'drawdown_severity': classify_drawdown_severity(metrics.get('max_drawdown'))
    }
