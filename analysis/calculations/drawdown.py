"""
Drawdown calculation utilities.
Pure functions for peak-to-trough analysis of cumulative growth series.
"""

import numpy as np
from typing import Dict, Optional, Sequence, Union


def drawdown_series(cumulative_returns: Sequence[float]) -> Optional[np.ndarray]:
    """
    Calculate the drawdown at every point of a cumulative series.

    Formula: dd_t = (value_t - peak_t) / peak_t, peak_t = running maximum

    Returns:
        Array of drawdowns (<= 0), or None if empty or a running peak
        is non-positive (drawdown undefined)
    """
    if len(cumulative_returns) == 0:
        return None

    values = np.asarray(cumulative_returns, dtype=float)

    # Track running maximum (peak)
    running_max = np.maximum.accumulate(values)

    if np.any(running_max <= 0):
        return None

    return (values - running_max) / running_max


def calculate_max_drawdown(cumulative_returns: Sequence[float]) -> Optional[float]:
    """
    Calculate maximum drawdown of a cumulative growth series.

    The result is the global minimum over the whole walk, so an early deep
    drawdown wins over a later, shallower one after partial recovery.

    Args:
        cumulative_returns: Growth factors in chronological order, typically
            from to_cumulative_returns (starting at 1.0)

    Returns:
        Maximum drawdown as negative decimal (-0.25 = 25% loss), 0.0 if the
        series never falls below its peak, or None if fewer than 2 points
    """
    if len(cumulative_returns) < 2:
        return None

    drawdowns = drawdown_series(cumulative_returns)
    if drawdowns is None:
        return None

    max_dd = float(drawdowns.min())

    # Never below peak: report a clean zero
    return max_dd if max_dd < 0 else 0.0


def drawdown_stats(cumulative_returns: Sequence[float]) -> Dict[str, Union[float, int, None]]:
    """
    Locate the maximum drawdown within a cumulative series.

    Args:
        cumulative_returns: Growth factors in chronological order

    Returns:
        Dictionary with:
        - max_drawdown: Largest decline as decimal (None if undefined)
        - peak_index: Index of the peak before the trough
        - trough_index: Index of the lowest point
        - recovery_index: First index after the trough above the peak (None if unrecovered)
        - drawdown_periods: Periods from peak to trough
        - recovery_periods: Periods from trough to recovery (None if unrecovered)
    """
    empty = {
        'max_drawdown': None,
        'peak_index': None,
        'trough_index': None,
        'recovery_index': None,
        'drawdown_periods': None,
        'recovery_periods': None
    }

    max_dd = calculate_max_drawdown(cumulative_returns)
    if max_dd is None:
        return empty

    values = np.asarray(cumulative_returns, dtype=float)

    if max_dd == 0:
        return {
            'max_drawdown': 0.0,
            'peak_index': None,
            'trough_index': None,
            'recovery_index': None,
            'drawdown_periods': 0,
            'recovery_periods': None
        }

    drawdowns = drawdown_series(cumulative_returns)
    trough_idx = int(np.argmin(drawdowns))

    # Peak is the first occurrence of the running max in effect at the trough
    peak_value = np.maximum.accumulate(values)[trough_idx]
    peak_idx = int(np.argmax(values[:trough_idx + 1] >= peak_value))

    recovery_idx = None
    for i in range(trough_idx + 1, len(values)):
        if values[i] >= peak_value:
            recovery_idx = i
            break

    return {
        'max_drawdown': max_dd,
        'peak_index': peak_idx,
        'trough_index': trough_idx,
        'recovery_index': recovery_idx,
        'drawdown_periods': trough_idx - peak_idx,
        'recovery_periods': (recovery_idx - trough_idx) if recovery_idx is not None else None
    }
