"""
Descriptive statistics helpers.
Pure functions over plain sequences; None signals insufficient data.
"""

import numpy as np
from typing import Optional, Sequence


def mean(values: Sequence[float]) -> Optional[float]:
    """
    Calculate the arithmetic mean.

    Args:
        values: Sequence of numbers

    Returns:
        Mean value, or None if the sequence is empty
    """
    if len(values) == 0:
        return None

    return float(np.mean(np.asarray(values, dtype=float)))


def standard_deviation(values: Sequence[float]) -> Optional[float]:
    """
    Calculate the sample standard deviation (n-1 denominator).

    Args:
        values: Sequence of numbers

    Returns:
        Standard deviation, or None if fewer than 2 values.
        Identical values give exactly 0.0.
    """
    if len(values) < 2:
        return None

    arr = np.asarray(values, dtype=float)

    # The float mean of identical values can round away from them
    if np.all(arr == arr[0]):
        return 0.0

    return float(np.std(arr, ddof=1))


def variance(values: Sequence[float]) -> Optional[float]:
    """Sample variance, or None if fewer than 2 values."""
    return covariance(values, values)


def covariance(x: Sequence[float], y: Sequence[float]) -> Optional[float]:
    """
    Calculate the sample covariance of two equally long sequences.

    Formula: Cov = Σ(x_i - x̄)(y_i - ȳ) / (n - 1)

    Args:
        x: First sequence
        y: Second sequence

    Returns:
        Covariance, or None if lengths differ or fewer than 2 values
    """
    if len(x) != len(y) or len(x) < 2:
        return None

    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)

    if np.all(x_arr == x_arr[0]) or np.all(y_arr == y_arr[0]):
        return 0.0

    products = (x_arr - x_arr.mean()) * (y_arr - y_arr.mean())

    return float(products.sum() / (len(x_arr) - 1))
