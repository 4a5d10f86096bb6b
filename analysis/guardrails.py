"""
Guardrails for the comparison engine - validation and safety checks.
Runs at the I/O boundary; the calculation modules themselves never raise.
"""

import logging
import warnings
from datetime import date
from typing import Dict, Any, List, Optional

import numpy as np
import pandas as pd

from analysis.models import FundReturns

logger = logging.getLogger(__name__)


class DataQualityError(Exception):
    """Raised when data quality issues require user intervention."""
    pass


class DataQualityWarning(UserWarning):
    """Raised when data quality issues should be noted but don't block execution."""
    pass


def validate_return_series(
    fund_returns: FundReturns,
    min_history_months: int = 12
) -> List[str]:
    """
    Validate a fund's monthly return series before analysis.

    Args:
        fund_returns: Fund return history
        min_history_months: Months below which a short-history warning is raised

    Returns:
        List of warning messages (empty if the series is clean)

    Raises:
        DataQualityError: If the series contains NaN, infinite values or
            returns below -100%
    """
    returns = np.asarray(fund_returns.returns, dtype=float)
    fund_id = fund_returns.fund_id

    if np.isnan(returns).any():
        raise DataQualityError(f"NaN return found for fund {fund_id}")

    if np.isinf(returns).any():
        raise DataQualityError(f"Infinite return found for fund {fund_id}")

    below = int((returns < -1.0).sum())
    if below:
        raise DataQualityError(
            f"Fund {fund_id} has {below} monthly returns below -100%. "
            f"Returns must be decimals (0.05 = 5%), check the input units."
        )

    messages = []

    if len(returns) < min_history_months:
        message = (
            f"Limited history for fund {fund_id}: have {len(returns)} months, "
            f"recommend at least {min_history_months} for reliable metrics."
        )
        warnings.warn(message, DataQualityWarning)
        messages.append(message)

    return messages


def check_duplicate_periods(returns_df: pd.DataFrame) -> List[Dict[str, Any]]:
    """
    Detect duplicated (fund_id, year, month) rows in raw return data.

    Args:
        returns_df: DataFrame with fund_id, year, month, net_return columns

    Returns:
        List of duplicate descriptions, one per duplicated period
    """
    duplicates = []

    if returns_df.empty:
        return duplicates

    for (fund_id, year, month), group in returns_df.groupby(['fund_id', 'year', 'month']):
        if len(group) > 1:
            values = group['net_return'].tolist()
            duplicates.append({
                'fund_id': fund_id,
                'year': int(year),
                'month': int(month),
                'count': len(group),
                'values': values,
                'conflicting': len(set(values)) > 1
            })

    return duplicates


def validate_numeric_outputs(payload: Any, path: str = 'report') -> None:
    """
    Ensure no NaN or infinite value leaks into a report payload.

    Walks nested dicts and lists; None is accepted as "not computable".

    Args:
        payload: Report dictionary (or any nested structure)
        path: Location prefix used in error messages

    Raises:
        DataQualityError: If a NaN or infinite number is found
    """
    if isinstance(payload, dict):
        for key, value in payload.items():
            validate_numeric_outputs(value, f'{path}.{key}')
    elif isinstance(payload, (list, tuple)):
        for i, value in enumerate(payload):
            validate_numeric_outputs(value, f'{path}[{i}]')
    elif isinstance(payload, (int, float)) and not isinstance(payload, bool):
        if np.isnan(payload):
            raise DataQualityError(f"NaN value found in {path}")
        if np.isinf(payload):
            raise DataQualityError(f"Infinite value found in {path}")


def run_all_guardrails(
    funds_returns: List[FundReturns],
    returns_df: Optional[pd.DataFrame] = None,
    min_history_months: int = 12
) -> Dict[str, Any]:
    """
    Run all input guardrail checks and compile results.

    Args:
        funds_returns: Return histories to validate
        returns_df: Raw return rows (optional, enables the duplicate check)
        min_history_months: Short-history warning threshold

    Returns:
        Dictionary with guardrail results

    Raises:
        DataQualityError: If critical issues found that require user intervention
    """
    guardrail_results = {
        'timestamp': date.today().isoformat(),
        'funds_checked': len(funds_returns),
        'data_quality_checks': {
            'return_series': None,
            'duplicate_periods': None
        },
        'warnings': [],
        'errors': []
    }

    try:
        # 1. Duplicate periods
        duplicates = check_duplicate_periods(returns_df) if returns_df is not None else []
        guardrail_results['data_quality_checks']['duplicate_periods'] = duplicates

        conflicting = [d for d in duplicates if d['conflicting']]
        if conflicting:
            raise DataQualityError(
                f"Found {len(conflicting)} periods with conflicting returns, "
                f"e.g. fund {conflicting[0]['fund_id']} "
                f"{conflicting[0]['year']}-{conflicting[0]['month']:02d}"
            )
        if duplicates:
            guardrail_results['warnings'].append(
                f"Found {len(duplicates)} duplicated periods with identical returns"
            )

        # 2. Per-fund series validation
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', DataQualityWarning)
            for fund_returns in funds_returns:
                guardrail_results['warnings'].extend(
                    validate_return_series(fund_returns, min_history_months)
                )
        guardrail_results['data_quality_checks']['return_series'] = 'passed'

        for message in guardrail_results['warnings']:
            logger.warning(message)

        return guardrail_results

    except DataQualityError as e:
        guardrail_results['errors'].append(str(e))
        logger.error(f"Guardrail failure: {e}")
        raise
