"""
File loaders - read fund metadata, monthly returns and view logs.
Thin IO layer over pandas; CSV and JSON (list of records) are accepted.
"""

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from analysis.models import FundData, FundReturns

logger = logging.getLogger(__name__)


FUND_COLUMNS = ['id', 'name', 'type']
RETURN_COLUMNS = ['fund_id', 'year', 'month', 'net_return']
BENCHMARK_COLUMNS = ['year', 'month', 'net_return']
VIEW_COLUMNS = ['fund_id', 'viewed_at']
PERIOD_KEY = ['fund_id', 'year', 'month']


class LoaderError(Exception):
    """Raised when an input file cannot be loaded."""
    pass


def read_table(path: str, required_columns: List[str]) -> pd.DataFrame:
    """
    Read a CSV or JSON table and check its columns.

    Args:
        path: File path (.csv or .json)
        required_columns: Columns that must be present

    Returns:
        DataFrame with the file contents

    Raises:
        LoaderError: If the file is missing, unreadable or lacks columns
    """
    file_path = Path(path)

    if not file_path.exists():
        raise LoaderError(f"Input file not found: {path}")

    suffix = file_path.suffix.lower()

    try:
        if suffix == '.csv':
            df = pd.read_csv(file_path)
        elif suffix == '.json':
            df = pd.read_json(file_path, orient='records', dtype=False)
        else:
            raise LoaderError(f"Unsupported file type '{suffix}' for {path} (use .csv or .json)")
    except LoaderError:
        raise
    except (ValueError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise LoaderError(f"Could not parse {path}: {e}")

    missing = [col for col in required_columns if col not in df.columns]
    if missing:
        raise LoaderError(f"{path} is missing required columns: {missing}")

    logger.debug(f"Read {len(df)} rows from {path}")
    return df


def _clean(value: Any) -> Any:
    """Map pandas missing values to None."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _optional_float(value: Any) -> Optional[float]:
    value = _clean(value)
    return float(value) if value is not None else None


def _optional_str(value: Any) -> Optional[str]:
    value = _clean(value)
    return str(value) if value is not None else None


def _optional_date(value: Any) -> Optional[date]:
    value = _clean(value)
    if value is None:
        return None
    return pd.to_datetime(value).date()


def slugify(name: str) -> str:
    """URL slug from a fund name: lowercase words joined by hyphens."""
    return re.sub(r'[^a-z0-9]+', '-', name.lower()).strip('-')


def load_funds(path: str) -> List[FundData]:
    """
    Load fund metadata.

    Required columns: id, name, type. Optional: slug (derived from the name
    when absent), strategy, sub_strategy, aum, inception_date,
    management_fee, performance_fee, min_investment.

    Args:
        path: CSV or JSON file

    Returns:
        List of FundData in file order

    Raises:
        LoaderError: If the file cannot be loaded or a value is malformed
    """
    df = read_table(path, FUND_COLUMNS)

    funds = []
    try:
        for record in df.to_dict(orient='records'):
            name = str(record['name'])
            slug = _optional_str(record.get('slug')) or slugify(name)

            funds.append(FundData(
                id=str(record['id']),
                name=name,
                slug=slug,
                type=str(record['type']),
                strategy=_optional_str(record.get('strategy')),
                sub_strategy=_optional_str(record.get('sub_strategy')),
                aum=_optional_float(record.get('aum')),
                inception_date=_optional_date(record.get('inception_date')),
                management_fee=_optional_float(record.get('management_fee')),
                performance_fee=_optional_float(record.get('performance_fee')),
                min_investment=_optional_float(record.get('min_investment'))
            ))
    except (TypeError, ValueError) as e:
        raise LoaderError(f"Malformed fund record in {path}: {e}")

    logger.info(f"Loaded {len(funds)} funds from {path}")
    return funds


def read_returns_frame(path: str) -> pd.DataFrame:
    """
    Read raw monthly return rows.

    Returns:
        DataFrame with fund_id (str), year, month (int) and net_return (float)

    Raises:
        LoaderError: If the file cannot be loaded or periods are invalid
    """
    df = read_table(path, RETURN_COLUMNS)

    try:
        df = df.astype({'year': int, 'month': int, 'net_return': float})
    except (TypeError, ValueError) as e:
        raise LoaderError(f"Non-numeric period or return in {path}: {e}")

    df['fund_id'] = df['fund_id'].astype(str)

    bad_months = df[(df['month'] < 1) | (df['month'] > 12)]
    if not bad_months.empty:
        raise LoaderError(f"{path} has {len(bad_months)} rows with month outside 1-12")

    return df


def returns_from_frame(df: pd.DataFrame) -> List[FundReturns]:
    """
    Group raw return rows into per-fund series, oldest period first.

    A period repeated in the frame contributes its first row only; conflicting
    repeats must be rejected before this point (see check_duplicate_periods).
    years is the number of months / 12.
    """
    df = df.drop_duplicates(PERIOD_KEY, keep='first')
    series = []

    for fund_id, group in df.groupby('fund_id', sort=False):
        ordered = group.sort_values(['year', 'month'], kind='stable')
        series.append(FundReturns.from_monthly(
            fund_id=str(fund_id),
            returns=[float(r) for r in ordered['net_return']]
        ))

    return series


def load_returns(path: str) -> List[FundReturns]:
    """
    Load monthly returns (fund_id, year, month, net_return) per fund.

    Identical repeated periods are collapsed to one row.

    Args:
        path: CSV or JSON file

    Returns:
        List of FundReturns in order of first appearance

    Raises:
        LoaderError: If the file cannot be loaded or a period has
            conflicting returns
    """
    df = read_returns_frame(path)

    values_per_period = df.groupby(PERIOD_KEY)['net_return'].nunique()
    conflicting = values_per_period[values_per_period > 1]
    if not conflicting.empty:
        fund_id, year, month = conflicting.index[0]
        raise LoaderError(
            f"{path} has {len(conflicting)} periods with conflicting returns, "
            f"e.g. fund {fund_id} {year}-{month:02d}"
        )

    repeated = int(df.duplicated(PERIOD_KEY).sum())
    if repeated:
        logger.warning(f"Dropped {repeated} repeated period rows from {path}")

    series = returns_from_frame(df)

    logger.info(f"Loaded return histories for {len(series)} funds from {path}")
    return series


def load_benchmark(path: str) -> List[float]:
    """
    Load benchmark monthly returns (year, month, net_return), oldest first.

    Raises:
        LoaderError: If the file cannot be loaded
    """
    df = read_table(path, BENCHMARK_COLUMNS)

    try:
        df = df.astype({'year': int, 'month': int, 'net_return': float})
    except (TypeError, ValueError) as e:
        raise LoaderError(f"Non-numeric benchmark row in {path}: {e}")

    ordered = df.sort_values(['year', 'month'], kind='stable')
    returns = [float(r) for r in ordered['net_return']]

    logger.info(f"Loaded {len(returns)} benchmark months from {path}")
    return returns


def load_view_log(path: str) -> Dict[str, List[datetime]]:
    """
    Load fund view events (fund_id, viewed_at ISO timestamp).

    Naive timestamps are read as UTC; offsets are converted to naive UTC.

    Returns:
        View timestamps per fund id

    Raises:
        LoaderError: If the file cannot be loaded or a timestamp is invalid
    """
    df = read_table(path, VIEW_COLUMNS)

    try:
        viewed_at = pd.to_datetime(df['viewed_at'], utc=True).dt.tz_localize(None)
    except (TypeError, ValueError) as e:
        raise LoaderError(f"Invalid view timestamp in {path}: {e}")

    view_log: Dict[str, List[datetime]] = {}
    for fund_id, ts in zip(df['fund_id'].astype(str), viewed_at):
        view_log.setdefault(fund_id, []).append(ts.to_pydatetime())

    logger.info(f"Loaded {len(df)} views for {len(view_log)} funds from {path}")
    return view_log
