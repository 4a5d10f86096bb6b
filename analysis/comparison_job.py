"""
Orchestrated comparison job - input files to comparison report JSON.
Loads inputs, runs guardrails, calls the pure engine, persists results atomically.
"""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

from analysis.comparison import generate_comparison_report
from analysis.config import AnalysisConfig
from analysis.guardrails import run_all_guardrails
from analysis.models import ComparisonReport, FundData, FundReturns
from reports.atomic_writer import write_json_atomic
from reports.export import build_report_payload, export_report
from storage.loaders import load_funds, read_returns_frame, returns_from_frame

logger = logging.getLogger(__name__)


# Funds per comparison
MIN_FUNDS = 2
MAX_FUNDS = 10


class ComparisonJobError(Exception):
    """Raised when comparison job inputs are invalid."""
    pass


def select_funds(funds: List[FundData], fund_ids: Optional[List[str]] = None) -> List[FundData]:
    """
    Pick the funds to compare, in the requested order.

    Args:
        funds: All loaded funds
        fund_ids: Requested ids (default: every loaded fund)

    Returns:
        Selected funds

    Raises:
        ComparisonJobError: If an id is unknown or the count is outside 2-10
    """
    if fund_ids is None:
        selected = list(funds)
    else:
        by_id = {f.id: f for f in funds}
        unknown = [fid for fid in fund_ids if fid not in by_id]
        if unknown:
            raise ComparisonJobError(f"Unknown fund ids: {unknown}")
        selected = [by_id[fid] for fid in fund_ids]

    if not MIN_FUNDS <= len(selected) <= MAX_FUNDS:
        raise ComparisonJobError(
            f"Comparison needs {MIN_FUNDS}-{MAX_FUNDS} funds, got {len(selected)}"
        )

    return selected


def load_inputs(
    funds_path: str,
    returns_path: str,
    fund_ids: Optional[List[str]] = None,
    config: Optional[AnalysisConfig] = None
) -> Tuple[List[FundData], List[FundReturns], Dict[str, Any]]:
    """
    Load selected funds and their return series, then run guardrails.

    Duplicate periods are checked on the raw rows; identical repeats are
    collapsed to one month, conflicting repeats stop the run.

    Returns:
        Tuple of (funds, return series, guardrail results)

    Raises:
        LoaderError, DataQualityError, ComparisonJobError: On invalid inputs
    """
    if config is None:
        config = AnalysisConfig()

    funds = select_funds(load_funds(funds_path), fund_ids)
    selected_ids = {f.id for f in funds}

    returns_df = read_returns_frame(returns_path)
    returns_df = returns_df[returns_df['fund_id'].isin(selected_ids)]

    funds_returns: List[FundReturns] = returns_from_frame(returns_df)

    missing = selected_ids - {fr.fund_id for fr in funds_returns}
    if missing:
        logger.warning(f"No returns found for funds: {sorted(missing)}")

    guardrails = run_all_guardrails(funds_returns, returns_df, config.min_history_months)

    return funds, funds_returns, guardrails


def prepare_report(
    funds_path: str,
    returns_path: str,
    fund_ids: Optional[List[str]] = None,
    as_of: Optional[date] = None,
    config: Optional[AnalysisConfig] = None
) -> Tuple[ComparisonReport, Dict[str, Any]]:
    """
    Load inputs, run guardrails and build the comparison report.

    Returns:
        Tuple of (report, guardrail results)

    Raises:
        LoaderError, DataQualityError, ComparisonJobError: On invalid inputs
    """
    if config is None:
        config = AnalysisConfig()

    funds, funds_returns, guardrails = load_inputs(funds_path, returns_path, fund_ids, config)

    report = generate_comparison_report(
        funds,
        funds_returns,
        as_of=as_of,
        risk_free_rate=config.risk_free_rate,
        thresholds=config.correlation
    )

    return report, guardrails


def run_comparison(
    funds_path: str,
    returns_path: str,
    output_path: Path,
    fund_ids: Optional[List[str]] = None,
    as_of: Optional[date] = None,
    config: Optional[AnalysisConfig] = None
) -> Dict[str, Any]:
    """
    Run a complete fund comparison and save the report JSON.

    Args:
        funds_path: Fund metadata file (CSV or JSON)
        returns_path: Monthly returns file (CSV or JSON)
        output_path: Path to save the report JSON
        fund_ids: Funds to compare (default: every fund in funds_path)
        as_of: Date that determines the YTD window (defaults to today)
        config: Analysis configuration (defaults if omitted)

    Returns:
        Dictionary with job results and summary
    """
    if config is None:
        config = AnalysisConfig()

    start_time = datetime.now()
    output_path = Path(output_path)

    try:
        report, guardrails = prepare_report(funds_path, returns_path, fund_ids, as_of, config)

        payload = build_report_payload(report, config.correlation)
        payload['warnings'] = guardrails['warnings']

        write_result = write_json_atomic(payload, output_path)
        if write_result['status'] != 'completed':
            raise ComparisonJobError(f"Could not write report: {write_result['error']}")

        logger.info(f"Comparison of {len(report.funds)} funds written to {output_path}")

        return {
            'status': 'completed',
            'output_path': str(output_path),
            'funds_compared': len(report.funds),
            'insights_generated': len(report.insights),
            'warnings': guardrails['warnings'],
            'duration_seconds': (datetime.now() - start_time).total_seconds()
        }

    except Exception as e:
        logger.error(f"Comparison job failed: {e}")
        return {
            'status': 'failed',
            'error_message': str(e),
            'output_path': None,
            'funds_compared': 0,
            'duration_seconds': (datetime.now() - start_time).total_seconds()
        }


def run_export(
    funds_path: str,
    returns_path: str,
    output_dir: Path,
    fund_ids: Optional[List[str]] = None,
    as_of: Optional[date] = None,
    config: Optional[AnalysisConfig] = None
) -> Dict[str, Any]:
    """
    Run a fund comparison and export CSV tables plus report JSON.

    Returns:
        Dictionary with job results and the written paths
    """
    if config is None:
        config = AnalysisConfig()

    start_time = datetime.now()

    try:
        report, guardrails = prepare_report(funds_path, returns_path, fund_ids, as_of, config)

        result = export_report(report, Path(output_dir), thresholds=config.correlation)

        return {
            'status': 'completed',
            'paths_written': result['paths_written'],
            'funds_compared': len(report.funds),
            'warnings': guardrails['warnings'],
            'duration_seconds': (datetime.now() - start_time).total_seconds()
        }

    except Exception as e:
        logger.error(f"Export job failed: {e}")
        return {
            'status': 'failed',
            'error_message': str(e),
            'paths_written': [],
            'funds_compared': 0,
            'duration_seconds': (datetime.now() - start_time).total_seconds()
        }
