"""
Comparison report exports.
Builds formatted and raw tables with pandas and writes CSV/JSON atomically.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional

import pandas as pd

from analysis.config import CorrelationThresholds
from analysis.guardrails import DataQualityError, validate_numeric_outputs
from analysis.models import ComparisonReport, FundComparison
from reports.atomic_writer import write_all_atomic
from reports.formatters import format_metric
from reports.labelers import classify_correlation, label_fund

logger = logging.getLogger(__name__)


# Display columns of the comparison CSV, in order
COMPARISON_COLUMNS = {
    'ytd_return': 'YTD Return',
    'one_year_return': '1Y Return',
    'three_year_return': '3Y Return',
    'five_year_return': '5Y Return',
    'cagr': 'CAGR',
    'volatility': 'Volatility',
    'max_drawdown': 'Max Drawdown',
    'sharpe_ratio': 'Sharpe Ratio',
    'sortino_ratio': 'Sortino Ratio',
    'aum': 'AUM',
    'management_fee': 'Mgmt Fee',
    'performance_fee': 'Perf Fee',
}


class ExportError(Exception):
    """Raised when a report export fails."""
    pass


def comparison_table(
    comparisons: List[FundComparison],
    metrics: Optional[List[str]] = None
) -> pd.DataFrame:
    """
    Build the formatted comparison table (one row per fund).

    Args:
        comparisons: Per-fund comparison records
        metrics: Metric keys to show (default: the standard export columns)

    Returns:
        DataFrame of display strings; missing metrics render as "N/A"
    """
    if metrics is None:
        columns_by_metric = COMPARISON_COLUMNS
    else:
        columns_by_metric = {m: COMPARISON_COLUMNS.get(m, m) for m in metrics}

    rows = []
    for comparison in comparisons:
        row = {'Fund Name': comparison.fund_name, 'Fund ID': comparison.fund_id}
        for metric, header in columns_by_metric.items():
            row[header] = format_metric(metric, comparison.metrics.get(metric))
        rows.append(row)

    columns = ['Fund Name', 'Fund ID'] + list(columns_by_metric.values())
    return pd.DataFrame(rows, columns=columns)


def raw_metrics_table(comparisons: List[FundComparison]) -> pd.DataFrame:
    """Build the unformatted metrics table; missing values are empty cells."""
    rows = [
        {'fund_id': c.fund_id, 'fund_name': c.fund_name, **c.metrics}
        for c in comparisons
    ]
    return pd.DataFrame(rows)


def correlation_table(fund_ids: List[str], matrix: List[List[float]]) -> pd.DataFrame:
    """Correlation matrix as a square table labelled by fund id."""
    return pd.DataFrame(matrix, index=fund_ids, columns=fund_ids)


def build_report_payload(
    report: ComparisonReport,
    thresholds: CorrelationThresholds = CorrelationThresholds()
) -> Dict[str, Any]:
    """
    Report JSON payload: the report itself plus per-fund and per-pair labels.

    Raises:
        ExportError: If the payload contains NaN or infinite numbers
    """
    payload = report.to_dict()

    payload['labels'] = {
        c.fund_id: label_fund(c.metrics) for c in report.funds
    }

    fund_ids = [c.fund_id for c in report.funds]
    pairs = []
    for i in range(len(fund_ids)):
        for j in range(i + 1, len(fund_ids)):
            corr = report.correlation_matrix[i][j]
            pairs.append({
                'funds': [fund_ids[i], fund_ids[j]],
                'correlation': corr,
                'level': classify_correlation(corr, thresholds)
            })
    payload['correlation_pairs'] = pairs

    try:
        validate_numeric_outputs(payload)
    except DataQualityError as e:
        raise ExportError(f"Report payload failed numeric validation: {e}") from e

    return payload


def export_report(
    report: ComparisonReport,
    output_dir: Path,
    stem: Optional[str] = None,
    thresholds: CorrelationThresholds = CorrelationThresholds()
) -> Dict[str, Any]:
    """
    Export a comparison report as four files, all-or-nothing.

    Files: <stem>.csv (formatted table), <stem>-metrics.csv (raw values),
    <stem>-correlation.csv and <stem>.json.

    Args:
        report: Comparison report to export
        output_dir: Destination directory
        stem: File name stem (default: fund-comparison-<report date>)
        thresholds: Correlation bounds for pair labels

    Returns:
        Dictionary with status and written paths

    Raises:
        ExportError: If the payload is invalid or any file cannot be written
    """
    output_dir = Path(output_dir)
    if stem is None:
        stem = f"fund-comparison-{report.generated_at.date().isoformat()}"

    payload = build_report_payload(report, thresholds)
    fund_ids = [c.fund_id for c in report.funds]

    files = {
        output_dir / f'{stem}.csv': comparison_table(report.funds).to_csv(index=False),
        output_dir / f'{stem}-metrics.csv': raw_metrics_table(report.funds).to_csv(index=False),
        output_dir / f'{stem}-correlation.csv': correlation_table(
            fund_ids, report.correlation_matrix
        ).to_csv(),
        output_dir / f'{stem}.json': json.dumps(payload, indent=2, default=str),
    }

    result = write_all_atomic(files)
    if result['status'] != 'completed':
        raise ExportError(f"Export to {output_dir} failed: {result['error']}")

    logger.info(f"Exported comparison of {len(report.funds)} funds to {output_dir}")
    return result
