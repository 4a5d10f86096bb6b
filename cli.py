#!/usr/bin/env python3
"""
Command-line interface for fund performance analytics.
Usage: python cli.py COMMAND [options]
"""

import sys
import json
import logging
import argparse
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional

from analysis.comparison import COMPARISON_METRICS, compare_funds
from analysis.comparison_job import ComparisonJobError, load_inputs, run_comparison, run_export, select_funds
from analysis.config import AnalysisConfig, ConfigError, load_config
from analysis.correlation import calculate_correlation_matrix
from analysis.guardrails import DataQualityError
from analysis.models import FundReturns
from analysis.risk_metrics import get_performance_attribution, get_risk_adjusted_metrics
from analysis.similarity import find_similar_funds
from analysis.trending import build_trending_list
from reports.export import ExportError, comparison_table, correlation_table
from storage.loaders import LoaderError, load_benchmark, load_funds, load_returns, load_view_log

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Fund performance statistics and comparison',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py compare --funds data/funds.csv --returns data/returns.csv --fund-ids F1 F2
  python cli.py risk --returns data/returns.csv --fund-id F1 --benchmark data/sp500.csv
  python cli.py similar --funds data/funds.csv --returns data/returns.csv --fund-id F1
  python cli.py trending --funds data/funds.csv --views data/views.csv
        """
    )
    parser.add_argument('--config',
                        help='Analysis config YAML (default: $FUND_ANALYTICS_CONFIG or ./config/analysis.yml)')
    parser.add_argument('--verbose', '-v',
                        action='store_true',
                        help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    compare = subparsers.add_parser('compare', help='Compare funds side-by-side')
    _add_fund_inputs(compare)
    compare.add_argument('--metrics', nargs='+', choices=COMPARISON_METRICS,
                         help='Metrics to show (default: all)')
    compare.add_argument('--output',
                         help='Write the full comparison report JSON to this path')

    correlation = subparsers.add_parser('correlation', help='Correlation matrix of fund returns')
    _add_fund_inputs(correlation)

    risk = subparsers.add_parser('risk', help='Risk-adjusted metrics for one fund')
    risk.add_argument('--returns', required=True, help='Monthly returns file (CSV or JSON)')
    risk.add_argument('--fund-id', required=True, help='Fund to analyze')
    risk.add_argument('--benchmark', help='Benchmark monthly returns file')

    attribution = subparsers.add_parser('attribution', help='Performance attribution for one fund')
    attribution.add_argument('--returns', required=True, help='Monthly returns file (CSV or JSON)')
    attribution.add_argument('--fund-id', required=True, help='Fund to analyze')
    attribution.add_argument('--benchmark', required=True, help='Benchmark monthly returns file')

    similar = subparsers.add_parser('similar', help='Find funds similar to a fund')
    similar.add_argument('--funds', required=True, help='Fund metadata file (CSV or JSON)')
    similar.add_argument('--returns', required=True, help='Monthly returns file (CSV or JSON)')
    similar.add_argument('--fund-id', required=True, help='Target fund')
    similar.add_argument('--limit', type=int, default=5, choices=range(1, 21), metavar='1-20',
                         help='Number of similar funds (default: 5)')

    trending = subparsers.add_parser('trending', help='Trending funds by recent views')
    trending.add_argument('--funds', required=True, help='Fund metadata file (CSV or JSON)')
    trending.add_argument('--views', required=True, help='View log file (fund_id, viewed_at)')
    trending.add_argument('--now', type=datetime.fromisoformat,
                          help='Scoring time (ISO timestamp, naive UTC; default: now)')
    trending.add_argument('--top', type=int, default=20, help='Entries to show (default: 20)')

    export = subparsers.add_parser('export', help='Export comparison CSV tables and report JSON')
    _add_fund_inputs(export)
    export.add_argument('--output-dir', default='./data/exports',
                        help='Destination directory (default: ./data/exports)')

    return parser


def _add_fund_inputs(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument('--funds', required=True, help='Fund metadata file (CSV or JSON)')
    subparser.add_argument('--returns', required=True, help='Monthly returns file (CSV or JSON)')
    subparser.add_argument('--fund-ids', nargs='+', help='Funds to include (default: all, 2-10)')
    subparser.add_argument('--as-of', type=date.fromisoformat,
                           help='Date for the YTD window (YYYY-MM-DD, default: today)')


def _fund_series(returns_path: str, fund_id: str) -> FundReturns:
    for fund_returns in load_returns(returns_path):
        if fund_returns.fund_id == fund_id:
            return fund_returns
    raise ComparisonJobError(f"No returns found for fund {fund_id}")


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


def cmd_compare(args: argparse.Namespace, config: AnalysisConfig) -> int:
    if args.output:
        result = run_comparison(
            args.funds, args.returns, Path(args.output),
            fund_ids=args.fund_ids, as_of=args.as_of, config=config
        )
        if result['status'] != 'completed':
            print(f"❌ Comparison failed: {result['error_message']}", file=sys.stderr)
            return 1
        print(f"✅ Compared {result['funds_compared']} funds: {result['output_path']}")
        return 0

    funds, funds_returns, _ = load_inputs(args.funds, args.returns, args.fund_ids, config)

    comparisons = compare_funds(
        funds, funds_returns,
        selected_metrics=args.metrics,
        as_of=args.as_of,
        risk_free_rate=config.risk_free_rate
    )

    print(comparison_table(comparisons, args.metrics).to_string(index=False))
    return 0


def cmd_correlation(args: argparse.Namespace, config: AnalysisConfig) -> int:
    funds = select_funds(load_funds(args.funds), args.fund_ids)
    returns_by_fund = {fr.fund_id: fr for fr in load_returns(args.returns)}

    ordered = [
        returns_by_fund.get(f.id, FundReturns(fund_id=f.id, returns=[], years=0))
        for f in funds
    ]
    matrix = calculate_correlation_matrix(ordered)

    print(correlation_table(matrix.fund_ids, matrix.matrix).round(3).to_string())
    return 0


def cmd_risk(args: argparse.Namespace, config: AnalysisConfig) -> int:
    fund_returns = _fund_series(args.returns, args.fund_id)
    benchmark = load_benchmark(args.benchmark) if args.benchmark else None

    metrics = get_risk_adjusted_metrics(
        args.fund_id, fund_returns.returns, benchmark, config.risk_free_rate
    )
    _print_json(metrics.to_dict())
    return 0


def cmd_attribution(args: argparse.Namespace, config: AnalysisConfig) -> int:
    fund_returns = _fund_series(args.returns, args.fund_id)
    benchmark = load_benchmark(args.benchmark)

    attribution = get_performance_attribution(
        args.fund_id, fund_returns.returns, benchmark, config.risk_free_rate
    )
    _print_json(attribution.to_dict())
    return 0


def cmd_similar(args: argparse.Namespace, config: AnalysisConfig) -> int:
    funds = load_funds(args.funds)
    target = next((f for f in funds if f.id == args.fund_id), None)
    if target is None:
        raise ComparisonJobError(f"Unknown fund id: {args.fund_id}")

    funds_returns = load_returns(args.returns)
    target_returns = next((fr.returns for fr in funds_returns if fr.fund_id == target.id), [])

    similar = find_similar_funds(
        target, target_returns, funds, funds_returns,
        limit=args.limit, weights=config.similarity
    )
    _print_json([s.to_dict() for s in similar])
    return 0


def cmd_trending(args: argparse.Namespace, config: AnalysisConfig) -> int:
    now = args.now if args.now is not None else datetime.now(timezone.utc).replace(tzinfo=None)

    entries = build_trending_list(
        load_view_log(args.views), load_funds(args.funds), now, config.trending
    )
    _print_json([e.to_dict() for e in entries[:args.top]])
    return 0


def cmd_export(args: argparse.Namespace, config: AnalysisConfig) -> int:
    result = run_export(
        args.funds, args.returns, Path(args.output_dir),
        fund_ids=args.fund_ids, as_of=args.as_of, config=config
    )
    if result['status'] != 'completed':
        print(f"❌ Export failed: {result['error_message']}", file=sys.stderr)
        return 1

    print(f"✅ Exported {result['funds_compared']} funds:")
    for path in result['paths_written']:
        print(f"   {path}")
    return 0


COMMANDS = {
    'compare': cmd_compare,
    'correlation': cmd_correlation,
    'risk': cmd_risk,
    'attribution': cmd_attribution,
    'similar': cmd_similar,
    'trending': cmd_trending,
    'export': cmd_export,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        config = load_config(args.config)
        logger.debug(f"Running {args.command} with risk-free rate {config.risk_free_rate}")
        return COMMANDS[args.command](args, config)
    except (ConfigError, LoaderError, DataQualityError, ComparisonJobError, ExportError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
