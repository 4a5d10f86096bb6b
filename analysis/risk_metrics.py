"""
Extended risk-adjusted metrics and performance attribution.
Built entirely on the calculation primitives; None propagates, nothing raises.
"""

import math
from typing import Dict, List, Optional, Sequence

from analysis.calculations.statistics import mean, standard_deviation
from analysis.calculations.returns import calculate_cagr, to_cumulative_returns
from analysis.calculations.volatility import (
    MONTHS_PER_YEAR,
    calculate_volatility,
    calculate_sharpe_ratio,
    calculate_sortino
)
from analysis.calculations.drawdown import calculate_max_drawdown
from analysis.calculations.benchmark import calculate_beta, calculate_alpha
from analysis.config import DEFAULT_RISK_FREE_RATE
from analysis.correlation import align_trailing
from analysis.models import RiskAdjustedMetrics, PerformanceAttribution, FactorExposure


def annualized_mean_return(returns: Sequence[float]) -> Optional[float]:
    """Arithmetic monthly mean scaled by 12, or None for an empty series."""
    avg = mean(returns)
    if avg is None:
        return None

    return avg * MONTHS_PER_YEAR


def calculate_calmar(returns: Sequence[float]) -> Optional[float]:
    """
    Calculate the Calmar ratio.

    Formula: Calmar = CAGR / |Max Drawdown|, with years = months / 12

    Returns:
        Calmar ratio, or None if CAGR is unavailable or drawdown is zero
    """
    max_dd = calculate_max_drawdown(to_cumulative_returns(returns))
    cagr = calculate_cagr(returns, len(returns) / MONTHS_PER_YEAR)

    if cagr is None or max_dd is None or max_dd == 0:
        return None

    return cagr / abs(max_dd)


def calculate_omega(returns: Sequence[float], threshold: float = 0.0) -> Optional[float]:
    """
    Calculate the Omega ratio.

    Formula: Ω = Σ gains above threshold / |Σ losses below threshold|

    Args:
        returns: Monthly returns
        threshold: Annual threshold return, converted to monthly

    Returns:
        Omega ratio, or None if returns are empty or there are no losses
    """
    if len(returns) == 0:
        return None

    monthly_threshold = threshold / MONTHS_PER_YEAR
    gains = 0.0
    losses = 0.0

    for r in returns:
        excess = r - monthly_threshold
        if excess > 0:
            gains += excess
        else:
            losses += abs(excess)

    if losses == 0:
        return None

    return gains / losses


def calculate_information_ratio(
    fund_returns: Sequence[float],
    benchmark_returns: Sequence[float]
) -> Optional[float]:
    """
    Calculate the information ratio over the shared trailing window.

    Formula: IR = (mean excess × 12) / (tracking error × √12)

    Returns:
        Information ratio, or None if tracking error is undefined or zero
    """
    aligned_fund, aligned_bench = align_trailing(fund_returns, benchmark_returns)
    excess = [f - b for f, b in zip(aligned_fund, aligned_bench)]

    tracking_error = standard_deviation(excess)
    avg_excess = mean(excess)

    if avg_excess is None or tracking_error is None or tracking_error == 0:
        return None

    return (avg_excess * MONTHS_PER_YEAR) / (tracking_error * math.sqrt(MONTHS_PER_YEAR))


def calculate_capture_ratios(
    fund_returns: Sequence[float],
    benchmark_returns: Sequence[float]
) -> Dict[str, Optional[float]]:
    """
    Calculate up and down market capture ratios.

    Aligned months are split by the sign of the benchmark return
    (benchmark >= 0 is an up month), regardless of the fund's own sign.

    Formula: capture = mean(fund in partition) / mean(benchmark in partition) × 100

    Returns:
        Dictionary with 'up' and 'down' capture ratios (None if undefined)
    """
    aligned_fund, aligned_bench = align_trailing(fund_returns, benchmark_returns)
    if len(aligned_fund) < 2:
        return {'up': None, 'down': None}

    up_fund: List[float] = []
    up_bench: List[float] = []
    down_fund: List[float] = []
    down_bench: List[float] = []

    for f, b in zip(aligned_fund, aligned_bench):
        if b >= 0:
            up_fund.append(f)
            up_bench.append(b)
        else:
            down_fund.append(f)
            down_bench.append(b)

    return {
        'up': _capture(up_fund, up_bench),
        'down': _capture(down_fund, down_bench)
    }


def _capture(fund: List[float], bench: List[float]) -> Optional[float]:
    bench_mean = mean(bench)
    fund_mean = mean(fund)

    if bench_mean is None or fund_mean is None or bench_mean == 0:
        return None

    return (fund_mean / bench_mean) * 100


def get_risk_adjusted_metrics(
    fund_id: str,
    returns: Sequence[float],
    benchmark_returns: Optional[Sequence[float]] = None,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE
) -> RiskAdjustedMetrics:
    """
    Calculate the extended risk-adjusted metric bundle for a fund.

    Benchmark-relative metrics (beta, alpha, Treynor, information ratio,
    capture ratios) are only computed when a non-empty benchmark is given.

    Args:
        fund_id: Fund identifier
        returns: Monthly returns
        benchmark_returns: Optional benchmark monthly returns
        risk_free_rate: Annual risk-free rate (default 4%)

    Returns:
        RiskAdjustedMetrics with None for every undefined metric
    """
    max_dd = calculate_max_drawdown(to_cumulative_returns(returns))

    # Annualized return only meaningful with at least a year of history
    annual_return = annualized_mean_return(returns) if len(returns) >= MONTHS_PER_YEAR else None

    metrics = RiskAdjustedMetrics(
        fund_id=fund_id,
        sharpe_ratio=calculate_sharpe_ratio(returns, risk_free_rate),
        sortino_ratio=calculate_sortino(returns, risk_free_rate),
        calmar_ratio=calculate_calmar(returns),
        omega=calculate_omega(returns, 0.0),
        volatility=calculate_volatility(returns),
        max_drawdown=max_dd
    )

    if not benchmark_returns:
        return metrics

    beta = calculate_beta(returns, benchmark_returns)
    benchmark_annual = annualized_mean_return(benchmark_returns)

    metrics.beta = beta

    if beta is not None and annual_return is not None and benchmark_annual is not None:
        metrics.alpha = calculate_alpha(annual_return, beta, benchmark_annual, risk_free_rate)

    if beta is not None and beta != 0 and annual_return is not None:
        metrics.treynor_ratio = (annual_return - risk_free_rate) / beta

    metrics.information_ratio = calculate_information_ratio(returns, benchmark_returns)

    capture = calculate_capture_ratios(returns, benchmark_returns)
    metrics.up_capture_ratio = capture['up']
    metrics.down_capture_ratio = capture['down']

    return metrics


def get_performance_attribution(
    fund_id: str,
    returns: Sequence[float],
    benchmark_returns: Optional[Sequence[float]] = None,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE
) -> PerformanceAttribution:
    """
    Decompose annualized fund return into market, alpha and residual terms.

    Simplified attribution, not a Brinson decomposition:
    - market exposure: β × benchmark return
    - alpha: actual return minus CAPM expected return
    - timing: not estimated, always 0.0
    - residual: total minus the three terms above (missing terms count as 0)

    Args:
        fund_id: Fund identifier
        returns: Monthly returns
        benchmark_returns: Benchmark monthly returns
        risk_free_rate: Annual risk-free rate (default 4%)

    Returns:
        PerformanceAttribution (all None without a benchmark)
    """
    if not benchmark_returns:
        return PerformanceAttribution(fund_id=fund_id)

    total_fund_return = annualized_mean_return(returns) or 0.0
    benchmark_return = annualized_mean_return(benchmark_returns) or 0.0
    beta = calculate_beta(returns, benchmark_returns)

    market_exposure = beta * benchmark_return if beta is not None else None

    expected_return = (
        risk_free_rate + beta * (benchmark_return - risk_free_rate)
        if beta is not None else None
    )
    alpha_return = total_fund_return - expected_return if expected_return is not None else None

    # TODO: estimate timing from rolling-window beta changes once product signs off on the method
    timing_return = 0.0

    residual_return = (
        total_fund_return
        - (market_exposure or 0.0)
        - (alpha_return or 0.0)
        - timing_return
    )

    return PerformanceAttribution(
        fund_id=fund_id,
        market_exposure=market_exposure,
        alpha_return=alpha_return,
        timing_return=timing_return,
        residual_return=residual_return,
        factor_exposures=[
            FactorExposure(
                factor='Market',
                exposure=beta if beta is not None else 0.0,
                contribution=market_exposure if market_exposure is not None else 0.0
            )
        ]
    )
