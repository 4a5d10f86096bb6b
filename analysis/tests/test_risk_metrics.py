"""
Tests for extended risk-adjusted metrics and performance attribution.
"""

import math
import pytest

from analysis.risk_metrics import (
    annualized_mean_return,
    calculate_calmar,
    calculate_omega,
    calculate_information_ratio,
    calculate_capture_ratios,
    get_risk_adjusted_metrics,
    get_performance_attribution
)


# Two years of monthly returns; the fund is 1.5x a benchmark plus a small tilt
BENCHMARK = [0.02, -0.01, 0.015, -0.02, 0.03, 0.005, -0.015, 0.01, 0.025, -0.005, 0.01, 0.02] * 2
FUND = [1.5 * b + 0.001 for b in BENCHMARK]


class TestSimpleRatios:
    """Tests for Calmar and Omega."""

    def test_annualized_mean_return(self):
        """Arithmetic mean times 12."""
        assert annualized_mean_return([0.01, 0.03]) == pytest.approx(0.24)
        assert annualized_mean_return([]) is None

    def test_omega(self):
        """Gains over losses relative to a zero threshold."""
        # Gains 0.03 + 0.02, losses 0.01 + 0.04
        assert calculate_omega([0.03, -0.01, 0.02, -0.04]) == pytest.approx(0.05 / 0.05)

    def test_omega_no_losses(self):
        """Without losses the ratio is undefined."""
        assert calculate_omega([0.01, 0.02]) is None
        assert calculate_omega([]) is None

    def test_omega_annual_threshold(self):
        """A 12% annual threshold is 1% a month."""
        # Excess: +0.01, -0.01 -> gains 0.01, losses 0.01
        assert calculate_omega([0.02, 0.0], threshold=0.12) == pytest.approx(1.0)

    def test_calmar(self):
        """CAGR over the magnitude of max drawdown."""
        returns = [0.10, -0.20, 0.30]
        # 3 months = 0.25 years; growth = 1.1 × 0.8 × 1.3 = 1.144
        cagr = 1.144 ** 4 - 1
        # Peak 1.1, trough 0.88: -20%
        assert calculate_calmar(returns) == pytest.approx(cagr / 0.20)

    def test_calmar_no_drawdown(self):
        """Zero drawdown makes Calmar undefined."""
        assert calculate_calmar([0.01, 0.02, 0.03]) is None


class TestBenchmarkRatios:
    """Tests for information ratio and capture ratios."""

    def test_information_ratio_identical_series(self):
        """No tracking error: undefined."""
        assert calculate_information_ratio(BENCHMARK, BENCHMARK) is None

    def test_information_ratio_sign(self):
        """Outperformance gives a positive ratio."""
        result = calculate_information_ratio(FUND, BENCHMARK)

        assert result is not None
        assert result > 0

    def test_capture_ratios_leveraged_fund(self):
        """A 1.5x fund captures about 150% of up months."""
        capture = calculate_capture_ratios(FUND, BENCHMARK)

        up_bench = [b for b in BENCHMARK if b >= 0]
        up_fund = [1.5 * b + 0.001 for b in up_bench]
        expected_up = (sum(up_fund) / len(up_fund)) / (sum(up_bench) / len(up_bench)) * 100

        assert capture['up'] == pytest.approx(expected_up)
        assert capture['down'] is not None
        assert capture['down'] > 100

    def test_capture_ratios_insufficient(self):
        """Fewer than two aligned months gives no ratios."""
        assert calculate_capture_ratios([0.01], [0.02]) == {'up': None, 'down': None}

    def test_capture_ratios_no_down_months(self):
        """Missing partition yields None for that side."""
        capture = calculate_capture_ratios([0.02, 0.01], [0.01, 0.02])

        assert capture['up'] == pytest.approx(100.0)
        assert capture['down'] is None


class TestRiskAdjustedMetrics:
    """Tests for get_risk_adjusted_metrics bundle."""

    def test_without_benchmark(self):
        """Benchmark-relative fields stay None."""
        metrics = get_risk_adjusted_metrics('F1', FUND)

        assert metrics.fund_id == 'F1'
        assert metrics.sharpe_ratio is not None
        assert metrics.volatility is not None
        assert metrics.beta is None
        assert metrics.alpha is None
        assert metrics.treynor_ratio is None
        assert metrics.information_ratio is None
        assert metrics.up_capture_ratio is None

    def test_with_benchmark(self):
        """Beta, alpha and Treynor are consistent with each other."""
        metrics = get_risk_adjusted_metrics('F1', FUND, BENCHMARK, risk_free_rate=0.04)

        assert metrics.beta == pytest.approx(1.5)

        fund_annual = sum(FUND) / len(FUND) * 12
        bench_annual = sum(BENCHMARK) / len(BENCHMARK) * 12
        expected_alpha = fund_annual - (0.04 + 1.5 * (bench_annual - 0.04))

        assert metrics.alpha == pytest.approx(expected_alpha)
        assert metrics.treynor_ratio == pytest.approx((fund_annual - 0.04) / 1.5)

    def test_short_history_skips_annual_metrics(self):
        """Alpha and Treynor need at least a year of returns."""
        metrics = get_risk_adjusted_metrics('F1', FUND[:6], BENCHMARK[:6])

        assert metrics.beta is not None
        assert metrics.alpha is None
        assert metrics.treynor_ratio is None

    def test_empty_returns(self):
        """Empty input never raises; everything is None."""
        metrics = get_risk_adjusted_metrics('F1', [])

        assert all(value is None for key, value in metrics.to_dict().items() if key != 'fund_id')


class TestPerformanceAttribution:
    """Tests for get_performance_attribution."""

    def test_no_benchmark(self):
        """Without a benchmark nothing is attributed."""
        attribution = get_performance_attribution('F1', FUND)

        assert attribution.market_exposure is None
        assert attribution.alpha_return is None
        assert attribution.timing_return is None
        assert attribution.factor_exposures == []

    def test_components_sum_to_total(self):
        """Market + alpha + timing + residual = total annualized return."""
        attribution = get_performance_attribution('F1', FUND, BENCHMARK, risk_free_rate=0.04)

        total = sum(FUND) / len(FUND) * 12
        parts = (
            attribution.market_exposure
            + attribution.alpha_return
            + attribution.timing_return
            + attribution.residual_return
        )

        assert parts == pytest.approx(total)
        assert attribution.timing_return == 0.0

    def test_market_factor_exposure(self):
        """Single Market factor carries beta and its contribution."""
        attribution = get_performance_attribution('F1', FUND, BENCHMARK)

        assert len(attribution.factor_exposures) == 1
        factor = attribution.factor_exposures[0]
        assert factor.factor == 'Market'
        assert factor.exposure == pytest.approx(1.5)
        assert factor.contribution == pytest.approx(attribution.market_exposure)

    def test_undefined_beta(self):
        """Constant benchmark: market and alpha terms are None, residual carries the total."""
        benchmark = [0.01] * 12
        attribution = get_performance_attribution('F1', FUND[:12], benchmark)

        assert attribution.market_exposure is None
        assert attribution.alpha_return is None
        assert attribution.residual_return == pytest.approx(sum(FUND[:12]) / 12 * 12)
        assert attribution.factor_exposures[0].exposure == 0.0
