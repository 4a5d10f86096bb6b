"""
Tests for beta and CAPM alpha.
"""

import math
import pytest

from analysis.calculations.benchmark import calculate_beta, calculate_alpha


class TestBeta:
    """Tests for calculate_beta function."""

    def test_fund_moves_twice_benchmark(self):
        """Fund returns exactly 2x the benchmark give beta 2."""
        fund = [0.02, -0.02, 0.04, -0.04, 0.02]
        benchmark = [0.01, -0.01, 0.02, -0.02, 0.01]

        assert calculate_beta(fund, benchmark) == 2.0

    @pytest.mark.parametrize('returns', [
        [0.01, 0.02, -0.03],
        [0.05, -0.02, 0.011, 0.034, -0.07, 0.002],
        [-0.1, 0.1],
    ])
    def test_self_beta_is_one(self, returns):
        """A series against itself has beta exactly 1."""
        assert calculate_beta(returns, returns) == 1.0

    def test_single_point(self):
        """One observation is insufficient."""
        assert calculate_beta([0.01], [0.02]) is None

    def test_length_mismatch(self):
        """Series must cover the same periods."""
        assert calculate_beta([0.01, 0.02, 0.03], [0.01, 0.02]) is None

    def test_constant_benchmark(self):
        """Zero benchmark variance makes beta undefined."""
        assert calculate_beta([0.01, 0.03, -0.02], [0.01, 0.01, 0.01]) is None

    def test_inverse_fund(self):
        """A mirror-image fund has beta -1."""
        benchmark = [0.01, -0.02, 0.03]
        fund = [-r for r in benchmark]

        assert calculate_beta(fund, benchmark) == pytest.approx(-1.0)


class TestAlpha:
    """Tests for calculate_alpha function."""

    def test_alpha_capm(self):
        """Expected 10% under CAPM, actual 15%: alpha 5%."""
        assert calculate_alpha(0.15, 1.0, 0.10, 0.04) == pytest.approx(0.05, abs=1e-15)

    def test_alpha_with_leverage(self):
        """Beta 2 doubles the benchmark excess."""
        # Expected = 0.04 + 2 × (0.10 - 0.04) = 0.16
        assert calculate_alpha(0.16, 2.0, 0.10, 0.04) == pytest.approx(0.0, abs=1e-12)

    def test_alpha_missing_beta(self):
        """No beta, no alpha."""
        assert calculate_alpha(0.15, None, 0.10, 0.04) is None

    def test_alpha_non_finite_beta(self):
        """NaN or infinite beta is rejected."""
        assert calculate_alpha(0.15, math.nan, 0.10, 0.04) is None
        assert calculate_alpha(0.15, math.inf, 0.10, 0.04) is None
