"""
Tests for return correlation and the correlation matrix.
"""

import pytest

from analysis.correlation import align_trailing, calculate_correlation, calculate_correlation_matrix
from analysis.models import FundReturns


class TestCorrelation:
    """Tests for calculate_correlation function."""

    def test_perfect_positive(self):
        """Scaled series are perfectly correlated."""
        r1 = [0.01, -0.02, 0.03, 0.015]
        r2 = [2 * r for r in r1]

        assert calculate_correlation(r1, r2) == pytest.approx(1.0)

    def test_perfect_negative(self):
        """Mirrored series are perfectly anti-correlated."""
        r1 = [0.01, -0.02, 0.03, 0.015]
        r2 = [-r for r in r1]

        assert calculate_correlation(r1, r2) == pytest.approx(-1.0)

    def test_aligns_to_most_recent_periods(self):
        """Older history of the longer series is ignored."""
        recent = [0.01, 0.02, -0.01]
        longer = [0.50, -0.40] + recent

        assert calculate_correlation(longer, recent) == pytest.approx(1.0)

    def test_insufficient_overlap(self):
        """Fewer than two shared periods is undefined."""
        assert calculate_correlation([0.01], [0.02, 0.03]) is None
        assert calculate_correlation([], []) is None

    def test_zero_variance_leg(self):
        """A flat series has no correlation."""
        assert calculate_correlation([0.01, 0.01, 0.01], [0.01, 0.02, 0.03]) is None

    def test_align_trailing(self):
        """Both legs are cut to the shorter length from the end."""
        a, b = align_trailing([1, 2, 3, 4], [7, 8])

        assert a == [3, 4]
        assert b == [7, 8]


class TestCorrelationMatrix:
    """Tests for calculate_correlation_matrix function."""

    def _funds(self):
        return [
            FundReturns.from_monthly('A', [0.01, -0.02, 0.03, 0.01, -0.01]),
            FundReturns.from_monthly('B', [0.02, -0.01, 0.02, 0.00, -0.02]),
            FundReturns.from_monthly('C', [-0.01, 0.02, -0.03, 0.01, 0.02]),
        ]

    def test_symmetric_with_unit_diagonal(self):
        """matrix[i][j] == matrix[j][i] and the diagonal is 1."""
        result = calculate_correlation_matrix(self._funds())

        assert result.fund_ids == ['A', 'B', 'C']
        for i in range(3):
            assert result.matrix[i][i] == 1.0
            for j in range(3):
                assert result.matrix[i][j] == result.matrix[j][i]

    def test_single_fund(self):
        """N = 1 is a 1x1 identity."""
        result = calculate_correlation_matrix([FundReturns.from_monthly('A', [0.01, 0.02])])

        assert result.matrix == [[1.0]]

    def test_undefined_pair_becomes_zero(self):
        """Matrix consumers always receive numbers."""
        funds = [
            FundReturns.from_monthly('A', [0.01, 0.02, 0.03]),
            FundReturns.from_monthly('FLAT', [0.01, 0.01, 0.01]),
        ]

        result = calculate_correlation_matrix(funds)

        assert result.matrix[0][1] == 0.0
        assert result.matrix[1][0] == 0.0

    def test_empty(self):
        """No funds, empty matrix."""
        result = calculate_correlation_matrix([])

        assert result.matrix == []
        assert result.fund_ids == []
