"""
Fund Analytics Engine Module

Calculates fund performance statistics from monthly returns:
- Period returns (YTD, 1Y, 3Y, 5Y) and CAGR
- Volatility, downside deviation and maximum drawdown
- Risk-adjusted ratios, beta, alpha and capture ratios
- Correlation, side-by-side comparison, similarity and trending
"""

__version__ = "0.1.0"
