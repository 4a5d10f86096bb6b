"""
Record types for fund inputs and computed comparison results.
Plain dataclasses; to_dict() yields JSON-ready structures.
"""

from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from typing import Dict, Any, List, Optional


@dataclass(frozen=True)
class FundData:
    """Static fund metadata, read-only input to the engine."""
    id: str
    name: str
    slug: str
    type: str
    strategy: Optional[str] = None
    sub_strategy: Optional[str] = None
    aum: Optional[float] = None
    inception_date: Optional[date] = None
    management_fee: Optional[float] = None
    performance_fee: Optional[float] = None
    min_investment: Optional[float] = None


@dataclass(frozen=True)
class FundReturns:
    """Monthly return history for one fund, oldest first."""
    fund_id: str
    returns: List[float]
    years: float

    @classmethod
    def from_monthly(cls, fund_id: str, returns: List[float]) -> 'FundReturns':
        """Build with years derived from the number of months."""
        return cls(fund_id=fund_id, returns=list(returns), years=len(returns) / 12)


@dataclass
class FundComparison:
    fund_id: str
    fund_name: str
    metrics: Dict[str, Optional[float]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fund_id': self.fund_id,
            'fund_name': self.fund_name,
            'metrics': dict(self.metrics)
        }


@dataclass
class CorrelationMatrix:
    fund_ids: List[str]
    matrix: List[List[float]]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RiskAdjustedMetrics:
    fund_id: str
    sharpe_ratio: Optional[float] = None
    sortino_ratio: Optional[float] = None
    calmar_ratio: Optional[float] = None
    treynor_ratio: Optional[float] = None
    information_ratio: Optional[float] = None
    omega: Optional[float] = None
    beta: Optional[float] = None
    alpha: Optional[float] = None
    volatility: Optional[float] = None
    max_drawdown: Optional[float] = None
    down_capture_ratio: Optional[float] = None
    up_capture_ratio: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FactorExposure:
    factor: str
    exposure: float
    contribution: float


@dataclass
class PerformanceAttribution:
    """
    Simplified return decomposition.

    market_exposure is the beta contribution, alpha_return the selection
    contribution, timing_return the market timing contribution and
    residual_return whatever is left unexplained.
    """
    fund_id: str
    market_exposure: Optional[float] = None
    alpha_return: Optional[float] = None
    timing_return: Optional[float] = None
    residual_return: Optional[float] = None
    factor_exposures: List[FactorExposure] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RankingEntry:
    fund_id: str
    value: Optional[float]
    rank: int


@dataclass
class MetricRanking:
    metric: str
    rankings: List[RankingEntry]


@dataclass
class ComparisonReport:
    generated_at: datetime
    funds: List[FundComparison]
    correlation_matrix: List[List[float]]
    rankings: List[MetricRanking]
    insights: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'generated_at': self.generated_at.isoformat(),
            'funds': [f.to_dict() for f in self.funds],
            'correlation_matrix': [list(row) for row in self.correlation_matrix],
            'rankings': [asdict(r) for r in self.rankings],
            'insights': list(self.insights)
        }


@dataclass
class SimilarFund:
    fund_id: str
    fund_name: str
    similarity_score: float
    match_reasons: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
