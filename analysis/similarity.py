"""
Similar fund search.
Blends categorical match, AUM proximity and return correlation into a 0-100 score.
"""

from typing import List, Sequence

from analysis.config import SimilarityWeights
from analysis.correlation import calculate_correlation
from analysis.models import FundData, FundReturns, SimilarFund


def score_similarity(
    target: FundData,
    target_returns: Sequence[float],
    candidate: FundData,
    candidate_returns: Sequence[float],
    weights: SimilarityWeights = SimilarityWeights()
) -> SimilarFund:
    """
    Score how similar a candidate fund is to a target fund.

    Scoring (default weights):
    - same strategy: +30, otherwise same sub-strategy: +20
    - same fund type: +20
    - AUM ratio (smaller / larger) above 0.5: +15 × ratio
    - return correlation: +35 × max(0, ρ); negative correlation adds nothing

    Returns:
        SimilarFund with score and human-readable match reasons
    """
    score = 0.0
    reasons: List[str] = []

    if candidate.strategy and candidate.strategy == target.strategy:
        score += weights.strategy
        reasons.append('Same strategy')
    elif candidate.sub_strategy and candidate.sub_strategy == target.sub_strategy:
        score += weights.sub_strategy
        reasons.append('Similar sub-strategy')

    if candidate.type == target.type:
        score += weights.fund_type
        reasons.append('Same fund type')

    if candidate.aum and target.aum:
        aum_ratio = min(candidate.aum, target.aum) / max(candidate.aum, target.aum)
        if aum_ratio > weights.min_aum_ratio:
            score += weights.aum * aum_ratio
            reasons.append('Similar AUM')

    correlation = calculate_correlation(target_returns, candidate_returns)
    if correlation is not None:
        score += max(0.0, correlation) * weights.correlation
        if correlation > weights.high_correlation:
            reasons.append(f"High correlation ({correlation * 100:.0f}%)")
        elif correlation > weights.moderate_correlation:
            reasons.append(f"Moderate correlation ({correlation * 100:.0f}%)")

    return SimilarFund(
        fund_id=candidate.id,
        fund_name=candidate.name,
        similarity_score=score,
        match_reasons=reasons
    )


def find_similar_funds(
    target: FundData,
    target_returns: Sequence[float],
    candidates: List[FundData],
    candidate_returns: List[FundReturns],
    limit: int = 5,
    weights: SimilarityWeights = SimilarityWeights()
) -> List[SimilarFund]:
    """
    Find the funds most similar to a target fund.

    Args:
        target: Target fund metadata
        target_returns: Target monthly returns
        candidates: Candidate pool (the target itself is always excluded)
        candidate_returns: Return histories for candidates, matched by id
        limit: Maximum number of results
        weights: Similarity scoring weights

    Returns:
        Similar funds sorted by descending score, at most `limit`
    """
    returns_by_fund = {cr.fund_id: cr.returns for cr in candidate_returns}

    scored = [
        score_similarity(
            target,
            target_returns,
            candidate,
            returns_by_fund.get(candidate.id, []),
            weights
        )
        for candidate in candidates
        if candidate.id != target.id
    ]

    scored.sort(key=lambda s: s.similarity_score, reverse=True)

    return scored[:max(limit, 0)]
