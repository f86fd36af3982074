"""Proof-to-Promise Credibility."""

from offer_diagnostic.core.diagnostic.rules import RuleSet, lookup
from offer_diagnostic.core.diagnostic.types import (
    IcpSpecificity,
    OfferConfiguration,
    ProofLevel,
    Promise,
)

PROOF_STRENGTH: dict[ProofLevel, int] = {
    ProofLevel.NONE: 0,
    ProofLevel.WEAK: 1,
    ProofLevel.MODERATE: 2,
    ProofLevel.STRONG: 3,
    ProofLevel.CATEGORY_KILLER: 4,
}

# How much credibility each promised outcome demands (1-3)
PROMISE_DEMAND: dict[Promise, int] = {
    Promise.TOP_OF_FUNNEL_VOLUME: 1,
    Promise.MID_FUNNEL_ENGAGEMENT: 2,
    Promise.TOP_LINE_REVENUE: 3,
    Promise.EFFICIENCY_COST_SAVINGS: 1,
    Promise.OPS_COMPLIANCE_OUTCOMES: 1,
    Promise.BRAND_AWARENESS_ONLY: 1,
    Promise.ORGANIC_GROWTH_ONLY: 1,
}

BASE_SCORE = 10
EXCEEDS_BONUS = 8
MATCHES_BONUS = 4
ONE_BELOW_PENALTY = 4
FAR_BELOW_PENALTY = 8
CATEGORY_KILLER_BONUS = 4
BROAD_WEAK_PENALTY = 6
FOCUSED_ADEQUATE_BONUS = 3


def score_proof_to_promise(config: OfferConfiguration, rules: RuleSet) -> int:
    strength = lookup(PROOF_STRENGTH, config.proof_level, "PROOF_STRENGTH")
    demand = lookup(PROMISE_DEMAND, config.promise, "PROMISE_DEMAND")

    score = BASE_SCORE
    gap = strength - demand
    if gap >= 1:
        score += EXCEEDS_BONUS
    elif gap == 0:
        score += MATCHES_BONUS
    elif gap == -1:
        score -= ONE_BELOW_PENALTY
    else:
        score -= FAR_BELOW_PENALTY

    if config.proof_level == ProofLevel.CATEGORY_KILLER:
        score += CATEGORY_KILLER_BONUS

    if config.icp_specificity == IcpSpecificity.BROAD and strength <= 1:
        score -= BROAD_WEAK_PENALTY
    elif config.icp_specificity != IcpSpecificity.BROAD and gap >= 0:
        # Focused targeting concentrates proof that already meets demand
        score += FOCUSED_ADEQUATE_BONUS

    return max(0, min(rules.dimension_max, score))
