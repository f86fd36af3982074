"""Risk Alignment: guarantee model against proof strength."""

from offer_diagnostic.core.diagnostic.rules import RuleSet
from offer_diagnostic.core.diagnostic.types import (
    IcpMaturity,
    OfferConfiguration,
    ProofLevel,
    RiskModel,
)

STRONG_PROOF = frozenset({ProofLevel.STRONG, ProofLevel.CATEGORY_KILLER})
MODERATE_OR_BETTER = frozenset({ProofLevel.MODERATE, ProofLevel.STRONG, ProofLevel.CATEGORY_KILLER})
WEAK_PROOF = frozenset({ProofLevel.NONE, ProofLevel.WEAK})
CONTINGENT_MODELS = frozenset({RiskModel.PERFORMANCE_ONLY, RiskModel.PAY_AFTER_RESULTS})

BASE_SCORE = 10


def score_risk_alignment(config: OfferConfiguration, rules: RuleSet) -> int:
    risk = config.risk_model
    proof = config.proof_level
    score = BASE_SCORE

    if risk == RiskModel.NO_GUARANTEE:
        if proof in STRONG_PROOF:
            score += 4
        elif proof in WEAK_PROOF:
            score -= 5
    elif risk == RiskModel.CONDITIONAL_GUARANTEE:
        if proof in MODERATE_OR_BETTER:
            score += 5
    elif risk == RiskModel.FULL_GUARANTEE:
        # Over-promised risk
        if proof in WEAK_PROOF:
            score -= 6
    elif risk in CONTINGENT_MODELS:
        if proof in WEAK_PROOF:
            score -= 5
        elif proof in STRONG_PROOF:
            score += 5

    if config.icp_maturity == IcpMaturity.ENTERPRISE and risk == RiskModel.NO_GUARANTEE:
        score -= 3

    return max(0, min(rules.dimension_max, score))
