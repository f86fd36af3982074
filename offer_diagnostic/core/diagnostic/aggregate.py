"""Alignment score and readiness label."""

from decimal import ROUND_HALF_UP, Decimal

from offer_diagnostic.core.diagnostic.rules import RuleSet
from offer_diagnostic.core.diagnostic.types import GateResult, LatentScoreSet, ReadinessLabel


def round_half_up(value: float | Decimal) -> int:
    """Round .5 away from zero for positives (Python's round() is banker's rounding)."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def alignment_score(latents: LatentScoreSet, gates: GateResult, rules: RuleSet) -> int:
    max_total = rules.dimension_max * len(latents.as_dict())
    # Exact division so a true .5 is never lost to float error
    percent = Decimal(latents.total() * 100) / Decimal(max_total)
    score = round_half_up(percent) - gates.score_pressure
    score = max(0, min(100, score))

    if gates.score_cap is not None:
        score = min(score, gates.score_cap)

    return score


def readiness_label(score: int, ready: bool, rules: RuleSet) -> ReadinessLabel:
    if not ready or score < rules.moderate_from:
        return ReadinessLabel.WEAK
    if score >= rules.strong_from:
        return ReadinessLabel.STRONG
    return ReadinessLabel.MODERATE
