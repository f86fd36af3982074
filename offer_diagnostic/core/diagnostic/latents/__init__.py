"""Latent dimension scoring.

Each dimension is computed independently from the configuration and
clamped to 0-20.

Usage:
    from offer_diagnostic.core.diagnostic.latents import score_latents

    latents = score_latents(config, DEFAULT_RULES)
"""

from offer_diagnostic.core.diagnostic.latents.channel import (
    INCOMPATIBLE_REASON,
    score_channel_fit,
)
from offer_diagnostic.core.diagnostic.latents.economic import (
    friction_class,
    score_economic_feasibility,
)
from offer_diagnostic.core.diagnostic.latents.fulfillment import score_fulfillment_scalability
from offer_diagnostic.core.diagnostic.latents.proof import (
    PROOF_STRENGTH,
    PROMISE_DEMAND,
    score_proof_to_promise,
)
from offer_diagnostic.core.diagnostic.latents.risk import score_risk_alignment
from offer_diagnostic.core.diagnostic.latents.specificity import score_icp_specificity
from offer_diagnostic.core.diagnostic.rules import RuleSet
from offer_diagnostic.core.diagnostic.types import LatentScoreSet, OfferConfiguration


def score_latents(config: OfferConfiguration, rules: RuleSet) -> LatentScoreSet:
    """Compute all six latent scores for a complete configuration."""
    efi, friction = score_economic_feasibility(config, rules)
    channel, blocking = score_channel_fit(config, rules)

    return LatentScoreSet(
        economic_feasibility=efi,
        proof_to_promise=score_proof_to_promise(config, rules),
        fulfillment_scalability=score_fulfillment_scalability(config, rules),
        risk_alignment=score_risk_alignment(config, rules),
        channel_fit=channel,
        icp_specificity=score_icp_specificity(config, rules),
        friction_class=friction,
        channel_blocking=blocking,
    )


__all__ = [
    "INCOMPATIBLE_REASON",
    "PROMISE_DEMAND",
    "PROOF_STRENGTH",
    "friction_class",
    "score_channel_fit",
    "score_economic_feasibility",
    "score_fulfillment_scalability",
    "score_icp_specificity",
    "score_latents",
    "score_proof_to_promise",
    "score_risk_alignment",
]
