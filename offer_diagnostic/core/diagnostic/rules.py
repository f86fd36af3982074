"""Versioned rule set for the diagnostic pipeline.

Thresholds, caps, weights and orderings live here as data so a rule change
is an edit to one RuleSet instance rather than to scoring code. Exactly one
rule set is live (DEFAULT_RULES); tests pin its version.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TypeVar

from offer_diagnostic.core.diagnostic.errors import InvariantViolation
from offer_diagnostic.core.diagnostic.types import (
    FrictionClass,
    IcpSpecificity,
    LatentKey,
    LatentScoreSet,
)

K = TypeVar("K")
V = TypeVar("V")


def lookup(table: Mapping[K, V], key: K, table_name: str) -> V:
    """Read an enum-keyed table, failing loudly on keys outside its domain."""
    try:
        return table[key]
    except KeyError:
        raise InvariantViolation(f"{key!r} is outside the domain of {table_name}") from None


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(mapping)


LATENT_LABELS: Mapping[LatentKey, str] = _frozen({
    LatentKey.ECONOMIC_FEASIBILITY: "Economic Feasibility (EFI)",
    LatentKey.PROOF_TO_PROMISE: "Proof-to-Promise Credibility",
    LatentKey.FULFILLMENT_SCALABILITY: "Fulfillment Scalability",
    LatentKey.RISK_ALIGNMENT: "Risk Alignment",
    LatentKey.CHANNEL_FIT: "Channel Fit",
    LatentKey.ICP_SPECIFICITY: "ICP Specificity",
})


@dataclass(frozen=True)
class HardGate:
    """A threshold gate on one latent dimension (fails when score <= max_failing)."""

    name: str
    dimension: LatentKey
    max_failing: int


@dataclass(frozen=True)
class RuleSet:
    version: str
    dimension_max: int = 20

    # Hard gates, in evaluation order. The structural gate (broad targeting
    # with proof at or below moderate) is evaluated after these.
    hard_gates: tuple[HardGate, ...] = (
        HardGate("Economic Feasibility", LatentKey.ECONOMIC_FEASIBILITY, 4),
        HardGate("Proof-to-Promise Credibility", LatentKey.PROOF_TO_PROMISE, 6),
        HardGate("Fulfillment Scalability", LatentKey.FULFILLMENT_SCALABILITY, 6),
        HardGate("Channel Fit", LatentKey.CHANNEL_FIT, 6),
    )
    structural_gate_name: str = "ICP Specificity + Proof"

    soft_gate_penalty: int = 5
    efi_marginal_band: tuple[int, int] = (5, 7)

    # Score caps, first match wins
    hard_gate_cap: int = 49
    soft_gate_cap: int = 64
    soft_gate_cap_count: int = 3
    efi_cap: int = 69
    efi_cap_threshold: int = 7

    # Readiness label boundaries
    moderate_from: int = 50
    strong_from: int = 75

    dominance_order: tuple[LatentKey, ...] = (
        LatentKey.ECONOMIC_FEASIBILITY,
        LatentKey.PROOF_TO_PROMISE,
        LatentKey.FULFILLMENT_SCALABILITY,
        LatentKey.CHANNEL_FIT,
        LatentKey.RISK_ALIGNMENT,
        LatentKey.ICP_SPECIFICITY,
    )

    # Bottleneck eligibility: below this percentage and at least
    # median_gap points below the median percentage
    bottleneck_max_pct: float = 65.0
    bottleneck_median_gap: float = 10.0

    # Stabilization
    local_optimum_pct: float = 70.0
    core_latents: tuple[LatentKey, ...] = (
        LatentKey.PROOF_TO_PROMISE,
        LatentKey.ECONOMIC_FEASIBILITY,
        LatentKey.FULFILLMENT_SCALABILITY,
        LatentKey.CHANNEL_FIT,
    )
    second_order_pct: float = 50.0
    optimization_score: int = 75

    friction_scores: Mapping[FrictionClass, int] = field(default_factory=lambda: _frozen({
        FrictionClass.VERY_LOW: 19,
        FrictionClass.LOW: 15,
        FrictionClass.MODERATE: 11,
        FrictionClass.HIGH: 7,
        FrictionClass.EXTREME: 3,
    }))
    specificity_scores: Mapping[IcpSpecificity, int] = field(default_factory=lambda: _frozen({
        IcpSpecificity.BROAD: 6,
        IcpSpecificity.NARROW: 14,
        IcpSpecificity.EXACT: 18,
    }))

    # Channel fit score bands
    channel_compatible: int = 16
    channel_conditional: int = 14
    channel_incompatible: int = 6
    channel_fallback: int = 12

    # Output sizing
    default_top_k: int = 3
    max_top_k: int = 5
    dedupe_prefix_chars: int = 30

    def percentages(self, latents: LatentScoreSet) -> dict[LatentKey, float]:
        """Each latent as a percentage of its maximum."""
        return {
            key: score / self.dimension_max * 100
            for key, score in latents.as_dict().items()
        }


DEFAULT_RULES = RuleSet(version="latent-v6")
