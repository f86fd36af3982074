"""Viability gates and score caps.

Hard gates block outbound readiness outright. Soft gates only apply score
pressure. The score cap is the first matching cap rule, so a blocked offer
can never read as Moderate or Strong.
"""

from collections.abc import Callable
from dataclasses import dataclass

from offer_diagnostic.core.diagnostic.rules import RuleSet
from offer_diagnostic.core.diagnostic.types import (
    GateResult,
    IcpSize,
    IcpSpecificity,
    LatentKey,
    LatentScoreSet,
    OfferConfiguration,
    PricingStructure,
    ProofLevel,
    Promise,
    RiskModel,
)


@dataclass
class SoftGate:
    """Definition of a soft viability gate."""

    name: str
    check: Callable[[OfferConfiguration, LatentScoreSet, RuleSet], bool]


@dataclass
class ScoreCap:
    """Definition of a score cap rule."""

    id: str
    limit: Callable[[RuleSet], int]
    check: Callable[[list[str], list[str], LatentScoreSet, RuleSet], bool]


STRUCTURAL_GATE_PROOF = frozenset({ProofLevel.NONE, ProofLevel.WEAK, ProofLevel.MODERATE})


# =============================================================================
# Gate Definitions
# =============================================================================

SOFT_GATES = [
    SoftGate(
        name="EFI in marginal range (5-7)",
        check=lambda config, latents, rules: (
            rules.efi_marginal_band[0] <= latents.economic_feasibility <= rules.efi_marginal_band[1]
        ),
    ),
    SoftGate(
        name="Moderate proof with volume-based promise",
        check=lambda config, latents, rules: (
            config.proof_level == ProofLevel.MODERATE
            and config.promise == Promise.TOP_OF_FUNNEL_VOLUME
        ),
    ),
    SoftGate(
        name="Hybrid pricing with small ICP",
        check=lambda config, latents, rules: (
            config.pricing_structure == PricingStructure.HYBRID
            and config.icp_size in (IcpSize.SOLO_FOUNDER, IcpSize.EMPLOYEES_1_5)
        ),
    ),
    SoftGate(
        name="Conditional guarantee with low proof",
        check=lambda config, latents, rules: (
            config.risk_model == RiskModel.CONDITIONAL_GUARANTEE
            and config.proof_level in (ProofLevel.NONE, ProofLevel.WEAK)
        ),
    ),
]

SCORE_CAPS = [
    ScoreCap(
        id="hard_gate",
        limit=lambda rules: rules.hard_gate_cap,
        check=lambda hard, soft, latents, rules: bool(hard),
    ),
    ScoreCap(
        id="soft_gate_count",
        limit=lambda rules: rules.soft_gate_cap,
        check=lambda hard, soft, latents, rules: len(soft) >= rules.soft_gate_cap_count,
    ),
    ScoreCap(
        id="low_efi",
        limit=lambda rules: rules.efi_cap,
        check=lambda hard, soft, latents, rules: (
            latents.economic_feasibility <= rules.efi_cap_threshold
        ),
    ),
]


def evaluate_hard_gates(
    config: OfferConfiguration, latents: LatentScoreSet, rules: RuleSet
) -> tuple[list[str], LatentKey | None]:
    """
    Evaluate hard gates in declared order.

    Returns:
        (triggered gate names, dimension of the first triggered gate)
    """
    triggered: list[str] = []
    first_failed: LatentKey | None = None

    for gate in rules.hard_gates:
        failed = latents.get(gate.dimension) <= gate.max_failing
        if gate.dimension == LatentKey.CHANNEL_FIT and latents.channel_blocking:
            failed = True
        if failed:
            triggered.append(gate.name)
            if first_failed is None:
                first_failed = gate.dimension

    # Structural gate over raw inputs only
    if (
        config.icp_specificity == IcpSpecificity.BROAD
        and config.proof_level in STRUCTURAL_GATE_PROOF
    ):
        triggered.append(rules.structural_gate_name)
        if first_failed is None:
            first_failed = LatentKey.ICP_SPECIFICITY

    return triggered, first_failed


def evaluate_soft_gates(
    config: OfferConfiguration, latents: LatentScoreSet, rules: RuleSet
) -> list[str]:
    return [gate.name for gate in SOFT_GATES if gate.check(config, latents, rules)]


def score_cap(
    hard_gates: list[str], soft_gates: list[str], latents: LatentScoreSet, rules: RuleSet
) -> int | None:
    """First matching cap wins; None when no cap applies."""
    for cap in SCORE_CAPS:
        if cap.check(hard_gates, soft_gates, latents, rules):
            return cap.limit(rules)
    return None


def evaluate_gates(
    config: OfferConfiguration, latents: LatentScoreSet, rules: RuleSet
) -> GateResult:
    hard_gates, failed_dimension = evaluate_hard_gates(config, latents, rules)
    soft_gates = evaluate_soft_gates(config, latents, rules)

    return GateResult(
        hard_gates=hard_gates,
        failed_dimension=failed_dimension,
        soft_gates=soft_gates,
        score_pressure=len(soft_gates) * rules.soft_gate_penalty,
        score_cap=score_cap(hard_gates, soft_gates, latents, rules),
    )
