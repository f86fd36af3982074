"""Primary bottleneck selection.

A failed hard gate short-circuits: the first gate to fail in declared order
is the bottleneck, severity blocking. Otherwise a dimension is eligible only
if it is both low in absolute terms and clearly worse than its peers; the
lowest eligible dimension wins, ties broken by dominance order. With nothing
eligible the global minimum is returned, marked non-actionable.
"""

from statistics import median

from offer_diagnostic.core.diagnostic.latents import INCOMPATIBLE_REASON
from offer_diagnostic.core.diagnostic.pricing import PricingBandStatus
from offer_diagnostic.core.diagnostic.rules import LATENT_LABELS, RuleSet
from offer_diagnostic.core.diagnostic.types import (
    Bottleneck,
    BottleneckSeverity,
    GateResult,
    LatentKey,
    LatentScoreSet,
)


def eligible_dimensions(
    latents: LatentScoreSet, rules: RuleSet, exclude: frozenset[LatentKey] = frozenset()
) -> list[LatentKey]:
    """Dimensions below the eligibility ceiling and far enough below the median."""
    pcts = rules.percentages(latents)
    mid = median(pcts.values())
    return [
        key
        for key, pct in pcts.items()
        if key not in exclude
        and pct < rules.bottleneck_max_pct
        and (mid - pct) >= rules.bottleneck_median_gap
    ]


def _lowest(candidates: list[LatentKey], latents: LatentScoreSet, rules: RuleSet) -> LatentKey:
    pcts = rules.percentages(latents)
    lowest = min(pcts[key] for key in candidates)
    for key in rules.dominance_order:
        if key in candidates and pcts[key] == lowest:
            return key
    raise AssertionError("dominance order must cover every latent dimension")


def select_bottleneck(
    latents: LatentScoreSet,
    gates: GateResult,
    pricing: PricingBandStatus,
    rules: RuleSet,
) -> Bottleneck:
    if gates.failed_dimension is not None:
        dimension = gates.failed_dimension
        label = LATENT_LABELS[dimension]
        explanation = (
            f"Outbound is blocked due to {label}. "
            "This must be fixed before any other optimizations."
        )
        if dimension == LatentKey.CHANNEL_FIT and latents.channel_blocking:
            explanation = f"{explanation} {INCOMPATIBLE_REASON}."
        return Bottleneck(
            dimension=dimension,
            label=label,
            severity=BottleneckSeverity.BLOCKING,
            explanation=explanation,
        )

    # Pricing cannot be the bottleneck while the price sits inside its band
    exclude = frozenset({LatentKey.ECONOMIC_FEASIBILITY}) if pricing.locked else frozenset()

    eligible = eligible_dimensions(latents, rules, exclude)
    actionable = bool(eligible)
    if not eligible:
        eligible = [key for key in LatentKey if key not in exclude]

    dimension = _lowest(eligible, latents, rules)
    label = LATENT_LABELS[dimension]
    if actionable:
        explanation = f"{label} is your primary constraint limiting outbound effectiveness."
    else:
        explanation = (
            f"{label} is your lowest dimension, but no dimension is meaningfully "
            "weaker than the others."
        )

    return Bottleneck(
        dimension=dimension,
        label=label,
        severity=BottleneckSeverity.CONSTRAINING,
        explanation=explanation,
        actionable=actionable,
    )
