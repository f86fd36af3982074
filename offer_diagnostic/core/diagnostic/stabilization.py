"""Stabilization rules.

The diagnostic re-runs on every edit of the configuration, so advice has to
stay consistent across nearby inputs: never tell someone to undo a choice
that is already working. Each lock is an independent check over a
candidate's text and category; a candidate survives only if every lock
passes, and a rejection names the lock that fired.

Usage:
    ctx = build_stabilization_context(config, latents, pricing, rules)
    reason = block_reason("Switch to inbound", FixCategory.POSITIONING_SHIFT, ctx)
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from offer_diagnostic.core.diagnostic.bottleneck import eligible_dimensions
from offer_diagnostic.core.diagnostic.pricing import PricingBandStatus
from offer_diagnostic.core.diagnostic.rules import RuleSet
from offer_diagnostic.core.diagnostic.suppression import satisfied_phrases
from offer_diagnostic.core.diagnostic.types import (
    BlockReason,
    FixCategory,
    FulfillmentModel,
    IcpSpecificity,
    LatentKey,
    LatentScoreSet,
    OfferConfiguration,
    PricingStructure,
    ProofLevel,
    RiskModel,
)

# =============================================================================
# Channel lock
# =============================================================================

BANNED_CHANNELS = (
    "inbound",
    "seo",
    "ads",
    "partnerships",
    "referrals",
    "content",
    "paid media",
    "organic",
    "word of mouth",
)

_CHANNEL_PATTERNS = [
    re.compile(rf"\b(?:switch to|try|focus on|via) {re.escape(term)}\b")
    for term in BANNED_CHANNELS
] + [
    re.compile(rf"\bconsider {re.escape(term)} instead\b") for term in BANNED_CHANNELS
] + [re.compile(r"\babandon outbound\b")]

# =============================================================================
# Fulfillment lock
# =============================================================================

PRODUCTIZED_BLOCKED = (
    "productization",
    "productize",
    "labor decoupling",
    "standardization",
    "standardize",
    "package your service",
)
PRODUCTIZED_ALLOWED = (
    "automation depth",
    "sop refinement",
    "tooling efficiency",
    "delivery speed",
    "quality assurance",
    "client onboarding",
)
ADVISORY_BLOCKED = ("fully productize", "remove labor")
ADVISORY_ALLOWED = (
    "curriculum development",
    "group delivery",
    "self-paced components",
    "tooling efficiency",
)

# =============================================================================
# Local optimum lock
# =============================================================================

STRUCTURAL_KEYWORDS = ("switch", "change", "shift", "restructure", "pivot", "replace")
REFINEMENT_KEYWORDS = ("optimize", "refine", "improve")


@dataclass
class SecondOrderRule:
    """A dimension already scoring well on a recognised good input."""

    dimension: LatentKey
    selection: str
    is_good: Callable[[OfferConfiguration], bool]
    blocked: tuple[str, ...]


SECOND_ORDER_RULES = [
    SecondOrderRule(
        dimension=LatentKey.ECONOMIC_FEASIBILITY,
        selection="pricing structure",
        is_good=lambda c: c.pricing_structure
        in (PricingStructure.HYBRID, PricingStructure.PERFORMANCE_ONLY),
        blocked=("switch pricing", "change pricing model", "lower price", "raise price"),
    ),
    SecondOrderRule(
        dimension=LatentKey.PROOF_TO_PROMISE,
        selection="proof level",
        is_good=lambda c: c.proof_level
        in (ProofLevel.MODERATE, ProofLevel.STRONG, ProofLevel.CATEGORY_KILLER),
        blocked=("get more proof", "collect testimonials", "get case studies", "build proof"),
    ),
    SecondOrderRule(
        dimension=LatentKey.FULFILLMENT_SCALABILITY,
        selection="fulfillment model",
        is_good=lambda c: c.fulfillment
        in (FulfillmentModel.PACKAGE_BASED, FulfillmentModel.SOFTWARE_PLATFORM),
        blocked=("productize", "standardize", "package your service"),
    ),
    SecondOrderRule(
        dimension=LatentKey.RISK_ALIGNMENT,
        selection="risk model",
        is_good=lambda c: c.risk_model
        in (RiskModel.CONDITIONAL_GUARANTEE, RiskModel.FULL_GUARANTEE),
        blocked=("add guarantee", "reduce risk", "offer guarantee"),
    ),
    SecondOrderRule(
        dimension=LatentKey.ICP_SPECIFICITY,
        selection="ICP definition",
        is_good=lambda c: c.icp_specificity in (IcpSpecificity.NARROW, IcpSpecificity.EXACT),
        blocked=("narrow icp", "focus icp", "tighten icp", "be more specific"),
    ),
]

# Dimension -> the part of the offer a rewrite would touch
PRESERVABLE: dict[LatentKey, str] = {
    LatentKey.ECONOMIC_FEASIBILITY: "pricing structure",
    LatentKey.FULFILLMENT_SCALABILITY: "fulfillment model",
    LatentKey.ICP_SPECIFICITY: "ICP targeting",
    LatentKey.PROOF_TO_PROMISE: "promise scope",
}


@dataclass
class StabilizationContext:
    """Lock states for one evaluation. Internal to the fix router."""

    pricing: PricingBandStatus
    fulfillment_lock: str  # unlocked | partially_locked | fully_locked
    fulfillment_blocked: tuple[str, ...]
    fulfillment_allowed: tuple[str, ...]
    at_local_optimum: bool
    force_recommendations: bool
    second_order_blocked: tuple[str, ...]
    already_correct: tuple[str, ...]
    objective: str  # least_disruptive | improves_conversion
    must_preserve: tuple[str, ...]
    satisfied: list[str] = field(default_factory=list)

    def summary(self) -> dict:
        return {
            "pricing_locked": self.pricing.locked,
            "fulfillment_lock": self.fulfillment_lock,
            "at_local_optimum": self.at_local_optimum,
            "force_recommendations": self.force_recommendations,
            "already_correct": list(self.already_correct),
            "objective": self.objective,
        }


def is_at_local_optimum(latents: LatentScoreSet, rules: RuleSet) -> bool:
    pcts = rules.percentages(latents)
    return all(pcts[key] >= rules.local_optimum_pct for key in rules.core_latents)


def build_stabilization_context(
    config: OfferConfiguration,
    latents: LatentScoreSet,
    pricing: PricingBandStatus,
    rules: RuleSet,
) -> StabilizationContext:
    pcts = rules.percentages(latents)

    if config.fulfillment in (FulfillmentModel.PACKAGE_BASED, FulfillmentModel.SOFTWARE_PLATFORM):
        lock, blocked, allowed = "fully_locked", PRODUCTIZED_BLOCKED, PRODUCTIZED_ALLOWED
    elif config.fulfillment == FulfillmentModel.COACHING_ADVISORY:
        lock, blocked, allowed = "partially_locked", ADVISORY_BLOCKED, ADVISORY_ALLOWED
    else:
        lock, blocked, allowed = "unlocked", (), ()

    second_order: list[str] = []
    correct: list[str] = []
    for rule in SECOND_ORDER_RULES:
        if pcts[rule.dimension] >= rules.second_order_pct and rule.is_good(config):
            correct.append(rule.selection)
            second_order.extend(rule.blocked)

    local_optimum = is_at_local_optimum(latents, rules)
    if local_optimum:
        objective = "least_disruptive"
        preserve = tuple(PRESERVABLE.values())
    else:
        objective = "improves_conversion"
        preserve = tuple(
            label for key, label in PRESERVABLE.items() if pcts[key] >= rules.local_optimum_pct
        )

    return StabilizationContext(
        pricing=pricing,
        fulfillment_lock=lock,
        fulfillment_blocked=blocked,
        fulfillment_allowed=allowed,
        at_local_optimum=local_optimum,
        force_recommendations=bool(eligible_dimensions(latents, rules)),
        second_order_blocked=tuple(second_order),
        already_correct=tuple(correct),
        objective=objective,
        must_preserve=preserve,
        satisfied=satisfied_phrases(config),
    )


# =============================================================================
# Filters
# =============================================================================


def is_channel_switch(text: str) -> bool:
    lowered = text.lower()
    return any(pattern.search(lowered) for pattern in _CHANNEL_PATTERNS)


def is_refinement(headline: str) -> bool:
    lowered = headline.lower()
    return any(word in lowered for word in REFINEMENT_KEYWORDS)


def is_structural(text: str) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in STRUCTURAL_KEYWORDS)


def block_reason(
    text: str,
    category: FixCategory | None,
    ctx: StabilizationContext,
    refinement: bool = False,
) -> BlockReason | None:
    """First lock that rejects this text, or None if it survives all of them.

    ``refinement`` exempts the text from the local-optimum lock; it is set
    from a recommendation's headline wording, never from a free-standing
    step.
    """
    lowered = text.lower()

    if is_channel_switch(lowered):
        return BlockReason.CHANNEL_SWITCH_BLOCKED

    if category == FixCategory.PRICING_SHIFT and ctx.pricing.locked:
        return BlockReason.PRICING_WITHIN_VIABLE_BAND

    if category == FixCategory.FULFILLMENT_SHIFT and any(
        term in lowered for term in ctx.fulfillment_blocked
    ):
        return BlockReason.FULFILLMENT_ALREADY_PRODUCTIZED

    if ctx.at_local_optimum and not refinement and is_structural(lowered):
        return BlockReason.LOCAL_OPTIMUM_STRUCTURAL_BLOCKED

    if any(term in lowered for term in ctx.second_order_blocked):
        return BlockReason.SECOND_ORDER_INCONSISTENT

    if any(phrase in lowered for phrase in ctx.satisfied):
        return BlockReason.ALREADY_SATISFIED

    return None


def filter_candidate(
    headline: str,
    explanation: str,
    steps: list[str],
    category: FixCategory | None,
    ctx: StabilizationContext,
) -> tuple[list[str], BlockReason | None]:
    """Screen a whole recommendation.

    Headline and explanation are checked together; a hit blocks the
    recommendation. Steps are screened one at a time and dropped
    individually; losing every step blocks it with the first step's reason.
    """
    refinement = is_refinement(headline)
    reason = block_reason(f"{headline} {explanation}", category, ctx, refinement)
    if reason is not None:
        return [], reason

    kept: list[str] = []
    first_reason: BlockReason | None = None
    for step in steps:
        step_reason = block_reason(step, category, ctx)
        if step_reason is None:
            kept.append(step)
        elif first_reason is None:
            first_reason = step_reason

    if steps and not kept:
        return [], first_reason
    return kept, None
