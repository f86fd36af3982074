"""Cause inference and fix prioritization.

A cause is a named diagnosis gated by violation flags plus raw-input
predicates. Legacy causes carry a static fix list; context-aware causes
route to multipath fix groups, minus any group the configuration makes
pointless (no early-proof fixes for an offer that already has proof).
"""

from offer_diagnostic.core.diagnostic.rules import RuleSet, lookup
from offer_diagnostic.core.diagnostic.stabilization import StabilizationContext, block_reason
from offer_diagnostic.core.diagnostic.types import (
    BlockedCandidate,
    Cause,
    FixCategory,
    FulfillmentModel,
    IcpMaturity,
    IcpSize,
    InferredContext,
    OfferConfiguration,
    OfferType,
    PerformanceBasis,
    PerformanceCompTier,
    PricingStructure,
    PrioritizedFix,
    ProofLevel,
    Promise,
    RecurringPriceTier,
    RiskModel,
    ViolationFlags,
)

# =============================================================================
# Fix libraries
# =============================================================================

FIX_GROUPS: dict[str, list[str]] = {
    "early_proof": [
        "Run 2-3 micro clients to gather screenshots and testimonials",
        "Narrow the promise until you have evidence",
        "Stack proof assets before scaling outbound",
    ],
    "promise_tuning": [
        "Switch promise from 'revenue' to 'pipeline volume'",
        "Clarify what qualifies as success in concrete terms",
        "Reduce scope of promise until delivery is consistent",
    ],
    "budget_alignment": [
        "Move upmarket to ICPs with higher budgets",
        "Lower initial retainer and expand later",
        "Switch to hybrid pricing to reduce upfront cost",
    ],
    "performance": [
        "Add minimum retainer to cover operational load",
        "Switch from % revenue to $ per appointment",
        "Only use performance with solution-aware buyers",
    ],
    "compensation": [
        "Reduce unit payouts for volume-driven models",
        "Lower percentage bands to improve close rates",
        "Add tiered comp to control risk",
    ],
    "pilot": [
        "Pilot with narrow vertical before scaling outbound",
        "Limit onboarding to 3 to validate fulfillment",
        "Refine SOPs before increasing load",
    ],
    "add_guarantee": [
        "Add risk reversals to increase close rate",
        "Use conditional guarantees instead of full",
        "Tie guarantee to pipeline milestones",
    ],
    "awareness": [
        "Move to solution-aware verticals",
        "Educate via inbound before outbound",
        "Switch promise to cost-saving or efficiency",
    ],
}

GOOD_PROOF = frozenset({ProofLevel.MODERATE, ProofLevel.STRONG, ProofLevel.CATEGORY_KILLER})
LOW_PROOF = frozenset({ProofLevel.NONE, ProofLevel.WEAK})
EARLY_MATURITY = frozenset({IcpMaturity.PRE_REVENUE, IcpMaturity.EARLY_TRACTION})
SCALED_MATURITY = frozenset({IcpMaturity.SCALING, IcpMaturity.MATURE, IcpMaturity.ENTERPRISE})
LARGE_SIZES = frozenset({IcpSize.EMPLOYEES_21_100, IcpSize.EMPLOYEES_100_PLUS})
PERFORMANCE_STRUCTURES = frozenset({PricingStructure.HYBRID, PricingStructure.PERFORMANCE_ONLY})
PERCENT_BASES = frozenset({PerformanceBasis.PERCENT_REVENUE, PerformanceBasis.PERCENT_PROFIT})
HIGH_COMP_TIERS = frozenset({PerformanceCompTier.OVER_30_PERCENT, PerformanceCompTier.OVER_500_UNIT})
ACCEPTABLE_RISK = frozenset({RiskModel.CONDITIONAL_GUARANTEE, RiskModel.PAY_AFTER_RESULTS})
OUTBOUND_OFFERS = frozenset({OfferType.DEMAND_CAPTURE, OfferType.OUTBOUND_SALES_ENABLEMENT})

# (condition, suppressed groups)
GROUP_SUPPRESSION = [
    (lambda c: c.proof_level in GOOD_PROOF, ("early_proof",)),
    (lambda c: c.risk_model == RiskModel.CONDITIONAL_GUARANTEE, ("add_guarantee",)),
    (lambda c: c.icp_maturity in SCALED_MATURITY, ("pilot",)),
    (lambda c: c.pricing_structure == PricingStructure.RECURRING, ("performance",)),
    (
        lambda c: c.pricing_structure not in PERFORMANCE_STRUCTURES,
        ("performance", "compensation"),
    ),
]

# cause id -> (primary group, secondary groups)
CAUSE_FIX_ROUTES: dict[str, tuple[str, tuple[str, ...]]] = {
    "proof_mismatch": ("early_proof", ("promise_tuning",)),
    "pricing_to_budget_mismatch": ("budget_alignment", ("promise_tuning",)),
    "awareness_channel_mismatch": ("awareness", ("pilot",)),
    "performance_immaturity": ("performance", ("compensation",)),
}

FIX_CATALOG: dict[str, list[str]] = {
    "proof_deficiency": [
        "Collect 3-5 wins before expanding promise.",
        "Lower promise until proof matches.",
        "Run micro-pilots to accumulate screenshots, metrics, and testimonials.",
    ],
    "pricing_misalignment": [
        "Switch to hybrid pricing to reduce sticker shock.",
        "Lower initial retainer until proof compounds.",
        "Move upmarket to buyers with budget for current pricing.",
    ],
    "market_misalignment": [
        "Shift to ICPs with stronger budgets.",
        "Switch vertical to one with urgency + budgets.",
        "Retool offer to match ICP maturity stage.",
    ],
    "promise_mismatch": [
        "Avoid purely awareness promises for outbound.",
        "Add downstream pipeline or revenue component.",
        "Change offer to revenue or appointments.",
    ],
    "risk_misalignment": [
        "Use conditional instead of full guarantees.",
        "Remove performance-only for low maturity ICPs.",
        "Introduce milestone-based commitments.",
    ],
    "fulfillment_bottleneck": [
        "Productize delivery to scale.",
        "Add SOPs and QA before scaling.",
        "Increase pricing for DFY complexity.",
    ],
    "awareness_mismatch": [
        "Target ICPs with traction.",
        "Change promise from revenue to pipeline volume.",
        "Collect proof before scaling downmarket.",
    ],
    "performance_mismatch": [
        "Switch from % revenue to $ per appointment.",
        "Add retainer until revenue is stable.",
        "Avoid % revenue with immature ICPs.",
    ],
    "compensation_friction": [
        "Lower percentage bands for faster close rates.",
        "Lower unit payout for volume-based models.",
        "Add minimum retainer to cover delivery.",
    ],
}

CAUSE_LABELS: dict[str, str] = {
    "proof_deficiency": "Weak proof for this promise",
    "pricing_misalignment": "Pricing doesn't match market",
    "market_misalignment": "Wrong market for this offer",
    "promise_mismatch": "Promise doesn't fit outbound",
    "risk_misalignment": "Risk model needs adjustment",
    "fulfillment_bottleneck": "Fulfillment blocks scale",
    "awareness_mismatch": "ICP maturity vs promise gap",
    "performance_mismatch": "Performance model friction",
    "compensation_friction": "Compensation tier too high",
    "proof_mismatch": "Proof level doesn't match ICP expectations",
    "pricing_to_budget_mismatch": "Pricing exceeds ICP budget expectations",
    "awareness_channel_mismatch": "ICP awareness doesn't match channel",
    "performance_immaturity": "Performance pricing with immature ICP",
}

CAUSE_CATEGORIES: dict[str, FixCategory] = {
    "proof_deficiency": FixCategory.RISK_SHIFT,
    "pricing_misalignment": FixCategory.PRICING_SHIFT,
    "market_misalignment": FixCategory.ICP_SHIFT,
    "promise_mismatch": FixCategory.PROMISE_SHIFT,
    "risk_misalignment": FixCategory.RISK_SHIFT,
    "fulfillment_bottleneck": FixCategory.FULFILLMENT_SHIFT,
    "awareness_mismatch": FixCategory.ICP_SHIFT,
    "performance_mismatch": FixCategory.PRICING_SHIFT,
    "compensation_friction": FixCategory.PRICING_SHIFT,
    "proof_mismatch": FixCategory.PROMISE_SHIFT,
    "pricing_to_budget_mismatch": FixCategory.PRICING_SHIFT,
    "awareness_channel_mismatch": FixCategory.ICP_SHIFT,
    "performance_immaturity": FixCategory.PRICING_SHIFT,
}

# Ordering weight where it differs from the cause's own severity
SORT_WEIGHTS: dict[str, int] = {
    "performance_immaturity": 6,
    "pricing_to_budget_mismatch": 5,
    "proof_mismatch": 4,
    "awareness_channel_mismatch": 3,
}

FEASIBILITY_BY_MATURITY: dict[IcpMaturity, int] = {
    IcpMaturity.PRE_REVENUE: 1,
    IcpMaturity.EARLY_TRACTION: 3,
    IcpMaturity.SCALING: 4,
    IcpMaturity.MATURE: 3,
    IcpMaturity.ENTERPRISE: 2,
}

HIGH_PRICE_TIERS = frozenset({RecurringPriceTier.FROM_2K_TO_5K, RecurringPriceTier.OVER_5K})


def suppressed_groups(config: OfferConfiguration) -> set[str]:
    suppressed: set[str] = set()
    for condition, groups in GROUP_SUPPRESSION:
        if condition(config):
            suppressed.update(groups)
    return suppressed


def routed_fixes(cause_id: str, config: OfferConfiguration) -> list[str]:
    primary, secondary = CAUSE_FIX_ROUTES[cause_id]
    suppressed = suppressed_groups(config)
    fixes: list[str] = []
    for group in (primary, *secondary):
        if group not in suppressed:
            fixes.extend(FIX_GROUPS[group])
    return fixes


def _cause(cause_id: str, severity: int, fixes: list[str]) -> Cause:
    route = CAUSE_FIX_ROUTES.get(cause_id)
    return Cause(
        id=cause_id,
        label=lookup(CAUSE_LABELS, cause_id, "CAUSE_LABELS"),
        severity=severity,
        category=lookup(CAUSE_CATEGORIES, cause_id, "CAUSE_CATEGORIES"),
        fixes=fixes,
        primary_group=route[0] if route else None,
        secondary_groups=list(route[1]) if route else [],
    )


def _static_causes(config: OfferConfiguration, flags: ViolationFlags) -> list[Cause]:
    causes: list[Cause] = []
    has_good_proof = config.proof_level in GOOD_PROOF
    scaled_with_proof = config.icp_maturity in SCALED_MATURITY and has_good_proof

    if config.proof_level in LOW_PROOF and flags.outbound and not scaled_with_proof:
        causes.append(_cause("proof_deficiency", 5, list(FIX_CATALOG["proof_deficiency"])))

    if flags.pricing:
        fixes = list(FIX_CATALOG["pricing_misalignment"])
        if config.icp_size in LARGE_SIZES:
            fixes = [f for f in fixes if "Lower initial retainer" not in f]
        causes.append(_cause("pricing_misalignment", 3, fixes))

    if flags.buying_power and config.icp_maturity in EARLY_MATURITY:
        causes.append(_cause("market_misalignment", 4, list(FIX_CATALOG["market_misalignment"])))

    if flags.outbound and config.offer_type == OfferType.DEMAND_CREATION:
        causes.append(_cause("promise_mismatch", 4, list(FIX_CATALOG["promise_mismatch"])))

    # Already on an acceptable risk model: nothing to advise
    if flags.risk and config.risk_model not in ACCEPTABLE_RISK:
        causes.append(_cause("risk_misalignment", 2, list(FIX_CATALOG["risk_misalignment"])))

    if flags.execution and config.fulfillment == FulfillmentModel.CUSTOM_DFY:
        causes.append(
            _cause("fulfillment_bottleneck", 4, list(FIX_CATALOG["fulfillment_bottleneck"]))
        )

    if config.icp_maturity in EARLY_MATURITY and config.promise == Promise.TOP_LINE_REVENUE:
        causes.append(_cause("awareness_mismatch", 4, list(FIX_CATALOG["awareness_mismatch"])))

    if (
        config.pricing_structure in PERFORMANCE_STRUCTURES
        and config.performance_basis in PERCENT_BASES
        and config.icp_maturity in EARLY_MATURITY
    ):
        causes.append(
            _cause("performance_mismatch", 4, list(FIX_CATALOG["performance_mismatch"]))
        )

    if (
        config.pricing_structure in PERFORMANCE_STRUCTURES
        and config.performance_comp_tier in HIGH_COMP_TIERS
    ):
        causes.append(
            _cause("compensation_friction", 3, list(FIX_CATALOG["compensation_friction"]))
        )

    return causes


def _context_causes(config: OfferConfiguration, context: InferredContext) -> list[Cause]:
    triggered: list[tuple[str, int]] = []

    if config.proof_level in LOW_PROOF and context.proof_expectation == "high":
        triggered.append(("proof_mismatch", 5))

    if config.pricing_structure == PricingStructure.RECURRING and (
        (context.budget_expectation == "low" and config.recurring_price_tier in HIGH_PRICE_TIERS)
        or (
            context.budget_expectation == "medium"
            and config.recurring_price_tier == RecurringPriceTier.OVER_5K
        )
    ):
        triggered.append(("pricing_to_budget_mismatch", 5))

    if context.market_awareness == "problem-unaware" and config.offer_type in OUTBOUND_OFFERS:
        triggered.append(("awareness_channel_mismatch", 4))

    if (
        config.pricing_structure == PricingStructure.PERFORMANCE_ONLY
        and config.icp_maturity in EARLY_MATURITY
    ):
        triggered.append(("performance_immaturity", 6))

    causes: list[Cause] = []
    for cause_id, severity in triggered:
        fixes = routed_fixes(cause_id, config)
        if fixes:
            causes.append(_cause(cause_id, severity, fixes))
    return causes


def infer_causes(
    config: OfferConfiguration, flags: ViolationFlags, context: InferredContext
) -> list[Cause]:
    """All triggered causes, heaviest first."""
    causes = _static_causes(config, flags) + _context_causes(config, context)
    causes.sort(key=lambda c: SORT_WEIGHTS.get(c.id, c.severity), reverse=True)
    return causes


def prioritize_fixes(
    causes: list[Cause], config: OfferConfiguration, rules: RuleSet, limit: int
) -> list[PrioritizedFix]:
    """Rank fixes by cause severity x maturity feasibility, dedupe, keep the top ``limit``."""
    feasibility = lookup(FEASIBILITY_BY_MATURITY, config.icp_maturity, "FEASIBILITY_BY_MATURITY")

    ranked = [
        PrioritizedFix(
            text=text,
            cause_id=cause.id,
            cause_label=cause.label,
            score=cause.severity * feasibility,
        )
        for cause in causes
        for text in cause.fixes
    ]
    ranked.sort(key=lambda fix: fix.score, reverse=True)

    seen: set[str] = set()
    unique: list[PrioritizedFix] = []
    for fix in ranked:
        key = fix.text.lower()[: rules.dedupe_prefix_chars]
        if key in seen:
            continue
        seen.add(key)
        unique.append(fix)
        if len(unique) >= limit:
            break
    return unique


def screen_cause_fixes(
    causes: list[Cause], ctx: StabilizationContext
) -> tuple[list[Cause], list[BlockedCandidate]]:
    """Drop every fix string a stabilization lock rejects.

    Causes stay in the diagnosis even when all of their fixes are dropped.
    """
    screened: list[Cause] = []
    blocked: list[BlockedCandidate] = []
    for cause in causes:
        kept: list[str] = []
        for text in cause.fixes:
            reason = block_reason(text, cause.category, ctx)
            if reason is None:
                kept.append(text)
            else:
                blocked.append(
                    BlockedCandidate(id=f"{cause.id}: {text}", kind="cause_fix", reason=reason)
                )
        screened.append(cause.model_copy(update={"fixes": kept}))
    return screened, blocked
