"""Structured recommendations.

Three tiers, in output order:

1. An outbound-blocked notice when a hard gate failed.
2. One recommendation aimed at the bottleneck: corrective while the offer
   is below optimization level, refinement-worded once it is there.
3. Violation-driven recommendations, one per fix category, from the
   category generators below.

Every candidate is screened by the stabilization locks before it is kept;
rejected candidates are returned alongside with their block reason.
"""

from collections.abc import Callable

from offer_diagnostic.core.diagnostic.stabilization import (
    StabilizationContext,
    filter_candidate,
)
from offer_diagnostic.core.diagnostic.types import (
    BlockedCandidate,
    Bottleneck,
    FixCategory,
    FulfillmentModel,
    IcpIndustry,
    IcpMaturity,
    IcpSize,
    LatentKey,
    OfferConfiguration,
    PricingStructure,
    Promise,
    RiskModel,
    StructuredRecommendation,
    Violation,
)
from offer_diagnostic.core.diagnostic.violations import SEVERITY_ORDER

CATEGORY_LABELS: dict[FixCategory, str] = {
    FixCategory.ICP_SHIFT: "Target Market",
    FixCategory.PROMISE_SHIFT: "Offer Promise",
    FixCategory.FULFILLMENT_SHIFT: "Delivery Model",
    FixCategory.PRICING_SHIFT: "Pricing",
    FixCategory.RISK_SHIFT: "Risk & Guarantees",
    FixCategory.POSITIONING_SHIFT: "Positioning",
    FixCategory.FOUNDER_PSYCHOLOGY_CHECK: "Founder Mindset",
}

BOTTLENECK_CATEGORIES: dict[LatentKey, FixCategory] = {
    LatentKey.ECONOMIC_FEASIBILITY: FixCategory.PRICING_SHIFT,
    LatentKey.PROOF_TO_PROMISE: FixCategory.PROMISE_SHIFT,
    LatentKey.FULFILLMENT_SCALABILITY: FixCategory.FULFILLMENT_SHIFT,
    LatentKey.RISK_ALIGNMENT: FixCategory.RISK_SHIFT,
    LatentKey.CHANNEL_FIT: FixCategory.POSITIONING_SHIFT,
    LatentKey.ICP_SPECIFICITY: FixCategory.ICP_SHIFT,
}

# Categories a recommendation may touch for a given bottleneck
ALLOWED_CATEGORIES: dict[LatentKey, frozenset[FixCategory]] = {
    LatentKey.ECONOMIC_FEASIBILITY: frozenset({FixCategory.PRICING_SHIFT, FixCategory.ICP_SHIFT}),
    LatentKey.PROOF_TO_PROMISE: frozenset({FixCategory.PROMISE_SHIFT, FixCategory.POSITIONING_SHIFT}),
    LatentKey.FULFILLMENT_SCALABILITY: frozenset({FixCategory.FULFILLMENT_SHIFT}),
    LatentKey.RISK_ALIGNMENT: frozenset({FixCategory.RISK_SHIFT}),
    LatentKey.CHANNEL_FIT: frozenset({FixCategory.POSITIONING_SHIFT, FixCategory.ICP_SHIFT}),
    LatentKey.ICP_SPECIFICITY: frozenset({FixCategory.ICP_SHIFT, FixCategory.POSITIONING_SHIFT}),
}

# =============================================================================
# Fix pools
# =============================================================================

FIX_POOLS: dict[FixCategory, list[str]] = {
    FixCategory.ICP_SHIFT: [
        "Move upmarket to buyers with budget + urgency",
        "Narrow vertical to buyers who strongly feel the problem",
        "Switch to buyers already doing the precursor step (ex: running ads)",
        "Target founders with 3-10 clients instead of pre-revenue",
        "Target buyers with existing lead flow",
        "Prioritize industries with budget (B2B services, SaaS)",
        "Switch to solution-aware verticals (e.g. SaaS instead of local SMB)",
        "Change vertical to higher budget segment",
    ],
    FixCategory.PROMISE_SHIFT: [
        "Switch promise to revenue if ICP has pipeline",
        "Switch promise to leads/pipeline if ICP lacks revenue control",
        "Switch promise to cost/time savings if ICP is cost-sensitive",
        "Focus on efficiency gains for mature buyers",
        "Lead with compliance outcomes for enterprise",
    ],
    FixCategory.FULFILLMENT_SHIFT: [
        "Switch from coaching to DFY if outcome requires execution",
        "Switch from DFY to packaged service if margins break",
        "Add automation/tooling layer to increase throughput",
        "Productize delivery to reduce labor dependency",
        "Add implementation layer to software",
    ],
    FixCategory.PRICING_SHIFT: [
        "Move from retainer to hybrid model",
        "Add performance slice to justify higher retainer",
        "Reduce retainer but add conditional guarantee",
        "Increase price but narrow ICP",
        "Switch to project-based for high-churn industries",
    ],
    FixCategory.RISK_SHIFT: [
        "Add conditional guarantee to reduce buyer hesitation",
        "Add performance triggers/milestones",
        "Remove full guarantee if hurting economics",
        "Add phased engagement (entry offer + rollout)",
        "Offer pilot program to build trust",
        "Run pilot deals to build case studies first",
        "Lower promise from revenue to booked meetings until you have proof",
        "Switch from full guarantee to performance hybrid",
        "Use milestone-based billing",
    ],
    FixCategory.POSITIONING_SHIFT: [
        "Clarify who it's for in all messaging",
        "Clarify what changes after working with you",
        "Clarify why now (create urgency)",
        "Clarify expected timeline to results",
        "Lead with the transformation, not the service",
    ],
    FixCategory.FOUNDER_PSYCHOLOGY_CHECK: [
        "Reduce promise scope for first 3-5 clients",
        "Increase price after early proof",
        "Add guarantee once unit economics are proven",
        "Test with a smaller ICP before scaling",
        "Focus on one promise before expanding",
    ],
}

POOL_STEPS = 4

VIOLATION_TO_CATEGORIES: dict[str, list[FixCategory]] = {
    "proof_deficiency": [
        FixCategory.RISK_SHIFT, FixCategory.PROMISE_SHIFT, FixCategory.FOUNDER_PSYCHOLOGY_CHECK,
    ],
    "pricing_misalignment": [FixCategory.PRICING_SHIFT, FixCategory.ICP_SHIFT],
    "market_misalignment": [FixCategory.ICP_SHIFT, FixCategory.PROMISE_SHIFT],
    "promise_channel_mismatch": [FixCategory.PROMISE_SHIFT, FixCategory.POSITIONING_SHIFT],
    "risk_misalignment": [FixCategory.RISK_SHIFT, FixCategory.PRICING_SHIFT],
    "fulfillment_bottleneck": [FixCategory.FULFILLMENT_SHIFT, FixCategory.ICP_SHIFT],
    "awareness_mismatch": [FixCategory.ICP_SHIFT, FixCategory.POSITIONING_SHIFT],
    "low_outbound_fit": [
        FixCategory.ICP_SHIFT, FixCategory.PROMISE_SHIFT, FixCategory.POSITIONING_SHIFT,
    ],
    "execution_risk": [FixCategory.FULFILLMENT_SHIFT, FixCategory.ICP_SHIFT],
}

SMALL_SIZES = frozenset({IcpSize.SOLO_FOUNDER, IcpSize.EMPLOYEES_1_5})
EARLY_MATURITY = frozenset({IcpMaturity.PRE_REVENUE, IcpMaturity.EARLY_TRACTION})
CHURN_INDUSTRIES = frozenset({IcpIndustry.DTC_ECOMMERCE, IcpIndustry.LOCAL_SERVICES})


def is_contextually_unfit(fix: str, config: OfferConfiguration) -> bool:
    """Pool entries that make no sense for this buyer, whatever the violation."""
    lowered = fix.lower()
    if config.icp_maturity == IcpMaturity.PRE_REVENUE and "performance-only" in lowered:
        return True
    if config.icp_industry == IcpIndustry.LOCAL_SERVICES and "enterprise" in lowered:
        return True
    if config.pricing_structure == PricingStructure.PERFORMANCE_ONLY and "performance slice" in lowered:
        return True
    return config.icp_size in SMALL_SIZES and "automation" in lowered


def pool_steps(category: FixCategory, config: OfferConfiguration) -> list[str]:
    return [fix for fix in FIX_POOLS[category] if not is_contextually_unfit(fix, config)][:POOL_STEPS]


# =============================================================================
# Category generators
# =============================================================================


def _rec(
    rec_id: str,
    category: FixCategory,
    headline: str,
    explanation: str,
    steps: list[str],
    desired: str,
) -> StructuredRecommendation:
    return StructuredRecommendation(
        id=rec_id,
        category=category,
        headline=headline,
        explanation=explanation,
        action_steps=steps,
        desired_state=desired,
    )


def icp_shift(config: OfferConfiguration, source: str) -> StructuredRecommendation:
    steps = pool_steps(FixCategory.ICP_SHIFT, config)
    rec_id = f"icp_shift_{source}"
    if config.icp_maturity == IcpMaturity.PRE_REVENUE:
        return _rec(
            rec_id, FixCategory.ICP_SHIFT,
            "Sell to a buyer who already feels the pain",
            "Pre-revenue buyers don't have money or urgency. They delay decisions and rarely close.",
            steps,
            "Buyer has money + has the problem + feels urgency now",
        )
    if config.icp_size in SMALL_SIZES and config.icp_industry == IcpIndustry.LOCAL_SERVICES:
        return _rec(
            rec_id, FixCategory.ICP_SHIFT,
            "Your buyers can't afford what you're selling",
            "Small local businesses have tight budgets. Either simplify what you offer "
            "or find buyers with more cash.",
            steps,
            "Buyer can comfortably afford your price without hesitation",
        )
    return _rec(
        rec_id, FixCategory.ICP_SHIFT,
        "Find buyers who are ready to buy now",
        "Your current target market isn't showing enough buying signals. "
        "Target a segment with active demand.",
        steps,
        "Buyer has budget approved and timeline in place",
    )


def promise_shift(config: OfferConfiguration, source: str) -> StructuredRecommendation:
    steps = pool_steps(FixCategory.PROMISE_SHIFT, config)
    rec_id = f"promise_shift_{source}"
    if config.icp_maturity in EARLY_MATURITY:
        return _rec(
            rec_id, FixCategory.PROMISE_SHIFT,
            "Your promise is too big for early-stage buyers",
            "Early-stage companies need leads or pipeline first. Revenue promises feel "
            "impossible to them.",
            steps,
            "Promise matches what buyer can realistically achieve",
        )
    if config.promise == Promise.TOP_LINE_REVENUE:
        return _rec(
            rec_id, FixCategory.PROMISE_SHIFT,
            "Revenue promises need pipeline-ready buyers",
            "You're promising revenue but your ICP may not have the sales infrastructure "
            "to close deals.",
            steps,
            "Buyer can turn your output into revenue themselves",
        )
    return _rec(
        rec_id, FixCategory.PROMISE_SHIFT,
        "Align your promise to what this buyer actually needs",
        "Your promise doesn't match the buyer's current stage or priorities.",
        steps,
        "Promise directly solves their most urgent problem",
    )


def fulfillment_shift(config: OfferConfiguration, source: str) -> StructuredRecommendation:
    steps = pool_steps(FixCategory.FULFILLMENT_SHIFT, config)
    rec_id = f"fulfillment_shift_{source}"
    if (
        config.fulfillment == FulfillmentModel.COACHING_ADVISORY
        and config.icp_maturity == IcpMaturity.PRE_REVENUE
    ):
        return _rec(
            rec_id, FixCategory.FULFILLMENT_SHIFT,
            "Coaching doesn't work for pre-revenue buyers",
            "Pre-revenue founders can't implement advice. They need done-for-you help.",
            [
                "Add done-for-you elements to your coaching",
                "Create a hybrid offer with implementation support",
                "Target buyers who already have a team to execute",
                *steps[:1],
            ],
            "Buyer can actually use what you deliver",
        )
    if config.fulfillment in (FulfillmentModel.CUSTOM_DFY, FulfillmentModel.STAFFING_PLACEMENT):
        return _rec(
            rec_id, FixCategory.FULFILLMENT_SHIFT,
            "Your delivery is too heavy for this buyer",
            "Labor-intensive fulfillment eats your margins with smaller clients. "
            "Simplify or charge more.",
            steps,
            "Delivery effort matches the price point profitably",
        )
    return _rec(
        rec_id, FixCategory.FULFILLMENT_SHIFT,
        "Your delivery model doesn't match your promise",
        "How you deliver doesn't reliably produce the outcome you're selling.",
        steps,
        "Fulfillment method reliably produces promised results",
    )


def pricing_shift(config: OfferConfiguration, source: str) -> StructuredRecommendation:
    rec_id = f"pricing_shift_{source}"
    if (
        config.icp_industry in CHURN_INDUSTRIES
        and config.pricing_structure == PricingStructure.RECURRING
        and config.fulfillment == FulfillmentModel.CUSTOM_DFY
    ):
        return _rec(
            rec_id, FixCategory.PRICING_SHIFT,
            "Recurring custom work burns you out in this industry",
            "High-churn industries cancel often. Custom retainers leave you constantly onboarding.",
            [
                "Switch to project-based pricing",
                "Create packages with defined scope and timelines",
                "Add setup fees to cover onboarding costs",
                "Productize your most common deliverables",
            ],
            "Pricing model protects margins even with client churn",
        )
    if config.pricing_structure == PricingStructure.PERFORMANCE_ONLY:
        return _rec(
            rec_id, FixCategory.PRICING_SHIFT,
            "Performance-only pricing needs control",
            "You can't do pure performance unless you control the outcome. Add a base retainer.",
            [
                "Add a base retainer plus performance bonus",
                "Switch to hybrid pricing (50% retainer + 50% performance)",
                "Only go full performance for outbound or software",
                "Add milestones to de-risk your cashflow",
            ],
            "You get paid for effort while upside comes from results",
        )
    return _rec(
        rec_id, FixCategory.PRICING_SHIFT,
        "Your price doesn't match your buyer's budget",
        "There's a gap between what you charge and what your target can pay.",
        pool_steps(FixCategory.PRICING_SHIFT, config),
        "Price feels like a no-brainer for your ideal buyer",
    )


def risk_shift(config: OfferConfiguration, source: str) -> StructuredRecommendation:
    steps = pool_steps(FixCategory.RISK_SHIFT, config)
    rec_id = f"risk_shift_{source}"
    if config.icp_maturity == IcpMaturity.PRE_REVENUE:
        return _rec(
            rec_id, FixCategory.RISK_SHIFT,
            "Pre-revenue buyers need risk removed",
            "They don't have cash to gamble. Reduce their perceived risk to close faster.",
            [
                "Add a conditional guarantee (refund if X doesn't happen)",
                "Offer pay-after-results for the first month",
                "Create a pilot program to build trust",
                "Add clear milestones with exit points",
            ],
            "Buyer feels safe saying yes because risk is on you",
        )
    if config.risk_model == RiskModel.NO_GUARANTEE:
        return _rec(
            rec_id, FixCategory.RISK_SHIFT,
            "No guarantee means slow decisions",
            "Without risk reversal, buyers hesitate. A smart guarantee can speed up closes.",
            steps,
            "Buyer says yes faster because they feel protected",
        )
    return _rec(
        rec_id, FixCategory.RISK_SHIFT,
        "Adjust your risk model for this market",
        "Your risk structure isn't aligned with what this buyer segment expects.",
        steps,
        "Risk feels fair to both you and the buyer",
    )


def positioning_shift(config: OfferConfiguration, source: str) -> StructuredRecommendation:
    return _rec(
        f"positioning_shift_{source}", FixCategory.POSITIONING_SHIFT,
        "Clarify exactly who this is for",
        "When your positioning is fuzzy, buyers don't see themselves in your offer.",
        FIX_POOLS[FixCategory.POSITIONING_SHIFT][:POOL_STEPS],
        'Ideal buyer immediately says "this is for me"',
    )


def founder_psychology_check(config: OfferConfiguration, source: str) -> StructuredRecommendation:
    steps = FIX_POOLS[FixCategory.FOUNDER_PSYCHOLOGY_CHECK][:POOL_STEPS]
    rec_id = f"founder_psych_{source}"
    if config.icp_maturity == IcpMaturity.PRE_REVENUE:
        return _rec(
            rec_id, FixCategory.FOUNDER_PSYCHOLOGY_CHECK,
            "Start smaller before going big",
            "Early stage? Test your offer with a smaller scope before committing to guarantees.",
            steps,
            "You have proof of what works before scaling",
        )
    return _rec(
        rec_id, FixCategory.FOUNDER_PSYCHOLOGY_CHECK,
        "Validate before you promise",
        "Make sure you can deliver reliably before making big claims.",
        steps,
        "Confidence backed by real results",
    )


GENERATORS: dict[FixCategory, Callable[[OfferConfiguration, str], StructuredRecommendation]] = {
    FixCategory.ICP_SHIFT: icp_shift,
    FixCategory.PROMISE_SHIFT: promise_shift,
    FixCategory.FULFILLMENT_SHIFT: fulfillment_shift,
    FixCategory.PRICING_SHIFT: pricing_shift,
    FixCategory.RISK_SHIFT: risk_shift,
    FixCategory.POSITIONING_SHIFT: positioning_shift,
    FixCategory.FOUNDER_PSYCHOLOGY_CHECK: founder_psychology_check,
}

# =============================================================================
# Bottleneck recommendations
# =============================================================================

# (headline, explanation, steps, desired state)
CORRECTIVE: dict[LatentKey, tuple[str, str, list[str], str]] = {
    LatentKey.ECONOMIC_FEASIBILITY: (
        "Align pricing to market capacity",
        "Your pricing may be misaligned with what your target market can afford. "
        "Adjust your price point or target buyers with higher budgets.",
        [
            "Research what competitors charge in your vertical",
            "Consider hybrid pricing to reduce upfront commitment",
            "Target companies with demonstrated budget capacity",
        ],
        "Price feels like a no-brainer for your ideal buyer",
    ),
    LatentKey.PROOF_TO_PROMISE: (
        "Match your promise to your proof",
        "Your current promise may be too ambitious for the proof you have. "
        "Scale it back or build more case studies.",
        [
            "Lower your promise to match proven results",
            "Run pilot projects to build documented wins",
            "Collect specific metrics from recent successes",
        ],
        "Every promise backed by concrete evidence",
    ),
    LatentKey.FULFILLMENT_SCALABILITY: (
        "Streamline your delivery model",
        "Your current fulfillment approach may not scale efficiently. "
        "Productize or systematize key processes.",
        [
            "Document and template recurring deliverables",
            "Identify which parts can be standardized",
            "Consider adding software/automation layers",
        ],
        "Delivery effort stays flat as client count grows",
    ),
    LatentKey.RISK_ALIGNMENT: (
        "Adjust risk to match certainty",
        "Your risk structure may not align with your proof level. "
        "Use conditional guarantees or milestone-based commitments.",
        [
            "Add conditions to guarantees tied to client effort",
            "Create clear exit points with partial refunds",
            "Build in milestones that demonstrate value early",
        ],
        "Both you and the buyer feel the risk is fair",
    ),
    LatentKey.CHANNEL_FIT: (
        "Reposition the offer for cold outreach",
        "Your offer may need repositioning to be more effective in outbound. "
        "Consider the buying behavior of your target market.",
        [
            "Lead outreach with a problem the buyer already knows they have",
            "Refine messaging to match how your ICP makes decisions",
            "Tie the promise to an outcome a cold prospect can verify",
        ],
        "Outbound messaging resonates with how your buyers want to buy",
    ),
    LatentKey.ICP_SPECIFICITY: (
        "Narrow your ICP to one segment",
        "A broad target list dilutes every message. Outbound works when each prospect "
        "sees their exact situation described.",
        [
            "Pick one vertical where you have the strongest results",
            "Define size and maturity limits for that segment",
            "Rewrite your outreach for that segment only",
        ],
        "Every prospect on the list is an obvious fit",
    ),
}

# Refinement-worded, for offers already at optimization level
OPTIMIZATION: dict[LatentKey, tuple[str, str, list[str], str]] = {
    LatentKey.ECONOMIC_FEASIBILITY: (
        "Optimize how your price is presented",
        "Your economics already work for outbound. Remaining gains come from framing "
        "the price against the value it returns.",
        [
            "Anchor the price against the cost of the problem",
            "Open pricing conversations with the ROI math for this vertical",
            "Offer annual prepay as an option on the current price",
        ],
        "Buyers see the price as an obvious return",
    ),
    LatentKey.PROOF_TO_PROMISE: (
        "Refine how you present your proof",
        "Your proof already supports the promise. Make it easier for a cold prospect "
        "to see themselves in it.",
        [
            "Lead outreach with your most specific result",
            "Match each proof point to the prospect's vertical",
            "Quantify outcomes in the first line of every message",
        ],
        "Prospects recognise their own situation in your results",
    ),
    LatentKey.FULFILLMENT_SCALABILITY: (
        "Improve delivery speed and consistency",
        "Your delivery model already scales. Tighten execution so growth does not "
        "erode quality.",
        [
            "Add quality assurance checkpoints before client handoff",
            "Shorten client onboarding to the first week",
            "Track delivery speed per client and review it monthly",
        ],
        "Every client gets the same result on the same timeline",
    ),
    LatentKey.RISK_ALIGNMENT: (
        "Refine your guarantee terms",
        "Your risk model fits your proof. Clearer terms make it easier to act on.",
        [
            "Tie guarantee terms to inputs the client controls",
            "State the guarantee in the first sales call",
            "Put milestone checkpoints in the contract",
        ],
        "Buyers understand exactly what is protected and when",
    ),
    LatentKey.CHANNEL_FIT: (
        "Optimize outbound messaging for how your buyers decide",
        "Outbound already suits this offer. Improve reply rates with tighter messaging.",
        [
            "Test two opening lines per segment each week",
            "Refine messaging to match how your ICP makes decisions",
            "Sequence follow-ups around the buyer's planning cycle",
        ],
        "Outbound messaging resonates with how your buyers want to buy",
    ),
    LatentKey.ICP_SPECIFICITY: (
        "Refine your ICP definition",
        "Your targeting is already usable. Sharpen the list so every prospect looks "
        "like your best client.",
        [
            "List the three traits your best clients share",
            "Build lead lists from those traits only",
            "Drop segments with reply rates below your average",
        ],
        "Every prospect looks like your best client",
    ),
}


def bottleneck_recommendation(
    bottleneck: Bottleneck, optimization_level: bool
) -> StructuredRecommendation:
    key = bottleneck.dimension
    if optimization_level:
        headline, explanation, steps, desired = OPTIMIZATION[key]
        rec_id = f"optimize_{key.value}"
    else:
        headline, explanation, steps, desired = CORRECTIVE[key]
        rec_id = f"bottleneck_{key.value}"
    return _rec(rec_id, BOTTLENECK_CATEGORIES[key], headline, explanation, list(steps), desired)


def outbound_blocked_notice(bottleneck: Bottleneck) -> StructuredRecommendation:
    label = bottleneck.label
    return _rec(
        "outbound_blocked",
        BOTTLENECK_CATEGORIES[bottleneck.dimension],
        f"Outbound is blocked: {label}",
        f"This offer cannot succeed with cold outreach until the {label} issue is resolved. "
        "Focus on the fix below before investing in outbound.",
        [
            "Address the primary bottleneck first",
            "Do not scale outbound until this is fixed",
            "Consider warmer channels while fixing fundamentals",
        ],
        "Offer passes basic viability gates for outbound",
    )


# =============================================================================
# Assembly
# =============================================================================


def screen(
    rec: StructuredRecommendation,
    ctx: StabilizationContext,
    blocked: list[BlockedCandidate],
    lock_category: FixCategory | None = None,
) -> StructuredRecommendation | None:
    """Apply every lock; record and drop the recommendation if one fires."""
    steps, reason = filter_candidate(
        rec.headline, rec.explanation, rec.action_steps, lock_category, ctx
    )
    if reason is not None:
        blocked.append(BlockedCandidate(id=rec.id, kind="recommendation", reason=reason))
        return None
    return rec.model_copy(update={"action_steps": steps})


def build_recommendations(
    config: OfferConfiguration,
    ready: bool,
    bottleneck: Bottleneck,
    violations: list[Violation],
    ctx: StabilizationContext,
    optimization_level: bool,
    top_k: int,
) -> tuple[list[StructuredRecommendation], list[BlockedCandidate]]:
    kept: list[StructuredRecommendation] = []
    blocked: list[BlockedCandidate] = []
    used: set[FixCategory] = set()

    def add(rec: StructuredRecommendation, lock_category: FixCategory | None) -> None:
        if any(existing.id == rec.id for existing in kept):
            return
        survivor = screen(rec, ctx, blocked, lock_category)
        if survivor is not None:
            kept.append(survivor)

    if not ready:
        # The notice is exempt from category locks; it carries no fix of its own
        add(outbound_blocked_notice(bottleneck), None)

    wants_bottleneck = not ready or optimization_level or bottleneck.actionable
    if wants_bottleneck:
        rec = bottleneck_recommendation(bottleneck, optimization_level)
        add(rec, rec.category)
        used.add(rec.category)

    ordered = sorted(violations, key=lambda v: SEVERITY_ORDER[v.severity], reverse=True)
    for violation in ordered:
        for category in VIOLATION_TO_CATEGORIES.get(violation.id, [violation.fix_category]):
            if category in used:
                continue
            used.add(category)
            add(GENERATORS[category](config, violation.id), category)

    if not kept and ctx.force_recommendations:
        add(founder_psychology_check(config, "general"), FixCategory.FOUNDER_PSYCHOLOGY_CHECK)

    return kept[:top_k], blocked
