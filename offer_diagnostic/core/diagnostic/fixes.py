"""Context-aware fix stack.

Fixes come from three layers, each with its own certainty tier:

    risk layer         12 - i   (diagnostic risk alignment below 8)
    fulfillment rules  11 - i   (fulfillment model x price/size/maturity)
    problem routes     10 - 2i  (i = rank of the detected problem)

Problem routes depend on the context modifiers, then pass a validation step
that removes contradictions with the configuration. Every survivor is
screened by the stabilization locks before ranking.
"""

from collections.abc import Callable
from dataclasses import dataclass

from offer_diagnostic.core.diagnostic.rules import lookup
from offer_diagnostic.core.diagnostic.stabilization import (
    StabilizationContext,
    block_reason,
    is_refinement,
)
from offer_diagnostic.core.diagnostic.types import (
    BlockedCandidate,
    ContextFix,
    ContextModifiers,
    DetectedProblem,
    DiagnosticDimensions,
    FixCategory,
    FulfillmentModel,
    IcpMaturity,
    IcpSize,
    OfferConfiguration,
    PricingStructure,
    ProblemCategory,
    RecurringPriceTier,
)

MAX_CONTEXT_FIXES = 3
RISK_LAYER_BELOW = 8


@dataclass(frozen=True)
class FixDefinition:
    what: str
    how: str
    target: str
    effort: str
    impact: str
    strategic_impact: int
    feasibility: int
    category: FixCategory
    instruction: str | None = None  # pre-written; otherwise rendered from the template


_P = FixCategory.PRICING_SHIFT
_R = FixCategory.RISK_SHIFT
_I = FixCategory.ICP_SHIFT
_F = FixCategory.FULFILLMENT_SHIFT
_O = FixCategory.POSITIONING_SHIFT
_M = FixCategory.PROMISE_SHIFT

# =============================================================================
# Problem-routed fix definitions
# =============================================================================

FIX_DEFINITIONS: dict[str, FixDefinition] = {
    "switch_to_performance": FixDefinition(
        "Switch to Performance-Based Pricing",
        "Remove upfront retainer, charge only on delivered results",
        "Zero upfront friction, risk on your side", "Low", "High", 8, 7, _P),
    "switch_to_hybrid": FixDefinition(
        "Switch to Hybrid Pricing",
        "Small retainer ($500-$1500) + performance component",
        "Reduced upfront ask with skin in the game", "Low", "High", 7, 8, _P),
    "reduce_risk": FixDefinition(
        "Add Risk Reduction",
        "Introduce money-back guarantee or conditional refund",
        "Buyer feels protected on first purchase", "Low", "Medium", 6, 9, _R),
    "retainer": FixDefinition(
        "Move to Pure Retainer",
        "Set monthly retainer based on expected value delivered",
        "Predictable revenue with committed clients", "Low", "High", 7, 6, _P),
    "conditional_guarantee": FixDefinition(
        "Add Conditional Guarantee",
        "Guarantee tied to specific milestones or KPIs",
        "Trust built through measurable commitment", "Low", "High", 8, 7, _R),
    "increase_retainer": FixDefinition(
        "Increase Retainer Price",
        "Move into $2k-$5k+ range with expanded deliverables",
        "Higher ACV with better unit economics", "Medium", "Very High", 9, 5, _P),
    "shift_upmarket": FixDefinition(
        "Shift Upmarket",
        "Target 21-100 employee companies instead of SMB",
        "ICP has budget aligned to your pricing", "Medium", "Very High", 10, 5, _I),
    "shift_vertical": FixDefinition(
        "Shift to Higher-Budget Vertical",
        "Target SaaS/Tech or Professional Services instead",
        "Industry with demonstrated spend on your offer type", "Medium", "High", 8, 5, _I),
    "improve_mechanism": FixDefinition(
        "Strengthen Your Mechanism",
        "Add proprietary frameworks, data, or automation",
        "Differentiated offer that justifies premium", "Medium", "High", 8, 6, _O),
    "downmarket": FixDefinition(
        "Move Downmarket",
        "Simplify offer to serve earlier-stage companies",
        "Accessible entry point for growing companies", "Medium", "Medium", 5, 7, _I),
    "duration_brand": FixDefinition(
        "Extend Brand Engagement",
        "Move to 6-12 month brand partnerships vs campaigns",
        "Long-term brand relationship with recurring revenue", "Medium", "High", 7, 5, _O),
    "operational_simplify": FixDefinition(
        "Simplify Operations",
        "Reduce scope to core high-impact deliverables",
        "Easier fulfillment with clear boundaries", "Low", "Medium", 6, 8, _F),
    "increase_aov": FixDefinition(
        "Increase Average Order Value",
        "Bundle upsells, add premium tier, expand scope",
        "Higher revenue per customer relationship", "Medium", "High", 8, 6, _P),
    "simplify_offer": FixDefinition(
        "Simplify Your Offer",
        "Remove complex deliverables pre-revenue ICPs cannot use",
        "Offer matches what early-stage can implement", "Low", "High", 7, 8, _M),
    "performance_pricing": FixDefinition(
        "Switch to Performance Pricing",
        "Charge per result instead of upfront",
        "No cash flow barrier for pre-revenue buyers", "Low", "High", 8, 6, _P),
    "remove_guarantee": FixDefinition(
        "Remove Guarantee Requirements",
        "Shift to milestone-based pricing instead",
        "Lower risk for you with immature ICPs", "Low", "Medium", 5, 9, _R),
    "simplify_fulfillment": FixDefinition(
        "Simplify Fulfillment",
        "Reduce labor intensity with templates and systems",
        "Scalable delivery model", "Medium", "High", 7, 6, _F),
    "hybrid_pricing": FixDefinition(
        "Move to Hybrid Pricing",
        "Combine small retainer with success fees",
        "Balanced risk with upfront commitment", "Low", "High", 7, 7, _P),
    "add_conditional_guarantee": FixDefinition(
        "Add Conditional Guarantee",
        "Guarantee tied to client implementing requirements",
        "Protected guarantee with accountability", "Low", "High", 7, 8, _R),
    "increase_pricing": FixDefinition(
        "Increase Your Pricing",
        "Move to next tier with expanded deliverables",
        "Price matches scaling ICP expectations", "Low", "High", 8, 6, _P),
    "add_guarantee": FixDefinition(
        "Add Strong Guarantee",
        "Full or conditional money-back guarantee",
        "Eliminates perceived risk for buyer", "Low", "Very High", 9, 6, _R),
    "require_retainers": FixDefinition(
        "Require Retainer Commitment",
        "Minimum 3-6 month retainer agreement",
        "Committed clients with predictable revenue", "Low", "High", 7, 7, _P),
    "enterprise_packaging": FixDefinition(
        "Create Enterprise Packaging",
        "Build custom packages for $10k+/mo engagements",
        "Premium offer for mature buyers", "Medium", "Very High", 9, 4, _O),
    "land_and_expand": FixDefinition(
        "Implement Land & Expand",
        "Start small, prove value, expand scope",
        "Low-friction entry with expansion path", "Low", "High", 7, 8, _O),
    "productize": FixDefinition(
        "Productize Your Service",
        "Create standardized deliverables with fixed scope",
        "Repeatable delivery without custom work", "Medium", "High", 8, 5, _F),
    "systemize": FixDefinition(
        "Systemize Fulfillment",
        "Build SOPs, templates, and automation",
        "Reduced labor with consistent output", "Medium", "High", 7, 6, _F),
    "hybridize": FixDefinition(
        "Hybridize Fulfillment",
        "Combine labor with systems/automation",
        "Better margins with maintained quality", "Medium", "High", 7, 6, _F),
    "increase_price": FixDefinition(
        "Increase Price to Match Cost",
        "Price to 3-4x fulfillment cost for healthy margins",
        "Sustainable unit economics", "Low", "Medium", 6, 7, _P),
    "upmarket": FixDefinition(
        "Target Upmarket Buyers",
        "Focus on buyers who value high-touch fulfillment",
        "ICP appreciates and pays for labor intensity", "Medium", "High", 8, 5, _I),
    "guarantee": FixDefinition(
        "Add Performance Guarantee",
        "Guarantee specific outcomes or refund",
        "Risk reversal that closes deals faster", "Low", "High", 8, 6, _R),
    "add_services": FixDefinition(
        "Add Service Layer",
        "Bundle implementation, training, or support",
        "Higher value with stickier relationships", "Medium", "High", 7, 5, _F),
    "usage_based_pricing": FixDefinition(
        "Implement Usage-Based Pricing",
        "Charge per output, lead, or transaction",
        "Aligned incentives with scalable revenue", "Medium", "High", 7, 6, _P),
    "add_retainer_component": FixDefinition(
        "Add Retainer Component",
        "Add monthly fee for ongoing management",
        "Recurring revenue beyond placement", "Low", "High", 7, 7, _P),
}

PRICING_MISFIT_ROUTES: dict[str, list[str]] = {
    "Low": ["switch_to_performance", "switch_to_hybrid", "reduce_risk"],
    "Moderate": ["switch_to_hybrid", "retainer", "conditional_guarantee"],
    "High": ["increase_retainer", "switch_to_hybrid", "conditional_guarantee"],
}

ICP_MISMATCH_ROUTES: dict[str, list[str]] = {
    "Revenue": ["shift_upmarket", "shift_vertical", "improve_mechanism"],
    "Brand": ["shift_vertical", "downmarket", "duration_brand"],
    "Efficiency": ["shift_vertical", "operational_simplify"],
    "Retention": ["shift_vertical", "increase_aov"],
}

MATURITY_MISFIT_ROUTES: dict[str, list[str]] = {
    "Pre": ["simplify_offer", "performance_pricing", "remove_guarantee"],
    "Early": ["simplify_fulfillment", "hybrid_pricing", "add_conditional_guarantee"],
    "Scaling": ["increase_pricing", "add_guarantee", "shift_upmarket"],
    "Mature": ["require_retainers", "enterprise_packaging", "land_and_expand"],
}

FULFILLMENT_MISFIT_ROUTES: dict[str, list[str]] = {
    "Labor": ["productize", "systemize", "hybridize"],
    "Hybrid": ["increase_price", "upmarket", "guarantee"],
    "Automation": ["add_services", "usage_based_pricing"],
    "Staffing": ["add_retainer_component", "conditional_guarantee"],
}

BUYING_POWER_ROUTE = ["shift_upmarket", "shift_vertical", "switch_to_hybrid"]


def route_problem(category: ProblemCategory, modifiers: ContextModifiers) -> list[str]:
    if category == ProblemCategory.PRICING_MISFIT:
        return PRICING_MISFIT_ROUTES[modifiers.cash_flow]
    if category in (ProblemCategory.ICP_MISMATCH, ProblemCategory.LOW_PAIN_URGENCY):
        return ICP_MISMATCH_ROUTES[modifiers.pain_type]
    if category in (ProblemCategory.OFFER_TYPE_MISFIT, ProblemCategory.RISK_MISALIGNMENT):
        return MATURITY_MISFIT_ROUTES[modifiers.maturity]
    if category == ProblemCategory.FULFILLMENT_MISALIGNMENT:
        return FULFILLMENT_MISFIT_ROUTES[modifiers.fulfillment]
    if category == ProblemCategory.LOW_BUYING_POWER:
        return BUYING_POWER_ROUTE
    raise ValueError(f"No fix route for problem category {category!r}")


# (condition, fix ids it rules out)
CONTRADICTIONS = [
    # Already satisfied by the pricing model
    (
        lambda c, m: c.pricing_structure == PricingStructure.PERFORMANCE_ONLY,
        {"switch_to_performance", "performance_pricing"},
    ),
    (
        lambda c, m: c.pricing_structure
        in (PricingStructure.RECURRING, PricingStructure.USAGE_BASED),
        {"switch_to_hybrid"},
    ),
    (
        lambda c, m: c.pricing_structure == PricingStructure.RECURRING,
        {"require_retainers", "retainer"},
    ),
    # Cash-strapped buyers cannot absorb a price increase
    (lambda c, m: m.cash_flow == "Low", {"increase_retainer", "enterprise_packaging"}),
    # Automated fulfillment is already systemized
    (
        lambda c, m: m.fulfillment == "Automation",
        {"simplify_fulfillment", "systemize", "productize"},
    ),
    (
        lambda c, m: m.mechanism_strength == "VeryStrong",
        {"add_guarantee", "performance_pricing"},
    ),
]


def validate_fixes(
    fix_ids: list[str], config: OfferConfiguration, modifiers: ContextModifiers
) -> list[str]:
    ruled_out: set[str] = set()
    for condition, ids in CONTRADICTIONS:
        if condition(config, modifiers):
            ruled_out |= ids
    return [fix_id for fix_id in fix_ids if fix_id not in ruled_out]


CASH_FLOW_PHRASES = {
    "Low": "low cash flow buyers",
    "Moderate": "moderate budget buyers",
    "High": "high-budget buyers",
}
MATURITY_PHRASES = {
    "Pre": "pre-revenue companies",
    "Early": "early traction companies",
    "Scaling": "scaling companies",
    "Mature": "mature companies",
}
PAIN_PHRASES = {
    "Revenue": "revenue acquisition",
    "Brand": "brand awareness",
    "Retention": "customer retention",
    "Efficiency": "operational efficiency",
}


def render_instruction(definition: FixDefinition, modifiers: ContextModifiers) -> str:
    return (
        f"{definition.what} because {MATURITY_PHRASES[modifiers.maturity]} with "
        f"{CASH_FLOW_PHRASES[modifiers.cash_flow]} focused on "
        f"{PAIN_PHRASES[modifiers.pain_type]} respond better to this approach. "
        f"To implement: {definition.how}. End goal: {definition.target}."
    )


# =============================================================================
# Risk layer
# =============================================================================

RISK_FIXES: dict[IcpMaturity, list[tuple[str, FixDefinition]]] = {
    IcpMaturity.PRE_REVENUE: [
        ("risk_pre_1", FixDefinition(
            "Switch to Conditional or Pay-After-Results Model",
            "Move from full guarantee or performance-only to conditional guarantee or pay-after-results",
            "Reduced risk exposure while maintaining buyer trust", "Low", "High", 9, 8, _R,
            "Switch to Conditional guarantee or Pay after results because pre-revenue companies "
            "respond better to low-risk, results-based pricing. To implement: remove upfront "
            "guarantees -> add milestone-based payments -> introduce conditional refund terms. "
            "End goal: de-risk your offer while maintaining conversion.")),
        ("risk_pre_2", FixDefinition(
            "Avoid Full Guarantee and Performance-Only Models",
            "Remove performance-only or full guarantee structures until traction improves",
            "Sustainable risk profile for early-stage ICP", "Low", "Medium", 7, 9, _R,
            "Avoid Full guarantee and Performance only until traction improves because "
            "pre-revenue buyers lack the stability to honor long-term commitments. To implement: "
            "restructure contracts -> add exit clauses -> tier pricing by milestone. End goal: "
            "protect margins while serving pre-revenue buyers.")),
    ],
    IcpMaturity.EARLY_TRACTION: [
        ("risk_early_1", FixDefinition(
            "Use Conditional Guarantee or Pay-After-Results",
            "Implement conditional guarantee tied to specific milestones",
            "Reduced friction with accountability on both sides", "Low", "High", 8, 8, _R,
            "Use Conditional guarantee or Pay after results to reduce friction because early "
            "traction companies need trust signals without excessive upfront commitment. To "
            "implement: define clear milestones -> add conditional refund terms -> document "
            "success criteria. End goal: faster closes with aligned incentives.")),
        ("risk_early_2", FixDefinition(
            "Avoid Full Guarantee Unless Capacity is Proven",
            "Only offer full guarantees if you have proven fulfillment capacity",
            "Protected margins with appropriate risk levels", "Medium", "Medium", 6, 7, _R,
            "Avoid Full guarantee unless fulfillment capacity is proven because early-stage "
            "buyers may trigger refunds you cannot absorb. To implement: audit current capacity "
            "-> set guardrails on guarantee scope -> add performance conditions. End goal: "
            "sustainable guarantees that close deals.")),
    ],
    IcpMaturity.SCALING: [
        ("risk_scaling_1", FixDefinition(
            "Consider Performance-Only Pricing",
            "Move to performance-only to accelerate deal velocity",
            "Faster closes with aligned incentives for scaling buyers", "Low", "Very High", 10, 7, _R,
            "Consider Performance only for acceleration because scaling companies respond well "
            "to results-based pricing when they see clear ROI. To implement: calculate "
            "break-even metrics -> set performance thresholds -> document success fees. End "
            "goal: higher deal velocity with scaling ICPs.")),
        ("risk_scaling_2", FixDefinition(
            "Add Hybrid Guarantees for Outbound",
            "Combine conditional guarantees with retainer pricing for outbound",
            "Improved close rates in competitive outbound situations", "Medium", "High", 8, 6, _R,
            "Hybrid guarantees improve close rates in outbound because scaling companies expect "
            "risk-sharing on new vendor relationships. To implement: bundle retainer + "
            "conditional guarantee -> document success metrics -> add performance bonus tiers. "
            "End goal: competitive advantage in outbound sales.")),
    ],
    IcpMaturity.MATURE: [
        ("risk_mature_1", FixDefinition(
            "Consider Full Guarantee or Hybrid Models",
            "Add full or hybrid guarantees to improve enterprise procurement success",
            "Procurement-friendly risk structure", "Medium", "Very High", 9, 6, _R,
            "Full guarantee or Hybrid models improve enterprise procurement because mature "
            "companies expect vendor accountability in formal procurement processes. To "
            "implement: build guarantee into MSA -> add SLA terms -> document escalation paths. "
            "End goal: win more enterprise deals.")),
        ("risk_mature_2", FixDefinition(
            "Avoid Performance-Only Unless Margins Support It",
            "Only use performance-only if fulfillment margins are high",
            "Sustainable pricing with appropriate risk levels", "Low", "Medium", 6, 8, _R,
            "Avoid Performance only unless fulfillment margins are high because mature buyers "
            "may expect performance models at scale that erode profitability. To implement: "
            "calculate true fulfillment costs -> set minimum thresholds -> add volume caps. End "
            "goal: profitable performance deals.")),
    ],
    IcpMaturity.ENTERPRISE: [
        ("risk_enterprise_1", FixDefinition(
            "Implement Full Guarantee or Hybrid Structure",
            "Add comprehensive guarantees to satisfy enterprise procurement requirements",
            "Enterprise-grade risk structure for procurement approval", "Medium", "Very High", 9, 5, _R,
            "Full guarantee or Hybrid models improve enterprise procurement because enterprise "
            "buyers require formal risk mitigation in vendor agreements. To implement: develop "
            "enterprise MSA -> add comprehensive SLAs -> include audit rights. End goal: "
            "enterprise procurement approval.")),
        ("risk_enterprise_2", FixDefinition(
            "Avoid Performance-Only for Enterprise",
            "Replace performance-only with hybrid or guarantee structures",
            "Procurement-compliant pricing model", "Medium", "Medium", 7, 7, _R,
            "Avoid Performance only unless fulfillment margins are high because enterprise "
            "procurement rarely approves pure performance models without guarantees. To "
            "implement: bundle retainer + guarantee -> add enterprise terms -> document ROI "
            "methodology. End goal: enterprise-ready offer structure.")),
    ],
}

# =============================================================================
# Fulfillment rules
# =============================================================================

LOW_RECURRING = frozenset({RecurringPriceTier.UNDER_150, RecurringPriceTier.FROM_150_TO_500})
HIGH_RECURRING = frozenset({RecurringPriceTier.FROM_2K_TO_5K, RecurringPriceTier.OVER_5K})
SMALL_SIZES = frozenset({IcpSize.SOLO_FOUNDER, IcpSize.EMPLOYEES_1_5})


@dataclass
class FulfillmentRule:
    id: str
    check: Callable[[OfferConfiguration], bool]
    definition: FixDefinition


FULFILLMENT_RULES = [
    FulfillmentRule(
        id="fulfill_custom_low_price",
        check=lambda c: c.fulfillment == FulfillmentModel.CUSTOM_DFY
        and c.recurring_price_tier in LOW_RECURRING,
        definition=FixDefinition(
            "Package Deliverables or Raise Price",
            "Custom delivery is labor intensive; convert to packages or increase to $1500+/mo",
            "Sustainable margins with appropriate pricing", "Medium", "High", 8, 7, _F,
            "Custom delivery is labor intensive; consider packaging deliverables or raising "
            "price because custom DFY work at low price points creates unsustainable unit "
            "economics. To implement: document repeatable processes -> create tiered packages "
            "-> anchor pricing at $1500+/mo. End goal: profitable fulfillment with happy clients."),
    ),
    FulfillmentRule(
        id="fulfill_package_small_icp",
        check=lambda c: c.fulfillment == FulfillmentModel.PACKAGE_BASED and c.icp_size in SMALL_SIZES,
        definition=FixDefinition(
            "Tighten Scope or Raise Price",
            "Packages work, but micro agencies often price anchor low; tighten scope or raise price",
            "Clear boundaries with appropriate value exchange", "Low", "Medium", 6, 8, _F,
            "Packages work, but micro agencies often price anchor low; tighten scope or raise "
            "price because small ICPs expect discounts that erode profitability. To implement: "
            "reduce package scope -> clearly define boundaries -> anchor at higher price with "
            "value justification. End goal: profitable packages that set proper expectations."),
    ),
    FulfillmentRule(
        id="fulfill_software_high_price",
        check=lambda c: c.fulfillment == FulfillmentModel.SOFTWARE_PLATFORM
        and c.recurring_price_tier in HIGH_RECURRING,
        definition=FixDefinition(
            "Lower Price or Add Implementation Layer",
            "Software rarely converts at high-ticket without implementation layer; "
            "consider lowering price or adding onboarding",
            "Justified pricing with appropriate value delivery", "Medium", "High", 8, 6, _F,
            "Software rarely converts at high-ticket without implementation layer; consider "
            "lowering price or adding onboarding because buyers expect white-glove service at "
            "$1500+/mo price points. To implement: add implementation services -> include "
            "dedicated onboarding -> bundle training sessions. End goal: justified high-ticket "
            "software offering."),
    ),
    FulfillmentRule(
        id="fulfill_coaching_performance",
        check=lambda c: c.fulfillment == FulfillmentModel.COACHING_ADVISORY
        and c.pricing_structure == PricingStructure.PERFORMANCE_ONLY,
        definition=FixDefinition(
            "Switch to Retainer or Hybrid Pricing",
            "Coaching cannot support performance-only; switch to retainer or hybrid",
            "Pricing model aligned with advisory fulfillment", "Low", "Very High", 9, 8, _P,
            "Coaching cannot support performance-only because advisory work requires time "
            "regardless of client outcomes. To implement: convert to monthly retainer -> add "
            "milestone-based pricing -> document engagement scope. End goal: sustainable "
            "coaching practice with aligned incentives."),
    ),
    FulfillmentRule(
        id="fulfill_staffing_prerev",
        check=lambda c: c.fulfillment == FulfillmentModel.STAFFING_PLACEMENT
        and c.icp_maturity == IcpMaturity.PRE_REVENUE,
        definition=FixDefinition(
            "Shift ICP or Offer Advisory First",
            "Pre-revenue clients cannot utilize staffing; shift ICP or offer advisory first",
            "ICP has capacity to utilize placed talent", "Medium", "High", 8, 6, _I,
            "Pre-revenue clients cannot utilize staffing because they lack infrastructure to "
            "manage placed talent. To implement: shift ICP to early-traction or scaling -> offer "
            "advisory to build processes first -> qualify for placement capacity. End goal: "
            "successful placements with ready clients."),
    ),
]


def _context_fix(
    fix_id: str, definition: FixDefinition, certainty: int, source: str, instruction: str
) -> ContextFix:
    return ContextFix(
        id=fix_id,
        category=definition.category,
        what_to_change=definition.what,
        how_to_change_it=definition.how,
        target_condition=definition.target,
        effort=definition.effort,
        impact=definition.impact,
        strategic_impact=definition.strategic_impact,
        feasibility=definition.feasibility,
        certainty=certainty,
        source=source,
        instruction=instruction,
    )


def build_context_fixes(
    config: OfferConfiguration,
    dimensions: DiagnosticDimensions,
    problems: list[DetectedProblem],
    modifiers: ContextModifiers,
    stabilization: StabilizationContext,
) -> tuple[list[ContextFix], list[BlockedCandidate]]:
    """Top context-aware fixes plus every candidate the locks rejected."""
    candidates: dict[str, ContextFix] = {}

    if dimensions.risk_alignment < RISK_LAYER_BELOW:
        risk_fixes = lookup(RISK_FIXES, config.icp_maturity, "RISK_FIXES")
        for i, (fix_id, definition) in enumerate(risk_fixes):
            candidates[fix_id] = _context_fix(
                fix_id, definition, 12 - i, "risk", definition.instruction
            )

    matched = [rule for rule in FULFILLMENT_RULES if rule.check(config)]
    for i, rule in enumerate(matched):
        candidates[rule.id] = _context_fix(
            rule.id, rule.definition, 11 - i, "fulfillment", rule.definition.instruction
        )

    for i, problem in enumerate(problems):
        certainty = 10 - i * 2
        routed = validate_fixes(route_problem(problem.category, modifiers), config, modifiers)
        for fix_id in routed:
            existing = candidates.get(fix_id)
            if existing is not None and existing.certainty >= certainty:
                continue
            definition = FIX_DEFINITIONS[fix_id]
            candidates[fix_id] = _context_fix(
                fix_id,
                definition,
                certainty,
                problem.category.value,
                render_instruction(definition, modifiers),
            )

    kept: list[ContextFix] = []
    blocked: list[BlockedCandidate] = []
    for fix in candidates.values():
        # The rendered instruction gets no refinement exemption
        reason = block_reason(
            f"{fix.what_to_change} {fix.how_to_change_it}",
            fix.category,
            stabilization,
            refinement=is_refinement(fix.what_to_change),
        ) or block_reason(fix.instruction, fix.category, stabilization)
        if reason is None:
            kept.append(fix)
        else:
            blocked.append(BlockedCandidate(id=fix.id, kind="context_fix", reason=reason))

    kept.sort(key=lambda f: (f.certainty, f.strategic_impact, f.feasibility), reverse=True)
    return kept[:MAX_CONTEXT_FIXES], blocked
