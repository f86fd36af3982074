"""Diagnostic dimension scores.

Six simpler per-dimension scores, each a table sum clamped to its own
maximum. They feed the violation flags and the problem stack, never the
alignment score.
"""

from offer_diagnostic.core.diagnostic.aggregate import round_half_up
from offer_diagnostic.core.diagnostic.rules import lookup
from offer_diagnostic.core.diagnostic.types import (
    DiagnosticDimensions,
    FulfillmentModel,
    IcpIndustry,
    IcpMaturity,
    IcpSize,
    OfferConfiguration,
    OfferType,
    OneTimePriceTier,
    PricingStructure,
    ProofLevel,
    Promise,
    RecurringPriceTier,
    RiskModel,
    ViolationFlags,
)

# =============================================================================
# Pain / urgency (0-25)
# =============================================================================

INTRINSIC_URGENCY: dict[OfferType, int] = {
    OfferType.DEMAND_CREATION: 10,
    OfferType.DEMAND_CAPTURE: 8,
    OfferType.OUTBOUND_SALES_ENABLEMENT: 15,
    OfferType.RETENTION_MONETIZATION: 12,
    OfferType.OPERATIONAL_ENABLEMENT: 6,
}

MATURITY_URGENCY_BONUS: dict[IcpMaturity, int] = {
    IcpMaturity.PRE_REVENUE: 0,
    IcpMaturity.EARLY_TRACTION: 8,
    IcpMaturity.SCALING: 10,
    IcpMaturity.MATURE: 5,
    IcpMaturity.ENTERPRISE: 3,
}

# =============================================================================
# Buying power (0-20)
# =============================================================================

SIZE_BUDGET: dict[IcpSize, int] = {
    IcpSize.SOLO_FOUNDER: 3,
    IcpSize.EMPLOYEES_1_5: 6,
    IcpSize.EMPLOYEES_6_20: 12,
    IcpSize.EMPLOYEES_21_100: 15,
    IcpSize.EMPLOYEES_100_PLUS: 10,
}

INDUSTRY_BUDGET: dict[IcpIndustry, int] = {
    IcpIndustry.SAAS_TECH: 10,
    IcpIndustry.PROFESSIONAL_SERVICES: 8,
    IcpIndustry.DTC_ECOMMERCE: 7,
    IcpIndustry.B2B_SERVICE_AGENCY: 6,
    IcpIndustry.LOCAL_SERVICES: 5,
}

# =============================================================================
# Pricing fit (0-20)
# =============================================================================

RECURRING_TIER_BASE: dict[RecurringPriceTier, int] = {
    RecurringPriceTier.UNDER_150: 3,
    RecurringPriceTier.FROM_150_TO_500: 5,
    RecurringPriceTier.FROM_500_TO_2K: 7,
    RecurringPriceTier.FROM_2K_TO_5K: 9,
    RecurringPriceTier.OVER_5K: 6,
}

ONE_TIME_TIER_BASE: dict[OneTimePriceTier, int] = {
    OneTimePriceTier.UNDER_3K: 4,
    OneTimePriceTier.FROM_3K_TO_10K: 7,
    OneTimePriceTier.OVER_10K: 8,
}

UNTIERED_PRICE_BASE = 5

PRICING_SIZE_MODIFIER: dict[PricingStructure, dict[IcpSize, int]] = {
    PricingStructure.RECURRING: {
        IcpSize.SOLO_FOUNDER: 1,
        IcpSize.EMPLOYEES_1_5: 2,
        IcpSize.EMPLOYEES_6_20: 3,
        IcpSize.EMPLOYEES_21_100: 5,
        IcpSize.EMPLOYEES_100_PLUS: 4,
    },
    PricingStructure.HYBRID: {
        IcpSize.SOLO_FOUNDER: 2,
        IcpSize.EMPLOYEES_1_5: 3,
        IcpSize.EMPLOYEES_6_20: 5,
        IcpSize.EMPLOYEES_21_100: 5,
        IcpSize.EMPLOYEES_100_PLUS: 3,
    },
    PricingStructure.PERFORMANCE_ONLY: {
        IcpSize.SOLO_FOUNDER: -5,
        IcpSize.EMPLOYEES_1_5: -2,
        IcpSize.EMPLOYEES_6_20: 1,
        IcpSize.EMPLOYEES_21_100: 2,
        IcpSize.EMPLOYEES_100_PLUS: -2,
    },
    PricingStructure.ONE_TIME: {
        IcpSize.SOLO_FOUNDER: 1,
        IcpSize.EMPLOYEES_1_5: 2,
        IcpSize.EMPLOYEES_6_20: 3,
        IcpSize.EMPLOYEES_21_100: 3,
        IcpSize.EMPLOYEES_100_PLUS: 2,
    },
    PricingStructure.USAGE_BASED: {
        IcpSize.SOLO_FOUNDER: -3,
        IcpSize.EMPLOYEES_1_5: -1,
        IcpSize.EMPLOYEES_6_20: 3,
        IcpSize.EMPLOYEES_21_100: 4,
        IcpSize.EMPLOYEES_100_PLUS: 5,
    },
}

# =============================================================================
# Execution feasibility (0-15)
# =============================================================================

OFFER_FEASIBILITY: dict[OfferType, int] = {
    OfferType.DEMAND_CREATION: 7,
    OfferType.DEMAND_CAPTURE: 6,
    OfferType.OUTBOUND_SALES_ENABLEMENT: 9,
    OfferType.RETENTION_MONETIZATION: 10,
    OfferType.OPERATIONAL_ENABLEMENT: 5,
}

FULFILLMENT_FEASIBILITY: dict[FulfillmentModel, int] = {
    FulfillmentModel.CUSTOM_DFY: 5,
    FulfillmentModel.PACKAGE_BASED: 8,
    FulfillmentModel.COACHING_ADVISORY: 7,
    FulfillmentModel.SOFTWARE_PLATFORM: 10,
    FulfillmentModel.STAFFING_PLACEMENT: 3,
}

# =============================================================================
# Risk alignment (0-10)
# =============================================================================

RISK_BASE: dict[RiskModel, int] = {
    RiskModel.NO_GUARANTEE: 3,
    RiskModel.CONDITIONAL_GUARANTEE: 8,
    RiskModel.FULL_GUARANTEE: -2,
    RiskModel.PERFORMANCE_ONLY: 5,
    RiskModel.PAY_AFTER_RESULTS: 6,
}

RISK_MATURITY_MODIFIER: dict[IcpMaturity, int] = {
    IcpMaturity.PRE_REVENUE: -1,
    IcpMaturity.EARLY_TRACTION: 1,
    IcpMaturity.SCALING: 3,
    IcpMaturity.MATURE: 2,
    IcpMaturity.ENTERPRISE: 2,
}

# =============================================================================
# Outbound fit (0-15)
# =============================================================================

def _promise_row(tofu, mofu, revenue, efficiency, ops, awareness, organic):
    return {
        Promise.TOP_OF_FUNNEL_VOLUME: tofu,
        Promise.MID_FUNNEL_ENGAGEMENT: mofu,
        Promise.TOP_LINE_REVENUE: revenue,
        Promise.EFFICIENCY_COST_SAVINGS: efficiency,
        Promise.OPS_COMPLIANCE_OUTCOMES: ops,
        Promise.BRAND_AWARENESS_ONLY: awareness,
        Promise.ORGANIC_GROWTH_ONLY: organic,
    }


OFFER_PROMISE_ADJUSTMENT: dict[OfferType, dict[Promise, int]] = {
    OfferType.DEMAND_CREATION: _promise_row(0, -2, -3, -3, -3, 0, 0),
    OfferType.OUTBOUND_SALES_ENABLEMENT: _promise_row(3, 2, 1, -1, -2, -3, -3),
    OfferType.DEMAND_CAPTURE: _promise_row(1, 3, 3, -1, -2, -3, -3),
    OfferType.RETENTION_MONETIZATION: _promise_row(-2, 1, 3, 0, -1, -3, -3),
    OfferType.OPERATIONAL_ENABLEMENT: _promise_row(-3, -2, -2, 3, 3, -3, -3),
}

PROOF_OUTBOUND_MODIFIER: dict[ProofLevel, int] = {
    ProofLevel.NONE: -3,
    ProofLevel.WEAK: -1,
    ProofLevel.MODERATE: 1,
    ProofLevel.STRONG: 3,
    ProofLevel.CATEGORY_KILLER: 4,
}

OUTBOUND_BASE = 10

# Violation thresholds (strictly below fires)
OUTBOUND_FLOOR = 10
EXECUTION_FLOOR = 8
PRICING_FLOOR = 10
BUYING_POWER_FLOOR = 10
RISK_FLOOR = 5
URGENCY_FLOOR = 12


def _clamp(value: int, upper: int) -> int:
    return max(0, min(value, upper))


def _price_base(config: OfferConfiguration) -> int:
    if config.pricing_structure == PricingStructure.RECURRING:
        return lookup(RECURRING_TIER_BASE, config.recurring_price_tier, "RECURRING_TIER_BASE")
    if config.pricing_structure == PricingStructure.ONE_TIME:
        return lookup(ONE_TIME_TIER_BASE, config.one_time_price_tier, "ONE_TIME_TIER_BASE")
    return UNTIERED_PRICE_BASE


def score_dimensions(config: OfferConfiguration) -> DiagnosticDimensions:
    pain = lookup(INTRINSIC_URGENCY, config.offer_type, "INTRINSIC_URGENCY") + lookup(
        MATURITY_URGENCY_BONUS, config.icp_maturity, "MATURITY_URGENCY_BONUS"
    )
    buying = lookup(SIZE_BUDGET, config.icp_size, "SIZE_BUDGET") + lookup(
        INDUSTRY_BUDGET, config.icp_industry, "INDUSTRY_BUDGET"
    )

    size_modifiers = lookup(PRICING_SIZE_MODIFIER, config.pricing_structure, "PRICING_SIZE_MODIFIER")
    pricing = _price_base(config) + lookup(size_modifiers, config.icp_size, "PRICING_SIZE_MODIFIER")

    feasibility_avg = (
        lookup(OFFER_FEASIBILITY, config.offer_type, "OFFER_FEASIBILITY")
        + lookup(FULFILLMENT_FEASIBILITY, config.fulfillment, "FULFILLMENT_FEASIBILITY")
    ) / 2
    execution = round_half_up(feasibility_avg * 1.5)

    risk = lookup(RISK_BASE, config.risk_model, "RISK_BASE") + lookup(
        RISK_MATURITY_MODIFIER, config.icp_maturity, "RISK_MATURITY_MODIFIER"
    )

    promise_row = lookup(OFFER_PROMISE_ADJUSTMENT, config.offer_type, "OFFER_PROMISE_ADJUSTMENT")
    outbound = (
        OUTBOUND_BASE
        + lookup(promise_row, config.promise, "OFFER_PROMISE_ADJUSTMENT")
        + lookup(PROOF_OUTBOUND_MODIFIER, config.proof_level, "PROOF_OUTBOUND_MODIFIER")
    )

    return DiagnosticDimensions(
        pain_urgency=_clamp(pain, 25),
        buying_power=_clamp(buying, 20),
        pricing_fit=_clamp(pricing, 20),
        execution_feasibility=_clamp(execution, 15),
        risk_alignment=_clamp(risk, 10),
        outbound_fit=_clamp(outbound, 15),
    )


def violation_flags(dimensions: DiagnosticDimensions) -> ViolationFlags:
    return ViolationFlags(
        outbound=dimensions.outbound_fit < OUTBOUND_FLOOR,
        execution=dimensions.execution_feasibility < EXECUTION_FLOOR,
        pricing=dimensions.pricing_fit < PRICING_FLOOR,
        buying_power=dimensions.buying_power < BUYING_POWER_FLOOR,
        risk=dimensions.risk_alignment < RISK_FLOOR,
        urgency=dimensions.pain_urgency < URGENCY_FLOOR,
    )
