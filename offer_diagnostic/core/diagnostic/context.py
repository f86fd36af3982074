"""Context modifiers and inferred buyer context.

Both are coarse categorical summaries of the configuration used to route
fixes: the same problem gets different advice for a cash-strapped solo
founder than for a funded 50-person team.
"""

from offer_diagnostic.core.diagnostic.rules import lookup
from offer_diagnostic.core.diagnostic.types import (
    ContextModifiers,
    FulfillmentModel,
    IcpIndustry,
    IcpMaturity,
    IcpSize,
    InferredContext,
    OfferConfiguration,
    OfferType,
    PricingStructure,
)

# =============================================================================
# Context modifiers
# =============================================================================

CASH_FLOW_LEVELS = ("Low", "Moderate", "High")

SIZE_TO_CASH_FLOW: dict[IcpSize, int] = {
    IcpSize.SOLO_FOUNDER: 0,
    IcpSize.EMPLOYEES_1_5: 0,
    IcpSize.EMPLOYEES_6_20: 1,
    IcpSize.EMPLOYEES_21_100: 2,
    IcpSize.EMPLOYEES_100_PLUS: 2,
}

INDUSTRY_CASH_FLOW_SHIFT: dict[IcpIndustry, int] = {
    IcpIndustry.SAAS_TECH: 1,
    IcpIndustry.B2B_SERVICE_AGENCY: -1,
    IcpIndustry.DTC_ECOMMERCE: 0,
    IcpIndustry.LOCAL_SERVICES: 0,
    IcpIndustry.PROFESSIONAL_SERVICES: 0,
}

OFFER_TO_PAIN: dict[OfferType, str] = {
    OfferType.OUTBOUND_SALES_ENABLEMENT: "Revenue",
    OfferType.DEMAND_CAPTURE: "Revenue",
    OfferType.DEMAND_CREATION: "Brand",
    OfferType.RETENTION_MONETIZATION: "Retention",
    OfferType.OPERATIONAL_ENABLEMENT: "Efficiency",
}

MATURITY_LEVEL: dict[IcpMaturity, str] = {
    IcpMaturity.PRE_REVENUE: "Pre",
    IcpMaturity.EARLY_TRACTION: "Early",
    IcpMaturity.SCALING: "Scaling",
    IcpMaturity.MATURE: "Mature",
    IcpMaturity.ENTERPRISE: "Mature",
}

FULFILLMENT_TYPE: dict[FulfillmentModel, str] = {
    FulfillmentModel.CUSTOM_DFY: "Labor",
    FulfillmentModel.PACKAGE_BASED: "Hybrid",
    FulfillmentModel.COACHING_ADVISORY: "Hybrid",
    FulfillmentModel.SOFTWARE_PLATFORM: "Automation",
    FulfillmentModel.STAFFING_PLACEMENT: "Staffing",
}

MECHANISM_LEVELS = ("Weak", "Medium", "Strong", "VeryStrong")

OFFER_MECHANISM: dict[OfferType, int] = {
    OfferType.OUTBOUND_SALES_ENABLEMENT: 2,
    OfferType.RETENTION_MONETIZATION: 2,
    OfferType.DEMAND_CAPTURE: 1,
    OfferType.DEMAND_CREATION: 0,
    OfferType.OPERATIONAL_ENABLEMENT: 1,
}

PRICING_MECHANISM_BOOST: dict[PricingStructure, int] = {
    PricingStructure.RECURRING: 0,
    PricingStructure.ONE_TIME: 0,
    PricingStructure.PERFORMANCE_ONLY: 2,
    PricingStructure.USAGE_BASED: 1,
    PricingStructure.HYBRID: 1,
}

# =============================================================================
# Inferred context
# =============================================================================

CAPITAL_INTENSITY: dict[IcpIndustry, str] = {
    IcpIndustry.LOCAL_SERVICES: "medium",
    IcpIndustry.PROFESSIONAL_SERVICES: "medium",
    IcpIndustry.DTC_ECOMMERCE: "medium",
    IcpIndustry.B2B_SERVICE_AGENCY: "low",
    IcpIndustry.SAAS_TECH: "variable",
}

SALES_MOTION: dict[PricingStructure, str] = {
    PricingStructure.RECURRING: "sales-led",
    PricingStructure.HYBRID: "sales-led",
    PricingStructure.ONE_TIME: "project-led",
    PricingStructure.PERFORMANCE_ONLY: "conversion-led",
    PricingStructure.USAGE_BASED: "product-led",
}

MARKET_AWARENESS: dict[IcpMaturity, str] = {
    IcpMaturity.PRE_REVENUE: "problem-unaware",
    IcpMaturity.EARLY_TRACTION: "problem-aware",
    IcpMaturity.SCALING: "solution-aware",
    IcpMaturity.MATURE: "vendor-aware",
    IcpMaturity.ENTERPRISE: "vendor-aware",
}

PROOF_EXPECTATION: dict[IcpMaturity, str] = {
    IcpMaturity.PRE_REVENUE: "low",
    IcpMaturity.EARLY_TRACTION: "low",
    IcpMaturity.SCALING: "medium",
    IcpMaturity.MATURE: "high",
    IcpMaturity.ENTERPRISE: "high",
}

BUDGET_EXPECTATION: dict[IcpSize, str] = {
    IcpSize.SOLO_FOUNDER: "low",
    IcpSize.EMPLOYEES_1_5: "low",
    IcpSize.EMPLOYEES_6_20: "medium",
    IcpSize.EMPLOYEES_21_100: "high",
    IcpSize.EMPLOYEES_100_PLUS: "high",
}


def context_modifiers(config: OfferConfiguration) -> ContextModifiers:
    cash_index = lookup(SIZE_TO_CASH_FLOW, config.icp_size, "SIZE_TO_CASH_FLOW") + lookup(
        INDUSTRY_CASH_FLOW_SHIFT, config.icp_industry, "INDUSTRY_CASH_FLOW_SHIFT"
    )
    cash_index = max(0, min(cash_index, len(CASH_FLOW_LEVELS) - 1))

    mechanism_index = lookup(OFFER_MECHANISM, config.offer_type, "OFFER_MECHANISM") + lookup(
        PRICING_MECHANISM_BOOST, config.pricing_structure, "PRICING_MECHANISM_BOOST"
    )
    mechanism_index = min(mechanism_index, len(MECHANISM_LEVELS) - 1)

    return ContextModifiers(
        cash_flow=CASH_FLOW_LEVELS[cash_index],
        pain_type=lookup(OFFER_TO_PAIN, config.offer_type, "OFFER_TO_PAIN"),
        maturity=lookup(MATURITY_LEVEL, config.icp_maturity, "MATURITY_LEVEL"),
        fulfillment=lookup(FULFILLMENT_TYPE, config.fulfillment, "FULFILLMENT_TYPE"),
        mechanism_strength=MECHANISM_LEVELS[mechanism_index],
    )


def infer_context(config: OfferConfiguration) -> InferredContext:
    return InferredContext(
        vertical_capital_intensity=lookup(CAPITAL_INTENSITY, config.icp_industry, "CAPITAL_INTENSITY"),
        sales_motion=lookup(SALES_MOTION, config.pricing_structure, "SALES_MOTION"),
        market_awareness=lookup(MARKET_AWARENESS, config.icp_maturity, "MARKET_AWARENESS"),
        proof_expectation=lookup(PROOF_EXPECTATION, config.icp_maturity, "PROOF_EXPECTATION"),
        budget_expectation=lookup(BUDGET_EXPECTATION, config.icp_size, "BUDGET_EXPECTATION"),
    )
