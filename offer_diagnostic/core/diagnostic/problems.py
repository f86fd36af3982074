"""Problem stack: the top three structural problems, weighted by impact."""

from offer_diagnostic.core.diagnostic.rules import lookup
from offer_diagnostic.core.diagnostic.types import (
    DetectedProblem,
    DiagnosticDimensions,
    IcpIndustry,
    IcpMaturity,
    OfferConfiguration,
    OfferType,
    ProblemCategory,
)

MAX_PROBLEMS = 3

VALID_ICP_MATCHES: dict[OfferType, frozenset[IcpIndustry]] = {
    OfferType.DEMAND_CREATION: frozenset({
        IcpIndustry.DTC_ECOMMERCE, IcpIndustry.SAAS_TECH, IcpIndustry.PROFESSIONAL_SERVICES,
    }),
    OfferType.DEMAND_CAPTURE: frozenset({
        IcpIndustry.LOCAL_SERVICES, IcpIndustry.DTC_ECOMMERCE, IcpIndustry.PROFESSIONAL_SERVICES,
    }),
    OfferType.OUTBOUND_SALES_ENABLEMENT: frozenset({
        IcpIndustry.PROFESSIONAL_SERVICES, IcpIndustry.B2B_SERVICE_AGENCY, IcpIndustry.SAAS_TECH,
    }),
    OfferType.RETENTION_MONETIZATION: frozenset({
        IcpIndustry.DTC_ECOMMERCE, IcpIndustry.SAAS_TECH,
    }),
    OfferType.OPERATIONAL_ENABLEMENT: frozenset({
        IcpIndustry.PROFESSIONAL_SERVICES, IcpIndustry.B2B_SERVICE_AGENCY, IcpIndustry.SAAS_TECH,
    }),
}

MATURITY_ORDER: dict[IcpMaturity, int] = {
    IcpMaturity.PRE_REVENUE: 0,
    IcpMaturity.EARLY_TRACTION: 1,
    IcpMaturity.SCALING: 2,
    IcpMaturity.MATURE: 3,
    IcpMaturity.ENTERPRISE: 4,
}

REQUIRED_MATURITY: dict[OfferType, int] = {
    OfferType.DEMAND_CREATION: 1,
    OfferType.DEMAND_CAPTURE: 0,
    OfferType.OUTBOUND_SALES_ENABLEMENT: 2,
    OfferType.RETENTION_MONETIZATION: 2,
    OfferType.OPERATIONAL_ENABLEMENT: 2,
}

IMPACT_WEIGHTS: dict[ProblemCategory, int] = {
    ProblemCategory.ICP_MISMATCH: 5,
    ProblemCategory.OFFER_TYPE_MISFIT: 5,
    ProblemCategory.PRICING_MISFIT: 4,
    ProblemCategory.LOW_BUYING_POWER: 4,
    ProblemCategory.LOW_PAIN_URGENCY: 3,
    ProblemCategory.FULFILLMENT_MISALIGNMENT: 2,
    ProblemCategory.RISK_MISALIGNMENT: 1,
}

PROBLEM_LABELS: dict[ProblemCategory, str] = {
    ProblemCategory.ICP_MISMATCH: "ICP Mismatch",
    ProblemCategory.OFFER_TYPE_MISFIT: "Offer Type Misfit",
    ProblemCategory.LOW_BUYING_POWER: "Low Buying Power",
    ProblemCategory.PRICING_MISFIT: "Pricing Misfit",
    ProblemCategory.RISK_MISALIGNMENT: "Risk Misalignment",
    ProblemCategory.LOW_PAIN_URGENCY: "Low Pain Urgency",
    ProblemCategory.FULFILLMENT_MISALIGNMENT: "Fulfillment Misalignment",
}

# (problem, why it matters)
PROBLEM_SUMMARIES: dict[ProblemCategory, tuple[str, str]] = {
    ProblemCategory.ICP_MISMATCH: (
        "Your ICP does not align with your offer type.",
        "Selling to the wrong audience wastes resources and stalls growth.",
    ),
    ProblemCategory.OFFER_TYPE_MISFIT: (
        "Your offer type does not match ICP maturity.",
        "Immature ICPs cannot utilize complex offers effectively.",
    ),
    ProblemCategory.LOW_BUYING_POWER: (
        "Your target ICP lacks sufficient budget.",
        "Low-budget buyers stall sales cycles and reduce close rates.",
    ),
    ProblemCategory.PRICING_MISFIT: (
        "Your pricing structure misaligns with ICP expectations.",
        "Pricing friction slows velocity and causes sticker shock.",
    ),
    ProblemCategory.RISK_MISALIGNMENT: (
        "Your risk structure does not match ICP maturity.",
        "Mismatched risk reduces trust and makes deals harder to close.",
    ),
    ProblemCategory.LOW_PAIN_URGENCY: (
        "Your offer does not solve an urgent pain.",
        "Low urgency means buyers delay decisions indefinitely.",
    ),
    ProblemCategory.FULFILLMENT_MISALIGNMENT: (
        "Your fulfillment model creates execution challenges.",
        "Complex fulfillment kills margins and increases churn.",
    ),
}

MISMATCH_SEVERITY = 5

# Threshold-based problems: category -> (dimension field, threshold)
THRESHOLD_PROBLEMS: dict[ProblemCategory, tuple[str, int]] = {
    ProblemCategory.LOW_BUYING_POWER: ("buying_power", 12),
    ProblemCategory.PRICING_MISFIT: ("pricing_fit", 10),
    ProblemCategory.RISK_MISALIGNMENT: ("risk_alignment", 5),
    ProblemCategory.LOW_PAIN_URGENCY: ("pain_urgency", 12),
    ProblemCategory.FULFILLMENT_MISALIGNMENT: ("execution_feasibility", 10),
}


def _detected(category: ProblemCategory, severity: int) -> DetectedProblem:
    problem, why = lookup(PROBLEM_SUMMARIES, category, "PROBLEM_SUMMARIES")
    return DetectedProblem(
        category=category,
        label=lookup(PROBLEM_LABELS, category, "PROBLEM_LABELS"),
        problem=problem,
        why_it_matters=why,
        severity=severity,
    )


def detect_problems(
    config: OfferConfiguration, dimensions: DiagnosticDimensions
) -> list[DetectedProblem]:
    found: list[DetectedProblem] = []

    valid = lookup(VALID_ICP_MATCHES, config.offer_type, "VALID_ICP_MATCHES")
    if config.icp_industry not in valid:
        found.append(_detected(ProblemCategory.ICP_MISMATCH, MISMATCH_SEVERITY))

    required = lookup(REQUIRED_MATURITY, config.offer_type, "REQUIRED_MATURITY")
    if lookup(MATURITY_ORDER, config.icp_maturity, "MATURITY_ORDER") < required:
        found.append(_detected(ProblemCategory.OFFER_TYPE_MISFIT, MISMATCH_SEVERITY))

    for category, (field_name, threshold) in THRESHOLD_PROBLEMS.items():
        value = getattr(dimensions, field_name)
        if value < threshold:
            # Severity is the distance below threshold
            found.append(_detected(category, max(1, threshold - value)))

    found.sort(
        key=lambda p: IMPACT_WEIGHTS[p.category] * p.severity,
        reverse=True,
    )
    return found[:MAX_PROBLEMS]
