"""Economic Feasibility (EFI) as an ordinal friction class.

Pricing structure sets the base class. Each interacting factor (performance
basis, customer size, customer maturity, guarantee model) shifts it by at
most one step; the summed shift is clamped to the class range and mapped to
a representative 0-20 score.
"""

from offer_diagnostic.core.diagnostic.rules import RuleSet, lookup
from offer_diagnostic.core.diagnostic.types import (
    FrictionClass,
    IcpMaturity,
    IcpSize,
    OfferConfiguration,
    PerformanceBasis,
    PricingStructure,
    RiskModel,
)

FRICTION_ORDER: tuple[FrictionClass, ...] = tuple(FrictionClass)

BASE_FRICTION: dict[PricingStructure, FrictionClass] = {
    PricingStructure.PERFORMANCE_ONLY: FrictionClass.LOW,
    PricingStructure.HYBRID: FrictionClass.LOW,
    PricingStructure.RECURRING: FrictionClass.MODERATE,
    PricingStructure.ONE_TIME: FrictionClass.MODERATE,
    PricingStructure.USAGE_BASED: FrictionClass.HIGH,
}

# Negative shifts reduce friction
BASIS_SHIFT: dict[PerformanceBasis, int] = {
    PerformanceBasis.PER_APPOINTMENT: -1,
    PerformanceBasis.PER_OPPORTUNITY: 0,
    PerformanceBasis.PER_CLOSED_DEAL: 0,
    PerformanceBasis.PERCENT_REVENUE: 1,
    PerformanceBasis.PERCENT_PROFIT: 1,
    PerformanceBasis.PERCENT_AD_SPEND: 1,
}

RISK_SHIFT: dict[RiskModel, int] = {
    RiskModel.NO_GUARANTEE: 1,
    RiskModel.CONDITIONAL_GUARANTEE: 0,
    RiskModel.FULL_GUARANTEE: 0,
    RiskModel.PERFORMANCE_ONLY: -1,
    RiskModel.PAY_AFTER_RESULTS: -1,
}

SMALL_SIZES = frozenset({IcpSize.SOLO_FOUNDER, IcpSize.EMPLOYEES_1_5})
LARGE_SIZES = frozenset({IcpSize.EMPLOYEES_21_100, IcpSize.EMPLOYEES_100_PLUS})
EARLY_MATURITIES = frozenset({IcpMaturity.PRE_REVENUE, IcpMaturity.EARLY_TRACTION})
LATE_MATURITIES = frozenset({IcpMaturity.MATURE, IcpMaturity.ENTERPRISE})
PERFORMANCE_STRUCTURES = frozenset({PricingStructure.PERFORMANCE_ONLY, PricingStructure.HYBRID})


def _size_shift(size: IcpSize, structure: PricingStructure) -> int:
    if size in SMALL_SIZES and structure == PricingStructure.RECURRING:
        return 1
    if size in SMALL_SIZES and structure == PricingStructure.PERFORMANCE_ONLY:
        return -1
    if size == IcpSize.EMPLOYEES_6_20 and structure == PricingStructure.HYBRID:
        return -1
    if size in LARGE_SIZES and structure == PricingStructure.RECURRING:
        return -1
    return 0


def _maturity_shift(maturity: IcpMaturity, structure: PricingStructure) -> int:
    if maturity in EARLY_MATURITIES and structure == PricingStructure.PERFORMANCE_ONLY:
        return -1
    if maturity in EARLY_MATURITIES and structure == PricingStructure.RECURRING:
        return 1
    if maturity in LATE_MATURITIES and structure == PricingStructure.RECURRING:
        return -1
    return 0


def friction_class(config: OfferConfiguration) -> FrictionClass:
    """Classify the economic friction of an offer."""
    structure = config.pricing_structure
    base = lookup(BASE_FRICTION, structure, "BASE_FRICTION")

    shift = 0
    # Performance basis only applies to structures that carry one
    if structure in PERFORMANCE_STRUCTURES and config.performance_basis is not None:
        shift += lookup(BASIS_SHIFT, config.performance_basis, "BASIS_SHIFT")
    shift += _size_shift(config.icp_size, structure)
    shift += _maturity_shift(config.icp_maturity, structure)
    shift += lookup(RISK_SHIFT, config.risk_model, "RISK_SHIFT")

    index = FRICTION_ORDER.index(base) + shift
    index = max(0, min(len(FRICTION_ORDER) - 1, index))
    return FRICTION_ORDER[index]


def score_economic_feasibility(
    config: OfferConfiguration, rules: RuleSet
) -> tuple[int, FrictionClass]:
    friction = friction_class(config)
    return lookup(rules.friction_scores, friction, "friction_scores"), friction
