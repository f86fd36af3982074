"""Fulfillment Scalability."""

from offer_diagnostic.core.diagnostic.rules import RuleSet, lookup
from offer_diagnostic.core.diagnostic.types import (
    FulfillmentModel,
    IcpSize,
    OfferConfiguration,
    PricingStructure,
)

FULFILLMENT_ADJUSTMENT: dict[FulfillmentModel, int] = {
    FulfillmentModel.SOFTWARE_PLATFORM: 10,
    FulfillmentModel.PACKAGE_BASED: 6,
    FulfillmentModel.COACHING_ADVISORY: 2,
    FulfillmentModel.CUSTOM_DFY: -5,
    FulfillmentModel.STAFFING_PLACEMENT: -8,
}

SMALL_SIZES = frozenset({IcpSize.SOLO_FOUNDER, IcpSize.EMPLOYEES_1_5})
LARGE_SIZES = frozenset({IcpSize.EMPLOYEES_21_100, IcpSize.EMPLOYEES_100_PLUS})

BASE_SCORE = 10


def score_fulfillment_scalability(config: OfferConfiguration, rules: RuleSet) -> int:
    model = config.fulfillment
    score = BASE_SCORE + lookup(FULFILLMENT_ADJUSTMENT, model, "FULFILLMENT_ADJUSTMENT")

    # Labor-heavy delivery paid only on results
    if model == FulfillmentModel.CUSTOM_DFY and config.pricing_structure == PricingStructure.PERFORMANCE_ONLY:
        score -= 4

    # Labor-heavy delivery into large accounts
    if model == FulfillmentModel.CUSTOM_DFY and config.icp_size in LARGE_SIZES:
        score -= 4

    # Advisory work suits small teams
    if model == FulfillmentModel.COACHING_ADVISORY and config.icp_size in SMALL_SIZES:
        score += 2

    return max(0, min(rules.dimension_max, score))
