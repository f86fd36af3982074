"""Channel Fit: how directly the offer can be sold through cold outbound."""

from offer_diagnostic.core.diagnostic.rules import RuleSet
from offer_diagnostic.core.diagnostic.types import (
    FulfillmentModel,
    OfferConfiguration,
    OfferType,
    Promise,
)

# Promises that outbound cannot trigger directly
INCOMPATIBLE_PROMISES = frozenset({Promise.BRAND_AWARENESS_ONLY, Promise.ORGANIC_GROWTH_ONLY})

OUTBOUND_COMPATIBLE = frozenset({
    OfferType.DEMAND_CAPTURE,
    OfferType.DEMAND_CREATION,
    OfferType.OUTBOUND_SALES_ENABLEMENT,
    OfferType.RETENTION_MONETIZATION,
})

INCOMPATIBLE_REASON = "Promise is not directly triggerable via outbound"


def score_channel_fit(config: OfferConfiguration, rules: RuleSet) -> tuple[int, bool]:
    """Return (score, blocking). Blocking feeds the hard gate directly."""
    if config.promise in INCOMPATIBLE_PROMISES:
        return rules.channel_incompatible, True

    if config.offer_type in OUTBOUND_COMPATIBLE:
        return rules.channel_compatible, False

    if (
        config.offer_type == OfferType.OPERATIONAL_ENABLEMENT
        and config.fulfillment == FulfillmentModel.PACKAGE_BASED
    ):
        return rules.channel_conditional, False

    return rules.channel_fallback, False
