"""Viable monthly price bands by customer size and proof strength.

The band check drives the pricing-band lock: pricing fixes, and selection of
economic feasibility as a non-gate bottleneck, are only allowed when the
current price sits outside its band.
"""

from dataclasses import dataclass

from offer_diagnostic.core.diagnostic.rules import lookup
from offer_diagnostic.core.diagnostic.types import (
    IcpSize,
    OfferConfiguration,
    OneTimePriceTier,
    PricingStructure,
    ProofLevel,
    RecurringPriceTier,
)

# (lower, upper) monthly-equivalent price
PRICING_BANDS: dict[IcpSize, dict[ProofLevel, tuple[int, int]]] = {
    IcpSize.SOLO_FOUNDER: {
        ProofLevel.NONE: (100, 500),
        ProofLevel.WEAK: (150, 750),
        ProofLevel.MODERATE: (250, 1500),
        ProofLevel.STRONG: (500, 3000),
        ProofLevel.CATEGORY_KILLER: (1000, 5000),
    },
    IcpSize.EMPLOYEES_1_5: {
        ProofLevel.NONE: (200, 1000),
        ProofLevel.WEAK: (300, 1500),
        ProofLevel.MODERATE: (500, 3000),
        ProofLevel.STRONG: (1000, 5000),
        ProofLevel.CATEGORY_KILLER: (2000, 10000),
    },
    IcpSize.EMPLOYEES_6_20: {
        ProofLevel.NONE: (500, 2000),
        ProofLevel.WEAK: (750, 3000),
        ProofLevel.MODERATE: (1000, 5000),
        ProofLevel.STRONG: (2000, 10000),
        ProofLevel.CATEGORY_KILLER: (5000, 25000),
    },
    IcpSize.EMPLOYEES_21_100: {
        ProofLevel.NONE: (1000, 5000),
        ProofLevel.WEAK: (1500, 7500),
        ProofLevel.MODERATE: (2500, 15000),
        ProofLevel.STRONG: (5000, 30000),
        ProofLevel.CATEGORY_KILLER: (10000, 75000),
    },
    IcpSize.EMPLOYEES_100_PLUS: {
        ProofLevel.NONE: (2500, 10000),
        ProofLevel.WEAK: (5000, 20000),
        ProofLevel.MODERATE: (7500, 50000),
        ProofLevel.STRONG: (15000, 100000),
        ProofLevel.CATEGORY_KILLER: (25000, 250000),
    },
}

RETAINER_PRICE_VALUES: dict[RecurringPriceTier, int] = {
    RecurringPriceTier.UNDER_150: 100,
    RecurringPriceTier.FROM_150_TO_500: 325,
    RecurringPriceTier.FROM_500_TO_2K: 1250,
    RecurringPriceTier.FROM_2K_TO_5K: 3500,
    RecurringPriceTier.OVER_5K: 7500,
}

# One-time projects spread over a six month relationship
ONE_TIME_PRICE_VALUES: dict[OneTimePriceTier, int] = {
    OneTimePriceTier.UNDER_3K: 500,
    OneTimePriceTier.FROM_3K_TO_10K: 1100,
    OneTimePriceTier.OVER_10K: 3000,
}


@dataclass(frozen=True)
class PricingBandStatus:
    monthly_price: int | None
    lower: int
    upper: int

    @property
    def within_band(self) -> bool | None:
        """None when the structure has no comparable monthly price."""
        if self.monthly_price is None:
            return None
        return self.lower <= self.monthly_price <= self.upper

    @property
    def underpriced(self) -> bool:
        return self.monthly_price is not None and self.monthly_price < self.lower

    @property
    def overpriced(self) -> bool:
        return self.monthly_price is not None and self.monthly_price > self.upper

    @property
    def locked(self) -> bool:
        """Pricing changes are off the table while the price is inside its band."""
        return self.within_band is True


def monthly_price(config: OfferConfiguration) -> int | None:
    """Approximate monthly price; None for performance-only and usage-based pricing."""
    structure = config.pricing_structure
    if structure == PricingStructure.RECURRING:
        return lookup(RETAINER_PRICE_VALUES, config.recurring_price_tier, "RETAINER_PRICE_VALUES")
    if structure == PricingStructure.HYBRID:
        return lookup(RETAINER_PRICE_VALUES, config.hybrid_retainer_tier, "RETAINER_PRICE_VALUES")
    if structure == PricingStructure.ONE_TIME:
        return lookup(ONE_TIME_PRICE_VALUES, config.one_time_price_tier, "ONE_TIME_PRICE_VALUES")
    return None


def pricing_band_status(config: OfferConfiguration) -> PricingBandStatus:
    by_proof = lookup(PRICING_BANDS, config.icp_size, "PRICING_BANDS")
    lower, upper = lookup(by_proof, config.proof_level, "PRICING_BANDS")
    return PricingBandStatus(monthly_price=monthly_price(config), lower=lower, upper=upper)
