"""Completeness checks for an offer configuration."""

from offer_diagnostic.core.diagnostic.rules import lookup
from offer_diagnostic.core.diagnostic.types import OfferConfiguration, PricingStructure

REQUIRED_FIELDS: tuple[str, ...] = (
    "offer_type",
    "promise",
    "icp_industry",
    "vertical_segment",
    "icp_size",
    "icp_maturity",
    "icp_specificity",
    "pricing_structure",
    "risk_model",
    "fulfillment",
    "proof_level",
)

# Tier fields required by each pricing structure
CONDITIONAL_FIELDS: dict[PricingStructure, tuple[str, ...]] = {
    PricingStructure.RECURRING: ("recurring_price_tier",),
    PricingStructure.ONE_TIME: ("one_time_price_tier",),
    PricingStructure.USAGE_BASED: ("usage_output_type", "usage_volume_tier"),
    PricingStructure.HYBRID: (
        "hybrid_retainer_tier",
        "performance_basis",
        "performance_comp_tier",
    ),
    PricingStructure.PERFORMANCE_ONLY: ("performance_basis", "performance_comp_tier"),
}


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def missing_fields(config: OfferConfiguration) -> list[str]:
    """List required fields that are absent, including structure-specific tiers."""
    missing = [name for name in REQUIRED_FIELDS if _is_blank(getattr(config, name))]

    if config.pricing_structure is not None:
        conditional = lookup(CONDITIONAL_FIELDS, config.pricing_structure, "CONDITIONAL_FIELDS")
        missing.extend(name for name in conditional if getattr(config, name) is None)

    return missing


def is_complete(config: OfferConfiguration) -> bool:
    return not missing_fields(config)
