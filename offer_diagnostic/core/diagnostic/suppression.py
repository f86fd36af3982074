"""Already-satisfied fix suppression.

Drops any fix text that asks for something the configuration already has,
whether or not the cause that produced it fired. Matching is
case-insensitive substring matching over a short phrase list per rule.
"""

from collections.abc import Callable
from dataclasses import dataclass

from offer_diagnostic.core.diagnostic.types import (
    FulfillmentModel,
    IcpSpecificity,
    OfferConfiguration,
    PricingStructure,
    ProofLevel,
    RiskModel,
)


@dataclass
class SatisfiedRule:
    """Phrases that are redundant once the condition holds."""

    condition: Callable[[OfferConfiguration], bool]
    phrases: tuple[str, ...]


SATISFIED_RULES = [
    SatisfiedRule(
        condition=lambda c: c.risk_model == RiskModel.CONDITIONAL_GUARANTEE,
        phrases=("conditional guarantee",),
    ),
    SatisfiedRule(
        condition=lambda c: c.risk_model == RiskModel.PAY_AFTER_RESULTS,
        phrases=("pay-after-results", "pay after results"),
    ),
    SatisfiedRule(
        condition=lambda c: c.risk_model
        in (RiskModel.CONDITIONAL_GUARANTEE, RiskModel.FULL_GUARANTEE),
        phrases=("add guarantee", "add strong guarantee", "add performance guarantee"),
    ),
    SatisfiedRule(
        condition=lambda c: c.pricing_structure == PricingStructure.HYBRID,
        phrases=("hybrid pricing", "to hybrid"),
    ),
    SatisfiedRule(
        condition=lambda c: c.pricing_structure == PricingStructure.PERFORMANCE_ONLY,
        phrases=("switch to performance", "performance-only pricing"),
    ),
    SatisfiedRule(
        condition=lambda c: c.pricing_structure == PricingStructure.RECURRING,
        phrases=("move to recurring", "retainer commitment", "pure retainer"),
    ),
    SatisfiedRule(
        condition=lambda c: c.fulfillment
        in (FulfillmentModel.PACKAGE_BASED, FulfillmentModel.SOFTWARE_PLATFORM),
        phrases=("productize", "package deliverables"),
    ),
    SatisfiedRule(
        condition=lambda c: c.proof_level
        in (ProofLevel.MODERATE, ProofLevel.STRONG, ProofLevel.CATEGORY_KILLER),
        phrases=("testimonials", "first clients"),
    ),
    SatisfiedRule(
        condition=lambda c: c.icp_specificity == IcpSpecificity.EXACT,
        phrases=("narrow vertical", "narrow icp"),
    ),
]


def satisfied_phrases(config: OfferConfiguration) -> list[str]:
    """Every phrase made redundant by the current configuration."""
    return [
        phrase
        for rule in SATISFIED_RULES
        if rule.condition(config)
        for phrase in rule.phrases
    ]


def is_satisfied(text: str, phrases: list[str]) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in phrases)


def drop_satisfied(texts: list[str], phrases: list[str]) -> list[str]:
    return [text for text in texts if not is_satisfied(text, phrases)]
