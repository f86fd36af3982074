"""Targeting-specificity strength."""

from offer_diagnostic.core.diagnostic.rules import RuleSet, lookup
from offer_diagnostic.core.diagnostic.types import OfferConfiguration


def score_icp_specificity(config: OfferConfiguration, rules: RuleSet) -> int:
    return lookup(rules.specificity_scores, config.icp_specificity, "specificity_scores")
