"""Offer readiness diagnostic.

Scores an offer configuration on six latent dimensions, applies hard and
soft viability gates, picks the single bottleneck and produces stabilized,
ranked recommendations.

Usage:
    from offer_diagnostic.core.diagnostic import OfferConfiguration, evaluate

    result = evaluate(OfferConfiguration(**form_values))
    if result is None:
        ...  # not yet evaluable; see missing_fields()
"""

from offer_diagnostic.core.diagnostic.errors import (
    InvariantViolation,
    RecommendationPhrasingError,
)
from offer_diagnostic.core.diagnostic.evaluate import evaluate
from offer_diagnostic.core.diagnostic.rules import DEFAULT_RULES, LATENT_LABELS, RuleSet
from offer_diagnostic.core.diagnostic.snapshot import DiagnosticSnapshot
from offer_diagnostic.core.diagnostic.types import (
    EvaluationResult,
    LatentKey,
    OfferConfiguration,
    StructuredRecommendation,
)
from offer_diagnostic.core.diagnostic.validation import is_complete, missing_fields

__all__ = [
    "DEFAULT_RULES",
    "DiagnosticSnapshot",
    "EvaluationResult",
    "InvariantViolation",
    "LATENT_LABELS",
    "LatentKey",
    "OfferConfiguration",
    "RecommendationPhrasingError",
    "RuleSet",
    "StructuredRecommendation",
    "evaluate",
    "is_complete",
    "missing_fields",
]
