"""Offer evaluation pipeline.

Runs every diagnostic stage in order over one complete configuration and
returns a single EvaluationResult. The pipeline is pure: the same
configuration and rule set always produce the same result.
"""

import logging

from offer_diagnostic.core.diagnostic.aggregate import alignment_score, readiness_label
from offer_diagnostic.core.diagnostic.bottleneck import select_bottleneck
from offer_diagnostic.core.diagnostic.causes import (
    infer_causes,
    prioritize_fixes,
    screen_cause_fixes,
)
from offer_diagnostic.core.diagnostic.context import context_modifiers, infer_context
from offer_diagnostic.core.diagnostic.dimensions import score_dimensions, violation_flags
from offer_diagnostic.core.diagnostic.fixes import build_context_fixes
from offer_diagnostic.core.diagnostic.gates import evaluate_gates
from offer_diagnostic.core.diagnostic.latents import score_latents
from offer_diagnostic.core.diagnostic.pricing import pricing_band_status
from offer_diagnostic.core.diagnostic.problems import detect_problems
from offer_diagnostic.core.diagnostic.recommendations import build_recommendations
from offer_diagnostic.core.diagnostic.rules import DEFAULT_RULES, RuleSet
from offer_diagnostic.core.diagnostic.stabilization import build_stabilization_context
from offer_diagnostic.core.diagnostic.trace import Tracer
from offer_diagnostic.core.diagnostic.types import EvaluationResult, OfferConfiguration
from offer_diagnostic.core.diagnostic.validation import missing_fields
from offer_diagnostic.core.diagnostic.violations import detect_violations, screen_violation_advice
from offer_diagnostic.core.logging import get_logger, log_with_context

logger = get_logger(__name__)


def check_top_k(top_k: int | None, rules: RuleSet) -> int:
    if top_k is None:
        return rules.default_top_k
    if not 1 <= top_k <= rules.max_top_k:
        raise ValueError(f"top_k must be between 1 and {rules.max_top_k}, got {top_k}")
    return top_k


def evaluate(
    config: OfferConfiguration,
    rules: RuleSet = DEFAULT_RULES,
    top_k: int | None = None,
) -> EvaluationResult | None:
    """
    Evaluate an offer configuration.

    Args:
        config: Offer configuration to evaluate
        rules: Rule set to score against
        top_k: Number of recommendations and prioritized fixes to keep (1-5)

    Returns:
        EvaluationResult, or None when the configuration is incomplete.
        None means "not yet evaluable", never a zero score.

    Raises:
        ValueError: If top_k is outside 1..rules.max_top_k
        InvariantViolation: If a value reaches a table outside its domain
    """
    top_k = check_top_k(top_k, rules)
    tracer = Tracer()

    # =========================================================================
    # Validation
    # =========================================================================
    missing = missing_fields(config)
    tracer.emit("validation", complete=not missing, missing=missing)
    if missing:
        log_with_context(
            logger,
            logging.INFO,
            "Configuration incomplete, skipping evaluation",
            evaluation_id=tracer.evaluation_id,
            missing=",".join(missing),
        )
        return None

    # =========================================================================
    # Latent scores, gates, aggregation
    # =========================================================================
    latents = score_latents(config, rules)
    tracer.emit(
        "latents",
        scores={key.value: score for key, score in latents.as_dict().items()},
        friction_class=latents.friction_class.value,
        channel_blocking=latents.channel_blocking,
    )

    gates = evaluate_gates(config, latents, rules)
    tracer.emit(
        "gates",
        hard_gates=gates.hard_gates,
        soft_gates=gates.soft_gates,
        failed_dimension=gates.failed_dimension.value if gates.failed_dimension else None,
        score_cap=gates.score_cap,
    )

    score = alignment_score(latents, gates, rules)
    ready = gates.passed
    label = readiness_label(score, ready, rules)
    optimization_level = ready and score >= rules.optimization_score
    tracer.emit(
        "aggregation",
        alignment_score=score,
        readiness_label=label.value,
        ready=ready,
        optimization_level=optimization_level,
    )

    # =========================================================================
    # Bottleneck
    # =========================================================================
    pricing = pricing_band_status(config)
    bottleneck = select_bottleneck(latents, gates, pricing, rules)
    tracer.emit(
        "bottleneck",
        dimension=bottleneck.dimension.value,
        severity=bottleneck.severity.value,
        actionable=bottleneck.actionable,
        pricing_locked=pricing.locked,
    )

    # =========================================================================
    # Violations and causes
    # =========================================================================
    dimensions = score_dimensions(config)
    flags = violation_flags(dimensions)
    violations = detect_violations(config, flags)
    tracer.emit(
        "violations",
        flags=flags.model_dump(),
        violations=[v.id for v in violations],
    )

    modifiers = context_modifiers(config)
    causes = infer_causes(config, flags, infer_context(config))
    tracer.emit("causes", causes=[c.id for c in causes], modifiers=modifiers.model_dump())

    # =========================================================================
    # Stabilization and fix routing
    # =========================================================================
    stabilization = build_stabilization_context(config, latents, pricing, rules)
    tracer.emit("stabilization", **stabilization.summary())

    causes, blocked = screen_cause_fixes(causes, stabilization)
    violations, advice_blocked = screen_violation_advice(violations, stabilization)
    blocked.extend(advice_blocked)
    fixes = prioritize_fixes(causes, config, rules, top_k)
    problems = detect_problems(config, dimensions)
    context_fixes, context_blocked = build_context_fixes(
        config, dimensions, problems, modifiers, stabilization
    )
    blocked.extend(context_blocked)
    tracer.emit(
        "fixes",
        fixes=len(fixes),
        problems=[p.category.value for p in problems],
        context_fixes=[f.id for f in context_fixes],
        blocked=len(blocked),
    )

    # =========================================================================
    # Recommendations
    # =========================================================================
    recommendations, rec_blocked = build_recommendations(
        config, ready, bottleneck, violations, stabilization, optimization_level, top_k
    )
    blocked.extend(rec_blocked)
    tracer.emit(
        "recommendations",
        recommendations=[r.id for r in recommendations],
        blocked=[b.id for b in rec_blocked],
    )

    log_with_context(
        logger,
        logging.INFO,
        "Evaluation complete",
        evaluation_id=tracer.evaluation_id,
        rule_set=rules.version,
        alignment_score=score,
        ready=ready,
        bottleneck=bottleneck.dimension.value,
    )

    return EvaluationResult(
        rule_set_version=rules.version,
        alignment_score=score,
        readiness_label=label,
        ready=ready,
        latent_scores=latents,
        gates=gates,
        bottleneck=bottleneck,
        is_at_local_optimum=stabilization.at_local_optimum,
        is_optimization_level=optimization_level,
        dimensions=dimensions,
        violations=violations,
        causes=causes,
        fixes=fixes,
        context_modifiers=modifiers,
        problems=problems,
        context_fixes=context_fixes,
        recommendations=recommendations,
        blocked=blocked,
        trace=tracer.events,
    )
