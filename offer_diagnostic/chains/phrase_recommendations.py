"""Phrase recommendations for an evaluated offer using Claude.

The deterministic pipeline has already decided the score, readiness and
bottleneck; the model only writes prose around them. Output goes through
the same category and stabilization checks as deterministic
recommendations, so a phrased result can never contradict the locks.

Uses Anthropic tool_use for forced structured output.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from pydantic import ValidationError

from offer_diagnostic.core.config import get_settings
from offer_diagnostic.core.diagnostic.errors import RecommendationPhrasingError
from offer_diagnostic.core.diagnostic.pricing import pricing_band_status
from offer_diagnostic.core.diagnostic.recommendations import ALLOWED_CATEGORIES, screen
from offer_diagnostic.core.diagnostic.rules import DEFAULT_RULES, LATENT_LABELS, RuleSet
from offer_diagnostic.core.diagnostic.stabilization import (
    StabilizationContext,
    build_stabilization_context,
)
from offer_diagnostic.core.diagnostic.types import (
    BlockedCandidate,
    EvaluationResult,
    FixCategory,
    LatentKey,
    OfferConfiguration,
    StructuredRecommendation,
)
from offer_diagnostic.core.llm import extract_tool_input

logger = logging.getLogger(__name__)

_MAX_RETRIES = 2
_INITIAL_DELAY = 1.0

MAX_PHRASED = 2


# =============================================================================
# Tool schema for forced structured output
# =============================================================================

PHRASING_TOOL = {
    "name": "submit_recommendations",
    "description": "Submit the phrased recommendations.",
    "input_schema": {
        "type": "object",
        "properties": {
            "recommendations": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "headline": {"type": "string", "description": "Clear, decisive headline"},
                        "explanation": {
                            "type": "string",
                            "description": "Why this matters for outbound",
                        },
                        "action_steps": {
                            "type": "array",
                            "items": {"type": "string"},
                            "minItems": 1,
                            "maxItems": 4,
                        },
                        "desired_state": {
                            "type": "string",
                            "description": "What good looks like for outbound",
                        },
                        "category": {
                            "type": "string",
                            "enum": [c.value for c in FixCategory],
                        },
                    },
                    "required": [
                        "headline",
                        "explanation",
                        "action_steps",
                        "desired_state",
                        "category",
                    ],
                },
                "minItems": 1,
                "maxItems": MAX_PHRASED,
            },
        },
        "required": ["recommendations"],
    },
}


# =============================================================================
# System prompt
# =============================================================================

SYSTEM_PROMPT = """You are a senior B2B go-to-market advisor specializing in OUTBOUND sales readiness.
You give founders direct, practical advice to improve their offer for outbound.

## You do not compute anything
Scores, readiness and the primary bottleneck are computed before you see them.
Treat them as fact. Never challenge them and never introduce a different bottleneck.

## Rules
1. If outbound is BLOCKED, say so plainly and give 1-2 corrective actions aimed only at the primary bottleneck.
2. If outbound is READY, confirm it and give 1-2 optimizations of the primary bottleneck. These are optimizations, not prerequisites.
3. Never recommend moving away from outbound. Do not suggest inbound, SEO, ads, partnerships, referrals or content as an alternative channel.
4. Only use the categories listed as allowed in the request.
5. Respect every constraint listed in the request. Anything marked as already correct or to preserve must not be changed.
6. When the offer is at a local optimum, only refinements are allowed. Do not use the words switch, change, shift, restructure, pivot or replace.

Tone: clear, direct, consulting-grade. No fluff, no generic advice.
"""

BOTTLENECK_FOCUS: dict[LatentKey, str] = {
    LatentKey.ECONOMIC_FEASIBILITY: (
        "Talk only about pricing math, ICP affordability and unit economics."
    ),
    LatentKey.PROOF_TO_PROMISE: (
        "Talk only about promise scope, how proof is presented and specificity. "
        "Never recommend pricing changes."
    ),
    LatentKey.FULFILLMENT_SCALABILITY: (
        "Talk only about delivery constraints, leverage and systems. "
        "Never recommend ICP or pricing changes."
    ),
    LatentKey.RISK_ALIGNMENT: "Talk only about guarantees, downside framing and incentives.",
    LatentKey.CHANNEL_FIT: (
        "Talk only about outbound suitability, sales motion and buying behavior."
    ),
    LatentKey.ICP_SPECIFICITY: (
        "Talk only about who the offer is for and how tightly the target list is defined."
    ),
}


# =============================================================================
# Prompt assembly
# =============================================================================


def _constraints(ctx: StabilizationContext) -> list[str]:
    lines: list[str] = []
    for selection in ctx.already_correct:
        lines.append(f"- The {selection} is already correct. Do NOT recommend changing it.")
    for item in ctx.must_preserve:
        lines.append(f"- Preserve the current {item}.")
    if ctx.pricing.locked:
        lines.append("- Price is inside its viable band. Do NOT recommend pricing changes.")
    if ctx.fulfillment_blocked:
        lines.append(
            "- Fulfillment is already productized. Do NOT recommend: "
            + ", ".join(ctx.fulfillment_blocked)
            + "."
        )
    if ctx.satisfied:
        lines.append(
            "- Already in place, do NOT suggest: " + ", ".join(sorted(set(ctx.satisfied))) + "."
        )
    if ctx.at_local_optimum:
        lines.append("- The offer is at a local optimum. Refinements only.")
    return lines


def build_user_prompt(
    config: OfferConfiguration, result: EvaluationResult, ctx: StabilizationContext
) -> str:
    bottleneck = result.bottleneck
    allowed = sorted(c.value for c in ALLOWED_CATEGORIES[bottleneck.dimension])

    if result.ready:
        status = "OUTBOUND STATUS: READY. Provide optimization recommendations."
    else:
        status = (
            f"OUTBOUND STATUS: BLOCKED due to {bottleneck.label}. "
            f'Start by acknowledging: "Outbound is blocked due to {bottleneck.label}." '
            "Focus only on fixing this issue."
        )

    scores = "\n".join(
        f"- {LATENT_LABELS[key]}: {score}/20"
        for key, score in result.latent_scores.as_dict().items()
    )
    offer = "\n".join(
        f"- {name}: {value}"
        for name, value in config.model_dump(mode="json", exclude_none=True).items()
    )
    constraints = _constraints(ctx)
    constraints_text = (
        "\n\nCONSTRAINTS (do not violate):\n" + "\n".join(constraints) if constraints else ""
    )

    return f"""Phrase recommendations for this offer.

{status}

ALIGNMENT SCORE: {result.alignment_score}/100 ({result.readiness_label.value})
OBJECTIVE: {ctx.objective}

LATENT SCORES:
{scores}

PRIMARY BOTTLENECK: {bottleneck.label}
{BOTTLENECK_FOCUS[bottleneck.dimension]}

ALLOWED CATEGORIES: {", ".join(allowed)}

OFFER CONFIGURATION:
{offer}{constraints_text}

Provide 1-{MAX_PHRASED} high-leverage recommendations focused on the primary bottleneck."""


# =============================================================================
# Output validation
# =============================================================================


def parse_recommendations(
    payload: dict[str, Any] | None,
    bottleneck: LatentKey,
    ctx: StabilizationContext,
) -> tuple[list[StructuredRecommendation], list[BlockedCandidate]]:
    """Validate tool output, keep allowed categories, apply the stabilization locks."""
    if payload is None or not isinstance(payload.get("recommendations"), list):
        raise RecommendationPhrasingError("Phrasing response carried no recommendations")

    allowed = ALLOWED_CATEGORIES[bottleneck]
    kept: list[StructuredRecommendation] = []
    blocked: list[BlockedCandidate] = []

    for index, item in enumerate(payload["recommendations"]):
        if not isinstance(item, dict):
            continue
        try:
            rec = StructuredRecommendation(id=f"phrased_{index + 1}", **item)
        except (ValidationError, TypeError) as e:
            logger.warning(f"Dropping malformed phrased recommendation {index + 1}: {e}")
            continue
        if rec.category not in allowed:
            logger.info(
                f"Dropping phrased recommendation {rec.id}: category "
                f"{rec.category.value} not allowed for {bottleneck.value}"
            )
            continue
        survivor = screen(rec, ctx, blocked, rec.category)
        if survivor is not None:
            kept.append(survivor)
        if len(kept) >= MAX_PHRASED:
            break

    return kept, blocked


# =============================================================================
# Main phrasing function
# =============================================================================


async def phrase_recommendations(
    config: OfferConfiguration,
    result: EvaluationResult,
    rules: RuleSet = DEFAULT_RULES,
) -> EvaluationResult:
    """Replace the deterministic recommendations with phrased ones.

    Falls back to the deterministic recommendations when every phrased
    candidate is rejected by the locks.

    Raises:
        RecommendationPhrasingError: On transport failure after retries,
            timeout, or output without usable recommendations.
    """
    from anthropic import (
        APIConnectionError,
        APIStatusError,
        APITimeoutError,
        AsyncAnthropic,
        InternalServerError,
        RateLimitError,
    )

    settings = get_settings()
    if not settings.ANTHROPIC_API_KEY:
        raise RecommendationPhrasingError("ANTHROPIC_API_KEY is not configured")

    ctx = build_stabilization_context(
        config, result.latent_scores, pricing_band_status(config), rules
    )
    client = AsyncAnthropic(
        api_key=settings.ANTHROPIC_API_KEY,
        timeout=settings.PHRASING_TIMEOUT_SECONDS,
        max_retries=0,
    )

    system_blocks = [
        {"type": "text", "text": SYSTEM_PROMPT, "cache_control": {"type": "ephemeral"}},
    ]
    user_prompt = build_user_prompt(config, result, ctx)

    last_error: Exception | None = None
    response = None
    for attempt in range(_MAX_RETRIES + 1):
        try:
            t0 = time.monotonic()
            response = await client.messages.create(
                model=settings.PHRASING_MODEL,
                max_tokens=settings.PHRASING_MAX_TOKENS,
                system=system_blocks,
                messages=[{"role": "user", "content": user_prompt}],
                temperature=0.2,
                tools=[PHRASING_TOOL],
                tool_choice={"type": "tool", "name": "submit_recommendations"},
            )
            elapsed_ms = int((time.monotonic() - t0) * 1000)
            logger.info(
                f"Phrasing call succeeded in {elapsed_ms}ms "
                f"(prompt {settings.PHRASING_PROMPT_VERSION})"
            )
            break

        except (APIConnectionError, APITimeoutError, InternalServerError, RateLimitError) as e:
            last_error = e
            if attempt < _MAX_RETRIES:
                delay = _INITIAL_DELAY * (2**attempt)
                logger.warning(
                    f"Transient error on attempt {attempt + 1}: {e}. "
                    f"Retrying in {delay}s..."
                )
                await asyncio.sleep(delay)
            else:
                logger.error(f"All {_MAX_RETRIES + 1} attempts failed: {e}")

        except APIStatusError as e:
            raise RecommendationPhrasingError(f"Phrasing call rejected: {e}") from e

    if response is None:
        raise RecommendationPhrasingError("Phrasing call failed after retries") from last_error

    payload = extract_tool_input(response, "submit_recommendations")
    phrased, blocked = parse_recommendations(payload, result.bottleneck.dimension, ctx)

    if not phrased:
        logger.warning("Every phrased recommendation was rejected, keeping deterministic ones")
        return result.model_copy(update={"blocked": result.blocked + blocked})

    return result.model_copy(
        update={"recommendations": phrased, "blocked": result.blocked + blocked}
    )
