"""Named violations derived from dimension flags and raw inputs."""

import re
from collections.abc import Callable
from dataclasses import dataclass

from offer_diagnostic.core.diagnostic.stabilization import StabilizationContext, block_reason
from offer_diagnostic.core.diagnostic.types import (
    BlockedCandidate,
    FixCategory,
    FulfillmentModel,
    IcpMaturity,
    IcpSize,
    OfferConfiguration,
    OfferType,
    ProofLevel,
    Promise,
    Severity,
    Violation,
    ViolationFlags,
)

EARLY_MATURITY = frozenset({IcpMaturity.PRE_REVENUE, IcpMaturity.EARLY_TRACTION})
LARGE_SIZES = frozenset({IcpSize.EMPLOYEES_21_100, IcpSize.EMPLOYEES_100_PLUS})
TOP_FUNNEL_PROMISES = frozenset({Promise.TOP_OF_FUNNEL_VOLUME, Promise.MID_FUNNEL_ENGAGEMENT})
LOW_PROOF = frozenset({ProofLevel.NONE, ProofLevel.WEAK})

SEVERITY_ORDER: dict[Severity, int] = {
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}

MAX_VIOLATIONS = 5

_SENTENCE_BREAK = re.compile(r"(?<=\.)\s+")


@dataclass
class ViolationRule:
    """A named violation and the predicate that raises it."""

    id: str
    rule: str
    severity: Severity
    recommendation: str
    fix_category: FixCategory
    check: Callable[[OfferConfiguration, ViolationFlags], bool]


def _promise_channel_mismatch(config: OfferConfiguration, flags: ViolationFlags) -> bool:
    return (
        config.offer_type == OfferType.DEMAND_CREATION
        or config.promise in TOP_FUNNEL_PROMISES
    )


def _fulfillment_bottleneck(config: OfferConfiguration, flags: ViolationFlags) -> bool:
    return config.fulfillment == FulfillmentModel.CUSTOM_DFY and config.icp_size in LARGE_SIZES


VIOLATION_RULES = [
    ViolationRule(
        id="proof_deficiency",
        rule="Proof Deficiency",
        severity=Severity.HIGH,
        recommendation=(
            "Narrow the claim until you have strong proof. "
            "Collect 3-5 wins before scaling promise."
        ),
        fix_category=FixCategory.RISK_SHIFT,
        check=lambda config, flags: (
            config.proof_level in LOW_PROOF and config.promise != Promise.TOP_OF_FUNNEL_VOLUME
        ),
    ),
    ViolationRule(
        id="pricing_misalignment",
        rule="Pricing Misalignment",
        severity=Severity.HIGH,
        recommendation=(
            "Switch to hybrid pricing to reduce sticker shock, "
            "or lower initial retainer until proof compounds."
        ),
        fix_category=FixCategory.PRICING_SHIFT,
        check=lambda config, flags: flags.pricing,
    ),
    ViolationRule(
        id="market_misalignment",
        rule="Market Misalignment",
        severity=Severity.HIGH,
        recommendation=(
            "Shift upmarket to ICPs with higher buying power, "
            "or switch vertical to one with urgent problems & budgets."
        ),
        fix_category=FixCategory.ICP_SHIFT,
        check=lambda config, flags: flags.buying_power and config.icp_maturity in EARLY_MATURITY,
    ),
    ViolationRule(
        id="promise_channel_mismatch",
        rule="Promise-Channel Mismatch",
        severity=Severity.MEDIUM,
        recommendation=(
            "Cold outbound will struggle here. Switch promise to revenue or "
            "pipeline outcomes, or add downstream proof."
        ),
        fix_category=FixCategory.PROMISE_SHIFT,
        check=_promise_channel_mismatch,
    ),
    ViolationRule(
        id="risk_misalignment",
        rule="Risk Misalignment",
        severity=Severity.MEDIUM,
        recommendation=(
            "Use conditional guarantees instead of full guarantees. "
            "Add milestone-based commitments."
        ),
        fix_category=FixCategory.RISK_SHIFT,
        check=lambda config, flags: flags.risk,
    ),
    ViolationRule(
        id="fulfillment_bottleneck",
        rule="Fulfillment Bottleneck",
        severity=Severity.MEDIUM,
        recommendation=(
            "Productize delivery to reduce labor variance. "
            "Add SOPs & QA before scaling headcount."
        ),
        fix_category=FixCategory.FULFILLMENT_SHIFT,
        check=_fulfillment_bottleneck,
    ),
    ViolationRule(
        id="awareness_mismatch",
        rule="Awareness Mismatch",
        severity=Severity.MEDIUM,
        recommendation=(
            "Target ICPs that already have traction. "
            "Switch promise from revenue to pipeline volume."
        ),
        fix_category=FixCategory.ICP_SHIFT,
        check=lambda config, flags: (
            config.icp_maturity in EARLY_MATURITY and config.promise == Promise.TOP_LINE_REVENUE
        ),
    ),
    # Raw flags only surface when no named violation already explains them
    ViolationRule(
        id="low_outbound_fit",
        rule="Low Outbound Fit",
        severity=Severity.HIGH,
        recommendation=(
            "Cold outbound will struggle here. "
            "Consider switching to solution-aware verticals like SaaS."
        ),
        fix_category=FixCategory.ICP_SHIFT,
        check=lambda config, flags: (
            flags.outbound and not _promise_channel_mismatch(config, flags)
        ),
    ),
    ViolationRule(
        id="execution_risk",
        rule="Execution Risk",
        severity=Severity.MEDIUM,
        recommendation=(
            "Your offer type and fulfillment model create execution challenges. "
            "Simplify delivery."
        ),
        fix_category=FixCategory.FULFILLMENT_SHIFT,
        check=lambda config, flags: (
            flags.execution and not _fulfillment_bottleneck(config, flags)
        ),
    ),
]


def detect_violations(config: OfferConfiguration, flags: ViolationFlags) -> list[Violation]:
    """Triggered violations, highest severity first, capped at MAX_VIOLATIONS."""
    violations = [
        Violation(
            id=rule.id,
            rule=rule.rule,
            severity=rule.severity,
            recommendation=rule.recommendation,
            fix_category=rule.fix_category,
        )
        for rule in VIOLATION_RULES
        if rule.check(config, flags)
    ]
    violations.sort(key=lambda v: SEVERITY_ORDER[v.severity], reverse=True)
    return violations[:MAX_VIOLATIONS]


def screen_violation_advice(
    violations: list[Violation], ctx: StabilizationContext
) -> tuple[list[Violation], list[BlockedCandidate]]:
    """Drop every advice sentence a stabilization lock rejects.

    The violation itself stays in the diagnosis; its recommendation becomes
    None once every sentence is dropped.
    """
    screened: list[Violation] = []
    blocked: list[BlockedCandidate] = []
    for violation in violations:
        kept: list[str] = []
        for sentence in _SENTENCE_BREAK.split(violation.recommendation or ""):
            if not sentence:
                continue
            reason = block_reason(sentence, violation.fix_category, ctx)
            if reason is None:
                kept.append(sentence)
            else:
                blocked.append(
                    BlockedCandidate(
                        id=f"{violation.id}: {sentence}", kind="violation_advice", reason=reason
                    )
                )
        screened.append(
            violation.model_copy(update={"recommendation": " ".join(kept) or None})
        )
    return screened, blocked
