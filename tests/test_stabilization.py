"""Tests for stabilization locks and already-satisfied suppression."""

import pytest

from offer_diagnostic.core.diagnostic.latents import score_latents
from offer_diagnostic.core.diagnostic.pricing import PricingBandStatus, pricing_band_status
from offer_diagnostic.core.diagnostic.rules import DEFAULT_RULES
from offer_diagnostic.core.diagnostic.stabilization import (
    StabilizationContext,
    block_reason,
    build_stabilization_context,
    filter_candidate,
    is_channel_switch,
)
from offer_diagnostic.core.diagnostic.suppression import drop_satisfied, satisfied_phrases
from offer_diagnostic.core.diagnostic.types import (
    BlockReason,
    FixCategory,
    FulfillmentModel,
    PricingStructure,
    RiskModel,
    Violation,
)
from offer_diagnostic.core.diagnostic.violations import VIOLATION_RULES, screen_violation_advice


def _context(config) -> StabilizationContext:
    latents = score_latents(config, DEFAULT_RULES)
    return build_stabilization_context(
        config, latents, pricing_band_status(config), DEFAULT_RULES
    )


def _bare_context(**overrides) -> StabilizationContext:
    """A context with every lock disengaged."""
    values = {
        "pricing": PricingBandStatus(monthly_price=None, lower=0, upper=0),
        "fulfillment_lock": "unlocked",
        "fulfillment_blocked": (),
        "fulfillment_allowed": (),
        "at_local_optimum": False,
        "force_recommendations": False,
        "second_order_blocked": (),
        "already_correct": (),
        "objective": "improves_conversion",
        "must_preserve": (),
        "satisfied": [],
    }
    values.update(overrides)
    return StabilizationContext(**values)


# =============================================================================
# Channel lock
# =============================================================================


class TestChannelLock:
    @pytest.mark.parametrize(
        "text",
        [
            "Switch to inbound marketing",
            "Try SEO for the next quarter",
            "Focus on referrals from existing clients",
            "Generate demand via content",
            "Consider partnerships instead",
            "Abandon outbound until proof exists",
        ],
    )
    def test_channel_switch_is_blocked(self, text):
        assert is_channel_switch(text)
        reason = block_reason(text, FixCategory.POSITIONING_SHIFT, _bare_context())
        assert reason == BlockReason.CHANNEL_SWITCH_BLOCKED

    @pytest.mark.parametrize(
        "text",
        [
            "Refine outbound messaging for each segment",
            "Reference your content library in follow-ups",
            "Ask happy clients for a quote to use in outreach",
        ],
    )
    def test_outbound_advice_passes(self, text):
        assert not is_channel_switch(text)
        assert block_reason(text, FixCategory.POSITIONING_SHIFT, _bare_context()) is None

    def test_channel_lock_applies_without_category(self):
        """Category-free text such as a notice is still screened for channel switches."""
        assert block_reason("Switch to paid media", None, _bare_context()) == (
            BlockReason.CHANNEL_SWITCH_BLOCKED
        )


# =============================================================================
# Pricing and fulfillment locks
# =============================================================================


class TestPricingLock:
    def test_pricing_fix_blocked_inside_band(self):
        ctx = _bare_context(pricing=PricingBandStatus(monthly_price=1000, lower=500, upper=2000))
        assert block_reason("Move from retainer to hybrid model", FixCategory.PRICING_SHIFT, ctx) == (
            BlockReason.PRICING_WITHIN_VIABLE_BAND
        )

    def test_other_categories_unaffected_by_pricing_lock(self):
        ctx = _bare_context(pricing=PricingBandStatus(monthly_price=1000, lower=500, upper=2000))
        assert block_reason("Move from retainer to hybrid model", FixCategory.RISK_SHIFT, ctx) is None

    def test_pricing_fix_allowed_outside_band(self):
        ctx = _bare_context(pricing=PricingBandStatus(monthly_price=100, lower=500, upper=2000))
        assert block_reason("Raise the retainer", FixCategory.PRICING_SHIFT, ctx) is None


class TestFulfillmentLock:
    def test_productized_offer_blocks_productization(self, make_config):
        ctx = _context(make_config(fulfillment=FulfillmentModel.PACKAGE_BASED))
        assert ctx.fulfillment_lock == "fully_locked"
        reason = block_reason(
            "Standardize delivery to reduce labor", FixCategory.FULFILLMENT_SHIFT, ctx
        )
        assert reason == BlockReason.FULFILLMENT_ALREADY_PRODUCTIZED

    def test_productized_offer_allows_refinement(self, make_config):
        ctx = _context(make_config(fulfillment=FulfillmentModel.PACKAGE_BASED))
        text = "Add quality assurance checkpoints to client onboarding"
        assert block_reason(text, FixCategory.FULFILLMENT_SHIFT, ctx) is None

    def test_advisory_offer_is_partially_locked(self, make_config):
        ctx = _context(make_config(fulfillment=FulfillmentModel.COACHING_ADVISORY))
        assert ctx.fulfillment_lock == "partially_locked"
        assert block_reason(
            "Fully productize the program", FixCategory.FULFILLMENT_SHIFT, ctx
        ) == BlockReason.FULFILLMENT_ALREADY_PRODUCTIZED
        assert block_reason(
            "Add group delivery sessions", FixCategory.FULFILLMENT_SHIFT, ctx
        ) is None

    def test_custom_delivery_is_unlocked(self, make_config):
        ctx = _context(make_config(fulfillment=FulfillmentModel.CUSTOM_DFY))
        assert ctx.fulfillment_lock == "unlocked"
        assert ctx.fulfillment_blocked == ()


# =============================================================================
# Local optimum and second-order locks
# =============================================================================


class TestLocalOptimumLock:
    def test_scenario_b_is_at_local_optimum(self, scenario_b_config):
        ctx = _context(scenario_b_config)
        assert ctx.at_local_optimum
        assert ctx.objective == "least_disruptive"
        assert set(ctx.must_preserve) == {
            "pricing structure",
            "fulfillment model",
            "ICP targeting",
            "promise scope",
        }

    def test_structural_wording_blocked(self, scenario_b_config):
        ctx = _context(scenario_b_config)
        assert block_reason("Switch to annual billing", None, ctx) == (
            BlockReason.LOCAL_OPTIMUM_STRUCTURAL_BLOCKED
        )

    def test_refinement_exempts_text(self, scenario_b_config):
        ctx = _context(scenario_b_config)
        assert block_reason("Switch to annual billing", None, ctx, refinement=True) is None

    def test_base_offer_is_not_at_local_optimum(self, base_config):
        ctx = _context(base_config)
        assert not ctx.at_local_optimum
        assert ctx.objective == "improves_conversion"
        assert ctx.must_preserve == ("fulfillment model", "ICP targeting", "promise scope")


class TestSecondOrderLock:
    def test_good_selections_are_already_correct(self, base_config):
        ctx = _context(base_config)
        assert ctx.already_correct == (
            "proof level",
            "fulfillment model",
            "risk model",
            "ICP definition",
        )

    def test_inconsistent_advice_blocked(self, scenario_b_config):
        ctx = _context(scenario_b_config)
        assert block_reason("Collect testimonials from recent clients", None, ctx) == (
            BlockReason.SECOND_ORDER_INCONSISTENT
        )

    def test_weak_dimension_not_locked(self, make_config):
        ctx = _context(make_config(risk_model=RiskModel.NO_GUARANTEE))
        assert "risk model" not in ctx.already_correct


# =============================================================================
# Already-satisfied suppression
# =============================================================================


class TestSatisfiedSuppression:
    def test_phrases_follow_configuration(self, base_config):
        phrases = satisfied_phrases(base_config)
        assert "conditional guarantee" in phrases
        assert "productize" in phrases
        assert "testimonials" in phrases
        assert "hybrid pricing" not in phrases

    def test_suppression_is_case_insensitive(self, base_config):
        texts = ["Add a CONDITIONAL GUARANTEE", "Tighten reply handling"]
        assert drop_satisfied(texts, satisfied_phrases(base_config)) == ["Tighten reply handling"]

    def test_satisfied_fix_blocked_whatever_its_source(self, base_config):
        ctx = _context(base_config)
        text = "Add conditional guarantee to reduce buyer hesitation"
        assert block_reason(text, FixCategory.RISK_SHIFT, ctx) == BlockReason.ALREADY_SATISFIED

    def test_hybrid_offer_suppresses_hybrid_advice(self, make_config):
        config = make_config(pricing_structure=PricingStructure.HYBRID)
        assert "switch to hybrid" not in satisfied_phrases(config)
        assert drop_satisfied(["Switch to hybrid pricing"], satisfied_phrases(config)) == []


# =============================================================================
# Whole-candidate screening
# =============================================================================


class TestFilterCandidate:
    def test_blocked_steps_dropped_individually(self):
        steps, reason = filter_candidate(
            "Tighten positioning",
            "Prospects do not see themselves in the offer.",
            ["Clarify who it's for", "Switch to inbound for a month"],
            FixCategory.POSITIONING_SHIFT,
            _bare_context(),
        )
        assert reason is None
        assert steps == ["Clarify who it's for"]

    def test_losing_every_step_blocks_candidate(self):
        steps, reason = filter_candidate(
            "Tighten positioning",
            "Prospects do not see themselves in the offer.",
            ["Try SEO", "Focus on referrals"],
            FixCategory.POSITIONING_SHIFT,
            _bare_context(),
        )
        assert steps == []
        assert reason == BlockReason.CHANNEL_SWITCH_BLOCKED

    def test_headline_hit_blocks_candidate(self):
        _, reason = filter_candidate(
            "Switch to inbound",
            "Outbound is hard.",
            ["Write blog posts"],
            None,
            _bare_context(),
        )
        assert reason == BlockReason.CHANNEL_SWITCH_BLOCKED

    def test_refinement_headline_does_not_exempt_steps(self):
        ctx = _bare_context(at_local_optimum=True)
        steps, reason = filter_candidate(
            "Refine your guarantee terms",
            "Clearer terms make it easier to act on.",
            ["State the guarantee on the first call", "Replace the guarantee with a refund"],
            FixCategory.RISK_SHIFT,
            ctx,
        )
        assert reason is None
        assert steps == ["State the guarantee on the first call"]


# =============================================================================
# Violation advice
# =============================================================================


def _violation(violation_id: str) -> Violation:
    rule = next(r for r in VIOLATION_RULES if r.id == violation_id)
    return Violation(
        id=rule.id,
        rule=rule.rule,
        severity=rule.severity,
        recommendation=rule.recommendation,
        fix_category=rule.fix_category,
    )


class TestScreenViolationAdvice:
    def test_satisfied_sentence_dropped(self, base_config):
        """A conditional-guarantee offer is not told to use conditional guarantees."""
        screened, blocked = screen_violation_advice(
            [_violation("risk_misalignment")], _context(base_config)
        )
        assert screened[0].recommendation == "Add milestone-based commitments."
        assert blocked[0].kind == "violation_advice"
        assert blocked[0].reason == BlockReason.ALREADY_SATISFIED
        assert blocked[0].id.startswith("risk_misalignment: Use conditional guarantees")

    def test_structural_advice_cleared_at_local_optimum(self, scenario_b_config):
        screened, blocked = screen_violation_advice(
            [_violation("market_misalignment")], _context(scenario_b_config)
        )
        assert screened[0].id == "market_misalignment"
        assert screened[0].recommendation is None
        assert [b.reason for b in blocked] == [BlockReason.LOCAL_OPTIMUM_STRUCTURAL_BLOCKED]

    def test_open_context_keeps_advice(self):
        violation = _violation("fulfillment_bottleneck")
        screened, blocked = screen_violation_advice([violation], _bare_context())
        assert screened == [violation]
        assert blocked == []
