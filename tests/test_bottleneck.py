"""Tests for primary bottleneck selection."""

from offer_diagnostic.core.diagnostic.bottleneck import eligible_dimensions, select_bottleneck
from offer_diagnostic.core.diagnostic.pricing import PricingBandStatus, pricing_band_status
from offer_diagnostic.core.diagnostic.rules import DEFAULT_RULES
from offer_diagnostic.core.diagnostic.types import (
    BottleneckSeverity,
    FrictionClass,
    GateResult,
    IcpSize,
    LatentKey,
    LatentScoreSet,
    PricingStructure,
    ProofLevel,
    RecurringPriceTier,
)

UNLOCKED = PricingBandStatus(monthly_price=None, lower=500, upper=2000)
LOCKED = PricingBandStatus(monthly_price=1000, lower=500, upper=2000)


def _latents(**overrides) -> LatentScoreSet:
    values = {key.value: 16 for key in LatentKey}
    values["friction_class"] = FrictionClass.LOW
    values.update(overrides)
    return LatentScoreSet(**values)


class TestGateBottleneck:
    def test_failed_gate_short_circuits(self):
        """A failed hard gate is the bottleneck even when another dimension is lower."""
        latents = _latents(channel_fit=6, risk_alignment=2)
        gates = GateResult(hard_gates=["Channel Fit"], failed_dimension=LatentKey.CHANNEL_FIT)
        bottleneck = select_bottleneck(latents, gates, UNLOCKED, DEFAULT_RULES)
        assert bottleneck.dimension == LatentKey.CHANNEL_FIT
        assert bottleneck.severity == BottleneckSeverity.BLOCKING
        assert bottleneck.explanation.startswith("Outbound is blocked due to Channel Fit.")

    def test_channel_blocking_explains_incompatibility(self):
        latents = _latents(channel_fit=6, channel_blocking=True)
        gates = GateResult(hard_gates=["Channel Fit"], failed_dimension=LatentKey.CHANNEL_FIT)
        bottleneck = select_bottleneck(latents, gates, UNLOCKED, DEFAULT_RULES)
        assert "not directly triggerable via outbound" in bottleneck.explanation

    def test_gate_bottleneck_ignores_pricing_lock(self):
        gates = GateResult(
            hard_gates=["Economic Feasibility"], failed_dimension=LatentKey.ECONOMIC_FEASIBILITY
        )
        bottleneck = select_bottleneck(
            _latents(economic_feasibility=3), gates, LOCKED, DEFAULT_RULES
        )
        assert bottleneck.dimension == LatentKey.ECONOMIC_FEASIBILITY


class TestEligibility:
    def test_low_and_far_below_median_is_eligible(self):
        latents = _latents(risk_alignment=10)  # 50% against a median of 80%
        assert eligible_dimensions(latents, DEFAULT_RULES) == [LatentKey.RISK_ALIGNMENT]

    def test_low_but_close_to_median_is_not_eligible(self):
        """Everything is uniformly mediocre: nothing stands out."""
        latents = _latents(**{key.value: 12 for key in LatentKey})
        assert eligible_dimensions(latents, DEFAULT_RULES) == []

    def test_far_below_median_but_above_ceiling_is_not_eligible(self):
        latents = _latents(**{**{key.value: 20 for key in LatentKey}, "risk_alignment": 14})
        assert eligible_dimensions(latents, DEFAULT_RULES) == []


class TestConstrainingBottleneck:
    def test_lowest_eligible_dimension_wins(self):
        latents = _latents(risk_alignment=10, icp_specificity=6)
        bottleneck = select_bottleneck(latents, GateResult(), UNLOCKED, DEFAULT_RULES)
        assert bottleneck.dimension == LatentKey.ICP_SPECIFICITY
        assert bottleneck.severity == BottleneckSeverity.CONSTRAINING
        assert bottleneck.actionable

    def test_ties_broken_by_dominance_order(self):
        """Channel fit precedes risk alignment in the dominance order."""
        latents = _latents(risk_alignment=8, channel_fit=8)
        bottleneck = select_bottleneck(latents, GateResult(), UNLOCKED, DEFAULT_RULES)
        assert bottleneck.dimension == LatentKey.CHANNEL_FIT

    def test_nothing_eligible_returns_minimum_marked_non_actionable(self):
        latents = _latents(**{**{key.value: 12 for key in LatentKey}, "proof_to_promise": 11})
        bottleneck = select_bottleneck(latents, GateResult(), UNLOCKED, DEFAULT_RULES)
        assert bottleneck.dimension == LatentKey.PROOF_TO_PROMISE
        assert bottleneck.actionable is False
        assert "no dimension is meaningfully weaker" in bottleneck.explanation

    def test_pricing_lock_excludes_economic_feasibility(self):
        latents = _latents(economic_feasibility=8, risk_alignment=9)
        unlocked = select_bottleneck(latents, GateResult(), UNLOCKED, DEFAULT_RULES)
        locked = select_bottleneck(latents, GateResult(), LOCKED, DEFAULT_RULES)
        assert unlocked.dimension == LatentKey.ECONOMIC_FEASIBILITY
        assert locked.dimension == LatentKey.RISK_ALIGNMENT


class TestPricingBand:
    def test_price_inside_band_is_locked(self, make_config):
        config = make_config(
            recurring_price_tier=RecurringPriceTier.FROM_2K_TO_5K,
            icp_size=IcpSize.EMPLOYEES_6_20,
            proof_level=ProofLevel.STRONG,
        )
        status = pricing_band_status(config)
        assert status.monthly_price == 3500
        assert status.within_band is True
        assert status.locked

    def test_underpriced_is_not_locked(self, base_config):
        status = pricing_band_status(base_config)
        assert status.underpriced
        assert not status.locked

    def test_performance_pricing_is_never_locked(self, make_config):
        config = make_config(pricing_structure=PricingStructure.PERFORMANCE_ONLY)
        status = pricing_band_status(config)
        assert status.monthly_price is None
        assert status.within_band is None
        assert not status.locked
