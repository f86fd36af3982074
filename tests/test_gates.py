"""Tests for viability gates, score caps and aggregation."""

import itertools
from collections.abc import Callable
from typing import get_origin, get_type_hints

import pytest

from offer_diagnostic.core.diagnostic.aggregate import (
    alignment_score,
    readiness_label,
    round_half_up,
)
from offer_diagnostic.core.diagnostic.fixes import FulfillmentRule
from offer_diagnostic.core.diagnostic.gates import (
    ScoreCap,
    SoftGate,
    evaluate_gates,
    evaluate_hard_gates,
    evaluate_soft_gates,
    score_cap,
)
from offer_diagnostic.core.diagnostic.latents import score_latents
from offer_diagnostic.core.diagnostic.rules import DEFAULT_RULES
from offer_diagnostic.core.diagnostic.stabilization import SecondOrderRule
from offer_diagnostic.core.diagnostic.suppression import SatisfiedRule
from offer_diagnostic.core.diagnostic.types import (
    FrictionClass,
    GateResult,
    IcpMaturity,
    IcpSize,
    IcpSpecificity,
    LatentKey,
    LatentScoreSet,
    PerformanceBasis,
    PerformanceCompTier,
    PricingStructure,
    ProofLevel,
    Promise,
    ReadinessLabel,
    RecurringPriceTier,
    RiskModel,
    UsageOutputType,
    UsageVolumeTier,
)
from offer_diagnostic.core.diagnostic.violations import ViolationRule


def _latents(**overrides) -> LatentScoreSet:
    values = {
        "economic_feasibility": 15,
        "proof_to_promise": 15,
        "fulfillment_scalability": 15,
        "risk_alignment": 15,
        "channel_fit": 15,
        "icp_specificity": 15,
        "friction_class": FrictionClass.LOW,
    }
    values.update(overrides)
    return LatentScoreSet(**values)


# =============================================================================
# Hard gates
# =============================================================================


class TestHardGates:
    def test_base_offer_passes(self, base_config):
        latents = score_latents(base_config, DEFAULT_RULES)
        gates = evaluate_gates(base_config, latents, DEFAULT_RULES)
        assert gates.passed
        assert gates.hard_gates == []
        assert gates.failed_dimension is None
        assert gates.score_cap is None

    def test_first_failure_in_declared_order_wins(self, make_config):
        """EFI and proof both fail; EFI is declared first."""
        config = make_config(
            pricing_structure=PricingStructure.USAGE_BASED,
            usage_output_type=UsageOutputType.LEAD_BASED,
            usage_volume_tier=UsageVolumeTier.LOW,
            icp_size=IcpSize.SOLO_FOUNDER,
            icp_maturity=IcpMaturity.PRE_REVENUE,
            risk_model=RiskModel.NO_GUARANTEE,
            proof_level=ProofLevel.WEAK,
            promise=Promise.TOP_LINE_REVENUE,
        )
        latents = score_latents(config, DEFAULT_RULES)
        hard, failed = evaluate_hard_gates(config, latents, DEFAULT_RULES)
        assert hard == ["Economic Feasibility", "Proof-to-Promise Credibility"]
        assert failed == LatentKey.ECONOMIC_FEASIBILITY

    def test_threshold_is_inclusive(self, base_config):
        hard, failed = evaluate_hard_gates(
            base_config, _latents(proof_to_promise=6), DEFAULT_RULES
        )
        assert hard == ["Proof-to-Promise Credibility"]
        assert failed == LatentKey.PROOF_TO_PROMISE

        hard, _ = evaluate_hard_gates(base_config, _latents(proof_to_promise=7), DEFAULT_RULES)
        assert hard == []

    def test_channel_blocking_fails_gate_regardless_of_score(self, base_config):
        latents = _latents(channel_fit=16, channel_blocking=True)
        hard, failed = evaluate_hard_gates(base_config, latents, DEFAULT_RULES)
        assert hard == ["Channel Fit"]
        assert failed == LatentKey.CHANNEL_FIT

    def test_structural_gate_on_broad_targeting_with_moderate_proof(self, make_config):
        config = make_config(
            icp_specificity=IcpSpecificity.BROAD, proof_level=ProofLevel.MODERATE
        )
        latents = score_latents(config, DEFAULT_RULES)
        hard, failed = evaluate_hard_gates(config, latents, DEFAULT_RULES)
        assert hard == [DEFAULT_RULES.structural_gate_name]
        assert failed == LatentKey.ICP_SPECIFICITY

    def test_broad_targeting_with_strong_proof_passes(self, make_config):
        config = make_config(icp_specificity=IcpSpecificity.BROAD)
        latents = score_latents(config, DEFAULT_RULES)
        hard, _ = evaluate_hard_gates(config, latents, DEFAULT_RULES)
        assert hard == []


# =============================================================================
# Soft gates
# =============================================================================


class TestSoftGates:
    @pytest.mark.parametrize("efi,expected", [(4, False), (5, True), (7, True), (8, False)])
    def test_efi_marginal_band(self, base_config, efi, expected):
        soft = evaluate_soft_gates(base_config, _latents(economic_feasibility=efi), DEFAULT_RULES)
        assert ("EFI in marginal range (5-7)" in soft) is expected

    def test_moderate_proof_with_volume_promise(self, make_config):
        config = make_config(proof_level=ProofLevel.MODERATE)
        assert evaluate_soft_gates(config, _latents(), DEFAULT_RULES) == [
            "Moderate proof with volume-based promise"
        ]

    def test_hybrid_with_small_icp(self, make_config):
        config = make_config(
            pricing_structure=PricingStructure.HYBRID,
            hybrid_retainer_tier=RecurringPriceTier.FROM_150_TO_500,
            performance_basis=PerformanceBasis.PER_APPOINTMENT,
            performance_comp_tier=PerformanceCompTier.UNDER_100_UNIT,
            icp_size=IcpSize.EMPLOYEES_1_5,
        )
        assert "Hybrid pricing with small ICP" in evaluate_soft_gates(
            config, _latents(), DEFAULT_RULES
        )

    def test_soft_gates_apply_pressure_without_blocking(self, make_config):
        config = make_config(
            risk_model=RiskModel.CONDITIONAL_GUARANTEE, proof_level=ProofLevel.WEAK
        )
        gates = evaluate_gates(config, _latents(), DEFAULT_RULES)
        assert gates.passed
        assert "Conditional guarantee with low proof" in gates.soft_gates
        assert gates.score_pressure == len(gates.soft_gates) * DEFAULT_RULES.soft_gate_penalty


# =============================================================================
# Caps and aggregation
# =============================================================================


class TestScoreCaps:
    def test_hard_gate_cap(self):
        assert score_cap(["Channel Fit"], [], _latents(), DEFAULT_RULES) == 49

    def test_soft_gate_count_cap(self):
        assert score_cap([], ["a", "b", "c"], _latents(), DEFAULT_RULES) == 64
        assert score_cap([], ["a", "b"], _latents(), DEFAULT_RULES) is None

    def test_low_efi_cap(self):
        assert score_cap([], [], _latents(economic_feasibility=7), DEFAULT_RULES) == 69

    def test_first_matching_cap_wins(self):
        latents = _latents(economic_feasibility=3)
        assert score_cap(["Economic Feasibility"], ["a", "b", "c"], latents, DEFAULT_RULES) == 49


class TestAggregation:
    def test_round_half_up(self):
        assert round_half_up(76.5) == 77
        assert round_half_up(76.49) == 76

    def test_perfect_latents_score_100(self):
        latents = _latents(**{key.value: 20 for key in LatentKey})
        assert alignment_score(latents, GateResult(), DEFAULT_RULES) == 100

    def test_cap_applies_after_pressure(self):
        latents = _latents(**{key.value: 20 for key in LatentKey})
        gates = GateResult(hard_gates=["Channel Fit"], score_pressure=10, score_cap=49)
        assert alignment_score(latents, gates, DEFAULT_RULES) == 49

    def test_pressure_lowers_score(self):
        latents = _latents()  # 90/120 = 75
        gates = GateResult(soft_gates=["a", "b"], score_pressure=10)
        assert alignment_score(latents, gates, DEFAULT_RULES) == 65

    @pytest.mark.parametrize(
        "score,ready,expected",
        [
            (90, False, ReadinessLabel.WEAK),
            (49, True, ReadinessLabel.WEAK),
            (50, True, ReadinessLabel.MODERATE),
            (74, True, ReadinessLabel.MODERATE),
            (75, True, ReadinessLabel.STRONG),
        ],
    )
    def test_readiness_label(self, score, ready, expected):
        assert readiness_label(score, ready, DEFAULT_RULES) == expected


class TestGateCapConsistency:
    """A blocked offer can never read as Moderate or Strong."""

    def test_blocked_offers_are_capped_and_weak(self, make_config):
        for proof, promise, specificity, risk in itertools.product(
            ProofLevel, Promise, IcpSpecificity, RiskModel
        ):
            config = make_config(
                proof_level=proof, promise=promise, icp_specificity=specificity, risk_model=risk
            )
            latents = score_latents(config, DEFAULT_RULES)
            gates = evaluate_gates(config, latents, DEFAULT_RULES)
            score = alignment_score(latents, gates, DEFAULT_RULES)
            label = readiness_label(score, gates.passed, DEFAULT_RULES)

            if not gates.passed:
                assert score <= DEFAULT_RULES.hard_gate_cap
                assert label == ReadinessLabel.WEAK
                assert gates.failed_dimension is not None
            else:
                assert gates.failed_dimension is None


# =============================================================================
# Rule definitions
# =============================================================================


class TestRuleHooks:
    @pytest.mark.parametrize(
        "rule_class,field",
        [
            (SoftGate, "check"),
            (ScoreCap, "limit"),
            (ScoreCap, "check"),
            (SecondOrderRule, "is_good"),
            (SatisfiedRule, "condition"),
            (FulfillmentRule, "check"),
            (ViolationRule, "check"),
        ],
    )
    def test_hook_annotated_as_callable(self, rule_class, field):
        assert get_origin(get_type_hints(rule_class)[field]) is Callable
