"""Tests for the recommendation phrasing chain (mocked Anthropic client)."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from anthropic import APIConnectionError, BadRequestError

from offer_diagnostic.chains.phrase_recommendations import (
    MAX_PHRASED,
    build_user_prompt,
    parse_recommendations,
    phrase_recommendations,
)
from offer_diagnostic.core.diagnostic import RecommendationPhrasingError, evaluate
from offer_diagnostic.core.diagnostic.latents import score_latents
from offer_diagnostic.core.diagnostic.pricing import pricing_band_status
from offer_diagnostic.core.diagnostic.rules import DEFAULT_RULES
from offer_diagnostic.core.diagnostic.stabilization import build_stabilization_context
from offer_diagnostic.core.diagnostic.types import BlockReason, FixCategory, LatentKey

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _mock_settings(api_key: str | None = "test-key") -> MagicMock:
    return MagicMock(
        ANTHROPIC_API_KEY=api_key,
        PHRASING_MODEL="claude-haiku-4-5-20251001",
        PHRASING_MAX_TOKENS=1500,
        PHRASING_TIMEOUT_SECONDS=30.0,
        PHRASING_PROMPT_VERSION="phrasing_v1",
    )


def _phrased(
    category: str = "pricing_shift",
    headline: str = "Raise your retainer toward market rate",
) -> dict:
    return {
        "headline": headline,
        "explanation": "Your retainer sits below what agencies of this size pay.",
        "action_steps": [
            "Quote the next three prospects at the middle of the band",
            "Tie the new price to the pipeline you already deliver",
        ],
        "desired_state": "Price matches the value buyers already see",
        "category": category,
    }


def _tool_response(payload: dict) -> MagicMock:
    block = MagicMock()
    block.type = "tool_use"
    block.name = "submit_recommendations"
    block.input = payload
    response = MagicMock()
    response.content = [block]
    return response


def _context(config):
    latents = score_latents(config, DEFAULT_RULES)
    return build_stabilization_context(
        config, latents, pricing_band_status(config), DEFAULT_RULES
    )


# =============================================================================
# Output validation
# =============================================================================


class TestParseRecommendations:
    def test_missing_payload_raises(self, base_config):
        with pytest.raises(RecommendationPhrasingError):
            parse_recommendations(None, LatentKey.ECONOMIC_FEASIBILITY, _context(base_config))

    def test_payload_without_list_raises(self, base_config):
        with pytest.raises(RecommendationPhrasingError):
            parse_recommendations(
                {"recommendations": "none"},
                LatentKey.ECONOMIC_FEASIBILITY,
                _context(base_config),
            )

    def test_capped_at_two(self, base_config):
        payload = {"recommendations": [_phrased(), _phrased(), _phrased()]}
        kept, _ = parse_recommendations(
            payload, LatentKey.ECONOMIC_FEASIBILITY, _context(base_config)
        )
        assert len(kept) == MAX_PHRASED
        assert [r.id for r in kept] == ["phrased_1", "phrased_2"]

    def test_disallowed_category_dropped(self, base_config):
        payload = {"recommendations": [_phrased(category="risk_shift")]}
        kept, blocked = parse_recommendations(
            payload, LatentKey.ECONOMIC_FEASIBILITY, _context(base_config)
        )
        assert kept == []
        assert blocked == []

    def test_malformed_item_dropped(self, base_config):
        payload = {"recommendations": [{"headline": "Only a headline"}, _phrased()]}
        kept, _ = parse_recommendations(
            payload, LatentKey.ECONOMIC_FEASIBILITY, _context(base_config)
        )
        assert [r.id for r in kept] == ["phrased_2"]

    def test_locked_item_recorded_as_blocked(self, base_config):
        payload = {
            "recommendations": [
                _phrased(category="icp_shift", headline="Switch to inbound for smaller agencies"),
            ]
        }
        kept, blocked = parse_recommendations(
            payload, LatentKey.ECONOMIC_FEASIBILITY, _context(base_config)
        )
        assert kept == []
        assert blocked[0].id == "phrased_1"
        assert blocked[0].reason == BlockReason.CHANNEL_SWITCH_BLOCKED


class TestBuildUserPrompt:
    def test_prompt_carries_scores_and_constraints(self, base_config):
        result = evaluate(base_config)
        prompt = build_user_prompt(base_config, result, _context(base_config))
        assert "OUTBOUND STATUS: READY" in prompt
        assert f"ALIGNMENT SCORE: {result.alignment_score}/100" in prompt
        assert "PRIMARY BOTTLENECK: Economic Feasibility (EFI)" in prompt
        assert "The proof level is already correct" in prompt

    def test_blocked_prompt_names_bottleneck(self, scenario_a_config):
        result = evaluate(scenario_a_config)
        prompt = build_user_prompt(scenario_a_config, result, _context(scenario_a_config))
        assert "OUTBOUND STATUS: BLOCKED due to Proof-to-Promise Credibility" in prompt


# =============================================================================
# Phrasing call
# =============================================================================


class TestPhraseRecommendations:
    @pytest.mark.asyncio
    @patch("offer_diagnostic.chains.phrase_recommendations.get_settings")
    @patch("anthropic.AsyncAnthropic")
    async def test_phrased_recommendations_replace_deterministic(
        self, mock_anthropic_cls, mock_get_settings, base_config
    ):
        mock_get_settings.return_value = _mock_settings()
        mock_client = AsyncMock()
        mock_anthropic_cls.return_value = mock_client
        mock_client.messages.create = AsyncMock(
            return_value=_tool_response({"recommendations": [_phrased()]})
        )

        result = evaluate(base_config)
        phrased = await phrase_recommendations(base_config, result)

        assert [r.id for r in phrased.recommendations] == ["phrased_1"]
        assert phrased.recommendations[0].category == FixCategory.PRICING_SHIFT
        assert phrased.alignment_score == result.alignment_score
        assert phrased.bottleneck == result.bottleneck

        call_kwargs = mock_client.messages.create.call_args.kwargs
        assert call_kwargs["tool_choice"] == {"type": "tool", "name": "submit_recommendations"}

    @pytest.mark.asyncio
    @patch("offer_diagnostic.chains.phrase_recommendations.get_settings")
    @patch("anthropic.AsyncAnthropic")
    async def test_all_rejected_keeps_deterministic(
        self, mock_anthropic_cls, mock_get_settings, base_config
    ):
        mock_get_settings.return_value = _mock_settings()
        mock_client = AsyncMock()
        mock_anthropic_cls.return_value = mock_client
        mock_client.messages.create = AsyncMock(
            return_value=_tool_response({"recommendations": [_phrased(category="risk_shift")]})
        )

        result = evaluate(base_config)
        phrased = await phrase_recommendations(base_config, result)

        assert phrased.recommendations == result.recommendations

    @pytest.mark.asyncio
    @patch("offer_diagnostic.chains.phrase_recommendations.asyncio.sleep", new_callable=AsyncMock)
    @patch("offer_diagnostic.chains.phrase_recommendations.get_settings")
    @patch("anthropic.AsyncAnthropic")
    async def test_transient_error_retried(
        self, mock_anthropic_cls, mock_get_settings, mock_sleep, base_config
    ):
        mock_get_settings.return_value = _mock_settings()
        mock_client = AsyncMock()
        mock_anthropic_cls.return_value = mock_client
        mock_client.messages.create = AsyncMock(
            side_effect=[
                APIConnectionError(request=_REQUEST),
                _tool_response({"recommendations": [_phrased()]}),
            ]
        )

        phrased = await phrase_recommendations(base_config, evaluate(base_config))

        assert [r.id for r in phrased.recommendations] == ["phrased_1"]
        assert mock_client.messages.create.call_count == 2
        mock_sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    @patch("offer_diagnostic.chains.phrase_recommendations.asyncio.sleep", new_callable=AsyncMock)
    @patch("offer_diagnostic.chains.phrase_recommendations.get_settings")
    @patch("anthropic.AsyncAnthropic")
    async def test_retries_exhausted_raises(
        self, mock_anthropic_cls, mock_get_settings, mock_sleep, base_config
    ):
        mock_get_settings.return_value = _mock_settings()
        mock_client = AsyncMock()
        mock_anthropic_cls.return_value = mock_client
        mock_client.messages.create = AsyncMock(side_effect=APIConnectionError(request=_REQUEST))

        with pytest.raises(RecommendationPhrasingError, match="after retries"):
            await phrase_recommendations(base_config, evaluate(base_config))

        assert mock_client.messages.create.call_count == 3
        assert mock_sleep.await_count == 2

    @pytest.mark.asyncio
    @patch("offer_diagnostic.chains.phrase_recommendations.get_settings")
    @patch("anthropic.AsyncAnthropic")
    async def test_rejected_request_not_retried(
        self, mock_anthropic_cls, mock_get_settings, base_config
    ):
        mock_get_settings.return_value = _mock_settings()
        mock_client = AsyncMock()
        mock_anthropic_cls.return_value = mock_client
        mock_client.messages.create = AsyncMock(
            side_effect=BadRequestError(
                message="bad request",
                response=httpx.Response(400, request=_REQUEST),
                body=None,
            )
        )

        with pytest.raises(RecommendationPhrasingError, match="rejected"):
            await phrase_recommendations(base_config, evaluate(base_config))

        assert mock_client.messages.create.call_count == 1

    @pytest.mark.asyncio
    @patch("offer_diagnostic.chains.phrase_recommendations.get_settings")
    async def test_missing_api_key_raises(self, mock_get_settings, base_config):
        mock_get_settings.return_value = _mock_settings(api_key=None)

        with pytest.raises(RecommendationPhrasingError, match="ANTHROPIC_API_KEY"):
            await phrase_recommendations(base_config, evaluate(base_config))
