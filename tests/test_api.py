"""Tests for the diagnostic API endpoints."""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from offer_diagnostic.core.diagnostic import RecommendationPhrasingError
from offer_diagnostic.main import app
from tests.fixtures_regression import REGRESSION_CASES

client = TestClient(app)

CONFIG_JSON = REGRESSION_CASES[0]["configuration"]


def _incomplete() -> dict:
    config = dict(CONFIG_JSON)
    config["proof_level"] = None
    config["fulfillment"] = None
    return config


# =============================================================================
# Evaluate
# =============================================================================


class TestEvaluateEndpoint:
    def test_evaluate_complete_configuration(self):
        response = client.post("/v1/diagnostic/evaluate", json={"configuration": CONFIG_JSON})
        assert response.status_code == 200
        data = response.json()
        assert data["alignment_score"] == 77
        assert data["readiness_label"] == "Strong"
        assert data["ready"] is True
        assert data["bottleneck"]["dimension"] == "economic_feasibility"
        assert data["recommendations_unavailable"] is False
        assert len(data["recommendations"]) <= 3

    def test_incomplete_configuration_lists_missing_fields(self):
        response = client.post("/v1/diagnostic/evaluate", json={"configuration": _incomplete()})
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["message"] == "Configuration is incomplete"
        assert set(detail["missing_fields"]) == {"proof_level", "fulfillment"}

    def test_top_k_out_of_range_rejected(self):
        response = client.post(
            "/v1/diagnostic/evaluate", json={"configuration": CONFIG_JSON, "top_k": 6}
        )
        assert response.status_code == 422

    def test_top_k_limits_recommendations(self):
        response = client.post(
            "/v1/diagnostic/evaluate", json={"configuration": CONFIG_JSON, "top_k": 1}
        )
        assert response.status_code == 200
        assert len(response.json()["recommendations"]) <= 1

    def test_unknown_enum_value_rejected(self):
        config = dict(CONFIG_JSON)
        config["proof_level"] = "legendary"
        response = client.post("/v1/diagnostic/evaluate", json={"configuration": config})
        assert response.status_code == 422


# =============================================================================
# Phrased evaluate
# =============================================================================


class TestPhrasedEndpoint:
    @patch(
        "offer_diagnostic.api.diagnostic.phrase_recommendations",
        new_callable=AsyncMock,
        side_effect=RecommendationPhrasingError("timed out"),
    )
    def test_phrasing_failure_returns_502(self, mock_phrase):
        response = client.post(
            "/v1/diagnostic/evaluate/phrased", json={"configuration": CONFIG_JSON}
        )
        assert response.status_code == 502
        assert response.json()["detail"] == "Recommendation phrasing unavailable, retry"

    @patch(
        "offer_diagnostic.api.diagnostic.phrase_recommendations",
        new_callable=AsyncMock,
        side_effect=RecommendationPhrasingError("timed out"),
    )
    def test_scores_only_keeps_scores(self, mock_phrase):
        response = client.post(
            "/v1/diagnostic/evaluate/phrased?scores_only=true",
            json={"configuration": CONFIG_JSON},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["alignment_score"] == 77
        assert data["recommendations"] == []
        assert data["recommendations_unavailable"] is True

    @patch("offer_diagnostic.api.diagnostic.phrase_recommendations", new_callable=AsyncMock)
    def test_phrased_result_returned(self, mock_phrase):
        mock_phrase.side_effect = lambda config, result: result
        response = client.post(
            "/v1/diagnostic/evaluate/phrased", json={"configuration": CONFIG_JSON}
        )
        assert response.status_code == 200
        assert response.json()["ready"] is True
        mock_phrase.assert_awaited_once()

    def test_incomplete_configuration_skips_phrasing(self):
        with patch(
            "offer_diagnostic.api.diagnostic.phrase_recommendations", new_callable=AsyncMock
        ) as mock_phrase:
            response = client.post(
                "/v1/diagnostic/evaluate/phrased", json={"configuration": _incomplete()}
            )
        assert response.status_code == 422
        mock_phrase.assert_not_awaited()


# =============================================================================
# Snapshot and completeness
# =============================================================================


class TestSnapshotEndpoint:
    def test_snapshot_wraps_result(self):
        response = client.post("/v1/diagnostic/snapshot", json={"configuration": CONFIG_JSON})
        assert response.status_code == 200
        data = response.json()
        assert data["schema_version"] == 1
        assert data["rule_set_version"] == "latent-v6"
        assert data["configuration"]["proof_level"] == CONFIG_JSON["proof_level"]
        assert data["result"]["alignment_score"] == 77


class TestCompletenessEndpoint:
    def test_complete(self):
        response = client.post("/v1/diagnostic/completeness", json=CONFIG_JSON)
        assert response.status_code == 200
        assert response.json() == {"evaluable": True, "missing_fields": []}

    def test_incomplete(self):
        response = client.post("/v1/diagnostic/completeness", json=_incomplete())
        assert response.status_code == 200
        data = response.json()
        assert data["evaluable"] is False
        assert "proof_level" in data["missing_fields"]
