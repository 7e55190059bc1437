"""Tests for the projection HTTP endpoints."""

from unittest.mock import patch

import pytest

from homeplanner.services.language_client import CollaboratorError, LanguageClient


@pytest.fixture
def comparison_payload(buy_scenario, rent_scenario):
    return {
        "scenarios": [
            buy_scenario.model_dump(mode="json"),
            rent_scenario.model_dump(mode="json"),
        ],
        "assumptions": {"horizon_months": 24, "as_of": "2025-01-01"},
    }


class TestProjectionsEndpoint:
    """Test cases for POST /api/projections."""

    def test_compare_scenarios(self, client, comparison_payload):
        response = client.post("/api/projections", json=comparison_payload)

        assert response.status_code == 200
        data = response.get_json()
        assert data["horizon_months"] == 24
        assert [o["scenario_id"] for o in data["outcomes"]] == ["buy", "rent"]
        assert len(data["outcomes"][0]["result"]["amortization_schedule"]) == 24
        assert data["winners"]["net_worth"] in {"buy", "rent"}

    def test_invalid_scenario(self, client):
        response = client.post(
            "/api/projections",
            json={"scenarios": [{"id": "bad", "down_payment": -5}]},
        )
        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid request"

    def test_missing_body(self, client):
        response = client.post("/api/projections")
        assert response.status_code == 400

    def test_horizon_limit(self, client, comparison_payload):
        comparison_payload["assumptions"]["horizon_months"] = 601
        response = client.post("/api/projections", json=comparison_payload)
        assert response.status_code == 400
        assert "horizon_months" in response.get_json()["error"]

    def test_scenario_limit(self, client, buy_scenario):
        scenarios = [
            buy_scenario.model_copy(update={"id": f"s{i}"}).model_dump(mode="json")
            for i in range(11)
        ]
        response = client.post("/api/projections", json={"scenarios": scenarios})
        assert response.status_code == 400
        assert "At most 10 scenarios" in response.get_json()["error"]


class TestEquitySyncEndpoint:
    """Test cases for POST /api/equity-sync."""

    def test_edit_home_value(self, client, buy_scenario):
        response = client.post(
            "/api/equity-sync",
            json={
                "scenario": buy_scenario.model_dump(mode="json"),
                "field": "home_value",
                "value": 550_000,
                "as_of": "2025-01-01",
            },
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data["scenario"]["down_payment"] == pytest.approx(150_000)
        assert data["equation_broken"] is False

    def test_unknown_field(self, client, buy_scenario):
        response = client.post(
            "/api/equity-sync",
            json={"scenario": buy_scenario.model_dump(mode="json"), "field": "rate", "value": 1},
        )
        assert response.status_code == 400

    def test_negative_value(self, client, buy_scenario):
        response = client.post(
            "/api/equity-sync",
            json={
                "scenario": buy_scenario.model_dump(mode="json"),
                "field": "down_payment",
                "value": -10,
            },
        )
        assert response.status_code == 400
        assert "cannot be negative" in response.get_json()["error"]


class TestListingEndpoint:
    """Test cases for POST /api/listings/extract."""

    def test_extract_and_apply(self, client, buy_scenario):
        answer = '{"homeValue": 600000, "propertyTax": 7200, "homeInsurance": 2000, "hoa": 100}'
        with patch.object(LanguageClient, "generate", return_value=answer):
            response = client.post(
                "/api/listings/extract",
                json={
                    "url": "https://example.com/listing/1",
                    "scenario": buy_scenario.model_dump(mode="json"),
                },
            )

        assert response.status_code == 200
        data = response.get_json()
        assert data["listing"]["home_value"] == 600_000
        assert data["scenario"]["loan_amount"] == pytest.approx(480_000)
        assert data["scenario"]["lock_fmv"] is True

    def test_collaborator_failure(self, client):
        with patch.object(
            LanguageClient, "generate", side_effect=CollaboratorError("unavailable")
        ):
            response = client.post(
                "/api/listings/extract", json={"url": "https://example.com/listing/1"}
            )

        assert response.status_code == 502
        assert response.get_json()["message"] == "unavailable"

    def test_missing_url(self, client):
        response = client.post("/api/listings/extract", json={})
        assert response.status_code == 400


class TestAnalysisEndpoint:
    """Test cases for POST /api/analysis."""

    def test_analysis(self, client, comparison_payload):
        with patch.object(LanguageClient, "generate", return_value="## Buy wins") as generate:
            response = client.post("/api/analysis", json=comparison_payload)

        assert response.status_code == 200
        assert response.get_json() == {"analysis": "## Buy wins"}
        assert "SNAPSHOT at Year 2" in generate.call_args[0][0]

    def test_analysis_failure(self, client, comparison_payload):
        with patch.object(
            LanguageClient, "generate", side_effect=CollaboratorError("quota exceeded")
        ):
            response = client.post("/api/analysis", json=comparison_payload)

        assert response.status_code == 502
        assert response.get_json()["error"] == "Analysis failed"
