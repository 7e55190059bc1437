"""
Projection blueprint for comparing home-finance scenarios.

This module provides API endpoints for projecting scenarios, keeping a
scenario's price/debt/equity inputs consistent after an edit, importing
listing data, and requesting a narrative analysis.
"""

from datetime import date
from typing import Any, List, Optional

from flask import Blueprint, current_app, jsonify, request
from pydantic import BaseModel, Field, ValidationError

from homeplanner.models.equity_sync import EditableField, apply_edit
from homeplanner.models.scenario import ProjectionAssumptions, Scenario
from homeplanner.services.language_client import CollaboratorError, LanguageClient
from homeplanner.services.narrative_analysis import NarrativeAnalysisService
from homeplanner.services.projection_service import ProjectionService
from homeplanner.services.property_extraction import (
    PropertyExtractionService,
    apply_listing,
)

projections_bp = Blueprint("projections", __name__, url_prefix="/api")


class ComparisonRequest(BaseModel):
    scenarios: List[Scenario] = Field(..., min_length=1)
    assumptions: ProjectionAssumptions = Field(default_factory=ProjectionAssumptions)


class EquitySyncRequest(BaseModel):
    scenario: Scenario
    field: EditableField
    value: float
    as_of: Optional[date] = None


class ListingRequest(BaseModel):
    url: str = Field(..., min_length=1)
    scenario: Optional[Scenario] = None


def _language_client() -> LanguageClient:
    return current_app.extensions["language_client"]


def _validation_error(e: ValidationError) -> Any:
    return (
        jsonify(
            {
                "error": "Invalid request",
                "details": e.errors(include_url=False, include_context=False),
            }
        ),
        400,
    )


def _compare(payload: ComparisonRequest):
    max_horizon = current_app.config["MAX_HORIZON_MONTHS"]
    if payload.assumptions.horizon_months > max_horizon:
        raise ValueError(f"horizon_months cannot exceed {max_horizon}")
    service = ProjectionService(max_scenarios=current_app.config["MAX_SCENARIOS"])
    return service.compare(payload.scenarios, payload.assumptions)


@projections_bp.route("/projections", methods=["POST"])
def create_projection() -> Any:
    """Project and compare scenarios.

    Returns:
        JSON comparison report with per-scenario results and winners
    """
    try:
        payload = ComparisonRequest.model_validate(request.get_json(silent=True) or {})
        report = _compare(payload)
        return jsonify(report.model_dump(mode="json")), 200

    except ValidationError as e:
        return _validation_error(e)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        current_app.logger.error(f"Error projecting scenarios: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@projections_bp.route("/equity-sync", methods=["POST"])
def sync_equity() -> Any:
    """Apply one edit to home value, loan, down payment or existing equity.

    Returns:
        JSON with the updated scenario and the equity equation check
    """
    try:
        payload = EquitySyncRequest.model_validate(request.get_json(silent=True) or {})
        result = apply_edit(
            payload.scenario,
            payload.field,
            payload.value,
            payload.as_of or date.today(),
        )
        return jsonify(result.model_dump(mode="json")), 200

    except ValidationError as e:
        return _validation_error(e)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        current_app.logger.error(f"Error synchronizing equity: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@projections_bp.route("/listings/extract", methods=["POST"])
def extract_listing() -> Any:
    """Extract property data from a listing URL.

    When a scenario is supplied, the listing is merged into it as well.
    """
    try:
        payload = ListingRequest.model_validate(request.get_json(silent=True) or {})
        service = PropertyExtractionService(_language_client())
        listing = service.extract(payload.url)

        response = {"listing": listing.model_dump(mode="json")}
        if payload.scenario is not None:
            response["scenario"] = apply_listing(payload.scenario, listing).model_dump(
                mode="json"
            )
        return jsonify(response), 200

    except ValidationError as e:
        return _validation_error(e)
    except CollaboratorError as e:
        current_app.logger.warning(f"Listing extraction failed: {str(e)}")
        return jsonify({"error": "Listing extraction failed", "message": str(e)}), 502
    except Exception as e:
        current_app.logger.error(f"Error extracting listing: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@projections_bp.route("/analysis", methods=["POST"])
def analyze_scenarios() -> Any:
    """Project the scenarios and ask for a narrative comparison.

    Returns:
        JSON with the markdown analysis
    """
    try:
        payload = ComparisonRequest.model_validate(request.get_json(silent=True) or {})
        report = _compare(payload)
        results = [o.result for o in report.outcomes if o.result is not None]

        service = NarrativeAnalysisService(_language_client())
        analysis = service.analyze(
            payload.scenarios, results, payload.assumptions.horizon_months // 12
        )
        return jsonify({"analysis": analysis}), 200

    except ValidationError as e:
        return _validation_error(e)
    except CollaboratorError as e:
        current_app.logger.warning(f"Narrative analysis failed: {str(e)}")
        return jsonify({"error": "Analysis failed", "message": str(e)}), 502
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        current_app.logger.error(f"Error analyzing scenarios: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500
