"""Services that sit on top of the projection engine."""

from .language_client import CollaboratorError, LanguageClient
from .narrative_analysis import NarrativeAnalysisError, NarrativeAnalysisService
from .projection_service import ComparisonReport, ProjectionService, ScenarioOutcome
from .property_extraction import (
    PropertyExtractionError,
    PropertyExtractionService,
    PropertyListing,
    apply_listing,
)

__all__ = [
    "CollaboratorError",
    "LanguageClient",
    "NarrativeAnalysisError",
    "NarrativeAnalysisService",
    "ComparisonReport",
    "ProjectionService",
    "ScenarioOutcome",
    "PropertyExtractionError",
    "PropertyExtractionService",
    "PropertyListing",
    "apply_listing",
]
