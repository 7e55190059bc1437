"""
Property data extraction from listing URLs.

Given a listing URL, the language service is asked for the listing price and
annual property tax, insurance and HOA. The result is a partial record that a
caller merges into a scenario before projecting; the projection engine never
calls this service.
"""

import json
import logging
import re
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from homeplanner.models.scenario import Scenario
from homeplanner.services.language_client import CollaboratorError, LanguageClient

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """
I have a real estate listing URL: {url}

Please use Google Search to find the details for this specific property.
I need the following 4 numbers:
1. Listing Price (Home Value)
2. Annual Property Tax (Estimate is fine if exact not found)
3. Annual Home Insurance (Estimate is fine)
4. Annual HOA Fees (0 if none)

Return ONLY a raw JSON object with these keys: "homeValue", "propertyTax", "homeInsurance", "hoa".
Do not include markdown formatting or explanations. Just the JSON string.
Example: {{ "homeValue": 500000, "propertyTax": 4500, "homeInsurance": 1200, "hoa": 0 }}
"""

# Share of the listing price financed when a listing is imported
IMPORT_LOAN_TO_VALUE = 0.8

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


class PropertyExtractionError(CollaboratorError):
    """The listing could not be turned into property data."""


class PropertyListing(BaseModel):
    """Partial property record extracted from a listing."""

    home_value: Optional[float] = Field(default=None, ge=0)
    property_tax: Optional[float] = Field(default=None, ge=0)
    home_insurance: Optional[float] = Field(default=None, ge=0)
    hoa: Optional[float] = Field(default=None, ge=0)


class PropertyExtractionService:
    """Extracts property data for a listing URL."""

    def __init__(self, client: LanguageClient):
        self.client = client

    def extract(self, url: str) -> PropertyListing:
        """
        Extract property data for a listing.

        Args:
            url: Listing URL

        Returns:
            PropertyListing with whatever fields could be found

        Raises:
            PropertyExtractionError: If the service fails or the answer does
                not contain a numeric home value
        """
        if not url or not url.strip():
            raise PropertyExtractionError("Listing URL is required")

        try:
            text = self.client.generate(EXTRACTION_PROMPT.format(url=url), use_search=True)
        except CollaboratorError as e:
            raise PropertyExtractionError(str(e))

        return self.parse_listing(text)

    @staticmethod
    def parse_listing(text: str) -> PropertyListing:
        """Parse the service's JSON answer, tolerating markdown code fences."""
        cleaned = _FENCE.sub("", text).strip()
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing listing data: {e}")
            raise PropertyExtractionError("Listing data was not valid JSON")

        if not isinstance(data, dict) or not isinstance(
            data.get("homeValue"), (int, float)
        ):
            raise PropertyExtractionError("Listing data has no numeric homeValue")

        try:
            return PropertyListing(
                home_value=data["homeValue"],
                property_tax=data.get("propertyTax") or 0,
                home_insurance=data.get("homeInsurance") or 0,
                hoa=data.get("hoa") or 0,
            )
        except ValidationError as e:
            raise PropertyExtractionError(f"Listing data is invalid: {e}")


def apply_listing(scenario: Scenario, listing: PropertyListing) -> Scenario:
    """
    Merge extracted listing data into a scenario.

    Home value and loan are locked against global broadcast. When a home value
    is present the loan is set to 80% of it and the down payment to the rest.
    A cost taken from the listing is used as a dollar amount, not a rate.

    Args:
        scenario: Scenario to update
        listing: Extracted listing data

    Returns:
        New Scenario with the listing applied
    """
    updates = {"lock_fmv": True, "lock_loan": True}
    if listing.home_value is not None:
        updates.update(
            home_value=listing.home_value,
            original_fmv=None,
            loan_amount=listing.home_value * IMPORT_LOAN_TO_VALUE,
            down_payment=listing.home_value * (1 - IMPORT_LOAN_TO_VALUE),
            existing_equity=0.0,
            start_date=None,
            primary_balance_locked=False,
            manual_current_balance=None,
        )
    for field in ("property_tax", "home_insurance", "hoa"):
        value = getattr(listing, field)
        if value is not None:
            updates[field] = value
            updates[f"use_{field}_rate"] = False
    return scenario.model_copy(update=updates)
