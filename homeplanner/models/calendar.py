"""
Calendar and horizon utilities for home-finance projections.

This module provides month arithmetic for loan start dates, the projection
horizon (which months get an annual snapshot and how they are labelled), and
currency formatting for human-readable summaries.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


def months_between(start: date, end: date) -> int:
    """
    Count whole calendar months from ``start`` to ``end``.

    Days of month are ignored, so 2024-01-31 -> 2024-02-01 is one month.
    The result is negative when ``end`` precedes ``start``.

    Args:
        start: Earlier date
        end: Later date

    Returns:
        Number of calendar months between the two dates
    """
    return (end.year - start.year) * 12 + (end.month - start.month)


def add_months(start: date, months: int) -> date:
    """
    Return the first day of the month that is ``months`` after ``start``.

    Args:
        start: Reference date
        months: Number of months to advance (may be negative)

    Returns:
        First-of-month date
    """
    index = start.year * 12 + (start.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


class ProjectionHorizon(BaseModel):
    """Horizon of a projection, counted in months."""

    months: int = Field(..., description="Number of projected months")

    @property
    def is_empty(self) -> bool:
        return self.months <= 0

    @property
    def years(self) -> float:
        """Horizon length in (possibly fractional) years."""
        return max(self.months, 0) / 12

    def is_snapshot_month(self, month: int) -> bool:
        """True on every 12th month and on the final (possibly partial) month."""
        return month % 12 == 0 or month == self.months

    def snapshot_months(self) -> List[int]:
        """All months that produce an annual data point."""
        return [m for m in range(1, self.months + 1) if self.is_snapshot_month(m)]

    def label_for(self, month: int) -> str:
        """Chart label for a snapshot month."""
        if month % 12 == 0:
            return f"Yr {month // 12}"
        return f"Mo {month}"


class CurrencyFormatter(BaseModel):
    """Formats currency and percentage values for display."""

    currency_symbol: str = Field(default="$", description="Currency symbol")
    decimal_places: int = Field(
        default=0, ge=0, le=10, description="Number of decimal places"
    )
    show_currency_symbol: bool = Field(
        default=True, description="Whether to show currency symbol"
    )

    def format_currency(self, amount: float, show_symbol: Optional[bool] = None) -> str:
        """
        Format a currency amount for display.

        Args:
            amount: The amount to format
            show_symbol: Override the default symbol display setting

        Returns:
            Formatted currency string, e.g. ``-$1,250``
        """
        show_symbol = (
            show_symbol if show_symbol is not None else self.show_currency_symbol
        )

        rounded = round(abs(amount), self.decimal_places)
        if self.decimal_places > 0:
            formatted = f"{rounded:,.{self.decimal_places}f}"
        else:
            formatted = f"{int(rounded):,}"

        sign = "-" if amount < 0 and rounded != 0 else ""
        if show_symbol:
            return f"{sign}{self.currency_symbol}{formatted}"
        return f"{sign}{formatted}"

    def format_percentage(self, rate: float, decimal_places: int = 1) -> str:
        """
        Format a percentage for display.

        Args:
            rate: The rate in percent (5.0 = 5%)
            decimal_places: Number of decimal places to show

        Returns:
            Formatted percentage string
        """
        return f"{rate:.{decimal_places}f}%"
