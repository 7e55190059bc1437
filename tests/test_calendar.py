"""Tests for calendar, horizon and formatting utilities."""

from datetime import date

from homeplanner.models.calendar import (
    CurrencyFormatter,
    ProjectionHorizon,
    add_months,
    months_between,
)


class TestMonthArithmetic:
    """Test cases for month arithmetic."""

    def test_months_between_ignores_days(self):
        assert months_between(date(2024, 1, 31), date(2024, 2, 1)) == 1
        assert months_between(date(2020, 6, 1), date(2025, 1, 1)) == 55
        assert months_between(date(2025, 3, 1), date(2025, 1, 1)) == -2

    def test_add_months_rolls_over_years(self):
        assert add_months(date(2025, 11, 15), 1) == date(2025, 12, 1)
        assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 1)
        assert add_months(date(2025, 1, 31), -1) == date(2024, 12, 1)


class TestProjectionHorizon:
    """Test cases for ProjectionHorizon."""

    def test_snapshot_months_include_partial_final_year(self):
        horizon = ProjectionHorizon(months=30)
        assert horizon.snapshot_months() == [12, 24, 30]
        assert horizon.years == 2.5

    def test_labels(self):
        horizon = ProjectionHorizon(months=30)
        assert horizon.label_for(24) == "Yr 2"
        assert horizon.label_for(30) == "Mo 30"

    def test_empty_horizon(self):
        assert ProjectionHorizon(months=0).is_empty
        assert ProjectionHorizon(months=-3).snapshot_months() == []


class TestCurrencyFormatter:
    """Test cases for CurrencyFormatter."""

    def test_whole_dollars_by_default(self):
        formatter = CurrencyFormatter()
        assert formatter.format_currency(1234567.89) == "$1,234,568"
        assert formatter.format_currency(-1250) == "-$1,250"
        assert formatter.format_currency(1250, show_symbol=False) == "1,250"

    def test_decimal_places(self):
        formatter = CurrencyFormatter(decimal_places=2)
        assert formatter.format_currency(2194.583) == "$2,194.58"

    def test_percentage(self):
        formatter = CurrencyFormatter()
        assert formatter.format_percentage(20) == "20.0%"
        assert formatter.format_percentage(5.75, decimal_places=2) == "5.75%"
