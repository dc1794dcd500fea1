"""Tests for the working-day calendar."""

import pytest

from payroll_processor.calculators.work_calendar import month_display, working_days_in_month


@pytest.mark.parametrize(
    ("year", "month", "expected"),
    [
        (2026, 1, 22),  # starts Thursday
        (2026, 2, 20),  # exactly four weeks
        (2024, 2, 21),  # leap year, 29th is a Thursday
        (2025, 3, 21),
        (2025, 11, 20),
        (2026, 8, 21),
    ],
)
def test_working_days_in_month(year, month, expected):
    assert working_days_in_month(year, month) == expected


def test_month_display():
    assert month_display(1, 2026) == "January 2026"
    assert month_display(12, 2030) == "December 2030"
