"""Working-day calendar."""

from __future__ import annotations

import calendar


def working_days_in_month(year: int, month: int) -> int:
    """Count Monday-Friday days in a calendar month.

    Public holidays are not taken into account.
    """
    _, days_in_month = calendar.monthrange(year, month)
    return sum(
        1
        for day in range(1, days_in_month + 1)
        if calendar.weekday(year, month, day) < calendar.SATURDAY
    )


def month_display(month: int, year: int) -> str:
    """Format a period as e.g. ``January 2026``."""
    return f"{calendar.month_name[month]} {year}"
