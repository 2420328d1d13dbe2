from __future__ import annotations

from typing import List, Tuple

import numpy as np

MONTH_LENGTHS: List[int] = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]
"""Number of days in each month (January through December), non-leap year."""

MONTH_NAMES: List[str] = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

HOURS_PER_DAY = 24
DAYS_PER_YEAR = sum(MONTH_LENGTHS)
HOURS_PER_YEAR = DAYS_PER_YEAR * HOURS_PER_DAY


def build_calendar() -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Returns arrays describing the simulated year at daily resolution.

    Outputs:
      - day_of_year: 1-based day number (1..365)
      - month_in_year_for_day: month index 0..11
      - day_in_month_for_day: day number within the month (0-based)
    """
    day_of_year = []
    month_in_year_for_day = []
    day_in_month_for_day = []

    doy = 0
    for m, days in enumerate(MONTH_LENGTHS):
        for day in range(days):
            doy += 1
            day_of_year.append(doy)
            month_in_year_for_day.append(m)
            day_in_month_for_day.append(day)

    return (
        np.array(day_of_year, dtype=int),
        np.array(month_in_year_for_day, dtype=int),
        np.array(day_in_month_for_day, dtype=int),
    )
