"""
Monthly service distribution.

Spreads an annual visit count across the twelve calendar months in proportion
to each month's length in weeks. Flooring the proportional shares leaves a
shortfall; it is handed out one visit at a time to the months with the largest
fractional remainders, so the monthly counts always add up to the annual target.
"""

import calendar
import math
from enum import Enum

from pydantic import BaseModel

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


class Cadence(str, Enum):
    TWO_WEEK = "two_week"
    FOUR_WEEK = "four_week"


class MonthlyDistribution(BaseModel):
    """One month of a distribution (month is 0-based)"""

    month: int
    name: str
    weeks: float
    services: int


def weeks_in_month(year: int, month_index: int) -> float:
    """Length of a month in weeks, unrounded (month_index is 0-based)"""
    return calendar.monthrange(year, month_index + 1)[1] / 7


def calculate_monthly_distribution(
    year: int,
    annual_services: int,
    cadence: Cadence | str = Cadence.TWO_WEEK,
) -> list[MonthlyDistribution]:
    """
    Distribute ``annual_services`` over the months of ``year``.

    ``cadence`` is accepted for parity with the program settings but does not
    change the weighting: every month is weighted by its week count only.
    """
    weeks = [weeks_in_month(year, m) for m in range(12)]
    total_weeks = sum(weeks)
    ideal_services_per_week = annual_services / total_weeks

    raw_distribution = [w * ideal_services_per_week for w in weeks]
    floored = [math.floor(raw) for raw in raw_distribution]
    remainder = annual_services - sum(floored)

    # Largest remainder first; sorted() is stable so earlier months win ties
    by_fraction = sorted(
        range(12),
        key=lambda m: raw_distribution[m] - floored[m],
        reverse=True,
    )
    for m in by_fraction[:remainder]:
        floored[m] += 1

    return [
        MonthlyDistribution(
            month=m,
            name=MONTH_NAMES[m],
            weeks=round(weeks[m], 2),
            services=floored[m],
        )
        for m in range(12)
    ]


def get_services_array(
    year: int,
    annual_services: int,
    cadence: Cadence | str = Cadence.TWO_WEEK,
) -> list[int]:
    """Monthly counts only, usable directly as a template's servicesPerMonth"""
    return [m.services for m in calculate_monthly_distribution(year, annual_services, cadence)]


def get_total_services(
    year: int,
    annual_services: int,
    cadence: Cadence | str = Cadence.TWO_WEEK,
) -> int:
    return sum(get_services_array(year, annual_services, cadence))
