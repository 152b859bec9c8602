"""Time-value-of-money helpers for savings goals.

All functions return plain floats. Degenerate inputs (for example a periodic
rate at or below -100%) produce ``nan`` or ``inf`` instead of raising, so
callers must check ``math.isfinite`` before displaying a result.
"""

from __future__ import annotations

from datetime import datetime
import math
import sys

DAYS_IN_YEAR = 365.25

FREQUENCY_PERIODS: dict[str, int] = {
    "monthly": 12,
    "yearly": 1,
}


def periods_per_year(frequency: str) -> int:
    return FREQUENCY_PERIODS.get(frequency, 1)


def year_fraction_from_dates(start: datetime, end: datetime) -> float:
    diff_days = (end - start).total_seconds() / 86400.0
    return diff_days / DAYS_IN_YEAR


def _growth_factor(periodic_rate: float, period_count: float) -> float:
    """Return (1 + i) ** n, mapping overflow to inf and negative bases to nan."""
    base = 1.0 + periodic_rate
    if base < 0:
        return math.nan
    try:
        return base**period_count
    except OverflowError:
        return math.inf


def future_value_of_present(pv: float, rate_percent: float, n_per_year: int, years: float) -> float:
    if years <= 0 or rate_percent == 0:
        return pv
    periodic_rate = (rate_percent / 100.0) / n_per_year
    return pv * _growth_factor(periodic_rate, n_per_year * years)


def net_target_after_existing(
    target: float,
    existing: float,
    rate_percent: float,
    compounding_n_per_year: int,
    years: float,
) -> float:
    existing_fv = future_value_of_present(existing, rate_percent, compounding_n_per_year, years)
    if math.isnan(existing_fv):
        return math.nan
    return max(target - existing_fv, 0.0)


def required_payment_for_future_value(
    net_target: float,
    rate_percent: float,
    n_per_year: int,
    years: float,
) -> float:
    """Periodic payment P such that P * ((1 + i) ** n - 1) / i == net_target."""
    period_count = n_per_year * years
    if period_count <= 0:
        return net_target if net_target > 0 else 0.0

    if rate_percent == 0:
        return net_target / period_count

    periodic_rate = (rate_percent / 100.0) / n_per_year
    denominator = _growth_factor(periodic_rate, period_count) - 1.0
    if math.isnan(denominator):
        return math.nan
    if abs(denominator) < sys.float_info.epsilon:
        return net_target / period_count
    if math.isinf(denominator):
        return 0.0
    return (periodic_rate * net_target) / denominator


def required_lump_sum_for_future_value(
    net_target: float,
    rate_percent: float,
    compounding_n_per_year: int,
    years: float,
) -> float:
    """Single deposit today that grows to net_target by the horizon.

    This is an alternative framing of the same remaining target, not a
    component to subtract from the periodic payment.
    """
    if years <= 0 or rate_percent == 0:
        return net_target
    periodic_rate = (rate_percent / 100.0) / compounding_n_per_year
    factor = _growth_factor(periodic_rate, compounding_n_per_year * years)
    if factor == 0:
        return math.inf if net_target > 0 else 0.0
    return net_target / factor

