"""What-if scenarios and period-by-period projections for a goal plan."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, datetime
import logging
import math

from .financial import (
    net_target_after_existing,
    periods_per_year,
    required_lump_sum_for_future_value,
    required_payment_for_future_value,
)
from .plan import GoalPlan, derive_horizon_breakdown, finite_or_none

logger = logging.getLogger(__name__)

MAX_TIMELINE_OFFSET_MONTHS = 240


@dataclass(frozen=True, slots=True)
class ProjectionPoint:
    period: int
    total: float
    contributions: float
    growth: float


@dataclass(frozen=True, slots=True)
class ScenarioProjection:
    rate_percent: float
    timeline_offset_months: int
    per_period: float
    lump_sum: float
    contributions_total: float
    growth_total: float
    contribution_percent: float
    growth_percent: float
    period_count: float
    target_date: datetime
    years: int
    months: int
    points: tuple[ProjectionPoint, ...]


@dataclass(frozen=True, slots=True)
class ScenarioDelta:
    per_period_change: float | None
    lump_sum_change: float | None
    months_shifted: int
    target_date: datetime


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def add_months(value: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the end of the target month.

    Shifts past the supported calendar range stop at ``datetime.min``/``datetime.max``.
    """
    if months == 0:
        return value
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    if year > MAXYEAR:
        return datetime.max.replace(tzinfo=value.tzinfo)
    if year < MINYEAR:
        return datetime.min.replace(tzinfo=value.tzinfo)
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def build_projection_points(
    plan: GoalPlan,
    period_count: float,
    per_period: float,
    lump_sum: float,
    rate_percent: float,
) -> list[ProjectionPoint]:
    """Balance path from today to the target, one point per contribution period.

    The last point is pinned to the target amount so the series ends exactly
    on the goal regardless of floating-point drift.
    """
    n_per_year = periods_per_year(plan.assumptions.contribution_frequency)
    steps = max(1, round(period_count)) if period_count > 0 else 1
    periodic_rate = rate_percent / 100.0 / n_per_year
    target = plan.goal.target_amount
    payment = _finite(per_period)

    balance = plan.goal.existing_savings + _finite(lump_sum)
    contributions = balance

    opening = min(balance, target)
    points = [
        ProjectionPoint(period=0, total=opening, contributions=contributions, growth=max(opening - contributions, 0.0))
    ]

    for period in range(1, steps + 1):
        if period_count > 0:
            balance += payment
            contributions += payment
        if periodic_rate > 0:
            balance += balance * periodic_rate
        total = min(balance, target)
        points.append(
            ProjectionPoint(period=period, total=total, contributions=contributions, growth=max(total - contributions, 0.0))
        )

    points[-1] = ProjectionPoint(
        period=points[-1].period,
        total=target,
        contributions=contributions,
        growth=max(target - contributions, 0.0),
    )
    return points


def clamp_timeline_offset(plan: GoalPlan, timeline_offset_months: int) -> int:
    base_total_months = round(plan.base_years * 12)
    return int(_clamp(timeline_offset_months, -base_total_months, MAX_TIMELINE_OFFSET_MONTHS))


def evaluate_scenario(
    plan: GoalPlan,
    *,
    rate_percent: float | None = None,
    timeline_offset_months: int = 0,
) -> ScenarioProjection:
    """Re-run the plan math with an alternative rate and/or deadline.

    The base plan is not modified; a fresh projection is returned.
    """
    offset = clamp_timeline_offset(plan, timeline_offset_months)
    rate = plan.assumptions.expected_rate if rate_percent is None else rate_percent
    years = max(plan.base_years + offset / 12.0, 0.0)

    contribution_n = periods_per_year(plan.assumptions.contribution_frequency)
    compounding_n = periods_per_year(plan.assumptions.compounding)
    existing = plan.goal.existing_savings
    target = plan.goal.target_amount

    net_target = net_target_after_existing(target, existing, rate, compounding_n, years)
    per_period = required_payment_for_future_value(net_target, rate, contribution_n, years)
    lump_sum = required_lump_sum_for_future_value(net_target, rate, compounding_n, years)

    period_count = contribution_n * years
    contributions_total = existing + _finite(lump_sum) + _finite(per_period) * period_count
    growth_total = max(target - contributions_total, 0.0)
    contribution_percent = _clamp(contributions_total / target * 100.0, 0.0, 100.0) if target > 0 else 0.0
    growth_percent = _clamp(100.0 - contribution_percent, 0.0, 100.0) if target > 0 else 0.0
    years_part, months_part = derive_horizon_breakdown(period_count, contribution_n)

    points = build_projection_points(plan, period_count, per_period, lump_sum, rate)
    logger.debug("Scenario rate=%.3f offset=%d -> %d points", rate, offset, len(points))

    return ScenarioProjection(
        rate_percent=rate,
        timeline_offset_months=offset,
        per_period=per_period,
        lump_sum=lump_sum,
        contributions_total=contributions_total,
        growth_total=growth_total,
        contribution_percent=contribution_percent,
        growth_percent=growth_percent,
        period_count=period_count,
        target_date=add_months(plan.goal.target_date, offset),
        years=years_part,
        months=months_part,
        points=tuple(points),
    )


def compare_scenario(plan: GoalPlan, projection: ScenarioProjection) -> ScenarioDelta:
    def _delta(new: float, base: float) -> float | None:
        if not (math.isfinite(new) and math.isfinite(base)):
            return None
        return new - base

    return ScenarioDelta(
        per_period_change=_delta(projection.per_period, plan.totals.per_period),
        lump_sum_change=_delta(projection.lump_sum, plan.totals.lump_sum_now),
        months_shifted=projection.timeline_offset_months,
        target_date=projection.target_date,
    )


def scenario_to_dict(projection: ScenarioProjection) -> dict[str, object]:
    return {
        "ratePercent": projection.rate_percent,
        "timelineOffsetMonths": projection.timeline_offset_months,
        "perPeriod": finite_or_none(projection.per_period),
        "lumpSum": finite_or_none(projection.lump_sum),
        "contributionsTotal": projection.contributions_total,
        "growthTotal": projection.growth_total,
        "contributionPercent": projection.contribution_percent,
        "growthPercent": projection.growth_percent,
        "periodCount": projection.period_count,
        "targetDate": projection.target_date.isoformat(),
        "years": projection.years,
        "months": projection.months,
        "points": [
            {"period": p.period, "total": p.total, "contributions": p.contributions, "growth": p.growth}
            for p in projection.points
        ],
    }
