"""Compact per-goal summary for dashboards and goal lists."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
import math

from .financial import (
    net_target_after_existing,
    periods_per_year,
    required_payment_for_future_value,
    year_fraction_from_dates,
)
from .schema import Goal

CONTRIBUTION_LABELS = {"monthly": "per month", "yearly": "per year"}


@dataclass(frozen=True, slots=True)
class GoalSummary:
    id: str
    title: str
    target_amount: float
    target_date: datetime
    contribution_amount: float
    contribution_label: str
    collaborative: bool
    progress: int


def _clamp_percent(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return min(max(value, 0.0), 100.0)


def build_goal_summary(goal: Goal, *, now: datetime | None = None) -> GoalSummary:
    now = now or datetime.now(UTC)
    years = max(year_fraction_from_dates(now, goal.target_date), 0.0)
    net_target = net_target_after_existing(
        goal.target_amount,
        goal.existing_savings,
        goal.expected_rate,
        periods_per_year(goal.compounding),
        years,
    )
    per_period = required_payment_for_future_value(
        net_target,
        goal.expected_rate,
        periods_per_year(goal.contribution_frequency),
        years,
    )
    progress = _clamp_percent(goal.existing_savings / goal.target_amount * 100.0) if goal.target_amount > 0 else 0.0

    return GoalSummary(
        id=goal.id,
        title=goal.title,
        target_amount=goal.target_amount,
        target_date=goal.target_date,
        contribution_amount=max(per_period, 0.0) if math.isfinite(per_period) else 0.0,
        contribution_label=CONTRIBUTION_LABELS.get(goal.contribution_frequency, "per period"),
        collaborative=goal.is_shared,
        progress=round(progress),
    )
