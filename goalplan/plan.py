"""Build the read-only funding plan for a goal and its members."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
import logging
import math
from typing import Any, Mapping

from .allocation import AllocationResult, compute_member_allocations
from .financial import (
    net_target_after_existing,
    periods_per_year,
    required_lump_sum_for_future_value,
    required_payment_for_future_value,
    year_fraction_from_dates,
)
from .schema import Goal, MemberDetails

logger = logging.getLogger(__name__)

WARNING_PAST_TARGET = "Target date is in the past or today; recurring contributions may not be feasible."
WARNING_NO_PERIODS = "No contribution periods remain; the full remaining target is due immediately."
WARNING_NOT_COMPUTABLE = "The required contribution cannot be computed for these assumptions."
WARNING_MISSING_PERCENTAGES = "Percentage allocations are missing; unable to distribute contributions."
WARNING_NO_RECIPIENTS = "No members available to receive the remaining contribution requirement."
WARNING_MIXED_SPLITS = (
    "Members mix fixed and percent-based splits; percent shares cover only what is left after fixed contributions."
)


@dataclass(frozen=True, slots=True)
class Horizon:
    years: int
    months: int
    total_periods: float
    n_per_year: int


@dataclass(frozen=True, slots=True)
class Totals:
    per_period: float
    lump_sum_now: float


@dataclass(frozen=True, slots=True)
class Assumptions:
    expected_rate: float
    compounding: str
    contribution_frequency: str


@dataclass(frozen=True, slots=True)
class PlanMember:
    user_id: str
    role: str
    split_percent: float | None
    fixed_amount: float | None
    per_period: float
    email: str | None = None
    name: str | None = None


@dataclass(frozen=True, slots=True)
class GoalPlan:
    goal: Goal
    horizon: Horizon
    totals: Totals
    members: tuple[PlanMember, ...]
    assumptions: Assumptions
    warnings: tuple[str, ...] = ()
    net_target: float = 0.0
    allocation: AllocationResult | None = field(default=None, compare=False, repr=False)

    @property
    def base_years(self) -> float:
        if self.horizon.n_per_year <= 0:
            return 0.0
        return self.horizon.total_periods / self.horizon.n_per_year


def derive_horizon_breakdown(total_periods: float, n_per_year: int) -> tuple[int, int]:
    """Split a period count into whole years and remaining months (0-11)."""
    total_months = max((total_periods / n_per_year) * 12.0, 0.0) if n_per_year > 0 else 0.0
    years = math.floor(total_months / 12.0)
    months = round(total_months - years * 12)
    if months == 12:
        years += 1
        months = 0
    return int(years), int(months)


def _overflow_warning(allocation: AllocationResult) -> str:
    return (
        f"Fixed contributions exceed the required per-period amount by {allocation.overflow_amount:,.2f}; "
        "review splits."
    )


def _percent_sum_warning(allocation: AllocationResult) -> str:
    return f"Percent shares total {allocation.percent_sum:.1f}%, adjust to 100%."


def _collect_warnings(raw_years: float, total_periods: float, per_period: float, allocation: AllocationResult) -> list[str]:
    warnings: list[str] = []
    if raw_years <= 0:
        warnings.append(WARNING_PAST_TARGET)
    if total_periods <= 0:
        warnings.append(WARNING_NO_PERIODS)
    if not math.isfinite(per_period):
        warnings.append(WARNING_NOT_COMPUTABLE)
    if allocation.overflow:
        warnings.append(_overflow_warning(allocation))
    if allocation.percent_sum_off_target:
        warnings.append(_percent_sum_warning(allocation))
    if allocation.missing_percentages:
        warnings.append(WARNING_MISSING_PERCENTAGES)
    if allocation.unassigned_remainder:
        warnings.append(WARNING_NO_RECIPIENTS)
    if allocation.has_fixed and allocation.has_percent:
        warnings.append(WARNING_MIXED_SPLITS)
    return warnings


def build_goal_plan(
    goal: Goal,
    member_details: Mapping[str, MemberDetails] | None = None,
    *,
    now: datetime | None = None,
) -> GoalPlan:
    """Compute horizon, totals and per-member contributions for ``goal``.

    ``member_details`` maps user ids to display details; missing entries
    leave ``email``/``name`` unset. ``now`` defaults to the current UTC time.
    """
    now = now or datetime.now(UTC)
    raw_years = year_fraction_from_dates(now, goal.target_date)
    years = max(raw_years, 0.0)

    compounding_n = periods_per_year(goal.compounding)
    contribution_n = periods_per_year(goal.contribution_frequency)
    total_periods = contribution_n * years

    net_target = net_target_after_existing(
        goal.target_amount,
        goal.existing_savings,
        goal.expected_rate,
        compounding_n,
        years,
    )
    per_period = required_payment_for_future_value(net_target, goal.expected_rate, contribution_n, years)
    lump_sum_now = required_lump_sum_for_future_value(net_target, goal.expected_rate, compounding_n, years)

    allocation = compute_member_allocations(per_period, goal.members)
    details = member_details or {}
    members = tuple(
        PlanMember(
            user_id=item.member.user_id,
            role=item.member.role,
            split_percent=item.member.split_percent,
            fixed_amount=item.member.fixed_amount,
            per_period=item.per_period,
            email=details[item.member.user_id].email if item.member.user_id in details else None,
            name=details[item.member.user_id].name if item.member.user_id in details else None,
        )
        for item in allocation.allocations
    )

    horizon_years, horizon_months = derive_horizon_breakdown(total_periods, contribution_n)
    warnings = _collect_warnings(raw_years, total_periods, per_period, allocation)

    logger.debug(
        "Built plan for goal %s: %.2f periods, per_period=%s, warnings=%d",
        goal.id or "<unsaved>",
        total_periods,
        per_period,
        len(warnings),
        extra={"goal_id": goal.id, "periods": total_periods, "rate_percent": goal.expected_rate},
    )

    return GoalPlan(
        goal=goal,
        horizon=Horizon(
            years=horizon_years,
            months=horizon_months,
            total_periods=total_periods,
            n_per_year=contribution_n,
        ),
        totals=Totals(per_period=per_period, lump_sum_now=lump_sum_now),
        members=members,
        assumptions=Assumptions(
            expected_rate=goal.expected_rate,
            compounding=goal.compounding,
            contribution_frequency=goal.contribution_frequency,
        ),
        warnings=tuple(warnings),
        net_target=net_target,
        allocation=allocation,
    )


def finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def plan_to_dict(plan: GoalPlan) -> dict[str, Any]:
    """Render the plan as a JSON-serializable dict; non-finite numbers become None."""
    goal = plan.goal
    members: list[dict[str, Any]] = []
    for member in plan.members:
        entry: dict[str, Any] = {"userId": member.user_id, "role": member.role}
        if member.split_percent is not None:
            entry["splitPercent"] = member.split_percent
        if member.fixed_amount is not None:
            entry["fixedAmount"] = member.fixed_amount
        entry["perPeriod"] = finite_or_none(member.per_period)
        if member.email is not None:
            entry["email"] = member.email
        if member.name is not None:
            entry["name"] = member.name
        members.append(entry)

    out: dict[str, Any] = {
        "goal": {
            "id": goal.id,
            "title": goal.title,
            "currency": goal.currency,
            "targetAmount": goal.target_amount,
            "targetDate": goal.target_date.isoformat(),
            "expectedRate": goal.expected_rate,
            "compounding": goal.compounding,
            "contributionFrequency": goal.contribution_frequency,
            "existingSavings": goal.existing_savings,
            "isShared": goal.is_shared,
        },
        "horizon": {
            "years": plan.horizon.years,
            "months": plan.horizon.months,
            "totalPeriods": plan.horizon.total_periods,
            "nPerYear": plan.horizon.n_per_year,
        },
        "totals": {
            "perPeriod": finite_or_none(plan.totals.per_period),
            "lumpSumNow": finite_or_none(plan.totals.lump_sum_now),
        },
        "members": members,
        "assumptions": {
            "expectedRate": plan.assumptions.expected_rate,
            "compounding": plan.assumptions.compounding,
            "contributionFrequency": plan.assumptions.contribution_frequency,
        },
    }
    if plan.warnings:
        out["warnings"] = list(plan.warnings)
    return out
