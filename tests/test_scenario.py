from datetime import UTC, datetime

import pytest

from goalplan.plan import build_goal_plan
from goalplan.scenario import (
    MAX_TIMELINE_OFFSET_MONTHS,
    add_months,
    compare_scenario,
    evaluate_scenario,
    scenario_to_dict,
)
from goalplan.schema import Goal, Member, PercentShare
from tests.helpers import NOW, years_from_now


def _plan(**overrides):
    fields = {
        "id": "goal-1",
        "target_amount": 50000.0,
        "currency": "USD",
        "target_date": years_from_now(10),
        "expected_rate": 6.0,
        "compounding": "monthly",
        "contribution_frequency": "monthly",
        "existing_savings": 2000.0,
        "members": (Member("owner", "owner", PercentShare(100)),),
    }
    fields.update(overrides)
    return build_goal_plan(Goal(**fields), now=NOW)


def test_default_scenario_matches_plan():
    plan = _plan()

    scenario = evaluate_scenario(plan)

    assert scenario.rate_percent == 6.0
    assert scenario.timeline_offset_months == 0
    assert scenario.per_period == pytest.approx(plan.totals.per_period)
    assert scenario.lump_sum == pytest.approx(plan.totals.lump_sum_now)
    assert scenario.target_date == plan.goal.target_date
    assert (scenario.years, scenario.months) == (10, 0)


def test_projection_has_one_point_per_period_and_ends_on_target():
    plan = _plan()

    scenario = evaluate_scenario(plan)

    assert len(scenario.points) == 121
    assert [p.period for p in scenario.points] == list(range(121))
    assert scenario.points[-1].total == plan.goal.target_amount
    assert all(p.total <= plan.goal.target_amount for p in scenario.points)
    assert all(later.total >= earlier.total for earlier, later in zip(scenario.points, scenario.points[1:]))


def test_rate_override_changes_scenario_not_plan():
    plan = _plan()
    base_per_period = plan.totals.per_period

    scenario = evaluate_scenario(plan, rate_percent=10.0)

    assert scenario.rate_percent == 10.0
    assert scenario.per_period < base_per_period
    assert plan.totals.per_period == base_per_period
    assert plan.assumptions.expected_rate == 6.0


def test_zero_rate_scenario_has_no_growth():
    plan = _plan(existing_savings=0.0)

    scenario = evaluate_scenario(plan, rate_percent=0.0)

    assert scenario.per_period == pytest.approx(50000.0 / 120)
    assert scenario.growth_total == pytest.approx(0.0, abs=1e-6)
    assert scenario.contribution_percent == pytest.approx(100.0)


def test_timeline_offset_moves_target_date():
    plan = _plan()

    later = evaluate_scenario(plan, timeline_offset_months=12)
    sooner = evaluate_scenario(plan, timeline_offset_months=-24)

    assert later.target_date == datetime(2037, 1, 1, 12, tzinfo=UTC)
    assert later.period_count == pytest.approx(132.0)
    assert later.per_period < plan.totals.per_period
    assert sooner.per_period > plan.totals.per_period
    assert (sooner.years, sooner.months) == (8, 0)


def test_timeline_offset_is_clamped():
    plan = _plan()

    assert evaluate_scenario(plan, timeline_offset_months=-1000).timeline_offset_months == -120
    assert evaluate_scenario(plan, timeline_offset_months=500).timeline_offset_months == MAX_TIMELINE_OFFSET_MONTHS


def test_offset_to_today_requires_full_remaining_target():
    plan = _plan()

    scenario = evaluate_scenario(plan, timeline_offset_months=-120)

    assert scenario.period_count == pytest.approx(0.0, abs=1e-9)
    assert scenario.per_period == pytest.approx(48000.0)


def test_zero_horizon_projection_has_two_points():
    plan = _plan(target_date=years_from_now(-0.5))

    scenario = evaluate_scenario(plan)

    assert len(scenario.points) == 2
    assert scenario.points[-1].total == plan.goal.target_amount


def test_contribution_and_growth_percentages_are_bounded():
    for rate in (0.5, 6.0, 25.0, 100.0):
        scenario = evaluate_scenario(_plan(), rate_percent=rate)
        assert 0.0 <= scenario.contribution_percent <= 100.0
        assert 0.0 <= scenario.growth_percent <= 100.0
        assert scenario.contribution_percent + scenario.growth_percent == pytest.approx(100.0)


def test_compare_scenario_reports_changes():
    plan = _plan()

    same = compare_scenario(plan, evaluate_scenario(plan))
    faster = compare_scenario(plan, evaluate_scenario(plan, timeline_offset_months=-12))

    assert same.per_period_change == pytest.approx(0.0, abs=1e-6)
    assert same.months_shifted == 0
    assert faster.per_period_change > 0
    assert faster.months_shifted == -12


def test_compare_scenario_non_finite_is_none():
    plan = _plan()

    delta = compare_scenario(plan, evaluate_scenario(plan, rate_percent=-2400.0))

    assert delta.per_period_change is None
    assert delta.lump_sum_change is None


def test_scenario_to_dict_is_json_ready():
    out = scenario_to_dict(evaluate_scenario(_plan(), timeline_offset_months=6))

    assert out["timelineOffsetMonths"] == 6
    assert out["targetDate"].startswith("2036-07-01")
    assert len(out["points"]) == round(out["periodCount"]) + 1
    assert set(out["points"][0]) == {"period", "total", "contributions", "growth"}


@pytest.mark.parametrize(
    ("start", "months", "expected"),
    [
        (datetime(2027, 1, 31, tzinfo=UTC), 1, datetime(2027, 2, 28, tzinfo=UTC)),
        (datetime(2028, 1, 31, tzinfo=UTC), 1, datetime(2028, 2, 29, tzinfo=UTC)),
        (datetime(2027, 3, 31, tzinfo=UTC), -1, datetime(2027, 2, 28, tzinfo=UTC)),
        (datetime(2027, 11, 15, tzinfo=UTC), 3, datetime(2028, 2, 15, tzinfo=UTC)),
        (datetime(2027, 5, 10, tzinfo=UTC), 0, datetime(2027, 5, 10, tzinfo=UTC)),
    ],
)
def test_add_months_clamps_day(start, months, expected):
    assert add_months(start, months) == expected


def test_offset_near_calendar_end_stops_at_max_date():
    plan = _plan(target_date=datetime(9995, 6, 1, tzinfo=UTC))

    scenario = evaluate_scenario(plan, timeline_offset_months=120)

    assert scenario.timeline_offset_months == 120
    assert scenario.target_date == datetime.max.replace(tzinfo=UTC)
    assert scenario_to_dict(scenario)["targetDate"].startswith("9999-12-31")


def test_add_months_outside_calendar_range():
    assert add_months(datetime(9999, 6, 1, tzinfo=UTC), 12) == datetime.max.replace(tzinfo=UTC)
    assert add_months(datetime(1, 3, 1, tzinfo=UTC), -6) == datetime.min.replace(tzinfo=UTC)
