"""HTML report generation."""

from __future__ import annotations

from datetime import UTC, datetime
import hashlib
import html
import json
from pathlib import Path

from .charts import build_chart_payload
from .formatters import format_date, format_horizon, format_money, format_percent
from .plan import GoalPlan, plan_to_dict
from .scenario import ScenarioProjection, compare_scenario, evaluate_scenario, scenario_to_dict
from .templates import render_html_document
from .validate import validate_goal

PERIOD_LABELS = {"monthly": "Month", "yearly": "Year"}


def _dashboard_cards(plan: GoalPlan) -> str:
    currency = plan.goal.currency
    frequency = "month" if plan.assumptions.contribution_frequency == "monthly" else "year"
    cards = [
        ("Target", format_money(plan.goal.target_amount, currency)),
        ("Target Date", format_date(plan.goal.target_date)),
        ("Horizon", format_horizon(plan.horizon.years, plan.horizon.months)),
        (f"Required per {frequency}", format_money(plan.totals.per_period, currency)),
        ("Or Lump Sum Today", format_money(plan.totals.lump_sum_now, currency)),
        ("Expected Rate", format_percent(plan.assumptions.expected_rate)),
    ]
    return "".join(f'<div class="card"><div class="k">{html.escape(k)}</div><div class="v">{html.escape(v)}</div></div>' for k, v in cards)


def _members_table(plan: GoalPlan) -> str:
    currency = plan.goal.currency
    rows: list[str] = []
    for member in plan.members:
        label = member.name or member.email or member.user_id
        if member.fixed_amount is not None:
            split = f"Fixed {format_money(member.fixed_amount, currency)}"
        else:
            split = format_percent(member.split_percent or 0.0)
        rows.append(
            "<tr>"
            + f"<td>{html.escape(label)}</td>"
            + f"<td>{html.escape(member.role)}</td>"
            + f"<td>{html.escape(split)}</td>"
            + f"<td>{html.escape(format_money(member.per_period, currency))}</td>"
            + "</tr>"
        )
    return (
        "<table><thead><tr>"
        "<th>Member</th><th>Role</th><th>Split</th><th>Per Period</th>"
        "</tr></thead><tbody>"
        + "".join(rows)
        + "</tbody></table>"
    )


def _scenario_table(plan: GoalPlan, scenario: ScenarioProjection) -> str:
    currency = plan.goal.currency
    delta = compare_scenario(plan, scenario)

    def _change(value: float | None) -> str:
        if value is None:
            return "Not available"
        return f"+{format_money(value, currency)}" if value > 0 else format_money(value, currency)

    rows = [
        ("Rate", format_percent(plan.assumptions.expected_rate), format_percent(scenario.rate_percent), ""),
        (
            "Target date",
            format_date(plan.goal.target_date),
            format_date(scenario.target_date),
            f"{delta.months_shifted:+d} months" if delta.months_shifted else "",
        ),
        (
            "Per period",
            format_money(plan.totals.per_period, currency),
            format_money(scenario.per_period, currency),
            _change(delta.per_period_change),
        ),
        (
            "Lump sum today",
            format_money(plan.totals.lump_sum_now, currency),
            format_money(scenario.lump_sum, currency),
            _change(delta.lump_sum_change),
        ),
        (
            "Contributions / growth",
            "",
            f"{scenario.contribution_percent:.1f}% / {scenario.growth_percent:.1f}%",
            "",
        ),
    ]
    body = "".join(
        "<tr>" + "".join(f"<td>{html.escape(cell)}</td>" for cell in row) + "</tr>"
        for row in rows
    )
    return (
        "<table><thead><tr><th>Assumption</th><th>Plan</th><th>Scenario</th><th>Change</th></tr></thead><tbody>"
        + body
        + "</tbody></table>"
    )


def _projection_table(plan: GoalPlan, projection: ScenarioProjection) -> str:
    currency = plan.goal.currency
    period_label = PERIOD_LABELS.get(plan.assumptions.contribution_frequency, "Period")
    rows = [
        "<tr>"
        + f"<td>{point.period}</td>"
        + f"<td>{format_money(point.total, currency, digits=0)}</td>"
        + f"<td>{format_money(point.contributions, currency, digits=0)}</td>"
        + f"<td>{format_money(point.growth, currency, digits=0)}</td>"
        + "</tr>"
        for point in projection.points
    ]
    table_html = (
        "<table><thead><tr>"
        f"<th>{period_label}</th><th>Balance</th><th>Contributions</th><th>Growth</th>"
        "</tr></thead><tbody>"
        + "".join(rows)
        + "</tbody></table>"
    )
    return f'<div class="table-wrap">{table_html}</div>'


def _validation_panel(plan: GoalPlan) -> str:
    validation = validate_goal(plan.goal)

    rows: list[str] = []
    for msg in validation.errors:
        rows.append(f"<tr class=\"warning\"><td>Error</td><td>{html.escape(msg)}</td></tr>")
    for msg in validation.warnings:
        rows.append(f"<tr><td>Validation warning</td><td>{html.escape(msg)}</td></tr>")
    for msg in plan.warnings:
        rows.append(f"<tr class=\"warning\"><td>Plan warning</td><td>{html.escape(msg)}</td></tr>")
    if not rows:
        rows.append("<tr><td>OK</td><td>No validation or plan issues detected.</td></tr>")

    return (
        "<table><thead><tr><th>Type</th><th>Detail</th></tr></thead><tbody>"
        + "".join(rows)
        + "</tbody></table>"
    )


def render_report(plan: GoalPlan, scenario: ScenarioProjection, goal_path: str) -> str:
    base = evaluate_scenario(plan)
    payload = {
        "plan": plan_to_dict(plan),
        "scenario": scenario_to_dict(scenario),
        "charts": build_chart_payload(plan.goal.target_amount, base, scenario),
    }

    goal_hash = hashlib.sha256(Path(goal_path).read_bytes()).hexdigest()[:12]
    name = plan.goal.title or plan.goal.id or "Savings Goal"
    title = f"Goal Plan - {html.escape(name)}"
    timestamp = datetime.now(UTC).isoformat(timespec="seconds")
    subtitle = (
        f"Currency: {html.escape(plan.goal.currency)} | Members: {len(plan.members)} | "
        f"Generated: {timestamp} | Goal hash: {goal_hash}"
    )

    return render_html_document(
        title=title,
        subtitle=subtitle,
        dashboard_cards=_dashboard_cards(plan),
        members_table=_members_table(plan),
        scenario_table=_scenario_table(plan, scenario),
        projection_table=_projection_table(plan, scenario),
        warnings_table=_validation_panel(plan),
        payload_json=json.dumps(payload).replace("</", "<\\/"),
    )


def write_report(path: str | Path, html_content: str) -> None:
    Path(path).write_text(html_content, encoding="utf-8")
