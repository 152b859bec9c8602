"""Chart payload generation for the self-contained report."""

from __future__ import annotations

from .scenario import ProjectionPoint, ScenarioProjection


def _series(points: tuple[ProjectionPoint, ...], key: str) -> list[float]:
    return [round(float(getattr(point, key)), 2) for point in points]


def _projection_series(projection: ScenarioProjection) -> dict[str, object]:
    return {
        "periods": [point.period for point in projection.points],
        "total": _series(projection.points, "total"),
        "contributions": _series(projection.points, "contributions"),
        "growth": _series(projection.points, "growth"),
        "ratePercent": projection.rate_percent,
        "timelineOffsetMonths": projection.timeline_offset_months,
    }


def build_chart_payload(
    target_amount: float,
    base: ScenarioProjection,
    scenario: ScenarioProjection | None = None,
) -> dict[str, object]:
    payload: dict[str, object] = {
        "target": target_amount,
        "base": _projection_series(base),
        "scenario": None,
        "split": {
            "contributionPercent": base.contribution_percent,
            "growthPercent": base.growth_percent,
        },
    }
    if scenario is not None and (
        scenario.rate_percent != base.rate_percent or scenario.timeline_offset_months != base.timeline_offset_months
    ):
        payload["scenario"] = _projection_series(scenario)
    return payload
