"""CLI entry point for the goal planner."""

from __future__ import annotations

import argparse
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
import json
import logging
from pathlib import Path
import sys
import threading

from .allocation import rebalance_goal
from .formatters import format_date, format_horizon, format_money, format_percent
from .observability import setup_logging
from .plan import GoalPlan, build_goal_plan, plan_to_dict
from .report import render_report, write_report
from .scenario import ScenarioProjection, evaluate_scenario, scenario_to_dict
from .schema import Goal, MemberDetails, SchemaError, goal_to_dict, load_goal, load_member_details
from .validate import validate_goal

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Shared savings goal planner")
    parser.add_argument("goal", help="Path to goal JSON file")
    parser.add_argument("-o", "--output", default="report.html", help="Output HTML path")
    parser.add_argument("--members", help="Path to JSON map of userId -> {email, name}")
    parser.add_argument("--rate", type=float, help="Scenario: override the expected annual rate (percent)")
    parser.add_argument("--timeline-offset", type=int, default=0, help="Scenario: move the target date by N months")
    parser.add_argument("--validate", action="store_true", help="Validate JSON only")
    parser.add_argument("--summary", action="store_true", help="Print text summary to stdout")
    parser.add_argument("--json", action="store_true", help="Print the computed plan as JSON instead of writing a report")
    parser.add_argument("--rebalance", action="store_true", help="Print the goal with member percentages rebalanced")
    parser.add_argument("--server", action="store_true", help="Watch goal file, regenerate output, and serve via local web server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind local web server (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port for local web server (default: 8000)")
    parser.add_argument("--watch-interval", type=float, default=1.0, help="Goal file watch interval in seconds (default: 1.0)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    parser.add_argument("--log-format", choices=["text", "json"], default="text", help="Log output format")
    return parser


def _print_validation(errors: list[str], warnings: list[str]) -> None:
    for warning in warnings:
        print(f"WARNING: {warning}", file=sys.stderr)
    for error in errors:
        print(f"ERROR: {error}", file=sys.stderr)


def _load_inputs(args: argparse.Namespace) -> tuple[Goal, dict[str, MemberDetails] | None]:
    goal = load_goal(args.goal)
    details = load_member_details(args.members) if args.members else None
    return goal, details


def _evaluate(goal: Goal, details: dict[str, MemberDetails] | None, args: argparse.Namespace) -> tuple[GoalPlan, ScenarioProjection]:
    plan = build_goal_plan(goal, details)
    scenario = evaluate_scenario(plan, rate_percent=args.rate, timeline_offset_months=args.timeline_offset)
    return plan, scenario


def _print_summary(plan: GoalPlan, scenario: ScenarioProjection) -> None:
    currency = plan.goal.currency
    print(f"Goal: {plan.goal.title or plan.goal.id or '-'}")
    print(f"Target: {format_money(plan.goal.target_amount, currency)} by {format_date(plan.goal.target_date)}")
    print(f"Horizon: {format_horizon(plan.horizon.years, plan.horizon.months)}")
    print(f"Required per period: {format_money(plan.totals.per_period, currency)}")
    print(f"Or lump sum today: {format_money(plan.totals.lump_sum_now, currency)}")
    for member in plan.members:
        label = member.name or member.email or member.user_id
        print(f"  {label} ({member.role}): {format_money(member.per_period, currency)}")
    if scenario.rate_percent != plan.assumptions.expected_rate or scenario.timeline_offset_months:
        print(
            f"Scenario at {format_percent(scenario.rate_percent)} by {format_date(scenario.target_date)}: "
            f"{format_money(scenario.per_period, currency)} per period"
        )
    for warning in plan.warnings:
        print(f"PLAN WARNING: {warning}")


def _write_report_for_goal(goal: Goal, details: dict[str, MemberDetails] | None, args: argparse.Namespace, *, print_header: bool = True) -> None:
    plan, scenario = _evaluate(goal, details, args)
    html_content = render_report(plan, scenario, goal_path=args.goal)
    write_report(args.output, html_content)

    if args.summary and print_header:
        _print_summary(plan, scenario)

    print(f"Wrote report to {Path(args.output)}")


def _goal_mtime_ns(goal_path: str) -> int | None:
    try:
        return Path(goal_path).stat().st_mtime_ns
    except OSError:
        return None


def _run_server_mode(args: argparse.Namespace) -> int:
    if args.validate or args.json or args.rebalance:
        print("--validate, --json and --rebalance cannot be used with --server", file=sys.stderr)
        return 2
    if args.watch_interval <= 0:
        print("--watch-interval must be > 0", file=sys.stderr)
        return 2

    try:
        goal, details = _load_inputs(args)
    except (SchemaError, OSError, ValueError) as exc:
        print(f"Failed to load goal: {exc}", file=sys.stderr)
        return 2

    validation = validate_goal(goal)
    _print_validation(validation.errors, validation.warnings)
    if not validation.is_valid:
        return 1

    _write_report_for_goal(goal, details, args)

    output_path = Path(args.output).resolve()
    output_dir = str(output_path.parent)
    output_name = output_path.name
    handler = partial(SimpleHTTPRequestHandler, directory=output_dir)
    server = ThreadingHTTPServer((args.host, args.port), handler)
    stop_event = threading.Event()
    state: dict[str, int | None] = {"last_mtime_ns": _goal_mtime_ns(args.goal)}

    def _watch_loop() -> None:
        while not stop_event.wait(args.watch_interval):
            current_mtime_ns = _goal_mtime_ns(args.goal)
            if current_mtime_ns is None or current_mtime_ns == state["last_mtime_ns"]:
                continue
            state["last_mtime_ns"] = current_mtime_ns
            print(f"Detected change in {args.goal}; regenerating report...")
            try:
                goal_update, details_update = _load_inputs(args)
            except (SchemaError, OSError, ValueError) as exc:
                print(f"Failed to load updated goal: {exc}", file=sys.stderr)
                continue
            validation_update = validate_goal(goal_update)
            _print_validation(validation_update.errors, validation_update.warnings)
            if not validation_update.is_valid:
                print("Regeneration failed due to validation errors; serving last successful output.", file=sys.stderr)
                continue
            _write_report_for_goal(goal_update, details_update, args, print_header=False)

    watcher = threading.Thread(target=_watch_loop, daemon=True)
    watcher.start()

    print(f"Serving {output_name} at http://{args.host}:{args.port}/{output_name}")
    print("Press Ctrl+C to stop.")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        stop_event.set()
        server.server_close()
        watcher.join(timeout=max(args.watch_interval * 2, 0.1))

    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_format)

    if args.server:
        return _run_server_mode(args)

    try:
        goal, details = _load_inputs(args)
    except (SchemaError, OSError, ValueError) as exc:
        print(f"Failed to load goal: {exc}", file=sys.stderr)
        return 2

    validation = validate_goal(goal)
    _print_validation(validation.errors, validation.warnings)
    if not validation.is_valid:
        return 1

    if args.validate:
        print("Goal is valid.")
        return 0

    if args.rebalance:
        rebalanced = rebalance_goal(goal)
        logger.info("Rebalanced %d members", len(rebalanced.members), extra={"goal_id": goal.id})
        print(json.dumps(goal_to_dict(rebalanced), indent=2))
        return 0

    if args.json:
        plan, scenario = _evaluate(goal, details, args)
        print(json.dumps({"plan": plan_to_dict(plan), "scenario": scenario_to_dict(scenario)}, indent=2))
        return 0

    _write_report_for_goal(goal, details, args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
