"""Semantic validation for goals and their member lists."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
import re
from typing import Iterable

from .allocation import ALLOCATION_EPSILON, SPLIT_WARNING_TOLERANCE
from .schema import Goal

CURRENCY_RE = re.compile(r"^[A-Z]{3}$")

FREQUENCIES = {"monthly", "yearly"}
MEMBER_ROLES = {"owner", "collaborator"}


@dataclass(slots=True)
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _check_enum(result: ValidationResult, path: str, value: str, allowed: Iterable[str]) -> None:
    allowed_set = set(allowed)
    if value not in allowed_set:
        expected = ", ".join(sorted(allowed_set))
        result.errors.append(f"{path}: '{value}' is not valid; expected one of [{expected}]")


def _check_members(result: ValidationResult, goal: Goal) -> None:
    if not goal.members:
        result.errors.append("members: at least one member is required")
        return

    seen: set[str] = set()
    for idx, member in enumerate(goal.members):
        base = f"members[{idx}]"
        if member.user_id in seen:
            result.errors.append(f"{base}.userId: duplicate member '{member.user_id}'")
        seen.add(member.user_id)
        _check_enum(result, f"{base}.role", member.role, MEMBER_ROLES)
        if member.split_percent is not None and not 0 <= member.split_percent <= 100:
            result.errors.append(f"{base}.splitPercent: must be between 0 and 100")
        if member.fixed_amount is not None and member.fixed_amount < 0:
            result.errors.append(f"{base}.fixedAmount: must be >= 0")

    owner_count = sum(1 for member in goal.members if member.is_owner)
    if owner_count != 1:
        result.errors.append(f"members: exactly one owner is required (found {owner_count})")

    percent_members = [member for member in goal.members if not member.is_fixed]
    percent_sum = sum(member.split_percent or 0.0 for member in percent_members)
    if percent_members and percent_sum > ALLOCATION_EPSILON and abs(percent_sum - 100.0) > SPLIT_WARNING_TOLERANCE:
        result.warnings.append(f"members: percent shares total {percent_sum:.1f}%, expected 100%")


def validate_goal(goal: Goal, *, now: datetime | None = None) -> ValidationResult:
    result = ValidationResult()
    now = now or datetime.now(UTC)

    if goal.target_amount <= 0:
        result.errors.append("targetAmount: must be > 0")
    if not CURRENCY_RE.match(goal.currency):
        result.errors.append(f"currency: '{goal.currency}' is not a 3-letter ISO code")
    if not 0 < goal.expected_rate <= 100:
        result.errors.append("expectedRate: must be > 0 and <= 100")
    if goal.existing_savings < 0:
        result.errors.append("existingSavings: must be >= 0")
    _check_enum(result, "compounding", goal.compounding, FREQUENCIES)
    _check_enum(result, "contributionFrequency", goal.contribution_frequency, FREQUENCIES)

    if goal.target_date <= now:
        result.warnings.append("targetDate: is not in the future; no contribution periods remain")
    if goal.target_amount > 0 and goal.existing_savings >= goal.target_amount:
        result.warnings.append("existingSavings: already covers targetAmount")

    _check_members(result, goal)
    return result
