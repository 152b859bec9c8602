"""Goal schema dataclasses and JSON loading."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
import json
import math
from pathlib import Path
from typing import Any


class SchemaError(ValueError):
    """Raised when raw JSON cannot be parsed into schema objects."""


def _expect_dict(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise SchemaError(f"{path}: expected object")
    return value


def _expect_list(value: Any, path: str) -> list[Any]:
    if not isinstance(value, list):
        raise SchemaError(f"{path}: expected array")
    return value


def _require(data: dict[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise SchemaError(f"{path}.{key}: missing required field")
    return data[key]


def _optional(data: dict[str, Any], key: str, default: Any = None) -> Any:
    value = data.get(key, default)
    return default if value is None else value


def _number(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaError(f"{path}: expected number")
    if not math.isfinite(value):
        raise SchemaError(f"{path}: must be a finite number")
    return float(value)


def _string(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise SchemaError(f"{path}: expected string")
    return value


def parse_instant(value: Any, path: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            raise SchemaError(f"{path}: '{value}' is not an ISO-8601 date") from None
    else:
        raise SchemaError(f"{path}: expected ISO-8601 date string")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True, slots=True)
class PercentShare:
    percent: float


@dataclass(frozen=True, slots=True)
class FixedShare:
    amount: float


Share = PercentShare | FixedShare


@dataclass(frozen=True, slots=True)
class Member:
    user_id: str
    role: str
    share: Share = PercentShare(0.0)

    @property
    def is_owner(self) -> bool:
        return self.role == "owner"

    @property
    def is_fixed(self) -> bool:
        return isinstance(self.share, FixedShare)

    @property
    def split_percent(self) -> float | None:
        return self.share.percent if isinstance(self.share, PercentShare) else None

    @property
    def fixed_amount(self) -> float | None:
        return self.share.amount if isinstance(self.share, FixedShare) else None

    def with_percent(self, percent: float) -> "Member":
        return Member(user_id=self.user_id, role=self.role, share=PercentShare(percent))

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "Member":
        split_percent = data.get("splitPercent")
        fixed_amount = data.get("fixedAmount")
        if split_percent is not None and fixed_amount is not None:
            raise SchemaError(f"{path}.fixedAmount: choose either splitPercent or fixedAmount, not both")
        share: Share
        if fixed_amount is not None:
            share = FixedShare(_number(fixed_amount, f"{path}.fixedAmount"))
        elif split_percent is not None:
            share = PercentShare(_number(split_percent, f"{path}.splitPercent"))
        else:
            share = PercentShare(0.0)
        return cls(
            user_id=str(_require(data, "userId", path)),
            role=_string(_require(data, "role", path), f"{path}.role"),
            share=share,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"userId": self.user_id, "role": self.role}
        if isinstance(self.share, FixedShare):
            out["fixedAmount"] = self.share.amount
        else:
            out["splitPercent"] = self.share.percent
        return out


@dataclass(frozen=True, slots=True)
class MemberDetails:
    email: str | None = None
    name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "MemberDetails":
        return cls(email=_optional(data, "email"), name=_optional(data, "name"))


@dataclass(frozen=True, slots=True)
class Goal:
    target_amount: float
    currency: str
    target_date: datetime
    expected_rate: float
    compounding: str
    contribution_frequency: str
    existing_savings: float = 0.0
    members: tuple[Member, ...] = ()
    id: str = ""
    title: str = ""
    shared: bool | None = None

    @property
    def is_shared(self) -> bool:
        if self.shared is not None:
            return self.shared
        return len(self.members) > 1

    @property
    def owner(self) -> Member | None:
        return next((member for member in self.members if member.is_owner), None)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "goal") -> "Goal":
        members = tuple(
            Member.from_dict(_expect_dict(item, f"members[{idx}]"), f"members[{idx}]")
            for idx, item in enumerate(_expect_list(_optional(data, "members", []), "members"))
        )
        shared = data.get("isShared")
        return cls(
            id=str(_optional(data, "id", "")),
            title=_optional(data, "title", ""),
            target_amount=_number(_require(data, "targetAmount", path), f"{path}.targetAmount"),
            currency=str(_require(data, "currency", path)).strip().upper(),
            target_date=parse_instant(_require(data, "targetDate", path), f"{path}.targetDate"),
            expected_rate=_number(_require(data, "expectedRate", path), f"{path}.expectedRate"),
            compounding=_string(_require(data, "compounding", path), f"{path}.compounding"),
            contribution_frequency=_string(
                _require(data, "contributionFrequency", path), f"{path}.contributionFrequency"
            ),
            existing_savings=_number(_optional(data, "existingSavings", 0.0), f"{path}.existingSavings"),
            members=members,
            shared=bool(shared) if shared is not None else None,
        )


def goal_to_dict(goal: Goal) -> dict[str, Any]:
    return {
        "id": goal.id,
        "title": goal.title,
        "targetAmount": goal.target_amount,
        "currency": goal.currency,
        "targetDate": goal.target_date.isoformat(),
        "expectedRate": goal.expected_rate,
        "compounding": goal.compounding,
        "contributionFrequency": goal.contribution_frequency,
        "existingSavings": goal.existing_savings,
        "isShared": goal.is_shared,
        "members": [member.to_dict() for member in goal.members],
    }


def _read_json(path: str | Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def load_goal(path: str | Path) -> Goal:
    """Load goal JSON into strongly-typed dataclasses."""
    raw = _read_json(path)
    if not isinstance(raw, dict):
        raise SchemaError("goal: root must be a JSON object")
    return Goal.from_dict(raw)


def load_member_details(path: str | Path) -> dict[str, MemberDetails]:
    """Load a ``{userId: {email, name}}`` lookup map."""
    raw = _read_json(path)
    if not isinstance(raw, dict):
        raise SchemaError("member_details: root must be a JSON object")
    return {
        str(user_id): MemberDetails.from_dict(_expect_dict(entry, f"member_details.{user_id}"), f"member_details.{user_id}")
        for user_id, entry in raw.items()
    }
