from datetime import UTC, datetime
import json

import pytest

from goalplan.schema import (
    FixedShare,
    Goal,
    PercentShare,
    SchemaError,
    goal_to_dict,
    load_goal,
    load_member_details,
)
from tests.helpers import SAMPLE_GOAL, SAMPLE_MEMBERS, clone_goal, write_goal


def test_load_sample_goal():
    goal = load_goal(SAMPLE_GOAL)

    assert goal.id == "goal-house-deposit"
    assert goal.target_amount == 120000.0
    assert goal.currency == "USD"
    assert goal.target_date == datetime(2036, 10, 19, tzinfo=UTC)
    assert goal.existing_savings == 5000.0
    assert [m.user_id for m in goal.members] == ["user-owner", "user-sam", "user-kim"]
    assert goal.owner is not None and goal.owner.user_id == "user-owner"
    assert goal.is_shared


def test_member_shares_are_tagged(tmp_path, sample_goal_dict):
    data = clone_goal(sample_goal_dict)
    data["members"][1] = {"userId": "user-sam", "role": "collaborator", "fixedAmount": 250}
    data["members"][2] = {"userId": "user-kim", "role": "collaborator"}

    goal = load_goal(write_goal(tmp_path, data))

    assert goal.members[0].share == PercentShare(50.0)
    assert goal.members[1].share == FixedShare(250.0)
    assert goal.members[1].is_fixed
    assert goal.members[1].split_percent is None
    assert goal.members[2].share == PercentShare(0.0)


def test_member_with_both_shares_is_rejected(sample_goal_dict):
    data = clone_goal(sample_goal_dict)
    data["members"][1]["fixedAmount"] = 100

    with pytest.raises(SchemaError, match=r"members\[1\]\.fixedAmount: choose either"):
        Goal.from_dict(data)


def test_null_share_fields_are_treated_as_absent(sample_goal_dict):
    data = clone_goal(sample_goal_dict)
    data["members"][1]["fixedAmount"] = None

    goal = Goal.from_dict(data)

    assert goal.members[1].share == PercentShare(30.0)


@pytest.mark.parametrize("field", ["targetAmount", "currency", "targetDate", "expectedRate", "compounding", "contributionFrequency"])
def test_missing_required_field(field, sample_goal_dict):
    data = clone_goal(sample_goal_dict)
    del data[field]

    with pytest.raises(SchemaError, match=f"goal.{field}: missing required field"):
        Goal.from_dict(data)


def test_type_errors_name_the_path(sample_goal_dict):
    data = clone_goal(sample_goal_dict)
    data["targetAmount"] = "lots"
    with pytest.raises(SchemaError, match="goal.targetAmount: expected number"):
        Goal.from_dict(data)

    data = clone_goal(sample_goal_dict)
    data["targetDate"] = "someday"
    with pytest.raises(SchemaError, match="goal.targetDate"):
        Goal.from_dict(data)

    data = clone_goal(sample_goal_dict)
    data["members"] = {"userId": "x"}
    with pytest.raises(SchemaError, match="members: expected array"):
        Goal.from_dict(data)


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_numbers_are_rejected(tmp_path, sample_goal_dict, literal):
    data = clone_goal(sample_goal_dict)
    data["existingSavings"] = "__placeholder__"
    path = tmp_path / "goal.json"
    path.write_text(json.dumps(data).replace('"__placeholder__"', literal), encoding="utf-8")

    with pytest.raises(SchemaError, match="goal.existingSavings: must be a finite number"):
        load_goal(path)


@pytest.mark.parametrize(
    ("mutator", "expected"),
    [
        (lambda d: d["members"][0].update({"role": []}), r"members\[0\]\.role: expected string"),
        (lambda d: d.update({"compounding": 12}), "goal.compounding: expected string"),
        (lambda d: d.update({"contributionFrequency": None}), "goal.contributionFrequency: expected string"),
    ],
)
def test_enum_fields_must_be_strings(sample_goal_dict, mutator, expected):
    data = clone_goal(sample_goal_dict)
    mutator(data)

    with pytest.raises(SchemaError, match=expected):
        Goal.from_dict(data)


def test_naive_dates_are_utc_and_currency_is_uppercased(sample_goal_dict):
    data = clone_goal(sample_goal_dict)
    data["targetDate"] = "2030-06-01"
    data["currency"] = " eur "

    goal = Goal.from_dict(data)

    assert goal.target_date == datetime(2030, 6, 1, tzinfo=UTC)
    assert goal.currency == "EUR"


def test_explicit_shared_flag_wins(sample_goal_dict):
    data = clone_goal(sample_goal_dict)
    data["isShared"] = False

    assert Goal.from_dict(data).is_shared is False


def test_root_must_be_object(tmp_path):
    path = tmp_path / "goal.json"
    path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")

    with pytest.raises(SchemaError, match="root must be a JSON object"):
        load_goal(path)


def test_goal_to_dict_round_trips(sample_goal_dict):
    data = clone_goal(sample_goal_dict)
    data["isShared"] = True
    goal = Goal.from_dict(data)

    assert Goal.from_dict(goal_to_dict(goal)) == goal


def test_load_member_details():
    details = load_member_details(SAMPLE_MEMBERS)

    assert details["user-owner"].name == "Alex Rivera"
    assert details["user-owner"].email == "owner@example.com"
    assert details["user-kim"].name is None
