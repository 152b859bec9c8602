import copy
from datetime import UTC, datetime, timedelta
import json
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SAMPLE_GOAL = ROOT / "sample_goal.json"
SAMPLE_MEMBERS = ROOT / "sample_members.json"

NOW = datetime(2026, 1, 1, tzinfo=UTC)


def years_from_now(years: float) -> datetime:
    return NOW + timedelta(days=365.25 * years)


def write_goal(tmp_path: Path, data: dict, filename: str = "goal.json") -> Path:
    path = tmp_path / filename
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def clone_goal(data: dict) -> dict:
    return copy.deepcopy(data)
