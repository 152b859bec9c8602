import json

import pytest

from tests.helpers import SAMPLE_GOAL


@pytest.fixture
def sample_goal_dict() -> dict:
    return json.loads(SAMPLE_GOAL.read_text(encoding="utf-8"))
