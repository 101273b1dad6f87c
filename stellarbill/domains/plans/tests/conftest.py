"""Plan limit gate test fixtures and helpers."""

from unittest.mock import AsyncMock

import pytest

from stellarbill.domains.plans.fakes.repository import FakePlanRepository
from stellarbill.domains.plans.gate import PlanLimitGate

DEFAULT_ORG_ID = "org_test"


def _make_gate() -> tuple[PlanLimitGate, FakePlanRepository]:
    repo = FakePlanRepository()
    return PlanLimitGate(plan_repo=repo), repo


@pytest.fixture
def db():
    return AsyncMock()
