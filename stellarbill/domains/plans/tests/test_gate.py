"""Unit tests for PlanLimitGate."""

from datetime import datetime, timedelta, timezone

import pytest

from stellarbill.core.shared_models import Network
from stellarbill.domains.plans.exceptions import PlanLimitExceededError
from stellarbill.domains.plans.tests.conftest import DEFAULT_ORG_ID, _make_gate
from stellarbill.domains.plans.types import (
    DEVELOPER_LIMITS,
    GateKind,
    GatingCheck,
    start_of_cycle,
)
from stellarbill.models import Checkout, Payment, Plan, Product, Subscription


class TestCheckLimit:
    @pytest.mark.asyncio
    async def test_under_limit_returns_count(self, db):
        gate, repo = _make_gate()
        repo.seed_rows(Product, 2, DEFAULT_ORG_ID)

        current = await gate.check_limit(
            db,
            model=Product,
            limit=3,
            organization_id=DEFAULT_ORG_ID,
            environment=Network.TESTNET,
            domain="products",
        )

        assert current == 2

    @pytest.mark.asyncio
    async def test_count_equal_to_limit_is_exceeded(self, db):
        gate, repo = _make_gate()
        repo.seed_rows(Product, 3, DEFAULT_ORG_ID)

        with pytest.raises(PlanLimitExceededError) as exc_info:
            await gate.check_limit(
                db,
                model=Product,
                limit=3,
                organization_id=DEFAULT_ORG_ID,
                environment=Network.TESTNET,
                domain="products",
            )

        assert exc_info.value.domain == "products"
        assert exc_info.value.current == 3
        assert exc_info.value.limit == 3
        assert "products (3/3)" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_other_network_and_organization_not_counted(self, db):
        gate, repo = _make_gate()
        repo.seed_rows(Product, 5, DEFAULT_ORG_ID, environment="mainnet")
        repo.seed_rows(Product, 5, "org_other")

        current = await gate.check_limit(
            db,
            model=Product,
            limit=1,
            organization_id=DEFAULT_ORG_ID,
            environment=Network.TESTNET,
            domain="products",
        )

        assert current == 0

    @pytest.mark.asyncio
    async def test_unscoped_environment_counts_all_networks(self, db):
        gate, repo = _make_gate()
        repo.seed_rows(Product, 1, DEFAULT_ORG_ID, environment="mainnet")
        repo.seed_rows(Product, 1, DEFAULT_ORG_ID, environment="testnet")

        current = await gate.check_limit(
            db,
            model=Product,
            limit=10,
            organization_id=DEFAULT_ORG_ID,
            environment=None,
            domain="products",
        )

        assert current == 2


class TestCheckLimits:
    @pytest.mark.asyncio
    async def test_throughput_only_counts_current_month(self, db):
        gate, repo = _make_gate()
        last_month = start_of_cycle() - timedelta(days=1)
        repo.seed_rows(Payment, 7, DEFAULT_ORG_ID, created_at=last_month)
        repo.seed_rows(Payment, 2, DEFAULT_ORG_ID)

        usage = await gate.check_limits(
            db,
            organization_id=DEFAULT_ORG_ID,
            environment=Network.TESTNET,
            checks=[GatingCheck("payments", Payment, 5, GateKind.THROUGHPUT)],
        )

        assert usage == {"payments": 2}

    @pytest.mark.asyncio
    async def test_all_violations_reported_together(self, db):
        gate, repo = _make_gate()
        repo.seed_rows(Subscription, 4, DEFAULT_ORG_ID)
        repo.seed_rows(Checkout, 9, DEFAULT_ORG_ID)
        repo.seed_rows(Product, 1, DEFAULT_ORG_ID)

        with pytest.raises(PlanLimitExceededError) as exc_info:
            await gate.check_limits(
                db,
                organization_id=DEFAULT_ORG_ID,
                environment=Network.TESTNET,
                checks=[
                    GatingCheck("subscriptions", Subscription, 4),
                    GatingCheck("checkouts", Checkout, 5, GateKind.THROUGHPUT),
                    GatingCheck("products", Product, 10),
                ],
            )

        domains = [v.domain for v in exc_info.value.violations]
        assert domains == ["subscriptions", "checkouts"]

    @pytest.mark.asyncio
    async def test_no_raise_mode_returns_usage(self, db):
        gate, repo = _make_gate()
        repo.seed_rows(Product, 10, DEFAULT_ORG_ID)

        usage = await gate.check_limits(
            db,
            organization_id=DEFAULT_ORG_ID,
            environment=Network.TESTNET,
            checks=[GatingCheck("products", Product, 1)],
            raise_on_violation=False,
        )

        assert usage == {"products": 10}

    @pytest.mark.asyncio
    async def test_empty_checks(self, db):
        gate, _ = _make_gate()

        assert await gate.check_limits(
            db, organization_id=DEFAULT_ORG_ID, environment=Network.TESTNET, checks=[]
        ) == {}


class TestCheckPlan:
    @pytest.mark.asyncio
    async def test_no_plan_uses_developer_limits(self, db):
        gate, repo = _make_gate()
        repo.seed_rows(Product, DEVELOPER_LIMITS["products"], DEFAULT_ORG_ID)

        with pytest.raises(PlanLimitExceededError):
            await gate.check_plan(
                db,
                organization_id=DEFAULT_ORG_ID,
                environment=Network.TESTNET,
                domain="products",
                model=Product,
            )

    @pytest.mark.asyncio
    async def test_plan_limit_overrides_default(self, db):
        gate, repo = _make_gate()
        repo.seed_plan(DEFAULT_ORG_ID, Plan(id="plan_pro", name="pro", limits={"products": 500}))
        repo.seed_rows(Product, DEVELOPER_LIMITS["products"], DEFAULT_ORG_ID)

        current = await gate.check_plan(
            db,
            organization_id=DEFAULT_ORG_ID,
            environment=Network.TESTNET,
            domain="products",
            model=Product,
        )

        assert current == DEVELOPER_LIMITS["products"]


def test_start_of_cycle_is_first_of_month_utc():
    now = datetime(2026, 3, 17, 15, 42, tzinfo=timezone.utc)
    assert start_of_cycle(now) == datetime(2026, 3, 1, tzinfo=timezone.utc)
