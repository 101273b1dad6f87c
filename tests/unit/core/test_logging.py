"""Unit tests for the contextual logger."""

import logging

from stellarbill.core.context import BaseContext
from stellarbill.core.logging import ContextualLogger
from stellarbill.core.shared_models import Network


def _logger() -> ContextualLogger:
    return ContextualLogger(logging.getLogger("stellarbill.test"))


def test_with_context_merges_dimensions():
    log = _logger().with_context(organization_id="org_1").with_context(checkout_id="ck_1")

    assert log.dimensions == {"organization_id": "org_1", "checkout_id": "ck_1"}


def test_with_context_drops_none_values():
    log = _logger().with_context(organization_id="org_1", checkout_id=None)

    assert log.dimensions == {"organization_id": "org_1"}


def test_with_context_does_not_mutate_parent():
    parent = _logger().with_context(organization_id="org_1")
    parent.with_context(subscription_id="sub_1")

    assert parent.dimensions == {"organization_id": "org_1"}


def test_process_attaches_dimensions_under_extra():
    log = _logger().with_context(organization_id="org_1")

    _, kwargs = log.process("msg", {"extra": {"dimensions": {"payout_id": "po_1"}}})

    assert kwargs["extra"]["dimensions"] == {"organization_id": "org_1", "payout_id": "po_1"}


def test_context_derives_logger_from_identity():
    ctx = BaseContext(organization_id="org_1", environment="mainnet")

    assert ctx.environment is Network.MAINNET
    assert ctx.logger.dimensions == {"organization_id": "org_1", "environment": "mainnet"}


def test_context_owns_only_its_network():
    ctx = BaseContext(organization_id="org_1", environment=Network.TESTNET)

    assert ctx.owns("org_1", "testnet")
    assert not ctx.owns("org_1", "mainnet")
    assert not ctx.owns("org_2", "testnet")
