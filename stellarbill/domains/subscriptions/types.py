"""Subscription charge sweep types and pure helpers."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Sequence

from stellarbill.core.protocols.chain import SubscriptionAction
from stellarbill.core.shared_models import SubscriptionStatus


@dataclass(frozen=True)
class DunningPolicy:
    """What happens to a subscription after failed charges.

    Every failure moves the subscription to past_due. With
    ``retry_past_due`` the sweep keeps charging past_due subscriptions;
    reaching ``max_failed_charges`` consecutive failures cancels it.
    ``max_failed_charges=None`` never cancels.
    """

    max_failed_charges: Optional[int] = 3
    retry_past_due: bool = False

    @classmethod
    def from_settings(cls, settings) -> "DunningPolicy":
        """Build from PAST_DUE_* settings."""
        return cls(
            max_failed_charges=settings.PAST_DUE_MAX_FAILED_CHARGES,
            retry_past_due=settings.PAST_DUE_RETRY_ENABLED,
        )

    def sweep_statuses(self) -> tuple[str, ...]:
        """Statuses the sweep charges once their period has ended."""
        if self.retry_past_due:
            return (SubscriptionStatus.ACTIVE.value, SubscriptionStatus.PAST_DUE.value)
        return (SubscriptionStatus.ACTIVE.value,)

    def status_after_failure(self, failed_charge_count: int) -> SubscriptionStatus:
        """Status after the ``failed_charge_count``-th consecutive failure."""
        if self.max_failed_charges is not None and failed_charge_count >= self.max_failed_charges:
            return SubscriptionStatus.CANCELED
        return SubscriptionStatus.PAST_DUE


class ChargeOutcomeKind(str, Enum):
    """Per-subscription result of a charge sweep."""

    CHARGED = "charged"
    SKIPPED_NO_WALLET = "skipped_no_wallet"
    FAILED = "failed"
    DEFERRED = "deferred"
    LOST_RACE = "lost_race"
    ERROR = "error"


@dataclass(frozen=True)
class ChargeOutcome:
    """What the sweep did with one subscription."""

    subscription_id: str
    kind: ChargeOutcomeKind
    transaction_hash: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ChargeSweepReport:
    """Aggregate of one charge sweep."""

    processed: int
    outcomes: list[ChargeOutcome] = field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: Sequence[ChargeOutcome]) -> "ChargeSweepReport":
        """Report over ``outcomes``; every listed subscription counts as processed."""
        return cls(processed=len(outcomes), outcomes=list(outcomes))

    def count(self, kind: ChargeOutcomeKind) -> int:
        """Number of outcomes of ``kind``."""
        return sum(1 for o in self.outcomes if o.kind == kind)

    def summary(self) -> dict[str, int]:
        """Outcome counts keyed by kind, zero counts omitted."""
        return {k.value: self.count(k) for k in ChargeOutcomeKind if self.count(k)}


def charge_idempotency_key(subscription_id: str, period_end: datetime) -> str:
    """Stable key for charging one subscription period, whatever the attempt."""
    return f"{subscription_id}:{int(period_end.timestamp())}"


def next_period_end(
    current_period_end: datetime,
    billing_interval_days: Optional[int],
    chain_period_end: Optional[datetime] = None,
) -> datetime:
    """End of the period a successful charge paid for.

    The contract's reported period end wins; otherwise the current period is
    extended by the product's billing interval.
    """
    if chain_period_end is not None:
        return chain_period_end
    if not billing_interval_days:
        raise ValueError("Product has no billing interval")
    return current_period_end + timedelta(days=billing_interval_days)


_TRANSITIONS: dict[SubscriptionAction, tuple[frozenset[SubscriptionStatus], SubscriptionStatus]] = {
    SubscriptionAction.PAUSE: (
        frozenset({SubscriptionStatus.ACTIVE, SubscriptionStatus.PAST_DUE}),
        SubscriptionStatus.PAUSED,
    ),
    SubscriptionAction.RESUME: (
        frozenset({SubscriptionStatus.PAUSED}),
        SubscriptionStatus.ACTIVE,
    ),
    SubscriptionAction.CANCEL: (
        frozenset(
            {SubscriptionStatus.ACTIVE, SubscriptionStatus.PAST_DUE, SubscriptionStatus.PAUSED}
        ),
        SubscriptionStatus.CANCELED,
    ),
}


def status_after(
    current: SubscriptionStatus, action: SubscriptionAction
) -> Optional[SubscriptionStatus]:
    """Status ``action`` moves a subscription to, or None when not allowed from ``current``.

    Canceled is terminal.
    """
    sources, target = _TRANSITIONS[SubscriptionAction(action)]
    if SubscriptionStatus(current) not in sources:
        return None
    return target
