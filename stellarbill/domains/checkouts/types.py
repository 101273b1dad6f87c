"""Checkout settlement types and the pure transition function.

Polling and webhook delivery both route through ``next_checkout_status`` so
the two entry points converge on the same state for the same observation.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Sequence

from stellarbill.core.shared_models import ChainObservation, CheckoutStatus


def next_checkout_status(
    current: CheckoutStatus, observation: ChainObservation, *, expired: bool = False
) -> CheckoutStatus:
    """Status a checkout moves to given what the chain reports.

    - terminal statuses never change
    - CONFIRMED settles as succeeded, even past the expiry time
    - FAILED settles as failed
    - PENDING (seen, not yet in a ledger) moves to processing
    - UNSEEN stays put, except a pending checkout past its expiry expires
    - UNKNOWN always keeps the current status
    """
    current = CheckoutStatus(current)
    if current.is_terminal:
        return current

    observation = ChainObservation(observation)
    if observation == ChainObservation.CONFIRMED:
        return CheckoutStatus.SUCCEEDED
    if observation == ChainObservation.FAILED:
        return CheckoutStatus.FAILED
    if observation == ChainObservation.PENDING:
        return CheckoutStatus.PROCESSING
    if observation == ChainObservation.UNSEEN:
        if expired and current == CheckoutStatus.PENDING:
            return CheckoutStatus.EXPIRED
        return current
    return current


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Whether an expiry time has passed. No expiry means never."""
    if expires_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= now


@dataclass(frozen=True)
class CheckoutSweepOutcome:
    """Result of refreshing one checkout during the open-checkout sweep."""

    checkout_id: str
    status: Optional[CheckoutStatus] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class CheckoutSweepReport:
    """Aggregate of one open-checkout sweep."""

    total: int
    succeeded: int
    failed: int
    outcomes: list[CheckoutSweepOutcome] = field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: Sequence[CheckoutSweepOutcome]) -> "CheckoutSweepReport":
        """Count ``outcomes``; ``succeeded`` means refreshed without error."""
        ok = sum(1 for o in outcomes if o.ok)
        return cls(
            total=len(outcomes), succeeded=ok, failed=len(outcomes) - ok, outcomes=list(outcomes)
        )
