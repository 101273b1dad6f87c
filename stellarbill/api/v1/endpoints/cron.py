"""Cron-triggered sweeps.

Both sweeps report per-item outcomes instead of failing: one bad checkout
or subscription never aborts the run.
"""

from fastapi import APIRouter, Depends

from stellarbill import schemas
from stellarbill.api import deps
from stellarbill.api.deps import Inject
from stellarbill.domains.checkouts.protocols import CheckoutSettlementTrackerProtocol
from stellarbill.domains.subscriptions.protocols import SubscriptionChargeSchedulerProtocol

router = APIRouter(dependencies=[Depends(deps.verify_cron_secret)])


@router.get("/charge", response_model=schemas.ChargeSweepResponse)
async def run_charge_sweep(
    scheduler: SubscriptionChargeSchedulerProtocol = Inject(SubscriptionChargeSchedulerProtocol),
) -> schemas.ChargeSweepResponse:
    """Charge every subscription whose billing period has ended."""
    report = await scheduler.run_due_charges()
    return schemas.ChargeSweepResponse(
        processed=report.processed,
        summary=report.summary(),
        outcomes=[schemas.ChargeOutcomeSchema.model_validate(o) for o in report.outcomes],
    )


@router.get("/sweep-checkouts", response_model=schemas.CheckoutSweepResponse)
async def run_checkout_sweep(
    tracker: CheckoutSettlementTrackerProtocol = Inject(CheckoutSettlementTrackerProtocol),
) -> schemas.CheckoutSweepResponse:
    """Refresh every open checkout, settling the ones the chain has confirmed."""
    report = await tracker.sweep_open_checkouts()
    return schemas.CheckoutSweepResponse.model_validate(report)
