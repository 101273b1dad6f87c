"""API routes for the FastAPI application."""

from fastapi import APIRouter

from stellarbill.api.v1.endpoints import (
    checkouts,
    credits,
    cron,
    payouts,
    refunds,
    subscriptions,
    webhooks,
)

api_router = APIRouter()
api_router.include_router(checkouts.router, prefix="/checkout", tags=["checkouts"])
api_router.include_router(webhooks.router, prefix="/stellar-webhook", tags=["webhooks"])
api_router.include_router(cron.router, prefix="/cron", tags=["cron"])
api_router.include_router(credits.router, prefix="/customers", tags=["credits"])
api_router.include_router(payouts.router, prefix="/payout", tags=["payouts"])
api_router.include_router(refunds.router, prefix="/refunds", tags=["refunds"])
api_router.include_router(
    subscriptions.router, prefix="/subscriptions", tags=["subscriptions"]
)
