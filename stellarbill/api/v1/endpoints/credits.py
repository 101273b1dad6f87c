"""API endpoints for customer credit balances."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import schemas
from stellarbill.api import deps
from stellarbill.api.deps import Inject
from stellarbill.core.context import BaseContext
from stellarbill.core.shared_models import CreditTransactionKind
from stellarbill.domains.credits.exceptions import InvalidUsageAmountError
from stellarbill.domains.credits.protocols import CreditLedgerProtocol
from stellarbill.domains.products.exceptions import ProductNotFoundError
from stellarbill.domains.products.repository import ProductRepositoryProtocol

router = APIRouter()


@router.get("/{customer_id}/credits/{product_id}", response_model=schemas.CreditBalanceResponse)
async def get_credit_balance(
    customer_id: str,
    product_id: str,
    db: AsyncSession = Depends(deps.get_db),
    ctx: BaseContext = Depends(deps.get_context),
    ledger: CreditLedgerProtocol = Inject(CreditLedgerProtocol),
) -> schemas.CreditBalanceResponse:
    """Current credit balance of a customer on a product."""
    balance = await ledger.balance(db, ctx, customer_id=customer_id, product_id=product_id)
    return schemas.CreditBalanceResponse(
        customer_id=customer_id, product_id=product_id, balance=balance
    )


@router.get(
    "/{customer_id}/credits/{product_id}/transactions",
    response_model=list[schemas.CreditTransactionResponse],
)
async def list_credit_transactions(
    customer_id: str,
    product_id: str,
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(deps.get_db),
    ctx: BaseContext = Depends(deps.get_context),
    ledger: CreditLedgerProtocol = Inject(CreditLedgerProtocol),
) -> list[schemas.CreditTransactionResponse]:
    """Newest-first credit movements of a customer on a product."""
    rows = await ledger.list_transactions(
        db, ctx, customer_id=customer_id, product_id=product_id, limit=limit
    )
    return [schemas.CreditTransactionResponse.model_validate(row) for row in rows]


@router.post(
    "/{customer_id}/credits/{product_id}/transaction",
    response_model=schemas.CreditTransactionResult,
)
async def record_credit_transaction(
    customer_id: str,
    product_id: str,
    transaction_in: schemas.CreditTransactionCreate,
    db: AsyncSession = Depends(deps.get_db),
    ctx: BaseContext = Depends(deps.get_context),
    ledger: CreditLedgerProtocol = Inject(CreditLedgerProtocol),
    product_repo: ProductRepositoryProtocol = Inject(ProductRepositoryProtocol),
) -> schemas.CreditTransactionResult:
    """Debit usage from, or grant credits to, a customer on a product.

    Args:
        customer_id: Customer whose balance moves
        product_id: Metered product the credits belong to
        transaction_in: Kind and amount (raw usage for debits, credits for grants)
        db: Database session
        ctx: Organization context resolved from the API key
        ledger: Credit ledger
        product_repo: Product lookup for the usage conversion

    Returns:
        The written transaction (None when the usage rounded to zero) and the new balance

    Raises:
        InsufficientCreditsError: the debit would cross the balance floor (402).
    """
    product = await product_repo.get(db, id=product_id, ctx=ctx)
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")

    if transaction_in.kind == CreditTransactionKind.GRANT:
        if transaction_in.amount != transaction_in.amount.to_integral_value():
            raise InvalidUsageAmountError("Granted credits must be a whole number")
        tx = await ledger.grant(
            db,
            ctx,
            customer_id=customer_id,
            product_id=product.id,
            credits=int(transaction_in.amount),
        )
    else:
        tx = await ledger.debit_usage(
            db,
            ctx,
            customer_id=customer_id,
            product=product,
            raw_usage_amount=transaction_in.amount,
        )

    balance = await ledger.balance(db, ctx, customer_id=customer_id, product_id=product.id)
    return schemas.CreditTransactionResult(
        transaction=schemas.CreditTransactionResponse.model_validate(tx) if tx else None,
        balance=balance,
    )
