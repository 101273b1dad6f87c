"""Initial schema.

Revision ID: 3f9a1c2b7d40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "3f9a1c2b7d40"
down_revision = None
branch_labels = None
depends_on = None


def _row_columns(id_length: int = 64) -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(id_length), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _owned_columns() -> list[sa.Column]:
    """Columns of rows owned by an organization on one network."""
    return [
        *_row_columns(),
        sa.Column(
            "organization_id",
            sa.String(64),
            sa.ForeignKey("organization.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("environment", sa.String(16), nullable=False),
    ]


def _index_owner(table: str) -> None:
    op.create_index(f"ix_{table}_organization_id", table, ["organization_id"])


def upgrade():
    """Create every table of the billing schema."""
    op.create_table(
        "plan",
        *_row_columns(),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("limits", sa.JSON(), nullable=False),
    )
    op.create_table(
        "organization",
        *_row_columns(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column(
            "plan_id", sa.String(64), sa.ForeignKey("plan.id", ondelete="SET NULL"), nullable=True
        ),
    )

    op.create_table(
        "api_key",
        *_owned_columns(),
        sa.Column("key_hash", sa.String(64), nullable=False, unique=True),
    )
    _index_owner("api_key")

    op.create_table(
        "organization_secret",
        *_owned_columns(),
        sa.Column("public_key", sa.String(56), nullable=False),
        sa.Column("webhook_signing_secret", sa.String(200), nullable=False),
        sa.UniqueConstraint("organization_id", "environment", name="uq_organization_secret_env"),
    )
    _index_owner("organization_secret")

    op.create_table(
        "product",
        *_owned_columns(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("amount", sa.Numeric(20, 7), nullable=False),
        sa.Column("billing_interval_days", sa.Integer(), nullable=True),
        sa.Column("credits_granted", sa.Integer(), nullable=True),
        sa.Column("unit_divisor", sa.Integer(), nullable=True),
        sa.Column("units_per_credit", sa.Integer(), nullable=True),
    )
    _index_owner("product")

    op.create_table(
        "checkout",
        *_owned_columns(),
        sa.Column("product_id", sa.String(64), sa.ForeignKey("product.id"), nullable=False),
        sa.Column("customer_id", sa.String(64), nullable=False),
        sa.Column("amount", sa.Numeric(20, 7), nullable=False),
        sa.Column("status", sa.String(20), nullable=True),
        sa.Column("transaction_hash", sa.String(64), nullable=True, unique=True),
        sa.Column("wallet_address", sa.String(56), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
    )
    _index_owner("checkout")
    op.create_index("idx_checkout_status", "checkout", ["status"])

    op.create_table(
        "subscription",
        *_owned_columns(),
        sa.Column("customer_id", sa.String(64), nullable=False),
        sa.Column("product_id", sa.String(64), sa.ForeignKey("product.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=True),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("wallet_address", sa.String(56), nullable=True),
        sa.Column("failed_charge_count", sa.Integer(), nullable=False),
        # Charge sweep bookkeeping
        sa.Column("charge_claimed_for", sa.DateTime(timezone=True), nullable=True),
        sa.Column("charge_claim_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("charge_transaction_hash", sa.String(64), nullable=True),
        sa.Column("charge_submitted_for", sa.DateTime(timezone=True), nullable=True),
    )
    _index_owner("subscription")
    op.create_index("idx_subscription_due", "subscription", ["status", "current_period_end"])

    op.create_table(
        "payment",
        *_owned_columns(),
        sa.Column("checkout_id", sa.String(64), nullable=True, unique=True),
        sa.Column("subscription_id", sa.String(64), nullable=True),
        sa.Column("customer_id", sa.String(64), nullable=False),
        sa.Column("amount", sa.Numeric(20, 7), nullable=False),
        sa.Column("transaction_hash", sa.String(64), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
    )
    _index_owner("payment")

    op.create_table(
        "refund",
        *_owned_columns(),
        sa.Column(
            "payment_id",
            sa.String(64),
            sa.ForeignKey("payment.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("customer_id", sa.String(64), nullable=False),
        sa.Column("amount", sa.Numeric(20, 7), nullable=False),
        sa.Column("wallet_address", sa.String(56), nullable=False),
        sa.Column("reason", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=True),
        sa.Column("transaction_hash", sa.String(64), nullable=True),
    )
    _index_owner("refund")
    op.create_index("ix_refund_payment_id", "refund", ["payment_id"])

    op.create_table(
        "payout",
        *_owned_columns(),
        sa.Column("amount", sa.Numeric(20, 7), nullable=False),
        sa.Column("wallet_address", sa.String(56), nullable=False),
        sa.Column("memo", sa.String(28), nullable=True),
        sa.Column("status", sa.String(20), nullable=True),
        sa.Column("transaction_hash", sa.String(64), nullable=True),
    )
    _index_owner("payout")

    op.create_table(
        "credit_transaction",
        *_owned_columns(),
        sa.Column("customer_id", sa.String(64), nullable=False),
        sa.Column("product_id", sa.String(64), sa.ForeignKey("product.id"), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(10), nullable=False),
        sa.Column("checkout_id", sa.String(64), nullable=True),
        sa.Column("reason", sa.String(200), nullable=True),
    )
    _index_owner("credit_transaction")
    op.create_index(
        "idx_credit_transaction_balance",
        "credit_transaction",
        ["organization_id", "customer_id", "product_id"],
    )

    op.create_table(
        "event",
        *_owned_columns(),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("customer_id", sa.String(64), nullable=True),
        sa.Column("data", sa.JSON(), nullable=False),
    )
    _index_owner("event")
    op.create_index("idx_event_org_type", "event", ["organization_id", "type"])


def downgrade():
    """Drop every table, dependents first."""
    for table in (
        "event",
        "credit_transaction",
        "payout",
        "refund",
        "payment",
        "subscription",
        "checkout",
        "product",
        "organization_secret",
        "api_key",
        "organization",
        "plan",
    ):
        op.drop_table(table)
