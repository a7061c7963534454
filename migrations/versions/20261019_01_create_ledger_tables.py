"""create balance, ledger and claim tables

Revision ID: 0001_ledger
Revises: 
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_ledger"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("earn_rate_centi", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("icon", sa.String(length=50)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("earn_rate_centi > 0", name="ck_categories_earn_rate_positive"),
    )
    op.create_index("ix_categories_name", "categories", ["name"])

    op.create_table(
        "balances",
        sa.Column("account_id", sa.String(length=64), primary_key=True),
        sa.Column("balance_centihours", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("from_account_id", sa.String(length=64)),
        sa.Column("to_account_id", sa.String(length=64)),
        sa.Column("hours_centihours", sa.BigInteger(), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("kind", sa.String(length=30), nullable=False),
        sa.Column("reference_id", sa.String(length=64)),
        sa.Column("reference_type", sa.String(length=20)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("hours_centihours > 0", name="ck_transactions_hours_positive"),
    )
    op.create_index("ix_transactions_from_account_id", "transactions", ["from_account_id"])
    op.create_index("ix_transactions_to_account_id", "transactions", ["to_account_id"])
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"])

    op.create_table(
        "earning_claims",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("claimant_id", sa.String(length=64), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("hours_claimed_centihours", sa.BigInteger(), nullable=False),
        sa.Column("actual_hours_centihours", sa.BigInteger(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("evidence_ref", sa.String(length=255)),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("resolver_id", sa.String(length=64)),
        sa.Column("rejection_reason", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("resolved_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_earning_claims_claimant_id", "earning_claims", ["claimant_id"])
    op.create_index("ix_earning_claims_status", "earning_claims", ["status"])

    op.create_table(
        "claim_votes",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("claim_id", sa.String(length=36), sa.ForeignKey("earning_claims.id"), nullable=False),
        sa.Column("voter_id", sa.String(length=64), nullable=False),
        sa.Column("choice", sa.String(length=10), nullable=False),
        sa.Column("comment", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("claim_id", "voter_id", name="uq_claim_votes_claim_voter"),
    )
    op.create_index("ix_claim_votes_claim_id", "claim_votes", ["claim_id"])


def downgrade() -> None:
    op.drop_index("ix_claim_votes_claim_id", table_name="claim_votes")
    op.drop_table("claim_votes")

    op.drop_index("ix_earning_claims_status", table_name="earning_claims")
    op.drop_index("ix_earning_claims_claimant_id", table_name="earning_claims")
    op.drop_table("earning_claims")

    op.drop_index("ix_transactions_created_at", table_name="transactions")
    op.drop_index("ix_transactions_to_account_id", table_name="transactions")
    op.drop_index("ix_transactions_from_account_id", table_name="transactions")
    op.drop_table("transactions")

    op.drop_table("balances")

    op.drop_index("ix_categories_name", table_name="categories")
    op.drop_table("categories")
