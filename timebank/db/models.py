"""SQLAlchemy ORM models.

Hours are stored as integer hundredths ("centihours"); see ``timebank.core.hours``.
"""
import uuid

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from timebank.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text)
    earn_rate_centi = Column(Integer, nullable=False, default=100)
    icon = Column(String(50))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("earn_rate_centi > 0", name="ck_categories_earn_rate_positive"),
    )


class Balance(Base):
    __tablename__ = "balances"

    account_id = Column(String(64), primary_key=True)
    balance_centihours = Column(BigInteger, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    from_account_id = Column(String(64), nullable=True, index=True)
    to_account_id = Column(String(64), nullable=True, index=True)
    hours_centihours = Column(BigInteger, nullable=False)
    description = Column(String(500), nullable=False)
    kind = Column(String(30), nullable=False)  # earned, spent, adjusted
    reference_id = Column(String(64), nullable=True)
    reference_type = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("hours_centihours > 0", name="ck_transactions_hours_positive"),
    )


class EarningClaim(Base):
    __tablename__ = "earning_claims"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    claimant_id = Column(String(64), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    hours_claimed_centihours = Column(BigInteger, nullable=False)
    actual_hours_centihours = Column(BigInteger, nullable=False)
    description = Column(Text, nullable=False)
    evidence_ref = Column(String(255))
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, voting, approved, rejected
    resolver_id = Column(String(64))
    rejection_reason = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False)
    resolved_at = Column(DateTime(timezone=True))


class ClaimVote(Base):
    __tablename__ = "claim_votes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    claim_id = Column(String(36), ForeignKey("earning_claims.id"), nullable=False, index=True)
    voter_id = Column(String(64), nullable=False)
    choice = Column(String(10), nullable=False)  # approve, reject, abstain
    comment = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("claim_id", "voter_id", name="uq_claim_votes_claim_voter"),
    )
