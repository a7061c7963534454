"""Pydantic schemas used across the project."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from timebank.domain.claims.models import ClaimStatus, ClaimWithVotes, VoteChoice
from timebank.domain.ledger.models import LedgerEntryKind

MAX_PAGE_SIZE = 500
MAX_CLAIM_HOURS = Decimal("999.99")


class PageQuery(BaseModel):
    limit: int = 50
    offset: int = 0

    @field_validator("limit")
    @classmethod
    def clamp_limit(cls, value: int) -> int:
        return max(1, min(value, MAX_PAGE_SIZE))

    @field_validator("offset")
    @classmethod
    def clamp_offset(cls, value: int) -> int:
        return max(0, value)


class ClaimSubmitRequest(BaseModel):
    claimant_id: str = Field(..., min_length=1, max_length=64)
    category_id: int
    hours_claimed: Decimal = Field(..., le=MAX_CLAIM_HOURS)
    description: str = Field(..., min_length=1)
    evidence_ref: Optional[str] = Field(default=None, max_length=255)


class AccountQuery(BaseModel):
    account_id: str = Field(..., min_length=1, max_length=64)


class ClaimActionRequest(BaseModel):
    claim_id: str = Field(..., min_length=1)
    approver_id: str = Field(..., min_length=1, max_length=64)


class ClaimRejectRequest(BaseModel):
    claim_id: str
    approver_id: str = Field(..., min_length=1, max_length=64)
    reason: str = Field(..., min_length=1, max_length=1000)


class VoteRequest(BaseModel):
    claim_id: str
    voter_id: str = Field(..., min_length=1, max_length=64)
    choice: VoteChoice
    comment: Optional[str] = Field(default=None, max_length=1000)


class AdjustBalanceRequest(BaseModel):
    account_id: str = Field(..., min_length=1, max_length=64)
    hours: Decimal
    reason: str = Field(..., min_length=1)
    admin_id: str = Field(..., min_length=1, max_length=64)


class TransferRequest(BaseModel):
    spender_id: str = Field(..., min_length=1, max_length=64)
    provider_id: str = Field(..., min_length=1, max_length=64)
    hours: Decimal
    request_id: Optional[str] = Field(default=None, max_length=64)
    title: str = Field(..., min_length=1)


class BalanceResponse(BaseModel):
    account_id: str
    balance: Decimal
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BalanceListResponse(BaseModel):
    total: int
    limit: int
    offset: int
    balances: list[BalanceResponse]


class LedgerEntryResponse(BaseModel):
    id: int
    kind: LedgerEntryKind
    hours: Decimal
    description: str
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    reference_id: Optional[str] = None
    reference_type: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LedgerPageResponse(BaseModel):
    total: int
    limit: int
    offset: int
    entries: list[LedgerEntryResponse]

    model_config = ConfigDict(from_attributes=True)


class VoteResponse(BaseModel):
    id: str
    voter_id: str
    choice: VoteChoice
    comment: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ClaimResponse(BaseModel):
    id: str
    claimant_id: str
    category_id: int
    hours_claimed: Decimal
    actual_hours_earned: Decimal
    description: str
    evidence_ref: Optional[str] = None
    status: ClaimStatus
    resolver_id: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    resolved_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ClaimDetailResponse(ClaimResponse):
    """Claim together with its votes and running counts."""

    approve_count: int = 0
    reject_count: int = 0
    abstain_count: int = 0
    total_votes: int = 0
    votes: list[VoteResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, item: ClaimWithVotes) -> "ClaimDetailResponse":
        base = ClaimResponse.model_validate(item.claim).model_dump()
        return cls(
            **base,
            approve_count=item.tally.approve,
            reject_count=item.tally.reject,
            abstain_count=item.tally.abstain,
            total_votes=item.tally.total,
            votes=[VoteResponse.model_validate(vote) for vote in item.votes],
        )


class VoteOutcomeResponse(BaseModel):
    complete: bool
    result: Optional[ClaimStatus] = None

    model_config = ConfigDict(from_attributes=True)


class TransferResponse(BaseModel):
    spender: BalanceResponse
    provider: BalanceResponse
    entry: LedgerEntryResponse

    model_config = ConfigDict(from_attributes=True)


class ReconciliationResponse(BaseModel):
    account_id: str
    balance: Decimal
    ledger_net: Decimal
    consistent: bool

    model_config = ConfigDict(from_attributes=True)
