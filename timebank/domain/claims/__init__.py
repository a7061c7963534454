"""Claim domain exports"""

from .exceptions import AlreadyVotedError, ClaimNotFoundError, InvalidClaimStateError, VotingDisabledError
from .models import Claim, ClaimStatus, ClaimWithVotes, Vote, VoteChoice, VoteOutcome
from .service import VOTE_REJECTION_REASON, ClaimWorkflow
from .tally import VoteTally

__all__ = [
    "AlreadyVotedError",
    "Claim",
    "ClaimNotFoundError",
    "ClaimStatus",
    "ClaimWithVotes",
    "ClaimWorkflow",
    "InvalidClaimStateError",
    "VOTE_REJECTION_REASON",
    "Vote",
    "VoteChoice",
    "VoteOutcome",
    "VoteTally",
    "VotingDisabledError",
]
