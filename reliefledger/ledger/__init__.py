"""Mini README: Funding state machine for the relief ledger.

This package holds the entity models, the error taxonomy and the
``LedgerStateMachine`` that validates and applies every operation. Other
packages (block execution, HTTP interface) only call into the state machine
and never touch its registries directly.
"""

from .errors import (
    DisasterNotFound,
    DuplicateVote,
    InsufficientBalance,
    InsufficientFundsAvailable,
    InvalidAmount,
    InvalidArguments,
    InvalidDisasterOrTeam,
    InvalidOrExecutedProposal,
    InvalidProposalOrInsufficientVotes,
    InvalidTarget,
    InvariantViolation,
    LedgerError,
    TeamAlreadyRegistered,
    UnknownOperation,
    VoterRequired,
)
from .models import AidProposal, Disaster, ProposalStatus, ResponseTeam
from .state_machine import QUORUM_THRESHOLD, LedgerStateMachine

__all__ = [
    "AidProposal",
    "Disaster",
    "DisasterNotFound",
    "DuplicateVote",
    "InsufficientBalance",
    "InsufficientFundsAvailable",
    "InvalidAmount",
    "InvalidArguments",
    "InvalidDisasterOrTeam",
    "InvalidOrExecutedProposal",
    "InvalidProposalOrInsufficientVotes",
    "InvalidTarget",
    "InvariantViolation",
    "LedgerError",
    "LedgerStateMachine",
    "ProposalStatus",
    "QUORUM_THRESHOLD",
    "ResponseTeam",
    "TeamAlreadyRegistered",
    "UnknownOperation",
    "VoterRequired",
]
