"""Mini README: Error taxonomy raised by the relief ledger state machine.

Structure:
    * LedgerError - base class for every caller-facing precondition failure.
    * One subclass per failure kind, each carrying a stable ``code``.
    * InvariantViolation - internal consistency failure, never a caller error.

Every ``LedgerError`` means the operation was rejected before any write, so
callers can surface ``code`` to their own transport without inspecting
ledger state.
"""

from __future__ import annotations

from typing import Optional


class LedgerError(Exception):
    """Base class for precondition failures surfaced to callers."""

    code = "LedgerError"
    default_message = "Ledger operation rejected"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self) -> dict:
        """Export the error in the shape used by receipts and HTTP responses."""

        return {"error": self.code, "detail": self.message}


class DisasterNotFound(LedgerError):
    code = "DisasterNotFound"
    default_message = "Disaster not found or inactive"


class InsufficientBalance(LedgerError):
    code = "InsufficientBalance"
    default_message = "Insufficient balance"


class InvalidTarget(LedgerError):
    code = "InvalidTarget"
    default_message = "Invalid disaster or unauthorized team"


class InsufficientFundsAvailable(LedgerError):
    code = "InsufficientFundsAvailable"
    default_message = "Insufficient funds available"


class InvalidOrExecutedProposal(LedgerError):
    code = "InvalidOrExecutedProposal"
    default_message = "Invalid or executed proposal"


class InvalidProposalOrInsufficientVotes(LedgerError):
    code = "InvalidProposalOrInsufficientVotes"
    default_message = "Invalid proposal or insufficient votes"


class InvalidDisasterOrTeam(LedgerError):
    code = "InvalidDisasterOrTeam"
    default_message = "Invalid disaster or team"


class InvalidAmount(LedgerError):
    code = "InvalidAmount"
    default_message = "Amounts must be non-negative integers"


class TeamAlreadyRegistered(LedgerError):
    code = "TeamAlreadyRegistered"
    default_message = "Response team already registered"


class VoterRequired(LedgerError):
    code = "VoterRequired"
    default_message = "A voter address is required when distinct voting is enabled"


class DuplicateVote(LedgerError):
    code = "DuplicateVote"
    default_message = "Voter has already voted on this proposal"


class UnknownOperation(LedgerError):
    code = "UnknownOperation"
    default_message = "Unknown ledger operation"


class InvalidArguments(LedgerError):
    code = "InvalidArguments"
    default_message = "Invalid arguments for ledger operation"


class InvariantViolation(RuntimeError):
    """Raised when the ledger detects internally inconsistent state."""
