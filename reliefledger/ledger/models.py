"""Mini README: Entity models held by the relief ledger.

Structure:
    * ProposalStatus - enum describing where a proposal sits in its lifecycle.
    * Disaster - funding target with required and raised amounts.
    * ResponseTeam - address-keyed actor that proposes disbursements.
    * AidProposal - requested disbursement gated by a vote quorum.

The dataclasses are plain containers; all validation and mutation happens in
``LedgerStateMachine`` so a model never changes outside an operation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


class ProposalStatus(str, Enum):
    """Lifecycle stages of an aid proposal."""

    CREATED = "created"
    VOTING = "voting"
    QUORATE = "quorate"
    EXECUTED = "executed"


@dataclass(slots=True)
class Disaster:
    """Represent a declared disaster accepting donations."""

    disaster_id: int
    name: str
    location: str
    funds_required: int
    funds_raised: int = 0
    active: bool = True

    @property
    def remaining_cap(self) -> int:
        """Amount still available for new proposals."""

        return self.funds_required - self.funds_raised

    def as_dict(self) -> Dict[str, object]:
        return {
            "disaster_id": self.disaster_id,
            "name": self.name,
            "location": self.location,
            "funds_required": self.funds_required,
            "funds_raised": self.funds_raised,
            "active": self.active,
        }


@dataclass(slots=True)
class ResponseTeam:
    """Represent a registered response team keyed by its address."""

    address: str
    name: str
    reputation: int = 0

    def as_dict(self) -> Dict[str, object]:
        return {
            "address": self.address,
            "name": self.name,
            "reputation": self.reputation,
        }


@dataclass(slots=True)
class AidProposal:
    """Represent a disbursement request from a disaster's funds to a team."""

    proposal_id: int
    disaster_id: int
    team_id: str
    amount: int
    votes: int = 0
    executed: bool = False
    voters: List[str] = field(default_factory=list)

    def status(self, quorum: int) -> ProposalStatus:
        """Derive the lifecycle stage against the supplied quorum."""

        if self.executed:
            return ProposalStatus.EXECUTED
        if self.votes >= quorum:
            return ProposalStatus.QUORATE
        if self.votes > 0:
            return ProposalStatus.VOTING
        return ProposalStatus.CREATED

    def as_dict(self) -> Dict[str, object]:
        return {
            "proposal_id": self.proposal_id,
            "disaster_id": self.disaster_id,
            "team_id": self.team_id,
            "amount": self.amount,
            "votes": self.votes,
            "executed": self.executed,
            "voters": list(self.voters),
        }
