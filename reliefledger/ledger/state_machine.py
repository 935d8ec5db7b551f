"""Mini README: The relief ledger funding state machine.

Structure:
    * QUORUM_THRESHOLD - default number of votes a proposal needs to execute.
    * DEFAULT_CUSTODY_ADDRESS - pooled account holding donated funds.
    * LedgerStateMachine - owns the disaster, team, proposal and balance
      registries plus the block counter, and exposes one method per ledger
      operation alongside read-only queries.

Every operation follows the same shape: take the ledger lock, validate all
preconditions against current state, then apply the writes. A rejected call
raises a ``LedgerError`` before the first write, so no caller can observe a
half-applied transfer. Queries return copies so registries are never aliased
outside the ledger.
"""

from __future__ import annotations

import threading
from copy import deepcopy
from typing import Dict, List, Mapping, Optional

from ..logging_utils import get_logger
from .errors import (
    DisasterNotFound,
    DuplicateVote,
    InsufficientBalance,
    InsufficientFundsAvailable,
    InvalidAmount,
    InvalidDisasterOrTeam,
    InvalidOrExecutedProposal,
    InvalidProposalOrInsufficientVotes,
    InvalidTarget,
    InvariantViolation,
    TeamAlreadyRegistered,
    VoterRequired,
)
from .models import AidProposal, Disaster, ProposalStatus, ResponseTeam

LOGGER = get_logger(__name__)

QUORUM_THRESHOLD = 3
DEFAULT_CUSTODY_ADDRESS = "STFCKHQNPQH8QKVY5BXRNXC0N7XDVS9AQVVQ6FXJ"


def _require_amount(value: object, *, allow_zero: bool = True) -> int:
    """Validate that ``value`` is an integer amount within bounds."""

    # bool is an int subclass but never a meaningful amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"Amount must be an integer, got {value!r}")
    if value < 0 or (value == 0 and not allow_zero):
        qualifier = "non-negative" if allow_zero else "positive"
        raise InvalidAmount(f"Amount must be {qualifier}, got {value}")
    return value


class LedgerStateMachine:
    """Single-writer state machine moving funds between donors and teams."""

    def __init__(
        self,
        genesis_balances: Optional[Mapping[str, int]] = None,
        *,
        custody_address: str = DEFAULT_CUSTODY_ADDRESS,
        quorum_threshold: int = QUORUM_THRESHOLD,
        distinct_voters: bool = False,
        allow_team_reregistration: bool = True,
    ) -> None:
        if isinstance(quorum_threshold, bool) or not isinstance(quorum_threshold, int) or quorum_threshold < 1:
            raise ValueError(f"Quorum threshold must be a positive integer, got {quorum_threshold!r}")

        self.custody_address = custody_address
        self.quorum_threshold = quorum_threshold
        self.distinct_voters = distinct_voters
        self.allow_team_reregistration = allow_team_reregistration

        self._lock = threading.RLock()
        self._disasters: Dict[int, Disaster] = {}
        self._teams: Dict[str, ResponseTeam] = {}
        self._proposals: Dict[int, AidProposal] = {}
        self._balances: Dict[str, int] = {}
        self._block = 1

        for address, amount in (genesis_balances or {}).items():
            self._balances[str(address)] = _require_amount(amount)
        self._balances.setdefault(custody_address, 0)
        self._genesis_total = sum(self._balances.values())
        LOGGER.debug(
            "Ledger initialised with %s accounts, total supply %s, quorum %s",
            len(self._balances),
            self._genesis_total,
            quorum_threshold,
        )

    @classmethod
    def from_settings(cls, settings, genesis_balances: Optional[Mapping[str, int]] = None) -> "LedgerStateMachine":
        """Build a ledger from ``ReliefLedgerSettings``."""

        balances = genesis_balances if genesis_balances is not None else settings.genesis_balances
        return cls(
            balances,
            custody_address=settings.custody_address,
            quorum_threshold=settings.quorum_threshold,
            distinct_voters=settings.distinct_voters,
            allow_team_reregistration=settings.allow_team_reregistration,
        )

    @property
    def lock(self) -> threading.RLock:
        """Exclusive-writer lock guarding the whole ledger."""

        return self._lock

    @property
    def current_block(self) -> int:
        return self._block

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def register_disaster(self, name: str, location: str, funds_required: int) -> int:
        """Register a disaster and return its sequential identifier."""

        _require_amount(funds_required)
        with self._lock:
            disaster_id = len(self._disasters) + 1
            self._disasters[disaster_id] = Disaster(
                disaster_id=disaster_id,
                name=name,
                location=location,
                funds_required=funds_required,
            )
            LOGGER.info(
                "Registered disaster %s '%s' at %s requiring %s",
                disaster_id,
                name,
                location,
                funds_required,
            )
            return disaster_id

    def donate_to_disaster(self, sender: str, disaster_id: int, amount: int) -> bool:
        """Move ``amount`` from ``sender`` into custody on behalf of a disaster."""

        _require_amount(amount)
        with self._lock:
            disaster = self._active_disaster(disaster_id)
            if disaster is None:
                LOGGER.warning("Donation rejected: disaster %s not found or inactive", disaster_id)
                raise DisasterNotFound(f"Disaster {disaster_id} not found or inactive")
            balance = self._balances.get(sender, 0)
            if balance < amount:
                LOGGER.warning("Donation rejected: %s holds %s, needs %s", sender, balance, amount)
                raise InsufficientBalance(f"Balance {balance} of {sender} is below {amount}")

            self._balances[sender] = balance - amount
            self._balances[self.custody_address] = self._balances.get(self.custody_address, 0) + amount
            disaster.funds_raised += amount
            LOGGER.info("Donation of %s from %s to disaster %s", amount, sender, disaster_id)
            return True

    def register_response_team(self, sender: str, name: str) -> bool:
        """Register ``sender`` as a response team, resetting reputation."""

        with self._lock:
            existing = self._teams.get(sender)
            if existing is not None:
                if not self.allow_team_reregistration:
                    LOGGER.warning("Team registration rejected: %s already registered", sender)
                    raise TeamAlreadyRegistered(f"Response team {sender} already registered")
                LOGGER.warning(
                    "Re-registering team %s; reputation %s reset to 0", sender, existing.reputation
                )
            self._teams[sender] = ResponseTeam(address=sender, name=name)
            LOGGER.info("Registered response team '%s' at %s", name, sender)
            return True

    def create_aid_proposal(self, sender: str, disaster_id: int, amount: int) -> int:
        """Create a proposal to pay ``amount`` from a disaster to ``sender``."""

        _require_amount(amount, allow_zero=False)
        with self._lock:
            disaster = self._active_disaster(disaster_id)
            if disaster is None or sender not in self._teams:
                LOGGER.warning(
                    "Proposal rejected: disaster %s or team %s invalid", disaster_id, sender
                )
                raise InvalidTarget(f"Disaster {disaster_id} is unavailable or {sender} is not a team")
            if amount > disaster.remaining_cap:
                LOGGER.warning(
                    "Proposal rejected: %s exceeds remaining cap %s of disaster %s",
                    amount,
                    disaster.remaining_cap,
                    disaster_id,
                )
                raise InsufficientFundsAvailable(
                    f"Requested {amount} exceeds remaining {disaster.remaining_cap}"
                )

            proposal_id = len(self._proposals) + 1
            self._proposals[proposal_id] = AidProposal(
                proposal_id=proposal_id,
                disaster_id=disaster_id,
                team_id=sender,
                amount=amount,
            )
            LOGGER.info(
                "Created proposal %s: %s to %s for disaster %s", proposal_id, amount, sender, disaster_id
            )
            return proposal_id

    def vote_on_proposal(self, proposal_id: int, voter: Optional[str] = None) -> bool:
        """Add one vote to a pending proposal."""

        with self._lock:
            proposal = self._proposals.get(proposal_id)
            if proposal is None or proposal.executed:
                LOGGER.warning("Vote rejected: proposal %s missing or executed", proposal_id)
                raise InvalidOrExecutedProposal(f"Proposal {proposal_id} is missing or executed")
            if self.distinct_voters:
                if not voter:
                    raise VoterRequired()
                if voter in proposal.voters:
                    LOGGER.warning("Vote rejected: %s already voted on %s", voter, proposal_id)
                    raise DuplicateVote(f"{voter} already voted on proposal {proposal_id}")

            proposal.votes += 1
            if voter:
                proposal.voters.append(voter)
            LOGGER.info("Proposal %s now has %s votes", proposal_id, proposal.votes)
            return True

    def execute_proposal(self, proposal_id: int) -> bool:
        """Pay out a quorate proposal from custody to its team."""

        with self._lock:
            proposal = self._proposals.get(proposal_id)
            if proposal is None or proposal.executed:
                LOGGER.warning("Execution rejected: proposal %s missing or executed", proposal_id)
                raise InvalidOrExecutedProposal(f"Proposal {proposal_id} is missing or executed")
            if proposal.votes < self.quorum_threshold:
                LOGGER.warning(
                    "Execution rejected: proposal %s has %s of %s votes",
                    proposal_id,
                    proposal.votes,
                    self.quorum_threshold,
                )
                raise InvalidProposalOrInsufficientVotes(
                    f"Proposal {proposal_id} has {proposal.votes} of {self.quorum_threshold} votes"
                )
            disaster = self._active_disaster(proposal.disaster_id)
            team = self._teams.get(proposal.team_id)
            if disaster is None or team is None:
                LOGGER.warning("Execution rejected: proposal %s references invalid disaster or team", proposal_id)
                raise InvalidDisasterOrTeam(
                    f"Disaster {proposal.disaster_id} or team {proposal.team_id} is unavailable"
                )
            custody_balance = self._balances.get(self.custody_address, 0)
            if disaster.funds_raised < proposal.amount or custody_balance < proposal.amount:
                LOGGER.warning(
                    "Execution rejected: proposal %s needs %s, raised %s, custody %s",
                    proposal_id,
                    proposal.amount,
                    disaster.funds_raised,
                    custody_balance,
                )
                raise InsufficientFundsAvailable(
                    f"Proposal {proposal_id} exceeds funds held for disaster {proposal.disaster_id}"
                )

            disaster.funds_raised -= proposal.amount
            team.reputation += 1
            proposal.executed = True
            self._balances[self.custody_address] = custody_balance - proposal.amount
            self._balances[team.address] = self._balances.get(team.address, 0) + proposal.amount
            LOGGER.info(
                "Executed proposal %s: %s paid to %s", proposal_id, proposal.amount, team.address
            )
            return True

    def close_disaster(self, disaster_id: int) -> bool:
        """Mark a disaster inactive so it stops accepting donations and proposals."""

        with self._lock:
            disaster = self._active_disaster(disaster_id)
            if disaster is None:
                LOGGER.warning("Closure rejected: disaster %s not found or inactive", disaster_id)
                raise DisasterNotFound(f"Disaster {disaster_id} not found or inactive")
            disaster.active = False
            LOGGER.info("Closed disaster %s", disaster_id)
            return True

    def advance_block(self) -> int:
        """Advance the block counter and return the new block number."""

        with self._lock:
            self._block += 1
            LOGGER.debug("Advanced to block %s", self._block)
            return self._block

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_disaster(self, disaster_id: int) -> Disaster:
        with self._lock:
            if disaster_id not in self._disasters:
                raise KeyError(f"Disaster {disaster_id} not found")
            return deepcopy(self._disasters[disaster_id])

    def get_team(self, address: str) -> ResponseTeam:
        with self._lock:
            if address not in self._teams:
                raise KeyError(f"Response team {address} not found")
            return deepcopy(self._teams[address])

    def get_proposal(self, proposal_id: int) -> AidProposal:
        with self._lock:
            if proposal_id not in self._proposals:
                raise KeyError(f"Proposal {proposal_id} not found")
            return deepcopy(self._proposals[proposal_id])

    def list_disasters(self) -> List[Disaster]:
        with self._lock:
            return [deepcopy(disaster) for disaster in self._disasters.values()]

    def list_teams(self) -> List[ResponseTeam]:
        with self._lock:
            return [deepcopy(team) for team in self._teams.values()]

    def list_proposals(self) -> List[AidProposal]:
        with self._lock:
            return [deepcopy(proposal) for proposal in self._proposals.values()]

    def balance_of(self, address: str) -> int:
        with self._lock:
            return self._balances.get(address, 0)

    def total_supply(self) -> int:
        """Sum of every account balance, custody included."""

        with self._lock:
            return sum(self._balances.values())

    def proposal_status(self, proposal_id: int) -> ProposalStatus:
        return self.get_proposal(proposal_id).status(self.quorum_threshold)

    def check_invariants(self) -> None:
        """Raise ``InvariantViolation`` if conservation or sign rules are broken."""

        with self._lock:
            negative = {address: amount for address, amount in self._balances.items() if amount < 0}
            if negative:
                raise InvariantViolation(f"Negative balances: {negative}")
            total = sum(self._balances.values())
            if total != self._genesis_total:
                raise InvariantViolation(
                    f"Total supply {total} differs from genesis total {self._genesis_total}"
                )
            for disaster in self._disasters.values():
                if disaster.funds_raised < 0:
                    raise InvariantViolation(
                        f"Disaster {disaster.disaster_id} has negative funds raised"
                    )

    def export_snapshot(self) -> Dict[str, object]:
        """Export every registry as JSON-serialisable data."""

        with self._lock:
            return {
                "block": self._block,
                "quorum_threshold": self.quorum_threshold,
                "custody_address": self.custody_address,
                "disasters": [disaster.as_dict() for disaster in self._disasters.values()],
                "teams": [team.as_dict() for team in self._teams.values()],
                "proposals": [
                    {**proposal.as_dict(), "status": proposal.status(self.quorum_threshold).value}
                    for proposal in self._proposals.values()
                ],
                "balances": dict(self._balances),
            }

    def _active_disaster(self, disaster_id: int) -> Optional[Disaster]:
        disaster = self._disasters.get(disaster_id)
        if disaster is None or not disaster.active:
            return None
        return disaster
