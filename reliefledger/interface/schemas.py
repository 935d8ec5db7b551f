"""Mini README: Request bodies accepted by the relief ledger HTTP API.

Amounts are plain integers here; range checks stay in the state machine so
the API reports the same ``InvalidAmount`` error as every other caller.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..blocks import OperationCall


class DisasterRequest(BaseModel):
    name: str
    location: str
    funds_required: int


class DonationRequest(BaseModel):
    sender: str
    amount: int


class TeamRequest(BaseModel):
    sender: str
    name: str


class ProposalRequest(BaseModel):
    sender: str
    disaster_id: int
    amount: int


class VoteRequest(BaseModel):
    voter: Optional[str] = None


class CallRequest(BaseModel):
    operation: str
    sender: str = ""
    arguments: Dict[str, Any] = Field(default_factory=dict)

    def to_call(self) -> OperationCall:
        return OperationCall(operation=self.operation, sender=self.sender, arguments=dict(self.arguments))


class BlockRequest(BaseModel):
    """One block of calls applied in order."""

    calls: List[CallRequest] = Field(default_factory=list)
