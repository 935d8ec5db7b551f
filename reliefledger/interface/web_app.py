"""Mini README: FastAPI transport adaptor for the relief ledger.

Structure:
    * ERROR_STATUS - HTTP status per ledger error code.
    * create_application - application factory wiring routes to one ledger.

Every route delegates to ``LedgerStateMachine`` (or ``BlockExecutor`` for
``/blocks``). Ledger rejections are turned into ``{"error", "detail"}``
JSON by a single exception handler; unknown resources on read routes become
404 responses.
Routes are plain functions so FastAPI runs them in its threadpool; the
ledger lock is blocking and must never be taken on the event loop.
"""

from __future__ import annotations

from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from ..blocks import BlockExecutor
from ..configuration import get_settings
from ..ledger import LedgerError, LedgerStateMachine
from ..logging_utils import get_logger
from .schemas import (
    BlockRequest,
    DisasterRequest,
    DonationRequest,
    ProposalRequest,
    TeamRequest,
    VoteRequest,
)

LOGGER = get_logger(__name__)

ERROR_STATUS: Dict[str, int] = {
    "DisasterNotFound": 404,
    "InvalidAmount": 422,
    "InvalidArguments": 422,
    "UnknownOperation": 422,
    "VoterRequired": 422,
}
CONFLICT_STATUS = 409


def create_application(ledger: Optional[LedgerStateMachine] = None) -> FastAPI:
    """Create the FastAPI application bound to ``ledger``."""

    settings = get_settings()
    ledger = ledger or LedgerStateMachine.from_settings(settings)
    executor = BlockExecutor(ledger)

    app = FastAPI(title="Relief Ledger", version="0.1.0")
    app.state.ledger = ledger

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, error: LedgerError) -> JSONResponse:
        status = ERROR_STATUS.get(error.code, CONFLICT_STATUS)
        LOGGER.debug("%s %s rejected with %s", request.method, request.url.path, error.code)
        return JSONResponse(error.as_dict(), status_code=status)

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse(
            {"status": "ok", "environment": settings.environment, "block": ledger.current_block}
        )

    @app.get("/snapshot")
    def snapshot() -> JSONResponse:
        return JSONResponse(ledger.export_snapshot())

    @app.get("/disasters")
    def list_disasters() -> JSONResponse:
        return JSONResponse({"disasters": [disaster.as_dict() for disaster in ledger.list_disasters()]})

    @app.post("/disasters", status_code=201)
    def register_disaster(body: DisasterRequest) -> JSONResponse:
        disaster_id = ledger.register_disaster(body.name, body.location, body.funds_required)
        return JSONResponse({"disaster_id": disaster_id}, status_code=201)

    @app.get("/disasters/{disaster_id}")
    def get_disaster(disaster_id: int) -> JSONResponse:
        try:
            disaster = ledger.get_disaster(disaster_id)
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error
        return JSONResponse(disaster.as_dict())

    @app.post("/disasters/{disaster_id}/donations")
    def donate(disaster_id: int, body: DonationRequest) -> JSONResponse:
        ledger.donate_to_disaster(body.sender, disaster_id, body.amount)
        return JSONResponse(
            {"success": True, "funds_raised": ledger.get_disaster(disaster_id).funds_raised}
        )

    @app.post("/disasters/{disaster_id}/close")
    def close_disaster(disaster_id: int) -> JSONResponse:
        return JSONResponse({"success": ledger.close_disaster(disaster_id)})

    @app.post("/teams", status_code=201)
    def register_team(body: TeamRequest) -> JSONResponse:
        ledger.register_response_team(body.sender, body.name)
        return JSONResponse({"success": True, "address": body.sender}, status_code=201)

    @app.get("/teams/{address}")
    def get_team(address: str) -> JSONResponse:
        try:
            team = ledger.get_team(address)
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error
        return JSONResponse(team.as_dict())

    @app.post("/proposals", status_code=201)
    def create_proposal(body: ProposalRequest) -> JSONResponse:
        proposal_id = ledger.create_aid_proposal(body.sender, body.disaster_id, body.amount)
        return JSONResponse({"proposal_id": proposal_id}, status_code=201)

    @app.get("/proposals/{proposal_id}")
    def get_proposal(proposal_id: int) -> JSONResponse:
        try:
            proposal = ledger.get_proposal(proposal_id)
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error
        payload = proposal.as_dict()
        payload["status"] = proposal.status(ledger.quorum_threshold).value
        return JSONResponse(payload)

    @app.post("/proposals/{proposal_id}/votes")
    def vote(proposal_id: int, body: Optional[VoteRequest] = None) -> JSONResponse:
        voter = body.voter if body else None
        ledger.vote_on_proposal(proposal_id, voter=voter)
        return JSONResponse({"success": True, "votes": ledger.get_proposal(proposal_id).votes})

    @app.post("/proposals/{proposal_id}/execute")
    def execute(proposal_id: int) -> JSONResponse:
        return JSONResponse({"success": ledger.execute_proposal(proposal_id)})

    @app.get("/balances/{address}")
    def balance(address: str) -> JSONResponse:
        return JSONResponse({"address": address, "balance": ledger.balance_of(address)})

    @app.post("/blocks")
    def apply_block(body: BlockRequest) -> JSONResponse:
        result = executor.apply_block([call.to_call() for call in body.calls])
        return JSONResponse(result.as_dict())

    return app
