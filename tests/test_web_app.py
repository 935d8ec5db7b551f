"""Mini README: Tests for the FastAPI transport adaptor.

Structure:
    * Happy path - the full funding flow driven over HTTP.
    * Error mapping - ledger error codes surface with 404/409/422 statuses.
    * Blocks - ``/blocks`` returns per-call receipts.
"""

from __future__ import annotations

import inspect

import pytest
from fastapi.testclient import TestClient

from reliefledger.interface import create_application
from reliefledger.ledger import InvalidArguments, LedgerStateMachine, UnknownOperation

DONOR = "ST1DONOR"
TEAM = "ST2TEAM"
CUSTODY = "STCUSTODY"


@pytest.fixture()
def client() -> TestClient:
    ledger = LedgerStateMachine({DONOR: 10000}, custody_address=CUSTODY)
    return TestClient(create_application(ledger))


def test_funding_flow_over_http(client: TestClient) -> None:
    response = client.post("/disasters", json={"name": "Quake", "location": "City A", "funds_required": 10000})
    assert response.status_code == 201
    assert response.json() == {"disaster_id": 1}

    response = client.post("/disasters/1/donations", json={"sender": DONOR, "amount": 5000})
    assert response.json() == {"success": True, "funds_raised": 5000}

    assert client.post("/teams", json={"sender": TEAM, "name": "Rescue"}).status_code == 201
    response = client.post("/proposals", json={"sender": TEAM, "disaster_id": 1, "amount": 4000})
    assert response.json() == {"proposal_id": 1}

    for expected in (1, 2, 3):
        assert client.post("/proposals/1/votes", json={"voter": DONOR}).json()["votes"] == expected
    assert client.get("/proposals/1").json()["status"] == "quorate"

    assert client.post("/proposals/1/execute").json() == {"success": True}
    assert client.get("/balances/" + TEAM).json()["balance"] == 4000
    assert client.get("/balances/" + CUSTODY).json()["balance"] == 1000
    assert client.get("/teams/" + TEAM).json()["reputation"] == 1
    assert client.get("/disasters/1").json()["funds_raised"] == 1000

    snapshot = client.get("/snapshot").json()
    assert snapshot["proposals"][0]["status"] == "executed"
    assert snapshot["balances"][DONOR] == 5000


def test_ledger_errors_map_to_statuses(client: TestClient) -> None:
    response = client.post("/disasters/9/donations", json={"sender": DONOR, "amount": 1})
    assert response.status_code == 404
    assert response.json()["error"] == "DisasterNotFound"

    client.post("/disasters", json={"name": "Quake", "location": "City A", "funds_required": 10})
    response = client.post("/disasters/1/donations", json={"sender": DONOR, "amount": -1})
    assert response.status_code == 422
    assert response.json()["error"] == "InvalidAmount"

    response = client.post("/proposals", json={"sender": TEAM, "disaster_id": 1, "amount": 5})
    assert response.status_code == 409
    assert response.json()["error"] == "InvalidTarget"

    response = client.post("/proposals/3/execute")
    assert response.status_code == 409
    assert response.json()["error"] == "InvalidOrExecutedProposal"


def test_unknown_resources_return_404(client: TestClient) -> None:
    assert client.get("/disasters/1").status_code == 404
    assert client.get("/teams/nobody").status_code == 404
    assert client.get("/proposals/1").status_code == 404


def test_blocks_endpoint_returns_receipts(client: TestClient) -> None:
    response = client.post(
        "/blocks",
        json={
            "calls": [
                {"operation": "register_disaster", "sender": DONOR, "arguments": {"name": "Fire", "location": "Hills", "funds_required": 100}},
                {"operation": "close_disaster", "sender": DONOR, "arguments": {"disaster_id": 1}},
                {"operation": "close_disaster", "sender": DONOR, "arguments": {"disaster_id": 1}},
            ]
        },
    )

    body = response.json()
    assert response.status_code == 200
    assert body["block"] == 1
    assert [receipt["success"] for receipt in body["receipts"]] == [True, True, False]
    assert body["receipts"][2]["error"] == "DisasterNotFound"
    assert client.get("/health").json()["block"] == 2


def test_vote_without_voter_is_rejected_in_distinct_mode() -> None:
    ledger = LedgerStateMachine({DONOR: 100}, distinct_voters=True)
    disaster_id = ledger.register_disaster("Quake", "City A", 100)
    ledger.register_response_team(TEAM, "Rescue")
    proposal_id = ledger.create_aid_proposal(TEAM, disaster_id, 10)
    client = TestClient(create_application(ledger))

    response = client.post(f"/proposals/{proposal_id}/votes", json={})

    assert response.status_code == 422
    assert response.json()["error"] == "VoterRequired"
    assert client.post(f"/proposals/{proposal_id}/votes", json={"voter": DONOR}).json()["votes"] == 1
    response = client.post(f"/proposals/{proposal_id}/votes", json={"voter": DONOR})
    assert response.status_code == 409
    assert response.json()["error"] == "DuplicateVote"


@pytest.mark.parametrize("error", [UnknownOperation("mint"), InvalidArguments("bad id")])
def test_dispatch_errors_map_to_422(error) -> None:
    app = create_application(LedgerStateMachine())

    @app.get("/raise")
    def raise_error():
        raise error

    response = TestClient(app).get("/raise")

    assert response.status_code == 422
    assert response.json() == {"error": error.code, "detail": error.message}


def test_blocks_endpoint_reports_malformed_calls(client: TestClient) -> None:
    response = client.post(
        "/blocks",
        json={
            "calls": [
                {"operation": "mint", "sender": DONOR, "arguments": {}},
                {"operation": "close_disaster", "sender": DONOR, "arguments": {"disaster_id": [1]}},
            ]
        },
    )

    assert response.status_code == 200
    assert [receipt["error"] for receipt in response.json()["receipts"]] == ["UnknownOperation", "InvalidArguments"]


def test_ledger_routes_run_in_threadpool() -> None:
    """Routes taking the blocking ledger lock must not be coroutines."""

    app = create_application(LedgerStateMachine())
    endpoints = [route.endpoint for route in app.routes if route.path in {"/disasters", "/blocks", "/proposals/{proposal_id}/votes"}]

    assert endpoints
    assert not any(inspect.iscoroutinefunction(endpoint) for endpoint in endpoints)
