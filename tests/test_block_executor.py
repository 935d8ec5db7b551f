"""Mini README: Tests for block execution and the operation registry.

Blocks run every call in order, record failures in receipts without
stopping, and advance the ledger's block counter once per block.
"""

from __future__ import annotations

import json
import threading

import pytest

from reliefledger.blocks import REGISTRY, BlockExecutor, OperationCall, OperationRegistry, load_block_file
from reliefledger.ledger import LedgerStateMachine, UnknownOperation

DONOR = "ST1DONOR"
TEAM = "ST2TEAM"


def test_registry_lists_every_ledger_operation():
    assert list(REGISTRY.available_operations()) == [
        "close_disaster",
        "create_aid_proposal",
        "donate_to_disaster",
        "execute_proposal",
        "register_disaster",
        "register_response_team",
        "vote_on_proposal",
    ]


def test_registry_rejects_unknown_operation():
    with pytest.raises(UnknownOperation):
        REGISTRY.get("mint")


def test_apply_block_records_receipts_and_advances_counter():
    ledger = LedgerStateMachine({DONOR: 10000})
    executor = BlockExecutor(ledger)

    result = executor.apply_block(
        [
            OperationCall("register_disaster", DONOR, {"name": "Flood", "location": "Delta", "funds_required": 8000}),
            OperationCall("donate_to_disaster", DONOR, {"disaster_id": 1, "amount": 6000}),
            OperationCall("donate_to_disaster", DONOR, {"disaster_id": 1, "amount": 6000}),
            OperationCall("register_response_team", TEAM, {"name": "Boats"}),
            OperationCall("create_aid_proposal", TEAM, {"disaster_id": 1, "amount": 2000}),
            OperationCall("vote_on_proposal", DONOR, {"proposal_id": 1}),
            OperationCall("vote_on_proposal", TEAM, {"proposal_id": 1}),
            OperationCall("vote_on_proposal", "ST3VOTER", {"proposal_id": 1}),
            OperationCall("execute_proposal", TEAM, {"proposal_id": 1}),
        ]
    )

    assert result.block == 1
    assert ledger.current_block == 2
    assert [receipt.success for receipt in result.receipts] == [True, True, False, True, True, True, True, True, True]
    assert result.receipts[0].result == 1
    assert result.receipts[2].error == "InsufficientBalance"
    assert result.failed == 1
    assert ledger.balance_of(TEAM) == 2000
    assert ledger.get_proposal(1).voters == [DONOR, TEAM, "ST3VOTER"]


def test_apply_block_reports_malformed_calls():
    ledger = LedgerStateMachine()
    result = BlockExecutor(ledger).apply_block(
        [
            OperationCall("mint", "ST1", {"amount": 5}),
            OperationCall("register_response_team", "ST1", {}),
            OperationCall("close_disaster", "ST1", {"disaster_id": 1, "reason": "done"}),
        ]
    )

    assert [receipt.error for receipt in result.receipts] == [
        "UnknownOperation",
        "InvalidArguments",
        "InvalidArguments",
    ]
    assert ledger.list_teams() == []


def test_apply_block_rejects_mistyped_arguments_and_continues():
    """Wrongly typed arguments fail their own call without aborting the block."""

    ledger = LedgerStateMachine({DONOR: 100})
    result = BlockExecutor(ledger).apply_block(
        [
            OperationCall("register_disaster", DONOR, {"name": "Flood", "location": "Delta", "funds_required": 50}),
            OperationCall("donate_to_disaster", DONOR, {"disaster_id": [1], "amount": 5}),
            OperationCall("donate_to_disaster", DONOR, {"disaster_id": "1", "amount": 5}),
            OperationCall("register_disaster", DONOR, {"name": 7, "location": None, "funds_required": 10}),
            OperationCall("close_disaster", DONOR, {"disaster_id": True}),
            OperationCall("donate_to_disaster", DONOR, {"disaster_id": 1, "amount": 5}),
        ]
    )

    assert [receipt.error for receipt in result.receipts] == [
        None,
        "InvalidArguments",
        "InvalidArguments",
        "InvalidArguments",
        "InvalidArguments",
        None,
    ]
    assert ledger.current_block == 2
    assert len(ledger.list_disasters()) == 1
    assert ledger.get_disaster(1).active is True
    assert ledger.get_disaster(1).funds_raised == 5


def test_apply_block_holds_ledger_lock_for_whole_block():
    """A concurrent donation waits until the running block has finished."""

    ledger = LedgerStateMachine({DONOR: 100})
    disaster_id = ledger.register_disaster("Flood", "Delta", 500)
    events = []

    def donate():
        ledger.donate_to_disaster(DONOR, disaster_id, 40)
        events.append("donation")

    donor = threading.Thread(target=donate)
    registry = OperationRegistry()

    @registry.register("start_donor")
    def _start_donor(ledger_, sender):
        donor.start()
        donor.join(timeout=0.2)
        events.append("block")
        return donor.is_alive()

    @registry.register("read_raised")
    def _read_raised(ledger_, sender):
        return ledger_.get_disaster(disaster_id).funds_raised

    result = BlockExecutor(ledger, registry).apply_block(
        [OperationCall("start_donor", DONOR), OperationCall("read_raised", DONOR)]
    )
    donor.join(timeout=5)

    assert [receipt.result for receipt in result.receipts] == [True, 0]
    assert events == ["block", "donation"]
    assert ledger.get_disaster(disaster_id).funds_raised == 40


def test_load_block_file_parses_genesis_and_blocks(tmp_path):
    path = tmp_path / "blocks.json"
    path.write_text(
        json.dumps(
            {
                "genesis": {DONOR: 500},
                "blocks": [[{"operation": "register_response_team", "sender": TEAM, "arguments": {"name": "Boats"}}], []],
            }
        ),
        encoding="utf-8",
    )

    genesis, blocks = load_block_file(path)

    assert genesis == {DONOR: 500}
    assert len(blocks) == 2
    assert blocks[0][0] == OperationCall("register_response_team", TEAM, {"name": "Boats"})
    assert blocks[1] == []


def test_load_block_file_rejects_bad_structure(tmp_path):
    path = tmp_path / "blocks.json"
    path.write_text(json.dumps({"blocks": [{"operation": "x"}]}), encoding="utf-8")

    with pytest.raises(ValueError):
        load_block_file(path)


def test_null_sender_becomes_empty_address():
    call = OperationCall.from_dict({"operation": "close_disaster", "sender": None, "arguments": {"disaster_id": 1}})
    assert call.sender == ""
