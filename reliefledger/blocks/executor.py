"""Mini README: Applies ordered blocks of operation calls to a ledger.

Structure:
    * OperationCall - one named call with its sender and keyword arguments.
    * OperationReceipt - outcome of a call (result or error code).
    * BlockResult - receipts for a whole block plus its block number.
    * BlockExecutor - runs each block under the ledger lock, in order.
    * load_block_file - parse the JSON block file format used by ``replay``.

A failing call is recorded in its receipt and the rest of the block still
runs; only ``LedgerError`` is converted into a receipt, anything else
propagates to the caller.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..ledger import LedgerError, LedgerStateMachine
from ..logging_utils import get_logger
from .registry import REGISTRY, OperationRegistry

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class OperationCall:
    """A single operation invocation inside a block."""

    operation: str
    sender: str
    arguments: Dict[str, object] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> "OperationCall":
        """Build a call from its JSON representation."""

        if not isinstance(payload, Mapping):
            raise ValueError("Each call must be a JSON object.")
        try:
            operation = payload["operation"]
        except KeyError as error:
            raise ValueError("Each call requires an 'operation' field.") from error
        arguments = payload.get("arguments") or {}
        if not isinstance(arguments, Mapping):
            raise ValueError("Call 'arguments' must be a JSON object.")
        sender = payload.get("sender")
        return cls(
            operation=str(operation),
            sender="" if sender is None else str(sender),
            arguments=dict(arguments),
        )


@dataclass(slots=True)
class OperationReceipt:
    """Outcome of one call."""

    index: int
    operation: str
    sender: str
    success: bool
    result: object = None
    error: Optional[str] = None
    detail: Optional[str] = None

    def as_dict(self) -> Dict[str, object]:
        return {
            "index": self.index,
            "operation": self.operation,
            "sender": self.sender,
            "success": self.success,
            "result": self.result,
            "error": self.error,
            "detail": self.detail,
        }


@dataclass(slots=True)
class BlockResult:
    """Receipts produced by applying one block."""

    block: int
    receipts: List[OperationReceipt]

    @property
    def failed(self) -> int:
        return sum(1 for receipt in self.receipts if not receipt.success)

    def as_dict(self) -> Dict[str, object]:
        return {"block": self.block, "receipts": [receipt.as_dict() for receipt in self.receipts]}


class BlockExecutor:
    """Apply blocks of calls sequentially against one ledger."""

    def __init__(self, ledger: LedgerStateMachine, registry: Optional[OperationRegistry] = None) -> None:
        self.ledger = ledger
        self.registry = registry or REGISTRY

    def apply_block(self, calls: Iterable[OperationCall]) -> BlockResult:
        """Run ``calls`` in order, then advance the block counter."""

        with self.ledger.lock:
            block = self.ledger.current_block
            receipts = [self._apply_call(index, call) for index, call in enumerate(calls)]
            self.ledger.advance_block()
        result = BlockResult(block=block, receipts=receipts)
        LOGGER.info(
            "Applied block %s with %s calls (%s failed)", block, len(receipts), result.failed
        )
        return result

    def _apply_call(self, index: int, call: OperationCall) -> OperationReceipt:
        try:
            value = self.registry.dispatch(self.ledger, call.operation, call.sender, call.arguments)
        except LedgerError as error:
            LOGGER.info("Call %s (%s) failed: %s", index, call.operation, error.code)
            return OperationReceipt(
                index=index,
                operation=call.operation,
                sender=call.sender,
                success=False,
                error=error.code,
                detail=error.message,
            )
        return OperationReceipt(
            index=index,
            operation=call.operation,
            sender=call.sender,
            success=True,
            result=value,
        )


def parse_block_document(document: Mapping[str, object]) -> Tuple[Dict[str, int], List[List[OperationCall]]]:
    """Split a block document into genesis balances and parsed blocks."""

    if not isinstance(document, Mapping):
        raise ValueError("Block document must be a JSON object.")
    genesis = document.get("genesis") or {}
    if not isinstance(genesis, Mapping):
        raise ValueError("'genesis' must map addresses to amounts.")
    raw_blocks = document.get("blocks")
    if not isinstance(raw_blocks, list):
        raise ValueError("'blocks' must be a list of call lists.")
    blocks: List[List[OperationCall]] = []
    for raw_block in raw_blocks:
        if not isinstance(raw_block, list):
            raise ValueError("Each block must be a list of calls.")
        blocks.append([OperationCall.from_dict(call) for call in raw_block])
    return {str(address): amount for address, amount in genesis.items()}, blocks


def load_block_file(path: Path) -> Tuple[Dict[str, int], List[List[OperationCall]]]:
    """Read and parse a JSON block file."""

    document = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_block_document(document)
