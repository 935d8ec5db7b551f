"""Mini README: Block execution for the relief ledger.

Exposes the operation registry and the executor that applies one ordered
batch of calls per block, producing a receipt for every call.
"""

from .executor import (
    BlockExecutor,
    BlockResult,
    OperationCall,
    OperationReceipt,
    load_block_file,
    parse_block_document,
)
from .registry import REGISTRY, Operation, OperationRegistry

__all__ = [
    "BlockExecutor",
    "BlockResult",
    "Operation",
    "OperationCall",
    "OperationReceipt",
    "OperationRegistry",
    "REGISTRY",
    "load_block_file",
    "parse_block_document",
]
