"""Mini README: Core package initializer for the relief ledger.

The package models a disaster-relief funding ledger: donors fund declared
disasters, registered response teams propose disbursements, and proposals
pay out once they reach a vote quorum. The state machine lives in
``reliefledger.ledger``; ``reliefledger.blocks`` applies ordered batches of
calls and ``reliefledger.interface`` exposes the HTTP API.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
