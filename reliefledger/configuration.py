"""Mini README: Centralised configuration models and helpers for the relief ledger.

Structure:
    * ReliefLedgerSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read ``RELIEFLEDGER_`` environment variables
    (or a ``.env`` file), pick the custody address and quorum, toggle the
    voting and registration hardening modes, and seed genesis balances. The
    configuration is cached so validation runs only once per process.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Dict

from pydantic import Field, validator
from pydantic_settings import BaseSettings

from .ledger.state_machine import DEFAULT_CUSTODY_ADDRESS, QUORUM_THRESHOLD


class ReliefLedgerSettings(BaseSettings):
    """Runtime configuration for the relief ledger node."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the HTTP API to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Default port the HTTP API exposes.",
        ge=1,
        le=65535,
    )
    custody_address: str = Field(
        DEFAULT_CUSTODY_ADDRESS,
        description="Account holding donated funds until proposals execute.",
    )
    quorum_threshold: int = Field(
        QUORUM_THRESHOLD,
        description="Votes a proposal needs before it can execute.",
        ge=1,
    )
    distinct_voters: bool = Field(
        False,
        description="Require a voter address and reject repeat votes from it.",
    )
    allow_team_reregistration: bool = Field(
        True,
        description=(
            "Let an address register as a response team again, resetting its"
            " reputation. Disable to reject re-registration instead."
        ),
    )
    genesis_balances: Dict[str, int] = Field(
        default_factory=dict,
        description="Opening balances keyed by address, supplied as JSON in the environment.",
    )
    log_level: str = Field("INFO", description="Root logging level.")

    class Config:
        env_prefix = "RELIEFLEDGER_"
        env_file = ".env"
        case_sensitive = False

    @validator("genesis_balances")
    def _non_negative_balances(cls, value: Dict[str, int]) -> Dict[str, int]:
        """Reject negative opening balances."""

        negative = [address for address, amount in value.items() if amount < 0]
        if negative:
            raise ValueError(f"Genesis balances must be non-negative: {', '.join(negative)}")
        return value

    @validator("log_level")
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache()
def get_settings() -> ReliefLedgerSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return ReliefLedgerSettings()
