"""Mini README: Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from reliefledger.configuration import ReliefLedgerSettings
from reliefledger.ledger import LedgerStateMachine


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("RELIEFLEDGER_QUORUM_THRESHOLD", raising=False)
    settings = ReliefLedgerSettings(_env_file=None)

    assert settings.quorum_threshold == 3
    assert settings.distinct_voters is False
    assert settings.allow_team_reregistration is True
    assert settings.custody_address == "STFCKHQNPQH8QKVY5BXRNXC0N7XDVS9AQVVQ6FXJ"


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("RELIEFLEDGER_QUORUM_THRESHOLD", "5")
    monkeypatch.setenv("RELIEFLEDGER_DISTINCT_VOTERS", "true")
    monkeypatch.setenv("RELIEFLEDGER_GENESIS_BALANCES", '{"ST1": 700}')
    monkeypatch.setenv("RELIEFLEDGER_LOG_LEVEL", "debug")

    settings = ReliefLedgerSettings(_env_file=None)
    ledger = LedgerStateMachine.from_settings(settings)

    assert settings.log_level == "DEBUG"
    assert ledger.quorum_threshold == 5
    assert ledger.distinct_voters is True
    assert ledger.balance_of("ST1") == 700


@pytest.mark.parametrize(
    "variable, value",
    [
        ("RELIEFLEDGER_GENESIS_BALANCES", '{"ST1": -1}'),
        ("RELIEFLEDGER_QUORUM_THRESHOLD", "0"),
        ("RELIEFLEDGER_LOG_LEVEL", "chatty"),
    ],
)
def test_settings_reject_invalid_values(monkeypatch, variable, value):
    monkeypatch.setenv(variable, value)
    with pytest.raises(ValidationError):
        ReliefLedgerSettings(_env_file=None)
