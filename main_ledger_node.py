"""Mini README: Entry point CLI for the relief ledger node.

This script exposes a Typer CLI with two commands: ``serve`` starts the
FastAPI application with configurable host, port and production flags, and
``replay`` applies a JSON block file to a fresh ledger and prints every
receipt plus the final snapshot. Both draw defaults from environment
settings and configure logging before touching the ledger.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
import uvicorn

from reliefledger.blocks import BlockExecutor, load_block_file
from reliefledger.configuration import get_settings
from reliefledger.ledger import LedgerError, LedgerStateMachine
from reliefledger.logging_utils import configure_root_logger

cli = typer.Typer(help="Run and replay the relief ledger state machine.")


@cli.command()
def serve(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    # Browsers cannot open the 0.0.0.0 bind address, so point them at localhost.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        "Starting relief ledger on "
        f"{effective_host}:{effective_port}.\n"
        "API docs at "
        f"http://{browser_host}:{effective_port}/docs"
    )
    uvicorn.run(
        "reliefledger.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def replay(
    block_file: Path = typer.Argument(..., help="JSON file with genesis balances and blocks."),
    custody_address: str = typer.Option(None, help="Override the custody account address."),
    quorum: int = typer.Option(None, min=1, help="Override the vote quorum."),
) -> None:
    """Apply every block in BLOCK_FILE and print receipts and the final snapshot."""

    settings = get_settings()
    configure_root_logger(settings.log_level)

    try:
        genesis, blocks = load_block_file(block_file)
    except FileNotFoundError:
        typer.echo(f"Block file not found: {block_file}", err=True)
        raise typer.Exit(code=1)
    except ValueError as error:
        # json.JSONDecodeError is a ValueError subclass
        typer.echo(f"Malformed block file {block_file}: {error}", err=True)
        raise typer.Exit(code=1)

    try:
        ledger = LedgerStateMachine(
            genesis or settings.genesis_balances,
            custody_address=custody_address or settings.custody_address,
            quorum_threshold=quorum or settings.quorum_threshold,
            distinct_voters=settings.distinct_voters,
            allow_team_reregistration=settings.allow_team_reregistration,
        )
    except LedgerError as error:
        typer.echo(f"Invalid genesis balances in {block_file}: {error.message}", err=True)
        raise typer.Exit(code=1)

    executor = BlockExecutor(ledger)
    results = [executor.apply_block(calls).as_dict() for calls in blocks]
    ledger.check_invariants()
    typer.echo(json.dumps({"blocks": results, "snapshot": ledger.export_snapshot()}, indent=2))


if __name__ == "__main__":
    cli()
