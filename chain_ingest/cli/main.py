"""
ChainIngest - Command Line Interface
======================================
CLI per replay di blocchi e query sullo store.

Last Updated: 2026-10-19
Version: 1.0.0

Commands:
- replay: Ingest di una fixture JSON di blocchi
- tx: Mostra una transazione salvata (input risolti + output)
- info: Statistiche database
"""

import typer
from typing import Optional
from pathlib import Path
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape
from pydantic import ValidationError as SettingsValidationError

from chain_ingest.config import IngestSettings, override_settings
from chain_ingest.errors import ChainIngestException, ConfigError
from chain_ingest.host.replay import FixtureBlockSource
from chain_ingest.logging_setup import setup_logging
from chain_ingest.services.ingest_service import BlockIngestionPipeline
from chain_ingest.storage.base import TransactionStore
from chain_ingest.storage.db import SQLiteTransactionStore
from chain_ingest.storage.memory import MemoryTransactionStore
from chain_ingest.version import __version__


# ============================================================================
# CLI APP
# ============================================================================

app = typer.Typer(
    name="chainingest",
    help="ChainIngest - Block ingestion with resolved inputs",
    add_completion=False
)

console = Console()


# ============================================================================
# GLOBAL STATE
# ============================================================================

class CLIState:
    """Global CLI state"""
    verbose: bool = False


state = CLIState()


def load_settings(**overrides) -> IngestSettings:
    """
    Settings da environment + override CLI (None ignorati).

    Raises:
        ConfigError: Se la configurazione è invalida
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        return override_settings(**values)
    except SettingsValidationError as e:
        raise ConfigError(
            f"Invalid configuration: {e.error_count()} error(s)",
            code="INVALID_CONFIG",
            details={"errors": [err["msg"] for err in e.errors()]}
        )


def _configure(**overrides) -> IngestSettings:
    try:
        config = load_settings(**overrides)
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    setup_logging(
        log_level="DEBUG" if state.verbose else config.log_level,
        log_to_file=config.log_to_file,
        log_dir=config.log_dir,
        log_format=config.log_format,
        log_rotation_mb=config.log_rotation_mb,
        log_retention_days=config.log_retention_days,
    )
    return config


def _open_existing_store(config: IngestSettings) -> SQLiteTransactionStore:
    db_path = config.get_db_path()
    if not db_path.exists():
        console.print(f"[red]Database not found: {db_path}[/red]")
        raise typer.Exit(1)
    return SQLiteTransactionStore(db_path, timeout=config.db_timeout_seconds)


# ============================================================================
# REPLAY
# ============================================================================

@app.command("replay")
def replay(
    fixture: Path = typer.Argument(..., help="JSON fixture with evaluated blocks"),
    db: Optional[Path] = typer.Option(
        None,
        "--db",
        help="Database path (default: data_dir/chainingest.db)"
    ),
    in_memory: bool = typer.Option(
        False,
        "--in-memory",
        help="Dry run against an in-memory store"
    ),
    coinbase_address: Optional[str] = typer.Option(
        None,
        "--coinbase-address",
        help="Address written on coinbase inputs: sentinel or empty"
    ),
    progress: Optional[bool] = typer.Option(
        None,
        "--progress/--no-progress",
        help="Show progress bar"
    )
):
    """Ingest a block fixture into the store"""
    config = _configure(
        db_path=db,
        coinbase_address=coinbase_address,
        show_progress=progress,
    )

    store: TransactionStore
    if in_memory:
        store = MemoryTransactionStore()
    else:
        store = SQLiteTransactionStore(config.get_db_path(), timeout=config.db_timeout_seconds)

    try:
        source = FixtureBlockSource.from_file(fixture)
        pipeline = BlockIngestionPipeline(store, config)
        stats = source.run(pipeline, show_progress=config.show_progress)

    except ChainIngestException as e:
        console.print(f"[red]Replay failed: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    finally:
        store.close()

    table = Table(title="Ingest Summary", show_header=False)
    table.add_column("Counter", style="cyan")
    table.add_column("Value", style="green")

    for key, value in stats.to_dict().items():
        table.add_row(key, str(value))

    console.print(table)

    target = "memory" if in_memory else str(config.get_db_path())
    console.print(Panel.fit(
        f"[green]✅ Ingested {stats.blocks} blocks "
        f"({stats.transactions} transactions) into [cyan]{target}[/cyan][/green]",
        border_style="green"
    ))


# ============================================================================
# QUERY COMMANDS
# ============================================================================

@app.command("tx")
def show_transaction(
    txhash: str = typer.Argument(..., help="Transaction hash (display hex)"),
    db: Optional[Path] = typer.Option(None, "--db", help="Database path")
):
    """Show a stored transaction with its resolved inputs"""
    config = _configure(db_path=db)
    store = _open_existing_store(config)

    try:
        doc = store.load_transaction_document(txhash.lower())
    except ChainIngestException as e:
        console.print(f"[red]Query failed: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    finally:
        store.close()

    if doc is None:
        console.print(f"[yellow]Transaction not found: {txhash}[/yellow]")
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"Block: [cyan]{doc['blockHash']}[/cyan]\n"
        f"Version: {doc['version']}  LockTime: {doc['lockTime']}",
        title=f"Transaction {doc['txHash'][:16]}...",
        border_style="cyan"
    ))

    inputs = Table(title=f"Inputs ({doc['inputCount']})")
    inputs.add_column("#", style="dim")
    inputs.add_column("Prev Out", style="cyan")
    inputs.add_column("Value", justify="right", style="green")
    inputs.add_column("Address")
    for inp in doc["txInputs"]:
        inputs.add_row(
            str(inp["indexIn"]),
            f"{inp['hashPrevOut'][:16]}...:{inp['indexPrevOut']}",
            str(inp["value"]),
            inp["address"] or "[dim]-[/dim]",
        )
    console.print(inputs)

    outputs = Table(title=f"Outputs ({doc['outputCount']})")
    outputs.add_column("#", style="dim")
    outputs.add_column("Value", justify="right", style="green")
    outputs.add_column("Address")
    for out in doc["txOutputs"]:
        outputs.add_row(
            str(out["indexOut"]),
            str(out["value"]),
            out["address"] or "[dim]-[/dim]",
        )
    console.print(outputs)


@app.command("info")
def db_info(
    db: Optional[Path] = typer.Option(None, "--db", help="Database path")
):
    """Show database statistics"""
    config = _configure(db_path=db)
    store = _open_existing_store(config)

    try:
        blocks = store.get_block_count()
        transactions = store.get_transaction_count()
        height = store.get_latest_block_height()
        writer = store.get_metadata("writer_version")
    except ChainIngestException as e:
        console.print(f"[red]Query failed: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    finally:
        store.close()

    table = Table(title="Database Information", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Path", str(config.get_db_path()))
    table.add_row("Blocks", str(blocks))
    table.add_row("Transactions", str(transactions))
    table.add_row("Latest Height", "-" if height is None else str(height))
    table.add_row("Written By", f"chainingest {writer}" if writer else "-")

    console.print(table)


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def version_callback(value: bool):
    if value:
        console.print(f"chainingest {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Verbose output (DEBUG logging)"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True
    )
):
    """
    ChainIngest - Block ingestion CLI

    Ingest di blocchi con input annotati (value/address dell'output speso).
    """
    state.verbose = verbose


if __name__ == "__main__":
    app()


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "app",
    "load_settings",
]
