"""Command line interface for mintdata."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mintdata.anchor.pipeline import Anchorer, write_artifact
from mintdata.anchor.storage import SQLiteLedger
from mintdata.config import AppConfig
from mintdata.errors import MintdataError
from mintdata.ingestion.extractor import MetadataExtractor
from mintdata.models import Metadata
from mintdata.utils.files import iter_image_paths
from mintdata.web.app import app as web_app


console = Console()
app = typer.Typer(help="mintdata - fingerprint images and anchor their metadata")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _metadata_table(metadata: Metadata) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("File Name", metadata.file_name)
    table.add_row("Width", f"{metadata.width} px")
    table.add_row("Height", f"{metadata.height} px")
    table.add_row("Format", metadata.format)
    table.add_row("Checksum (SHA256)", metadata.checksum)
    table.add_row("File Size", f"{metadata.file_size} bytes")
    return table


@app.command()
def extract(
    path: Path = typer.Argument(..., help="Image file to fingerprint."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the JSON record here"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON record"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Extract and display the metadata record of an image."""
    _setup_logging(verbose)
    try:
        metadata = MetadataExtractor().extract(path)
    except MintdataError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    payload = metadata.to_json()
    if as_json:
        typer.echo(payload)
    else:
        console.print(_metadata_table(metadata))

    if output is not None:
        write_artifact(payload, output)
        console.print(f"JSON file [bold]{output}[/bold] created successfully")


@app.command()
def anchor(
    inputs: List[Path] = typer.Argument(..., help="Image files or folders to anchor.", resolve_path=True),
    db: Path = typer.Option(None, "--db", help="SQLite ledger path"),
    identity: str = typer.Option(AppConfig().identity, help="Submitter identity"),
    output: Path = typer.Option(AppConfig().output_path, "--output", "-o", help="JSON artifact path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Extract metadata for images and submit it to the ledger."""
    _setup_logging(verbose)
    config = AppConfig(
        db_path=db if db is not None else AppConfig().db_path,
        output_path=output,
        identity=identity,
    )

    paths = list(iter_image_paths(inputs))
    if not paths:
        console.print("[yellow]No images found.[/yellow]")
        return

    resolved_db = config.resolve_db_path(Path.cwd())
    _ensure_db_parent(resolved_db)

    ledger = SQLiteLedger(resolved_db)
    try:
        anchorer = Anchorer(
            MetadataExtractor(chunk_size=config.chunk_size),
            ledger,
            identity=config.identity,
            output_path=config.resolve_output_path(Path.cwd()),
        )
        console.print(f"Anchoring into [bold]{resolved_db}[/bold]...")
        stats = anchorer.anchor_many(paths)
    finally:
        ledger.close()

    for result in stats.results:
        console.print(f"{result.metadata.file_name}: record {result.receipt.record_id}")
    console.print(f"Anchored: {stats.anchored}, failed: {stats.failed}")


@app.command()
def records(
    db: Path = typer.Option(None, "--db", help="SQLite ledger path"),
    checksum: Optional[str] = typer.Option(None, "--checksum", help="Only records for this file checksum"),
) -> None:
    """List the records stored in the ledger."""
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    resolved_db = config.resolve_db_path(Path.cwd())

    if not resolved_db.exists():
        console.print("[yellow]Ledger not found, nothing to list.[/yellow]")
        return

    ledger = SQLiteLedger(resolved_db)
    try:
        rows = ledger.find_by_checksum(checksum) if checksum else ledger.list_records()
    finally:
        ledger.close()

    if not rows:
        console.print("[yellow]No records found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID")
    table.add_column("Identity")
    table.add_column("Created")
    table.add_column("Payload")
    for row in rows:
        table.add_row(str(row.record_id), row.identity, row.created_at, row.payload)
    console.print(table)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    db: Path = typer.Option(None, "--db", help="SQLite ledger path"),
) -> None:
    """Start the HTTP interface."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    resolved_db = config.resolve_db_path(Path.cwd())
    if not resolved_db.exists():
        console.print("[yellow]Warning: ledger not found, it will be created on first anchor.[/yellow]")

    web_app.state.db_path = resolved_db
    console.print(f"Starting web interface on http://{host}:{port} (ledger: {resolved_db})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    app()
