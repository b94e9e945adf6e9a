"""Command line interface for worksplit."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from worksplit.codec import decode, encode
from worksplit.config import PlannerConfig
from worksplit.errors import WorkSplitError
from worksplit.models import SplitRecord
from worksplit.planning.planner import SplitPlanner
from worksplit.reader import SequentialReader
from worksplit.storage.local import LocalFileStorage
from worksplit.web.app import app as web_app


LOGGER = logging.getLogger(__name__)
console = Console()
app = typer.Typer(help="worksplit - locality-aware work descriptor splits")

SPLIT_FILE_PATTERN = "split-{index:05d}.bin"
SPLIT_FILE_GLOB = "split-*.bin"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _fail(exc: Exception) -> None:
    console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
    raise typer.Exit(code=1)


def _write_splits(splits: List[SplitRecord], output: Path) -> None:
    output.mkdir(parents=True, exist_ok=True)
    stale = sorted(output.glob(SPLIT_FILE_GLOB))
    for path in stale:
        path.unlink()
    if stale:
        LOGGER.info("Removed %d splits left from a previous plan in %s", len(stale), output)
    for index, split in enumerate(splits):
        (output / SPLIT_FILE_PATTERN.format(index=index)).write_bytes(encode(split))


@app.command()
def plan(
    inputs: List[Path] = typer.Argument(..., help="Descriptor files or directories holding them."),
    max_workers: Optional[int] = typer.Option(
        None, "--max-workers", "-m", help="Upper bound on the number of splits"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Directory for encoded splits"),
    block_size: Optional[int] = typer.Option(None, help="Simulated storage block size in bytes"),
    host_map: Optional[Path] = typer.Option(None, "--host-map", help="JSON file mapping files to block hosts"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Plan splits for the given descriptor files."""
    _setup_logging(verbose)
    try:
        config = PlannerConfig.from_env()
        if max_workers is not None:
            config.max_workers = max_workers
        if block_size is not None:
            config.block_size = block_size
        if host_map is not None:
            config.host_map = host_map

        planner = SplitPlanner(LocalFileStorage.from_config(config), config)
        splits = planner.plan_inputs([str(item) for item in inputs])
    except (WorkSplitError, ValueError, OSError) as exc:
        _fail(exc)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Split")
    table.add_column("References")
    table.add_column("Preferred hosts")
    for index, split in enumerate(splits):
        table.add_row(str(index), str(len(split)), ", ".join(split.preferred_hosts) or "-")
    console.print(table)

    if output is not None:
        try:
            _write_splits(splits, output)
        except OSError as exc:
            _fail(exc)
        console.print(
            f"Wrote {len(splits)} splits to [bold]{escape(str(output))}[/bold]", soft_wrap=True
        )


@app.command()
def read(
    split_file: Path = typer.Argument(..., help="Encoded split file", exists=True, dir_okay=False),
) -> None:
    """List the references held by an encoded split."""
    try:
        split = decode(split_file.read_bytes())
    except WorkSplitError as exc:
        _fail(exc)

    hosts = ", ".join(split.preferred_hosts) or "-"
    console.print(f"Preferred hosts: {hosts}", markup=False, soft_wrap=True)
    with SequentialReader(split) as reader:
        for index, path in reader:
            console.print(f"{index}: {path}", markup=False, soft_wrap=True)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Start the split distribution service."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    console.print(f"Serving splits on http://{host}:{port}")
    uvicorn.run(web_app, host=host, port=port, reload=False, log_level="info")
