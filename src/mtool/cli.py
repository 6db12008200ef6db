"""Command line interface for mtool."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from mtool.config import AppConfig
from mtool.errors import MtoolError
from mtool.ingestion.manifest import iter_manifest, scan_manifest
from mtool.restore.engine import DEFAULT_CONCURRENCY, RestoreEngine, RestoreStats
from mtool.snapshot.store import load_snapshot
from mtool.snapshot.writer import SnapshotWriter
from mtool.utils.files import STDIO_NAME, LocalFileSystem, open_input, open_output

# Exit statuses are truncated to one byte by the OS.
MAX_EXIT_CODE = 255

# stdout carries snapshot data in create mode.
console = Console(stderr=True)
app = typer.Typer(help="mtool - snapshot, verify and restore file modification times")

INPUT_HELP = "Input filename; content is in 'git ls-files --stage' format; - is for stdin"
ROOT_HELP = "Directory the manifest paths are relative to (default: current directory)"
VERBOSE_HELP = "Be verbose about mtime differences found during verify/restore"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _fail(exc: MtoolError) -> NoReturn:
    console.print(f"[red]ERROR:[/red] {escape(str(exc))}")
    raise typer.Exit(code=exc.exit_code)


def _check_snapshot(config: AppConfig, *, verify_only: bool) -> RestoreStats:
    with open_input(config.snapshot_name) as snapshot_source:
        store = load_snapshot(snapshot_source)

    fs = LocalFileSystem(config.resolve_root())
    engine = RestoreEngine(store, fs, concurrency=config.concurrency, verify_only=verify_only)
    with open_input(config.input_name) as source:
        stats = engine.run(iter_manifest(source, fs))

    if config.verbose:
        console.print(
            f"mtool: {stats.matched}/{stats.total_eligible} files verified successfully",
            highlight=False,
        )
    return stats


@app.command()
def create(
    input_name: str = typer.Option(STDIO_NAME, "--input", "-i", help=INPUT_HELP),
    snapshot_name: str = typer.Option(
        STDIO_NAME, "--snapshot", "-m", help="mtool snapshot filename; - is for stdout"
    ),
    root: Path = typer.Option(None, "--root", "-C", help=ROOT_HELP),
    append: bool = typer.Option(
        False, "--append", "-a", help="Append to an existing snapshot file instead of replacing it"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Create an mtool snapshot from the manifest."""
    _setup_logging(verbose)
    config = AppConfig(
        input_name=input_name,
        snapshot_name=snapshot_name,
        root=root,
        append=append,
        verbose=verbose,
    )
    try:
        config.validate("create")
        fs = LocalFileSystem(config.resolve_root())
        with open_input(config.input_name) as source, open_output(
            config.snapshot_name, append=config.append
        ) as sink:
            count = scan_manifest(source, SnapshotWriter(sink).write, fs)
    except MtoolError as exc:
        _fail(exc)

    if verbose:
        console.print(f"mtool: wrote {count} snapshot entries", highlight=False)


@app.command()
def verify(
    input_name: str = typer.Option(STDIO_NAME, "--input", "-i", help=INPUT_HELP),
    snapshot_name: str = typer.Option(
        STDIO_NAME, "--snapshot", "-m", help="mtool snapshot filename; - is for stdin"
    ),
    root: Path = typer.Option(None, "--root", "-C", help=ROOT_HELP),
    concurrency: int = typer.Option(
        DEFAULT_CONCURRENCY, "--concurrency", "-o", help="How many workers verify file mtimes"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help=VERBOSE_HELP),
) -> None:
    """Verify that file mtimes match the snapshot.

    Exits with the number of files whose mtime differs (0 when all match).
    """
    _setup_logging(verbose)
    config = AppConfig(
        input_name=input_name,
        snapshot_name=snapshot_name,
        root=root,
        concurrency=concurrency,
        verbose=verbose,
    )
    try:
        config.validate("verify")
        stats = _check_snapshot(config, verify_only=True)
    except MtoolError as exc:
        _fail(exc)

    if stats.non_matching:
        raise typer.Exit(code=min(stats.non_matching, MAX_EXIT_CODE))


@app.command()
def restore(
    input_name: str = typer.Option(STDIO_NAME, "--input", "-i", help=INPUT_HELP),
    snapshot_name: str = typer.Option(
        STDIO_NAME, "--snapshot", "-m", help="mtool snapshot filename; - is for stdin"
    ),
    root: Path = typer.Option(None, "--root", "-C", help=ROOT_HELP),
    concurrency: int = typer.Option(
        DEFAULT_CONCURRENCY, "--concurrency", "-o", help="How many workers restore file mtimes"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help=VERBOSE_HELP),
) -> None:
    """Restore file mtimes from the snapshot where the content is unchanged."""
    _setup_logging(verbose)
    config = AppConfig(
        input_name=input_name,
        snapshot_name=snapshot_name,
        root=root,
        concurrency=concurrency,
        verbose=verbose,
    )
    try:
        config.validate("restore")
        stats = _check_snapshot(config, verify_only=False)
    except MtoolError as exc:
        _fail(exc)

    if verbose:
        console.print(f"mtool: restored {stats.restored} file mtimes", highlight=False)
