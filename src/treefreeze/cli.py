"""CLI for treefreeze."""

from pathlib import Path
from typing import List
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .context import ProjectContext
from .core import ChangeType, DiffResult, FreezeResult, ScanError
from .errors import SnapshotError, TreeFreezeError
from .ops import (
    LATEST,
    PREVIOUS,
    compare_snapshots,
    freeze as ops_freeze,
    snapshot_history,
)
from .snapshot_store import load_snapshot
from .utils import humanize_date, printable_path


app = typer.Typer(help="""\
Snapshot a directory tree and report what changed since the last snapshot.
Every file is fingerprinted by content; snapshots are kept under
<root>/.treefreeze/versions.""")

console = Console(soft_wrap=True)
err_console = Console(stderr=True)


TYPE_LABELS = {
    ChangeType.ADDED: ("Added", "[green]+[/green]"),
    ChangeType.DELETED: ("Deleted", "[red]-[/red]"),
    ChangeType.MODIFIED: ("Modified", "[yellow]M[/yellow]"),
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(e: Exception) -> None:
    """Print an engine error and exit non-zero."""
    console.print(f"[red]✗[/red] {escape(printable_path(str(e)))}")
    raise typer.Exit(1)


def display_diff(diff: DiffResult) -> None:
    """Print changes grouped by type, then a summary line."""
    if not diff.has_changes:
        console.print("[green]✓[/green] No changes")
        return

    groups = (
        (ChangeType.ADDED, diff.added),
        (ChangeType.DELETED, diff.deleted),
        (ChangeType.MODIFIED, diff.modified),
    )
    for change_type, paths in groups:
        if not paths:
            continue
        label, icon = TYPE_LABELS[change_type]
        console.print(f"[bold]{label}:[/bold]")
        for path in paths:
            console.print(f"  {icon} {escape(printable_path(path))}")
        console.print()

    console.print(diff.summary_text())


def display_scan_errors(errors: List[ScanError]) -> None:
    if not errors:
        return
    console.print(f"[yellow]⚠ Skipped {len(errors)} unreadable entries:[/yellow]")
    for error in errors:
        path = escape(printable_path(error.path))
        message = escape(printable_path(error.message))
        console.print(f"  [yellow]•[/yellow] {path}: {message}")


def display_freeze_result(result: FreezeResult) -> None:
    if result.first_run:
        console.print("[dim]No previous snapshot, comparing against an empty tree[/dim]")
    else:
        console.print(f"[bold]Comparing with snapshot {result.previous.name}[/bold]\n")

    display_diff(result.diff)
    display_scan_errors(result.scan_errors)

    if result.snapshot is not None:
        console.print(
            f"[green]✓[/green] Saved snapshot {result.snapshot.name} "
            f"({result.file_count} files)"
        )


@app.command()
def freeze(
    root: Path = typer.Argument(..., help="Directory to snapshot"),
    missing_ok: bool = typer.Option(
        False, "--missing-ok", help="Treat a missing root as an empty tree"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Report changes without saving a snapshot"
    ),
):
    """Report changes since the latest snapshot and save a new one.

    Examples:
        treefreeze freeze ./project
        treefreeze freeze ./project --dry-run
    """
    ctx = ProjectContext(root, missing_ok=missing_ok)
    try:
        result = ops_freeze(ctx, dry_run=dry_run)
    except TreeFreezeError as e:
        _fail(e)
    display_freeze_result(result)


@app.command()
def status(
    root: Path = typer.Argument(..., help="Directory to check"),
    missing_ok: bool = typer.Option(
        False, "--missing-ok", help="Treat a missing root as an empty tree"
    ),
):
    """Report changes since the latest snapshot without saving one."""
    ctx = ProjectContext(root, missing_ok=missing_ok)
    try:
        result = ops_freeze(ctx, dry_run=True)
    except TreeFreezeError as e:
        _fail(e)
    display_freeze_result(result)


@app.command()
def log(
    root: Path = typer.Argument(..., help="Directory whose snapshots to list"),
):
    """List snapshots, oldest first."""
    ctx = ProjectContext(root)
    refs = snapshot_history(ctx)
    if not refs:
        console.print("[yellow]No snapshots yet[/yellow]")
        return

    table = Table(title=f"Snapshots of {escape(printable_path(str(ctx.root)))}")
    table.add_column("Snapshot", style="cyan")
    table.add_column("Created")
    table.add_column("Files", justify="right")

    for ref in refs:
        try:
            files = str(len(load_snapshot(ref)))
        except SnapshotError:
            files = "[red]corrupted[/red]"
        table.add_row(ref.name, humanize_date(ref.timestamp), files)

    console.print(table)


@app.command()
def diff(
    root: Path = typer.Argument(..., help="Directory whose snapshots to compare"),
    before: str = typer.Argument(PREVIOUS, help="Baseline snapshot name, 'previous' or 'latest'"),
    after: str = typer.Argument(LATEST, help="Snapshot name, 'previous' or 'latest'"),
):
    """Show differences between two stored snapshots.

    Examples:
        treefreeze diff ./project                  # previous vs latest
        treefreeze diff ./project 20261019T120000.000000Z latest
    """
    ctx = ProjectContext(root)
    try:
        result = compare_snapshots(ctx, before, after)
    except TreeFreezeError as e:
        _fail(e)
    console.print(f"[bold]Comparing {escape(before)} → {escape(after)}[/bold]\n")
    display_diff(result)
