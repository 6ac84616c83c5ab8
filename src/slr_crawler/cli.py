"""Command-line interface for the SLR crawler."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import Config
from .exceptions import PatchApplyError, SlrCrawlerError
from .git.diff import parse_patch
from .git.handler import GitHandler
from .git.models import Patch
from .logging import configure_logging
from .study.crawler import CreateNew, initialize_repository
from .study.models import Study, StudyDatabase


app = typer.Typer(
    name="slr-crawler",
    help="Git-backed result store for systematic literature review crawls",
    add_completion=False
)
console = Console()
err_console = Console(stderr=True)


class State:
    """Configuration shared by all commands of one invocation."""
    config: Optional[Config] = None


state = State()


@app.callback()
def main() -> None:
    """Load configuration and set up logging."""
    try:
        state.config = Config.load()
    except SlrCrawlerError as e:
        err_console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(1)
    configure_logging(state.config.app)


def open_handler(root: Path) -> GitHandler:
    """Open the study repository at ``root`` or exit with an error."""
    try:
        return GitHandler.open(root, state.config.git)
    except SlrCrawlerError as e:
        err_console.print(f"[red]Cannot open repository {root}: {e}[/red]")
        raise typer.Exit(1)


def fail(action: str, error: Exception) -> None:
    err_console.print(f"[red]{action} failed: {error}[/red]")
    raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[green]SLR crawler v{__version__}[/green]")


@app.command()
def init(
    root: Path = typer.Argument(..., help="Study repository root"),
    title: str = typer.Option(..., "--title", "-t", help="Study title"),
    authors: List[str] = typer.Option([], "--author", "-a", help="Study author (repeatable)"),
    queries: List[str] = typer.Option([], "--query", "-q", help="Search query (repeatable)"),
    databases: List[str] = typer.Option([], "--database", "-d", help="Library database (repeatable)"),
) -> None:
    """Create a new study repository with its study definition."""
    try:
        study = Study(
            title=title,
            authors=authors,
            queries=queries,
            databases=[StudyDatabase(name=name) for name in databases],
        )
    except ValueError as e:
        fail("Study creation", e)
    try:
        handler = initialize_repository(root, CreateNew(study), state.config.git)
    except SlrCrawlerError as e:
        fail("Study creation", e)
    console.print(f"[green]Study created at {handler.root}[/green]")
    console.print(f"[blue]Branch:[/blue] {handler.current_branch()}")


@app.command()
def status(root: Path = typer.Argument(..., help="Study repository root")) -> None:
    """Show the current branch and working tree status."""
    handler = open_handler(root)
    try:
        branch = handler.current_branch()
        tree = handler.status()
    except SlrCrawlerError as e:
        fail("Status", e)
    
    console.print(f"[blue]Branch:[/blue] {branch}")
    if tree.is_clean:
        console.print("[green]Working tree clean[/green]")
        return
    
    table = Table(title="Working Tree")
    table.add_column("State", style="cyan")
    table.add_column("Path", style="green")
    for label, paths in (
        ("modified", tree.modified),
        ("untracked", tree.untracked),
        ("missing", tree.missing),
        ("staged", tree.staged),
    ):
        for path in paths:
            table.add_row(label, path)
    console.print(table)


@app.command()
def checkout(
    root: Path = typer.Argument(..., help="Study repository root"),
    branch: str = typer.Argument(..., help="Branch to check out (created if missing)"),
) -> None:
    """Check out a branch, creating it from HEAD if it does not exist."""
    handler = open_handler(root)
    try:
        handler.checkout_branch(branch)
    except SlrCrawlerError as e:
        fail("Checkout", e)
    console.print(f"[green]On branch {branch}[/green]")


@app.command()
def commit(
    root: Path = typer.Argument(..., help="Study repository root"),
    message: str = typer.Option(..., "--message", "-m", help="Commit message"),
) -> None:
    """Commit all changes on the current branch."""
    handler = open_handler(root)
    try:
        committed = handler.commit_all(message)
    except SlrCrawlerError as e:
        fail("Commit", e)
    if committed:
        console.print("[green]Changes committed[/green]")
    else:
        console.print("[yellow]Nothing to commit[/yellow]")


@app.command()
def diff(
    root: Path = typer.Argument(..., help="Study repository root"),
    branch: str = typer.Argument(..., help="Branch whose latest commit is diffed"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the patch to a file"),
) -> None:
    """Print the patch introduced by the latest commit of a branch."""
    handler = open_handler(root)
    try:
        patch = handler.diff_head_against_parent(branch)
    except SlrCrawlerError as e:
        fail("Diff", e)
    
    if output is not None:
        output.write_bytes(patch.to_bytes())
        err_console.print(f"[green]Wrote {len(patch.files)} file change(s) to {output}[/green]")
    else:
        typer.echo(patch.to_bytes(), nl=False)


@app.command()
def apply(
    root: Path = typer.Argument(..., help="Study repository root"),
    patch_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Patch to apply"),
    message: str = typer.Option(..., "--message", "-m", help="Commit message"),
) -> None:
    """Apply a patch on the current branch and commit it."""
    handler = open_handler(root)
    try:
        patch = parse_patch(Patch.decode(patch_file.read_bytes()), branch=patch_file.stem)
    except ValueError as e:
        fail("Patch", e)
    try:
        applied = handler.apply_patch(patch, message)
    except PatchApplyError as e:
        fail("Patch", e)
    except SlrCrawlerError as e:
        fail("Commit", e)
    if applied:
        console.print(f"[green]Applied {len(patch.files)} file change(s)[/green]")
    else:
        console.print("[yellow]Patch is empty[/yellow]")


@app.command()
def merge(
    root: Path = typer.Argument(..., help="Study repository root"),
    target: str = typer.Argument(..., help="Branch to merge into"),
    source: str = typer.Argument(..., help="Branch to merge from"),
) -> None:
    """Merge one branch into another, keeping the current branch checked out."""
    handler = open_handler(root)
    try:
        merged = handler.merge(target, source)
    except SlrCrawlerError as e:
        fail("Merge", e)
    if merged:
        console.print(f"[green]Merged {source} into {target}[/green]")
    else:
        console.print(f"[yellow]Branch {source} does not exist, nothing merged[/yellow]")


@app.command()
def sync(
    root: Path = typer.Argument(..., help="Study repository root"),
    operation: str = typer.Argument(..., help="push, pull or fetch"),
    remote: Optional[str] = typer.Option(None, "--remote", "-r", help="Remote to fetch from"),
) -> None:
    """Synchronize with the remote. Network failures are reported, not fatal."""
    handler = open_handler(root)
    operations = {
        "push": handler.push,
        "pull": handler.pull,
        "fetch": lambda: handler.fetch(remote),
    }
    if operation not in operations:
        err_console.print(f"[red]Unknown operation: {operation}[/red]")
        raise typer.Exit(1)
    
    try:
        done = operations[operation]()
    except SlrCrawlerError as e:
        fail(operation.capitalize(), e)
    if done:
        console.print(f"[green]{operation.capitalize()} completed[/green]")
    else:
        console.print(f"[yellow]{operation.capitalize()} skipped or failed, see log[/yellow]")


@app.command()
def log(
    root: Path = typer.Argument(..., help="Study repository root"),
    max_count: int = typer.Option(20, "--max-count", "-n", help="Number of commits to show"),
) -> None:
    """Show the commit history of the current branch."""
    handler = open_handler(root)
    try:
        commits = handler.log(max_count=max_count)
    except SlrCrawlerError as e:
        fail("Log", e)
    
    table = Table(title=f"History of {handler.current_branch()}")
    table.add_column("Commit", style="cyan")
    table.add_column("Date", style="blue")
    table.add_column("Message", style="green")
    for info in commits:
        table.add_row(info.sha[:8], info.committed_date.strftime("%Y-%m-%d %H:%M"), info.message)
    console.print(table)


if __name__ == "__main__":
    app()
