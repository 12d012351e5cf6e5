"""Command line interface for shellkit."""

from functools import wraps
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core.config import Config
from .core.logging import setup_logging
from .core.repository import GitClient
from .core.restore import RestoreManager
from .core.status import StatusRenderer
from .core.trash import TrashManager


def common_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add --config and --debug to a command and load the configuration.

    The wrapped command receives a ready ``config`` argument instead of the
    raw option values.
    """

    @click.option(
        "--config",
        "config_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="YAML configuration file (defaults to ~/.config/shellkit/config.yaml)",
    )
    @click.option("--debug", is_flag=True, help="Enable debug logging")
    @wraps(func)
    def wrapper(*args: Any, config_file: Optional[Path], debug: bool, **kwargs: Any) -> Any:
        config = Config(config_file)
        errors = config.validate()
        if errors:
            console = Console()
            for error in errors:
                console.print(f"[red]Configuration error: {escape(error)}")
            raise click.Abort()
        setup_logging(debug=debug, log_file=config.log_file)
        return func(*args, config=config, **kwargs)

    return wrapper


trash_dir_option = click.option(
    "--trash-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Trash directory to use instead of the configured one (default: ~/.trash)",
)


@click.command("move-to-trash")
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@trash_dir_option
@click.option("--force", "-f", is_flag=True, help="Move without asking for confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be moved without moving anything")
@common_options
def move_to_trash(
    paths: Tuple[Path, ...],
    trash_dir: Optional[Path],
    force: bool,
    dry_run: bool,
    config: Config,
) -> None:
    """Move files or directories into the trash instead of deleting them.

    Each PATH is renamed to NAME.YYYYMMDD_HHMMSS inside the trash directory.
    You are asked to confirm every path unless --force is given. Missing
    paths and failed moves are reported and skipped.

    Examples:

      # Trash a file and a directory
      move-to-trash report.txt build/

      # Use a different trash directory without prompting
      mtt --trash-dir /tmp/trash --force notes.md
    """
    console = Console()
    try:
        manager = TrashManager(trash_dir or config.trash_dir, console=console)
        manager.move_to_trash(list(paths), force=force, dry_run=dry_run)
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}")
        raise click.Abort()


@click.command("restore")
@click.argument("patterns", nargs=-1, required=True)
@trash_dir_option
@click.option(
    "--destination",
    "-d",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to restore into (defaults to the current directory)",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Refuse to restore when several entries would restore to the same name",
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be restored without moving anything"
)
@common_options
def restore(
    patterns: Tuple[str, ...],
    trash_dir: Optional[Path],
    destination: Optional[Path],
    strict: bool,
    dry_run: bool,
    config: Config,
) -> None:
    """Restore trashed items whose name contains PATTERN.

    Matching is a case-insensitive substring match on the trashed name. The
    timestamp suffix is removed and the item is moved back, replacing
    anything already at that path. When several entries restore to the same
    name the last one wins unless --strict is given.

    Examples:

      # Restore everything with "report" in its name
      restore report

      # Restore into another directory
      rst notes -d ~/documents
    """
    console = Console()
    try:
        manager = RestoreManager(trash_dir or config.trash_dir, console=console)
        manager.restore(list(patterns), destination=destination, strict=strict, dry_run=dry_run)
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}")
        raise click.Abort()


@click.command("show-repo-status")
@common_options
def show_repo_status(config: Config) -> None:
    """Show a summary of the Git repository in the current directory.

    Prints the branch and its upstream, tags, commits to pull and push, and
    staged, unstaged and untracked files. Only read-only git commands are
    run.
    """
    console = Console()
    try:
        renderer = StatusRenderer(GitClient(), console=console, graph_limit=config.graph_limit)
        renderer.render()
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}")
        raise click.Abort()


@click.command("list-trash")
@trash_dir_option
@common_options
def list_trash(trash_dir: Optional[Path], config: Config) -> None:
    """List items in the trash, newest first."""
    console = Console()
    manager = TrashManager(trash_dir or config.trash_dir, console=console)
    entries = manager.list_entries()

    if not entries:
        console.print("[yellow]Trash is empty.")
        return

    table = Table(title=f"Trash ({escape(str(manager.trash_dir))})")
    table.add_column("Name", style="cyan")
    table.add_column("Trashed At", style="yellow")
    table.add_column("Type", style="magenta")
    table.add_column("Restore Command", style="blue")

    for entry in entries:
        trashed_at = entry.trashed_at.strftime("%Y-%m-%d %H:%M:%S") if entry.trashed_at else "-"
        table.add_row(
            escape(entry.original_name),
            trashed_at,
            "directory" if entry.is_dir else "file",
            f"restore {escape(entry.name)}",
        )

    console.print(table)


COMMANDS = {
    "mtt": move_to_trash,
    "rst": restore,
    "srs": show_repo_status,
    "lst": list_trash,
}


@click.group()
def cli() -> None:
    """Shell convenience utilities.

    Main commands:

      move-to-trash (mtt)     Move files into the trash instead of deleting them
      restore (rst)           Restore trashed files by name
      show-repo-status (srs)  Pretty-print the state of the current Git repository
      list-trash (lst)        List trashed items

    Run 'shellkit COMMAND --help' for more information on a specific command.
    """


for alias, command in COMMANDS.items():
    cli.add_command(command)
    cli.add_command(command, name=alias)


def main() -> None:
    """Entry point for the shellkit CLI."""
    cli()


if __name__ == "__main__":
    main()
