"""Trash functionality for shellkit.

Items are never deleted. They are moved into a trash directory under the
name ``<leaf>.<YYYYMMDD_HHMMSS>``, which is the only contract the restore
side relies on.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
TIMESTAMP_SUFFIX = re.compile(r"\.(\d{8}_\d{6})$")


def trash_name(leaf: str, when: datetime) -> str:
    """Return the trash entry name for ``leaf`` trashed at ``when``."""
    return f"{leaf}.{when.strftime(TIMESTAMP_FORMAT)}"


def strip_timestamp(name: str) -> str:
    """Remove a trailing ``.YYYYMMDD_HHMMSS`` suffix if there is one."""
    return TIMESTAMP_SUFFIX.sub("", name)


def is_valid_leaf(name: str) -> bool:
    """Whether ``name`` names a single entry inside a directory."""
    if name in ("", ".", ".."):
        return False
    return os.sep not in name and not (os.altsep and os.altsep in name)


def _contains(outer: Path, inner: Path) -> bool:
    outer = outer.resolve()
    inner = inner.resolve()
    return outer == inner or outer in inner.parents


def remove_path(path: Path) -> None:
    """Remove a file, symlink or directory tree."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


@dataclass
class TrashEntry:
    """An item sitting in the trash directory."""

    path: Path
    name: str
    original_name: str
    trashed_at: Optional[datetime]
    is_dir: bool

    @classmethod
    def from_path(cls, path: Path) -> TrashEntry:
        """Build an entry from a path inside the trash directory."""
        trashed_at = None
        match = TIMESTAMP_SUFFIX.search(path.name)
        if match:
            try:
                trashed_at = datetime.strptime(match.group(1), TIMESTAMP_FORMAT)
            except ValueError:
                # Eight and six digits that do not form a real date
                trashed_at = None
        return cls(
            path=path,
            name=path.name,
            original_name=strip_timestamp(path.name),
            trashed_at=trashed_at,
            is_dir=path.is_dir(),
        )


class TrashManager:
    """Move files and directories into the trash directory."""

    def __init__(
        self,
        trash_dir: Path,
        confirm: Optional[Callable[[Path], bool]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        console: Optional[Console] = None,
    ) -> None:
        """Initialize trash manager.

        Args:
            trash_dir: Directory that receives trashed items.
            confirm: Called once per existing path; returning False skips it.
                Defaults to an interactive prompt on the console.
            clock: Source of the timestamp suffix. Defaults to local time.
            console: Console for user-facing messages.
        """
        self.trash_dir = Path(trash_dir).expanduser()
        self.console = console or Console()
        self.confirm = confirm or self._prompt
        self.clock = clock or datetime.now
        logger.debug("TrashManager initialized with trash directory: %s", self.trash_dir)

    def _prompt(self, path: Path) -> bool:
        """Ask on the terminal whether ``path`` should be trashed."""
        answer = self.console.input(f"Move '{escape(str(path))}' to trash? \\[y/N] ")
        return answer.strip().lower() in ("y", "yes")

    def move_to_trash(
        self,
        paths: Sequence[Path],
        force: bool = False,
        dry_run: bool = False,
    ) -> List[Path]:
        """Move each path into the trash directory.

        Missing paths, declined prompts and failed moves are reported and
        skipped; they never stop the rest of the batch.

        Args:
            paths: Files or directories to trash.
            force: Skip the confirmation prompt.
            dry_run: Report what would be moved without touching anything.

        Returns:
            Destination paths inside the trash directory that were written.
        """
        if not dry_run:
            self.trash_dir.mkdir(parents=True, exist_ok=True)

        moved: List[Path] = []
        for raw_path in paths:
            path = Path(raw_path)
            shown = escape(str(path))
            if not path.exists() and not path.is_symlink():
                logger.warning("Path does not exist: %s", path)
                self.console.print(f"[yellow]Warning: '{shown}' does not exist, skipping")
                continue

            # "." and ".." only get a usable name once the path is normalized
            source = Path(os.path.abspath(path))
            problem = self._refusal(source)
            if problem:
                logger.error("Refusing to trash %s: %s", path, problem)
                self.console.print(f"[red]Error: cannot trash '{shown}': {escape(problem)}")
                continue

            if not force and not self.confirm(path):
                logger.info("Skipped by user: %s", path)
                self.console.print(f"Skipped '{shown}'")
                continue

            destination = self.trash_dir / trash_name(source.name, self.clock())
            shown_destination = escape(str(destination))

            if dry_run:
                self.console.print(f"Would move '{shown}' -> '{shown_destination}'")
                continue

            try:
                if destination.exists() or destination.is_symlink():
                    logger.debug("Replacing existing trash entry: %s", destination)
                    remove_path(destination)
                shutil.move(str(source), str(destination))
            except (OSError, shutil.Error) as e:
                logger.error("Error moving %s to trash: %s", path, e)
                self.console.print(f"[red]Error moving '{shown}' to trash: {escape(str(e))}")
                continue

            logger.info("Moved %s -> %s", path, destination)
            self.console.print(f"[green]Moved '{shown}' -> '{shown_destination}'")
            moved.append(destination)

        return moved

    def _refusal(self, path: Path) -> Optional[str]:
        """Return why ``path`` must not be trashed, or None if it may be."""
        if not is_valid_leaf(path.name):
            return "it has no name to store it under"
        if path.is_symlink() or not path.is_dir():
            return None
        if _contains(path, self.trash_dir):
            return "it contains the trash directory"
        if _contains(path, Path.cwd()):
            return "it contains the current directory"
        return None

    def list_entries(self) -> List[TrashEntry]:
        """List trash entries, newest first.

        Entries without a timestamp suffix sort after the dated ones.
        """
        if not self.trash_dir.is_dir():
            return []

        entries = [TrashEntry.from_path(p) for p in self.trash_dir.iterdir()]
        dated = [e for e in entries if e.trashed_at is not None]
        undated = [e for e in entries if e.trashed_at is None]
        dated.sort(key=lambda e: (e.trashed_at, e.name), reverse=True)
        undated.sort(key=lambda e: e.name)
        return dated + undated
