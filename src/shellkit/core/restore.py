"""Restore functionality for shellkit."""

from __future__ import annotations

import logging
import shutil
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from .trash import TrashEntry, is_valid_leaf, remove_path

logger = logging.getLogger(__name__)


class RestoreManager:
    """Move trashed entries back out of the trash directory."""

    def __init__(self, trash_dir: Path, console: Optional[Console] = None) -> None:
        """Initialize restore manager.

        Args:
            trash_dir: Directory holding trashed items.
            console: Console for user-facing messages.
        """
        self.trash_dir = Path(trash_dir).expanduser()
        self.console = console or Console()
        logger.debug("RestoreManager initialized with trash directory: %s", self.trash_dir)

    def find_matches(self, pattern: str) -> List[TrashEntry]:
        """Find trash entries whose name contains ``pattern``, ignoring case."""
        needle = pattern.lower()
        return [
            TrashEntry.from_path(p)
            for p in sorted(self.trash_dir.iterdir())
            if needle in p.name.lower()
        ]

    def restore(
        self,
        patterns: Sequence[str],
        destination: Optional[Path] = None,
        strict: bool = False,
        dry_run: bool = False,
    ) -> List[Path]:
        """Restore trash entries matching any of the patterns.

        Args:
            patterns: Case-insensitive substrings matched against entry names.
            destination: Directory to restore into (defaults to the current
                working directory).
            strict: Refuse to restore a pattern's matches when two of them
                would land on the same path.
            dry_run: Report what would be restored without touching anything.

        Returns:
            Paths that were restored.
        """
        destination = Path(destination) if destination is not None else Path.cwd()

        if not self.trash_dir.is_dir():
            logger.warning("Trash directory does not exist: %s", self.trash_dir)
            self.console.print(
                f"[yellow]Warning: trash directory '{escape(str(self.trash_dir))}' does not exist"
            )
            return []

        if not any(self.trash_dir.iterdir()):
            self.console.print(f"[yellow]Trash directory '{escape(str(self.trash_dir))}' is empty")
            return []

        restored: List[Path] = []
        for pattern in patterns:
            matches = self.find_matches(pattern)
            logger.debug("Pattern %r matched %d entries", pattern, len(matches))

            if not matches:
                self.console.print(f"[yellow]Warning: no trash entries match '{escape(pattern)}'")
                continue

            if strict:
                clashes = self._find_clashes(matches)
                if clashes:
                    for name, entries in clashes.items():
                        listed = ", ".join(e.name for e in entries)
                        logger.error("Ambiguous restore of %s: %s", name, listed)
                        self.console.print(
                            f"[red]Error: '{escape(pattern)}' matches several entries "
                            f"for '{escape(name)}': {escape(listed)}"
                        )
                    continue

            for entry in matches:
                if not is_valid_leaf(entry.original_name):
                    logger.error("Refusing to restore %s: no usable name", entry.path)
                    self.console.print(
                        f"[red]Error: cannot restore '{escape(entry.name)}': "
                        f"'{escape(entry.original_name)}' is not a usable name"
                    )
                    continue
                target = destination / entry.original_name
                if dry_run:
                    self.console.print(
                        f"Would restore '{escape(entry.name)}' -> '{escape(str(target))}'"
                    )
                    continue
                if self._restore_entry(entry, target):
                    restored.append(target)

        return restored

    def _find_clashes(self, matches: List[TrashEntry]) -> Dict[str, List[TrashEntry]]:
        """Group matches that would restore to the same name."""
        by_name: Dict[str, List[TrashEntry]] = defaultdict(list)
        for entry in matches:
            by_name[entry.original_name].append(entry)
        return {name: entries for name, entries in by_name.items() if len(entries) > 1}

    def _restore_entry(self, entry: TrashEntry, target: Path) -> bool:
        """Move one entry to ``target``, replacing whatever is there."""
        try:
            if target.exists() or target.is_symlink():
                logger.debug("Replacing existing item: %s", target)
                remove_path(target)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(entry.path), str(target))
        except (OSError, shutil.Error) as e:
            logger.error("Error restoring %s: %s", entry.path, e)
            self.console.print(f"[red]Error restoring '{escape(entry.name)}': {escape(str(e))}")
            return False

        logger.info("Restored %s -> %s", entry.path, target)
        self.console.print(f"[green]Restored '{escape(entry.name)}' -> '{escape(str(target))}'")
        return True
