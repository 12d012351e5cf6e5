"""Read-only Git queries for shellkit."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Git error class."""

    def __init__(self, message: str, command: str, output: str) -> None:
        """Initialize error."""
        super().__init__(message)
        self.command = command
        self.output = output


class GitClient:
    """Query a Git working tree through the ``git`` executable.

    Every method issues inspection commands only; nothing here changes
    repository state.

    Attributes:
        path (Path): Working directory the commands run in.
        executable (str): Name or path of the git binary.
    """

    def __init__(self, path: Optional[Path] = None, executable: str = "git"):
        """Initialize client."""
        self.path = Path(path) if path is not None else Path.cwd()
        self.executable = executable

    def __repr__(self) -> str:
        """Return string representation."""
        return f"GitClient({self.path})"

    def is_available(self) -> bool:
        """Check whether the git executable can be found on PATH."""
        return shutil.which(self.executable) is not None

    def _run_git(self, *args: str) -> str:
        """Run a Git command and return its output."""
        command = " ".join([self.executable, *args])
        logger.debug("Running: %s", command)
        try:
            result = subprocess.run(
                [self.executable, *args],
                cwd=self.path,
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            output = (e.stderr or e.stdout or "").strip()
            raise GitError(
                f"Git command failed: {output or 'no output'}", command=command, output=output
            )
        except FileNotFoundError as e:
            raise GitError(f"Git executable not found: {e}", command=command, output="")
        return result.stdout

    def _optional(self, *args: str) -> Optional[str]:
        """Run a query whose failure just means "no answer"."""
        try:
            output = self._run_git(*args).strip()
        except GitError as e:
            logger.debug("%s: %s", e.command, e)
            return None
        return output or None

    def status(self) -> str:
        """Return ``git status --porcelain=v2 --branch`` output."""
        return self._run_git("status", "--porcelain=v2", "--branch")

    def exact_tag(self) -> Optional[str]:
        """Return the tag pointing exactly at HEAD, if any."""
        return self._optional("describe", "--tags", "--exact-match", "HEAD")

    def nearest_tag(self) -> Optional[str]:
        """Return the nearest tag reachable from HEAD, if any."""
        return self._optional("describe", "--tags", "--abbrev=0")

    def remote_tags(self, remote: str) -> List[str]:
        """List tag names published on ``remote``.

        Raises:
            GitError: If the remote cannot be queried.
        """
        output = self._run_git("ls-remote", "--tags", remote)
        tags = []
        for line in output.splitlines():
            _, _, ref = line.partition("\t")
            if not ref.startswith("refs/tags/"):
                continue
            name = ref[len("refs/tags/") :]
            if name.endswith("^{}"):
                name = name[:-3]
            if name not in tags:
                tags.append(name)
        return tags

    def local_tags_at_head(self) -> List[str]:
        """List local tags pointing at HEAD."""
        output = self._run_git("tag", "--points-at", "HEAD")
        return [tag for tag in output.splitlines() if tag]

    def incoming_commits(self, upstream: str, limit: int) -> List[Tuple[str, str]]:
        """List commits on ``upstream`` that HEAD lacks, as (hash, subject)."""
        output = self._run_git(
            "log", "--format=%h %s", "-n", str(limit), f"HEAD..{upstream}"
        )
        commits = []
        for line in output.splitlines():
            if not line:
                continue
            short_hash, _, subject = line.partition(" ")
            commits.append((short_hash, subject))
        return commits

    def outgoing_hashes(self, upstream: str) -> List[str]:
        """List full hashes of commits on HEAD that ``upstream`` lacks."""
        output = self._run_git("rev-list", f"{upstream}..HEAD")
        return [line for line in output.splitlines() if line]

    def graph(self, limit: int) -> List[str]:
        """Return a decorated one-line commit graph of the last ``limit`` commits."""
        output = self._run_git(
            "log", "--graph", "--decorate", "--color=never", "--format=%h%d %s", "-n", str(limit)
        )
        return [line for line in output.splitlines() if line.strip()]
