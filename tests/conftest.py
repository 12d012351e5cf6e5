"""Test configuration."""

from __future__ import annotations

import io
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest
from rich.console import Console

from shellkit.core.repository import GitClient, GitError
from shellkit.core.restore import RestoreManager
from shellkit.core.trash import TrashManager

FIXED_TIME = datetime(2026, 10, 16, 9, 30, 15)


class FakeGitClient(GitClient):
    """In-memory stand-in for the subprocess-backed client."""

    def __init__(
        self,
        status: str = "",
        exact_tag: Optional[str] = None,
        nearest_tag: Optional[str] = None,
        remote_tags: Optional[List[str]] = None,
        local_tags: Optional[List[str]] = None,
        incoming: Optional[List[Tuple[str, str]]] = None,
        outgoing: Optional[List[str]] = None,
        graph: Optional[List[str]] = None,
        available: bool = True,
        remote_error: bool = False,
    ) -> None:
        super().__init__(Path("."))
        self._status = status
        self._exact_tag = exact_tag
        self._nearest_tag = nearest_tag
        self._remote_tags = remote_tags or []
        self._local_tags = local_tags or []
        self._incoming = incoming or []
        self._outgoing = outgoing or []
        self._graph = graph or []
        self._available = available
        self._remote_error = remote_error
        self.calls: List[str] = []

    def is_available(self) -> bool:
        return self._available

    def status(self) -> str:
        self.calls.append("status")
        return self._status

    def exact_tag(self) -> Optional[str]:
        self.calls.append("exact_tag")
        return self._exact_tag

    def nearest_tag(self) -> Optional[str]:
        self.calls.append("nearest_tag")
        return self._nearest_tag

    def remote_tags(self, remote: str) -> List[str]:
        self.calls.append(f"remote_tags {remote}")
        if self._remote_error:
            raise GitError("Git command failed: could not read from remote", "git ls-remote", "")
        return list(self._remote_tags)

    def local_tags_at_head(self) -> List[str]:
        self.calls.append("local_tags_at_head")
        return list(self._local_tags)

    def incoming_commits(self, upstream: str, limit: int) -> List[Tuple[str, str]]:
        self.calls.append(f"incoming_commits {upstream} {limit}")
        return self._incoming[:limit]

    def outgoing_hashes(self, upstream: str) -> List[str]:
        self.calls.append(f"outgoing_hashes {upstream}")
        return list(self._outgoing)

    def graph(self, limit: int) -> List[str]:
        self.calls.append(f"graph {limit}")
        return self._graph[:limit]


@pytest.fixture
def console() -> Console:
    """Console that records plain text output."""
    return Console(file=io.StringIO(), width=400, color_system=None)


@pytest.fixture
def output(console: Console) -> Callable[[], str]:
    """Return a function reading everything printed to the console so far."""

    def read() -> str:
        return console.file.getvalue()

    return read


@pytest.fixture
def trash_dir(tmp_path: Path) -> Path:
    """Trash directory location (not created)."""
    return tmp_path / "trash"


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Directory holding files to trash and receiving restores."""
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    return work_dir


@pytest.fixture
def trash_manager(trash_dir: Path, console: Console) -> TrashManager:
    """Trash manager that always confirms and uses a fixed clock."""
    return TrashManager(
        trash_dir, confirm=lambda path: True, clock=lambda: FIXED_TIME, console=console
    )


@pytest.fixture
def restore_manager(trash_dir: Path, console: Console) -> RestoreManager:
    """Create a restore manager for testing."""
    return RestoreManager(trash_dir, console=console)


@pytest.fixture
def make_client() -> Callable[..., FakeGitClient]:
    """Factory for fake git clients."""
    return FakeGitClient
