"""Repository status rendering for shellkit.

``git status --porcelain=v2 --branch`` output is parsed into typed line
records, folded into a :class:`StatusSnapshot`, and rendered to a rich
console together with tag and ahead/behind information.

Example:
    ```python
    from shellkit.core.repository import GitClient
    from shellkit.core.status import StatusRenderer

    StatusRenderer(GitClient()).render()
    ```
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple, Union

from rich.console import Console
from rich.markup import escape

from .repository import GitClient, GitError

logger = logging.getLogger(__name__)

DEFAULT_GRAPH_LIMIT = 7

UNCHANGED_CODES = (".", " ", "")

STAGED_STYLES: Dict[str, Tuple[str, str]] = {
    "M": ("modified", "yellow"),
    "A": ("added", "green"),
    "D": ("deleted", "red"),
    "R": ("renamed", "cyan"),
    "C": ("copied", "cyan"),
}

UNSTAGED_STYLES: Dict[str, Tuple[str, str]] = {
    "M": ("modified", "yellow"),
    "D": ("deleted", "red"),
}

# Number of space-separated fields before the path in each record type
TRACKED_FIELDS = {"1": 8, "2": 9, "u": 10}
FILE_MODE = re.compile(r"^[0-7]{6} ")

QUOTED_ESCAPE = re.compile(r"\\([0-7]{3}|.)")
C_ESCAPES = {"a": 7, "b": 8, "t": 9, "n": 10, "v": 11, "f": 12, "r": 13, '"': 34, "\\": 92}

GRAPH_HASH = re.compile(r"^[\s|/\\_*.-]*\*[\s|/\\_.-]*([0-9a-f]{4,40})\b")


@dataclass(frozen=True)
class BranchLine:
    """A ``# branch.<key> <value>`` header."""

    key: str
    value: str


@dataclass(frozen=True)
class TrackedLine:
    """A changed tracked path with its staged and unstaged codes."""

    staged_code: str
    unstaged_code: str
    path: str


@dataclass(frozen=True)
class UntrackedLine:
    """An untracked path."""

    path: str


@dataclass(frozen=True)
class UnrecognizedLine:
    """Anything the parser does not understand."""

    text: str


StatusLine = Union[BranchLine, TrackedLine, UntrackedLine, UnrecognizedLine]


@dataclass
class StatusSnapshot:
    """Parsed state of one status query."""

    branch: Optional[str] = None
    upstream: Optional[str] = None
    ahead: int = 0
    behind: int = 0
    exact_tag: Optional[str] = None
    nearest_tag: Optional[str] = None
    unpushed_tags: List[str] = field(default_factory=list)
    staged: List[Tuple[str, str]] = field(default_factory=list)
    unstaged: List[Tuple[str, str]] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        """Whether any file bucket has entries."""
        return bool(self.staged or self.unstaged or self.untracked)

    @property
    def remote(self) -> Optional[str]:
        """Remote name of the upstream branch, e.g. ``origin``."""
        if not self.upstream:
            return None
        return self.upstream.split("/", 1)[0]


def _is_changed(code: str) -> bool:
    return code not in UNCHANGED_CODES


def unquote_path(path: str) -> str:
    """Undo git's C-style quoting of paths with unusual characters.

    Octal escapes are raw bytes of the UTF-8 encoded name, so they are
    collected as bytes and decoded together.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    body = path[1:-1]
    raw = bytearray()
    pos = 0
    for match in QUOTED_ESCAPE.finditer(body):
        raw += body[pos : match.start()].encode("utf-8")
        escaped = match.group(1)
        if len(escaped) == 3:
            raw.append(int(escaped, 8))
        elif escaped in C_ESCAPES:
            raw.append(C_ESCAPES[escaped])
        else:
            raw += escaped.encode("utf-8")
        pos = match.end()
    raw += body[pos:].encode("utf-8")
    return raw.decode("utf-8", errors="replace")


def _tracked_path(kind: str, line: str) -> Optional[str]:
    """Extract the path from a ``1``/``2``/``u`` record.

    Full records have a fixed number of fields before the path and start
    with an octal file mode after the submodule field; anything else is
    read as the short form ``1 XY <sub> <path>``.
    """
    fields = line.split(" ", 3)
    if len(fields) != 4:
        return None
    if FILE_MODE.match(fields[3]):
        fields = line.split(" ", TRACKED_FIELDS[kind])
        if len(fields) != TRACKED_FIELDS[kind] + 1:
            return None
    path = fields[-1]
    if kind == "2":
        # Renames carry "<path>\t<original path>"
        path = path.split("\t", 1)[0]
    return unquote_path(path) or None


def parse_status_line(line: str) -> StatusLine:
    """Classify one line of porcelain v2 status output."""
    if line.startswith("# branch."):
        key, _, value = line[len("# branch.") :].partition(" ")
        return BranchLine(key=key, value=value)

    if line.startswith("? "):
        return UntrackedLine(path=unquote_path(line[2:]))

    kind = line[:1]
    if kind in TRACKED_FIELDS and line[1:2] == " ":
        xy = line[2:4]
        path = _tracked_path(kind, line)
        if len(xy) == 2 and line[4:5] == " " and path:
            return TrackedLine(staged_code=xy[0], unstaged_code=xy[1], path=path)

    return UnrecognizedLine(text=line)


def parse_status(output: str) -> List[StatusLine]:
    """Parse the full status report."""
    return [parse_status_line(line) for line in output.splitlines() if line]


def _parse_ahead_behind(value: str) -> Tuple[int, int]:
    ahead = behind = 0
    for part in value.split():
        try:
            if part.startswith("+"):
                ahead = int(part[1:])
            elif part.startswith("-"):
                behind = int(part[1:])
        except ValueError:
            logger.debug("Ignoring malformed ahead/behind value: %s", value)
    return ahead, behind


def build_snapshot(lines: List[StatusLine]) -> StatusSnapshot:
    """Fold parsed status lines into branch info and file buckets."""
    snapshot = StatusSnapshot()
    for line in lines:
        if isinstance(line, BranchLine):
            if line.key == "head":
                snapshot.branch = line.value
            elif line.key == "upstream":
                snapshot.upstream = line.value
            elif line.key == "ab":
                snapshot.ahead, snapshot.behind = _parse_ahead_behind(line.value)
        elif isinstance(line, TrackedLine):
            if _is_changed(line.staged_code):
                snapshot.staged.append((line.staged_code, line.path))
            if _is_changed(line.unstaged_code):
                snapshot.unstaged.append((line.unstaged_code, line.path))
        elif isinstance(line, UntrackedLine):
            snapshot.untracked.append(line.path)
        else:
            logger.debug("Unrecognized status line: %s", line.text)
    return snapshot


class StatusRenderer:
    """Render a categorized summary of the repository state."""

    def __init__(
        self,
        client: GitClient,
        console: Optional[Console] = None,
        graph_limit: int = DEFAULT_GRAPH_LIMIT,
    ) -> None:
        """Initialize status renderer."""
        self.client = client
        self.console = console or Console()
        self.graph_limit = graph_limit

    def snapshot(self, lines: Optional[List[StatusLine]] = None) -> StatusSnapshot:
        """Build a snapshot including tag information.

        Args:
            lines: Already parsed status lines. Queried from git when omitted.

        Raises:
            GitError: If the status query itself fails.
        """
        if lines is None:
            lines = parse_status(self.client.status())
        return self._add_tags(build_snapshot(lines))

    def _add_tags(self, snapshot: StatusSnapshot) -> StatusSnapshot:
        snapshot.exact_tag = self.client.exact_tag()
        if snapshot.exact_tag is None:
            snapshot.nearest_tag = self.client.nearest_tag()
        snapshot.unpushed_tags = self._unpushed_tags(snapshot)
        return snapshot

    def _unpushed_tags(self, snapshot: StatusSnapshot) -> List[str]:
        if snapshot.remote is None:
            return []
        try:
            local_tags = self.client.local_tags_at_head()
            if not local_tags:
                return []
            remote_tags = set(self.client.remote_tags(snapshot.remote))
        except GitError as e:
            logger.warning("Could not compare tags with %s: %s", snapshot.remote, e)
            return []
        return [tag for tag in local_tags if tag not in remote_tags]

    def render(self) -> Optional[StatusSnapshot]:
        """Print the repository status.

        Returns:
            The snapshot that was rendered, or None when git is unavailable
            or the status query failed.
        """
        if not self.client.is_available():
            logger.error("git executable not found on PATH")
            self.console.print("[red]Error: git is not installed or not on PATH")
            return None

        try:
            output = self.client.status()
        except GitError as e:
            logger.error("%s: %s", e.command, e.output)
            self.console.print(f"[red]Error: {escape(str(e))}")
            return None

        snapshot = build_snapshot(parse_status(output))
        if not snapshot.has_changes and snapshot.ahead == 0 and snapshot.behind == 0:
            self.console.print("[green]Working tree clean")
            return snapshot

        snapshot = self._add_tags(snapshot)
        self._render_header(snapshot)
        self._render_tags(snapshot)
        self._render_remote(snapshot)
        self._render_local(snapshot)

        if not snapshot.has_changes and snapshot.ahead == 0:
            self._render_graph(set())

        self._render_bucket("Staged", snapshot.staged, STAGED_STYLES)
        self._render_bucket("Unstaged", snapshot.unstaged, UNSTAGED_STYLES)
        self._render_untracked(snapshot.untracked)
        return snapshot

    def _render_header(self, snapshot: StatusSnapshot) -> None:
        branch = escape(snapshot.branch or "(unknown)")
        if snapshot.upstream:
            self.console.print(f"[bold]{branch}[/bold] → [cyan]{escape(snapshot.upstream)}")
        else:
            self.console.print(f"[bold]{branch}[/bold] [dim](no upstream)")

    def _render_tags(self, snapshot: StatusSnapshot) -> None:
        if snapshot.exact_tag:
            self.console.print(f"[magenta]tag: {escape(snapshot.exact_tag)}")
        elif snapshot.nearest_tag:
            self.console.print(f"[magenta]nearest tag: {escape(snapshot.nearest_tag)}")
        for tag in snapshot.unpushed_tags:
            self.console.print(f"[yellow]unpushed tag: {escape(tag)}")

    def _render_remote(self, snapshot: StatusSnapshot) -> None:
        if snapshot.behind > 0 and snapshot.upstream:
            upstream = escape(snapshot.upstream)
            self.console.print(f"[red]↓ {snapshot.behind} behind {upstream}")
            try:
                commits = self.client.incoming_commits(snapshot.upstream, snapshot.behind)
            except GitError as e:
                logger.warning("Could not list incoming commits: %s", e)
                return
            for short_hash, subject in commits:
                self.console.print(f"  [yellow]{escape(short_hash)}[/yellow] {escape(subject)}")
        else:
            self.console.print("[green]✓ up to date with remote")

    def _render_local(self, snapshot: StatusSnapshot) -> None:
        branch = escape(snapshot.branch or "(unknown)")
        if snapshot.ahead == 0:
            self.console.print(f"[bold]{branch}[/bold] [dim]↑ 0")
            return

        self.console.print(f"[yellow]↑ {snapshot.ahead} ahead on [bold]{branch}")
        outgoing: Set[str] = set()
        if snapshot.upstream:
            try:
                outgoing = set(self.client.outgoing_hashes(snapshot.upstream))
            except GitError as e:
                logger.warning("Could not list outgoing commits: %s", e)
        self._render_graph(outgoing)

    def _render_graph(self, outgoing: Set[str]) -> None:
        try:
            graph = self.client.graph(self.graph_limit)
        except GitError as e:
            logger.warning("Could not read commit graph: %s", e)
            return
        for line in graph:
            match = GRAPH_HASH.match(line)
            if match and any(h.startswith(match.group(1)) for h in outgoing):
                self.console.print(f"  [bold yellow]{escape(line)}[/bold yellow] [dim](unpushed)")
            else:
                self.console.print(f"  [dim]{escape(line)}")

    def _render_bucket(
        self,
        title: str,
        entries: List[Tuple[str, str]],
        styles: Dict[str, Tuple[str, str]],
    ) -> None:
        if not entries:
            return
        self.console.print(f"[bold]{title} ({len(entries)})")
        for code, path in entries:
            if code not in styles:
                logger.debug("No style for %s code %r: %s", title.lower(), code, path)
                continue
            label, color = styles[code]
            self.console.print(f"  [{color}]{code} {label:<9}[/{color}] {escape(path)}")

    def _render_untracked(self, paths: List[str]) -> None:
        if not paths:
            return
        self.console.print(f"[bold]Untracked ({len(paths)})")
        for path in paths:
            self.console.print(f"  [dim]{escape(path)}")
