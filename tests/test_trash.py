"""Test trash functionality."""

import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, List

from rich.console import Console

from shellkit.core.trash import TrashEntry, TrashManager, strip_timestamp, trash_name


def test_trash_name() -> None:
    """Test the trash entry naming scheme."""
    when = datetime(2026, 1, 2, 3, 4, 5)
    assert trash_name("report.txt", when) == "report.txt.20260102_030405"


def test_strip_timestamp() -> None:
    """Test removing the timestamp suffix."""
    assert strip_timestamp("report.txt.20260102_030405") == "report.txt"
    assert strip_timestamp("build.20260102_030405") == "build"
    # Only the exact trailing suffix is removed
    assert strip_timestamp("report.txt") == "report.txt"
    assert strip_timestamp("report.2026010_030405") == "report.2026010_030405"
    assert strip_timestamp("a.20260102_030405.bak") == "a.20260102_030405.bak"
    assert strip_timestamp("a.20260102_030405.20260103_000000") == "a.20260102_030405"


def test_move_file(trash_manager: TrashManager, trash_dir: Path, work_dir: Path) -> None:
    """Test moving a single file into the trash."""
    source = work_dir / "report.txt"
    source.write_text("quarterly numbers")

    moved = trash_manager.move_to_trash([source])

    expected = trash_dir / "report.txt.20261016_093015"
    assert moved == [expected]
    assert not source.exists()
    assert expected.read_text() == "quarterly numbers"


def test_move_directory(trash_manager: TrashManager, trash_dir: Path, work_dir: Path) -> None:
    """Test that a directory is moved with all nested contents."""
    source = work_dir / "build"
    (source / "lib" / "deep").mkdir(parents=True)
    (source / "lib" / "deep" / "module.bin").write_bytes(b"\x00\x01\x02")
    (source / "index.html").write_text("<html></html>")

    moved = trash_manager.move_to_trash([source])

    target = trash_dir / "build.20261016_093015"
    assert moved == [target]
    assert not source.exists()
    assert (target / "lib" / "deep" / "module.bin").read_bytes() == b"\x00\x01\x02"
    assert (target / "index.html").read_text() == "<html></html>"


def test_creates_trash_dir(
    console: Console, tmp_path: Path, work_dir: Path
) -> None:
    """Test that missing parent directories of the trash are created."""
    trash_dir = tmp_path / "nested" / "trash"
    manager = TrashManager(trash_dir, confirm=lambda p: True, console=console)
    (work_dir / "a.txt").write_text("a")

    manager.move_to_trash([work_dir / "a.txt"])

    assert trash_dir.is_dir()
    assert len(list(trash_dir.iterdir())) == 1


def test_missing_path_is_skipped(
    trash_manager: TrashManager,
    trash_dir: Path,
    work_dir: Path,
    output: Callable[[], str],
) -> None:
    """Test that a missing path warns and the batch continues."""
    present = work_dir / "present.txt"
    present.write_text("here")

    moved = trash_manager.move_to_trash([work_dir / "missing.txt", present])

    assert moved == [trash_dir / "present.txt.20261016_093015"]
    assert "does not exist" in output()


def test_declined_path_is_kept(
    console: Console, trash_dir: Path, work_dir: Path, output: Callable[[], str]
) -> None:
    """Test that declining the prompt leaves the path in place."""
    keep = work_dir / "keep.txt"
    drop = work_dir / "drop.txt"
    keep.write_text("keep")
    drop.write_text("drop")
    asked: List[Path] = []

    def confirm(path: Path) -> bool:
        asked.append(path)
        return path.name == "drop.txt"

    manager = TrashManager(trash_dir, confirm=confirm, console=console)
    moved = manager.move_to_trash([keep, drop])

    assert asked == [keep, drop]
    assert keep.exists()
    assert not drop.exists()
    assert len(moved) == 1
    assert "Skipped" in output()


def test_force_skips_confirmation(trash_dir: Path, work_dir: Path, console: Console) -> None:
    """Test that force never calls the confirm callback."""

    def confirm(path: Path) -> bool:
        raise AssertionError("confirm should not be called")

    (work_dir / "a.txt").write_text("a")
    manager = TrashManager(trash_dir, confirm=confirm, console=console)

    assert len(manager.move_to_trash([work_dir / "a.txt"], force=True)) == 1


def test_default_prompt_accepts_yes(
    trash_dir: Path, work_dir: Path, monkeypatch
) -> None:
    """Test the interactive prompt answers."""
    console = Console(width=200)
    manager = TrashManager(trash_dir, console=console)
    path = work_dir / "a.txt"

    answers = [("y", True), ("YES", True), (" Yes ", True), ("n", False), ("", False)]
    for answer, expected in answers:
        monkeypatch.setattr(console, "input", lambda prompt, answer=answer: answer)
        assert manager.confirm(path) is expected


def test_existing_destination_is_overwritten(
    trash_manager: TrashManager, trash_dir: Path, work_dir: Path
) -> None:
    """Test that a same-second collision replaces the earlier entry."""
    trash_dir.mkdir()
    existing = trash_dir / "notes.txt.20261016_093015"
    existing.write_text("old")
    source = work_dir / "notes.txt"
    source.write_text("new")

    trash_manager.move_to_trash([source])

    assert existing.read_text() == "new"
    assert not source.exists()


def test_move_failure_continues(
    trash_manager: TrashManager,
    trash_dir: Path,
    work_dir: Path,
    monkeypatch,
    output: Callable[[], str],
) -> None:
    """Test that a failing move is reported and the batch continues."""
    real_move = shutil.move
    first = work_dir / "first.txt"
    second = work_dir / "second.txt"
    first.write_text("1")
    second.write_text("2")

    def flaky_move(src: str, dst: str) -> str:
        if src.endswith("first.txt"):
            raise PermissionError("Permission denied")
        return real_move(src, dst)

    monkeypatch.setattr("shellkit.core.trash.shutil.move", flaky_move)

    moved = trash_manager.move_to_trash([first, second])

    assert first.exists()
    assert not second.exists()
    assert moved == [trash_dir / "second.txt.20261016_093015"]
    assert "Permission denied" in output()


def test_dry_run(trash_manager: TrashManager, trash_dir: Path, work_dir: Path) -> None:
    """Test that a dry run leaves everything untouched."""
    source = work_dir / "a.txt"
    source.write_text("a")

    assert trash_manager.move_to_trash([source], dry_run=True) == []
    assert source.exists()
    assert not trash_dir.exists()


def test_list_entries(trash_manager: TrashManager, trash_dir: Path) -> None:
    """Test listing trash entries newest first."""
    assert trash_manager.list_entries() == []

    trash_dir.mkdir()
    (trash_dir / "old.txt.20250101_000000").write_text("old")
    (trash_dir / "new.txt.20260101_000000").write_text("new")
    (trash_dir / "loose").mkdir()

    entries = trash_manager.list_entries()

    assert [e.original_name for e in entries] == ["new.txt", "old.txt", "loose"]
    assert entries[0].trashed_at == datetime(2026, 1, 1)
    assert entries[2].trashed_at is None
    assert entries[2].is_dir


def test_entry_with_impossible_date(tmp_path: Path) -> None:
    """Test that a well-formed suffix that is not a real date still strips."""
    path = tmp_path / "a.txt.20261399_999999"
    path.write_text("a")

    entry = TrashEntry.from_path(path)

    assert entry.original_name == "a.txt"
    assert entry.trashed_at is None


def test_current_directory_is_refused(
    trash_manager: TrashManager,
    trash_dir: Path,
    work_dir: Path,
    monkeypatch,
    output: Callable[[], str],
) -> None:
    """Test that '.' is never moved out from under the shell."""
    (work_dir / "a.txt").write_text("a")
    monkeypatch.chdir(work_dir)

    assert trash_manager.move_to_trash([Path(".")]) == []

    assert (work_dir / "a.txt").read_text() == "a"
    assert list(trash_dir.iterdir()) == []
    assert "contains the current directory" in output()


def test_parent_directory_is_refused(
    trash_manager: TrashManager,
    trash_dir: Path,
    work_dir: Path,
    monkeypatch,
    output: Callable[[], str],
) -> None:
    """Test that '..' is refused when it holds the current directory."""
    inner = work_dir / "inner"
    inner.mkdir()
    monkeypatch.chdir(inner)

    assert trash_manager.move_to_trash([Path("..")]) == []

    assert inner.is_dir()
    assert list(trash_dir.iterdir()) == []
    assert "contains the current directory" in output()


def test_directory_holding_trash_is_refused(
    work_dir: Path, tmp_path: Path, console: Console, output: Callable[[], str], monkeypatch
) -> None:
    """Test that the trash directory cannot be moved into itself."""
    monkeypatch.chdir(tmp_path)
    manager = TrashManager(work_dir / ".trash", confirm=lambda path: True, console=console)
    (work_dir / "a.txt").write_text("a")

    assert manager.move_to_trash([work_dir]) == []

    assert (work_dir / "a.txt").exists()
    assert "contains the trash directory" in output()


def test_root_is_refused(trash_manager: TrashManager, output: Callable[[], str]) -> None:
    """Test that a path without a leaf name is refused."""
    assert trash_manager.move_to_trash([Path("/")]) == []
    assert "has no name to store it under" in output()


def test_dot_dot_component_uses_real_name(
    trash_manager: TrashManager, trash_dir: Path, work_dir: Path, monkeypatch
) -> None:
    """Test that '..' components are resolved before naming the entry."""
    data = work_dir / "data"
    (data / "sub").mkdir(parents=True)
    monkeypatch.chdir(work_dir)

    moved = trash_manager.move_to_trash([Path("data/sub/..")])

    assert moved == [trash_dir / "data.20261016_093015"]
    assert not data.exists()
