"""Core functionality for shellkit."""

from .config import Config
from .repository import GitClient, GitError
from .restore import RestoreManager
from .status import StatusRenderer, StatusSnapshot
from .trash import TrashEntry, TrashManager

__all__ = [
    "Config",
    "GitClient",
    "GitError",
    "RestoreManager",
    "StatusRenderer",
    "StatusSnapshot",
    "TrashEntry",
    "TrashManager",
]
