"""Configuration management for shellkit."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

console = Console()

DEFAULT_CONFIG_FILE = "~/.config/shellkit/config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "trash_dir": "~/.trash",
    "graph_limit": 7,
    "log_file": None,
}


class Config:
    """Configuration class for shellkit."""

    def __init__(self, config_file: Optional[Path] = None) -> None:
        """Initialize configuration."""
        self.config: Dict[str, Any] = {}
        self.trash_dir: Path = Path(DEFAULT_CONFIG["trash_dir"]).expanduser()
        self.graph_limit: int = DEFAULT_CONFIG["graph_limit"]
        self.log_file: Optional[str] = None
        self.load_config(config_file)

    def load_config(self, config_file: Optional[Path] = None) -> None:
        """Load configuration from file.

        Defaults are applied first. When no file is given, the per-user file
        at ``~/.config/shellkit/config.yaml`` is used if it exists.
        """
        self._merge_config(DEFAULT_CONFIG)

        if config_file is None:
            default_file = Path(DEFAULT_CONFIG_FILE).expanduser()
            if not default_file.is_file():
                return
            config_file = default_file

        try:
            import yaml

            with open(config_file, "r") as f:
                user_config = yaml.safe_load(f)
            if user_config:
                self._merge_config(user_config)
        except Exception as e:
            console.print(f"[red]Error loading config file: {escape(str(e))}[/red]")

    def _merge_config(self, config: Dict[str, Any]) -> None:
        """Merge configuration with current configuration."""
        if not isinstance(config, dict):
            raise ValueError("Configuration must be a dictionary")

        if "trash_dir" in config:
            if not isinstance(config["trash_dir"], str):
                raise ValueError("trash_dir must be a string")
            self.trash_dir = Path(config["trash_dir"]).expanduser()

        if "graph_limit" in config:
            limit = config["graph_limit"]
            if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
                raise ValueError("graph_limit must be a positive integer")
            self.graph_limit = limit

        if "log_file" in config:
            if config["log_file"] is not None and not isinstance(config["log_file"], str):
                raise ValueError("log_file must be a string")
            self.log_file = config["log_file"]

        self.config.update(config)

    def validate(self) -> List[str]:
        """Validate configuration."""
        errors = []

        if not isinstance(self.trash_dir, Path):
            errors.append("trash_dir must be a path")
        elif self.trash_dir.exists() and not self.trash_dir.is_dir():
            errors.append(f"trash_dir {self.trash_dir} exists but is not a directory")

        if not isinstance(self.graph_limit, int) or self.graph_limit < 1:
            errors.append("graph_limit must be a positive integer")

        if self.log_file is not None and not isinstance(self.log_file, str):
            errors.append("log_file must be a string")

        return errors

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        Args:
            key: The configuration key to get.
            default: The default value to return if the key is not found.

        Returns:
            The configuration value, or the default if not found.
        """
        return self.config.get(key, default)
