"""Configuration management for clipcard."""

import os
import shlex
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python < 3.11


DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_CLIPBOARD_COMMAND = ["pbpaste"]


def _find_repo_root(start_dir: Path) -> Path:
    """Find repository root by walking upward looking for .git or pyproject.toml."""
    current_dir = start_dir

    while True:
        if (current_dir / ".git").exists() or (current_dir / "pyproject.toml").exists():
            return current_dir

        parent_dir = current_dir.parent

        # Stop if we reach filesystem root
        if parent_dir == current_dir:
            return start_dir

        current_dir = parent_dir


def _load_repo_config_data(repo_root: Path) -> Optional[dict]:
    """Load repo config data from .clipcard/config.toml if it exists."""
    config_file = repo_root / ".clipcard" / "config.toml"

    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        # If config file is malformed, ignore it
        return None


class ClipcardConfig(BaseModel):
    """Runtime settings for the clipboard monitor."""

    output_dir: Path = Field(default_factory=Path.cwd, description="Directory for capture JSON files")
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0, description="Seconds between clipboard reads")
    clipboard_command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CLIPBOARD_COMMAND),
        min_length=1,
        description="Command whose stdout is the clipboard text",
    )

    @classmethod
    def from_env(
        cls,
        output_dir: Optional[str] = None,
        poll_interval: Optional[float] = None,
    ) -> "ClipcardConfig":
        """Load configuration with the following precedence:

        1. Explicit arguments (CLI options)
        2. CLIPCARD_* environment variables
        3. repo-local .clipcard/config.toml (walk upward from CWD)
        4. Defaults
        """
        repo_config = _load_repo_config_data(_find_repo_root(Path.cwd())) or {}

        resolved_dir = output_dir or os.environ.get("CLIPCARD_OUTPUT_DIR") or repo_config.get("output_dir")

        if poll_interval is None:
            env_interval = os.environ.get("CLIPCARD_POLL_INTERVAL")
            if env_interval:
                poll_interval = float(env_interval)
            else:
                poll_interval = float(repo_config.get("poll_interval", DEFAULT_POLL_INTERVAL))

        env_command = os.environ.get("CLIPCARD_CLIPBOARD_COMMAND")
        if env_command:
            command = shlex.split(env_command)
        else:
            command = repo_config.get("clipboard_command") or list(DEFAULT_CLIPBOARD_COMMAND)
            if isinstance(command, str):
                command = shlex.split(command)

        return cls(
            output_dir=Path(resolved_dir).resolve() if resolved_dir else Path.cwd(),
            poll_interval=poll_interval,
            clipboard_command=command,
        )
