"""Configuration and data directory resolution.

Uses environment variables when available, falls back to conventional
defaults. Built once at startup and passed to whatever needs it.

Environment variables:
    HOARD_CONFIG_DIR  config directory (default: $XDG_CONFIG_HOME/hoard or ~/.config/hoard)
    HOARD_DATA_DIR    data directory (default: $XDG_DATA_HOME/hoard or ~/.local/share/hoard)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from hoard_engine.environment.host import current_os_name

APP_NAME = "hoard"
CONFIG_FILE_NAME = "config.yml"
HOARDS_DIR_SLUG = "hoards"


def _absolute(value: str | None) -> Path | None:
    if not value:
        return None
    path = Path(value)
    return path if path.is_absolute() else None


@dataclass(frozen=True)
class HoardDirs:
    home: Path
    config_dir: Path
    data_dir: Path

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        home: Path | None = None,
        os_name: str | None = None,
    ) -> HoardDirs:
        env = os.environ if environ is None else environ
        home = home or Path.home()
        os_name = os_name or current_os_name()

        config_dir = _absolute(env.get("HOARD_CONFIG_DIR"))
        if config_dir is None:
            if os_name == "windows" and env.get("APPDATA"):
                config_dir = Path(env["APPDATA"]) / APP_NAME
            else:
                base = _absolute(env.get("XDG_CONFIG_HOME")) or home / ".config"
                config_dir = base / APP_NAME

        data_dir = _absolute(env.get("HOARD_DATA_DIR"))
        if data_dir is None:
            if os_name == "windows" and env.get("LOCALAPPDATA"):
                data_dir = Path(env["LOCALAPPDATA"]) / APP_NAME
            else:
                base = _absolute(env.get("XDG_DATA_HOME")) or home / ".local" / "share"
                data_dir = base / APP_NAME

        return cls(home=home, config_dir=config_dir, data_dir=data_dir)

    @property
    def config_file(self) -> Path:
        """Return the default configuration file path."""
        return self.config_dir / CONFIG_FILE_NAME

    @property
    def hoards_root(self) -> Path:
        """Return the default directory hoards are backed up into."""
        return self.data_dir / HOARDS_DIR_SLUG
