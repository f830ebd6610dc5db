"""Application directories and preference storage for sshcfg."""

import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from sshcfg.errors import DirectoryCreationError

logger = logging.getLogger(__name__)

APP_NAME = "sshcfg"
CONFIG_ENV_VAR = "SSHCFG_CONFIG"


@dataclass
class Config:
    """Application configuration."""

    ssh_config: str | None = None


def get_config_dir() -> Path:
    """Return the platform-specific application config directory.

    ``$XDG_CONFIG_HOME/sshcfg`` when set, ``%APPDATA%\\sshcfg`` on Windows,
    otherwise ``~/.config/sshcfg``.
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME

    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / APP_NAME

    return Path.home() / ".config" / APP_NAME


def get_config_file() -> Path:
    return get_config_dir() / "config.json"


def get_backup_dir() -> Path:
    return get_config_dir() / "backups"


def get_ssh_dir() -> Path:
    return Path.home() / ".ssh"


def default_ssh_config_path() -> Path:
    """Return the default OpenSSH client config path (``~/.ssh/config``)."""
    return get_ssh_dir() / "config"


def ensure_dir(path: Path, mode: int = 0o755) -> Path:
    """Create *path* and its parents if needed.

    Raises:
        DirectoryCreationError: If the directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True, mode=mode)
    except OSError as e:
        raise DirectoryCreationError(f"failed to create directory {path}: {e}") from e
    return path


def load_config() -> Config:
    """Load configuration from disk.

    Returns:
        Config object with loaded settings, or defaults if no config exists.
    """
    config_file = get_config_file()
    if not config_file.exists():
        return Config()

    try:
        with open(config_file, "r") as f:
            data = json.load(f)
            return Config(ssh_config=data.get("ssh_config"))
    except (json.JSONDecodeError, OSError, AttributeError) as e:
        logger.warning("Ignoring unreadable preferences %s: %s", config_file, e)
        return Config()


def save_config(config: Config) -> None:
    """Save configuration to disk.

    Args:
        config: Config object to save.
    """
    ensure_dir(get_config_dir())

    data = {"ssh_config": config.ssh_config}

    with open(get_config_file(), "w") as f:
        json.dump(data, f, indent=2)


def resolve_ssh_config_path(explicit: str | Path | None = None) -> Path:
    """Pick the entry config file.

    Precedence: explicit argument, ``SSHCFG_CONFIG`` environment variable,
    the ``ssh_config`` preference, then ``~/.ssh/config``.
    """
    candidate = explicit or os.environ.get(CONFIG_ENV_VAR) or load_config().ssh_config
    if candidate:
        return Path(os.path.expanduser(str(candidate)))
    return default_ssh_config_path()
