import textwrap
from pathlib import Path

import pytest

from sshcfg.backup import BackupManager
from sshcfg.store import ConfigStore


@pytest.fixture(autouse=True)
def home(tmp_path, monkeypatch):
    """
    Points HOME and XDG_CONFIG_HOME into the test's temp dir so nothing
    touches the real ~/.ssh or ~/.config.
    """
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home_dir / ".config"))
    monkeypatch.delenv("SSHCFG_CONFIG", raising=False)
    return home_dir


@pytest.fixture
def ssh_dir(home):
    path = home / ".ssh"
    path.mkdir(mode=0o700)
    return path


@pytest.fixture
def write_config():
    """Write dedented text to a file, creating parent dirs."""

    def _write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text).lstrip("\n"))
        return path

    return _write


@pytest.fixture
def backup_dir(tmp_path):
    return tmp_path / "backups"


@pytest.fixture
def make_store(backup_dir):
    def _make(path: Path, **kwargs) -> ConfigStore:
        kwargs.setdefault("backups", BackupManager(backup_dir))
        return ConfigStore(path, **kwargs)

    return _make
