import sys

import pytest

from sshcfg.config import (
    Config,
    ensure_dir,
    get_config_dir,
    get_config_file,
    load_config,
    resolve_ssh_config_path,
    save_config,
)
from sshcfg.errors import DirectoryCreationError


def test_config_dir_uses_xdg(home):
    assert get_config_dir() == home / ".config" / "sshcfg"


def test_config_dir_falls_back_to_home(home, monkeypatch):
    monkeypatch.delenv("XDG_CONFIG_HOME")
    monkeypatch.setattr(sys, "platform", "linux")
    assert get_config_dir() == home / ".config" / "sshcfg"


def test_config_dir_on_windows(tmp_path, monkeypatch):
    monkeypatch.delenv("XDG_CONFIG_HOME")
    monkeypatch.setattr(sys, "platform", "win32")
    monkeypatch.setenv("APPDATA", str(tmp_path / "AppData"))
    assert get_config_dir() == tmp_path / "AppData" / "sshcfg"


def test_load_defaults_when_missing():
    assert load_config() == Config()


def test_save_and_load():
    save_config(Config(ssh_config="~/work/ssh_config"))
    assert get_config_file().exists()
    assert load_config().ssh_config == "~/work/ssh_config"


def test_load_ignores_corrupt_file():
    get_config_file().parent.mkdir(parents=True)
    get_config_file().write_text("{not json")
    assert load_config() == Config()


def test_resolve_precedence(home, tmp_path, monkeypatch):
    assert resolve_ssh_config_path() == home / ".ssh" / "config"

    save_config(Config(ssh_config=str(tmp_path / "pref")))
    assert resolve_ssh_config_path() == tmp_path / "pref"

    monkeypatch.setenv("SSHCFG_CONFIG", str(tmp_path / "env"))
    assert resolve_ssh_config_path() == tmp_path / "env"

    assert resolve_ssh_config_path(tmp_path / "explicit") == tmp_path / "explicit"


def test_resolve_expands_user(home):
    assert resolve_ssh_config_path("~/custom") == home / "custom"


def test_ensure_dir_failure(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("")
    with pytest.raises(DirectoryCreationError):
        ensure_dir(blocker / "sub")
