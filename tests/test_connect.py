from sshcfg.connect import build_ssh_command, connect
from sshcfg.errors import ConfigIOError
from sshcfg.store import ConfigStore


class Completed:
    def __init__(self, returncode):
        self.returncode = returncode


def test_build_ssh_command():
    assert build_ssh_command("web", "/tmp/cfg") == ["ssh", "-F", "/tmp/cfg", "web"]
    assert build_ssh_command("web", "/tmp/cfg", "Compression yes\nServerAliveInterval 60") == [
        "ssh",
        "-F",
        "/tmp/cfg",
        "-o",
        "Compression=yes",
        "-o",
        "ServerAliveInterval=60",
        "web",
    ]


def test_connect_success(tmp_path, monkeypatch):
    config = tmp_path / "config"
    config.write_text("Host web\n    HostName web.example.com\n")
    monkeypatch.setattr("sshcfg.connect.subprocess.run", lambda cmd: Completed(0))

    result = connect("web", ConfigStore(config))

    assert result.success
    assert result.return_code == 0


def test_connect_reports_ssh_failure(tmp_path, monkeypatch):
    config = tmp_path / "config"
    config.write_text("Host web\n")
    monkeypatch.setattr("sshcfg.connect.subprocess.run", lambda cmd: Completed(255))

    result = connect("web", ConfigStore(config))

    assert not result.success
    assert result.return_code == 255


def test_connect_unknown_host_does_not_run_ssh(tmp_path, monkeypatch):
    config = tmp_path / "config"
    config.write_text("Host web\n")
    calls = []
    monkeypatch.setattr("sshcfg.connect.subprocess.run", calls.append)

    result = connect("db", ConfigStore(config))

    assert not result.success
    assert "not found" in result.message
    assert calls == []


def test_connect_without_ssh_binary(tmp_path, monkeypatch):
    config = tmp_path / "config"
    config.write_text("Host web\n")

    def missing(cmd):
        raise FileNotFoundError("ssh")

    monkeypatch.setattr("sshcfg.connect.subprocess.run", missing)

    result = connect("web", ConfigStore(config))

    assert not result.success
    assert "ssh command not found" in result.message


def test_connect_read_error(tmp_path, monkeypatch):
    store = ConfigStore(tmp_path / "config")

    def broken(name):
        raise ConfigIOError("permission denied")

    monkeypatch.setattr(store, "quick_exists", broken)

    result = connect("web", store)

    assert not result.success
    assert "permission denied" in result.message
