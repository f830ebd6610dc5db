import pytest

from sshcfg.errors import HostValidationError
from sshcfg.ssh_config import HostRecord
from sshcfg.validation import (
    validate_host,
    validate_host_name,
    validate_hostname,
    validate_identity_file,
    validate_port,
)


@pytest.mark.parametrize("name", ["web", "web-1", "db.prod", "a" * 50])
def test_valid_host_names(name):
    assert validate_host_name(name)


@pytest.mark.parametrize("name", ["", "two words", "tab\tname", "has#hash", "web*", "!neg", "a" * 51])
def test_invalid_host_names(name):
    assert not validate_host_name(name)


@pytest.mark.parametrize("hostname", ["example.com", "db-1.internal", "localhost", "10.0.0.1", "::1", "fe80::1"])
def test_valid_hostnames(hostname):
    assert validate_hostname(hostname)


@pytest.mark.parametrize("hostname", ["", "-bad.com", "under_score.com", "a..b", "x" * 254])
def test_invalid_hostnames(hostname):
    assert not validate_hostname(hostname)


def test_ports():
    assert validate_port("")
    assert validate_port(None)
    assert validate_port("1")
    assert validate_port("65535")
    assert not validate_port("0")
    assert not validate_port("65536")
    assert not validate_port("ssh")


def test_identity_file(home):
    key = home / ".ssh" / "id_test"
    key.parent.mkdir()
    key.write_text("key")
    assert validate_identity_file("~/.ssh/id_test")
    assert validate_identity_file("")
    assert not validate_identity_file("~/.ssh/missing")


def test_validate_host_accepts_complete_record():
    validate_host(HostRecord(name="web", hostname="web.example.com", port="2222"))


@pytest.mark.parametrize(
    "record, message",
    [
        (HostRecord(name=" ", hostname="x"), "host name is required"),
        (HostRecord(name="bad name", hostname="x"), "invalid host name"),
        (HostRecord(name="web"), "hostname/IP is required"),
        (HostRecord(name="web", hostname="bad_host"), "invalid hostname"),
        (HostRecord(name="web", hostname="x", port="99999"), "port"),
        (HostRecord(name="web", hostname="x", identity="/nonexistent/key"), "identity file"),
    ],
)
def test_validate_host_rejects(record, message):
    with pytest.raises(HostValidationError, match=message):
        validate_host(record)


def test_identity_check_can_be_skipped():
    validate_host(HostRecord(name="web", hostname="x", identity="/nonexistent/key"), check_identity=False)
