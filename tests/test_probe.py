import pytest

from sshcfg.errors import ConfigIOError
from sshcfg.probe import quick_host_exists
from sshcfg.ssh_config import load_hosts


@pytest.fixture
def include_tree(tmp_path, write_config):
    """
    config -> conf.d/* (alpha, beta) ; beta -> ../shared ; shared -> config (cycle)
    plus a README that would define a host if it were parsed.
    """
    write_config(tmp_path / "conf.d" / "alpha", "Host alpha a1\n    HostName alpha.example.com\n")
    write_config(tmp_path / "conf.d" / "beta", "Include ../shared\nHost beta\n")
    write_config(tmp_path / "conf.d" / "README.md", "Host from-readme\n")
    write_config(tmp_path / "shared", "Include config\nHost shared-host *.wild\n")
    return write_config(
        tmp_path / "config",
        """
        Include conf.d/*

        Host *
            User everyone

        # Tags: main
        Host main main-alias
            HostName main.example.com
        """,
    )


@pytest.mark.parametrize(
    "name",
    ["alpha", "a1", "beta", "shared-host", "main", "main-alias"],
)
def test_finds_hosts_anywhere_in_the_tree(include_tree, name):
    assert quick_host_exists(name, include_tree)


@pytest.mark.parametrize("name", ["*", "*.wild", "from-readme", "missing", "main main-alias"])
def test_patterns_filtered_and_unknown_names_are_absent(include_tree, name):
    assert not quick_host_exists(name, include_tree)


def test_parity_with_full_load(include_tree):
    loaded = {host.name for host in load_hosts(include_tree)}
    candidates = loaded | {"*", "*.wild", "from-readme", "missing", "everyone", "Include"}

    for name in candidates:
        assert quick_host_exists(name, include_tree) == (name in loaded), name


def test_parity_with_mutual_includes(tmp_path, write_config):
    first = write_config(tmp_path / "first", "Include second\nHost one\n")
    write_config(tmp_path / "second", "Include first\nHost two three\n")

    loaded = [host.name for host in load_hosts(first)]

    assert sorted(loaded) == ["one", "three", "two"]
    for name in loaded:
        assert quick_host_exists(name, first)


def test_missing_entry_is_false_and_not_created(home):
    assert quick_host_exists("anything") is False
    assert not (home / ".ssh" / "config").exists()


def test_unreadable_entry_raises(tmp_path):
    directory = tmp_path / "dir"
    directory.mkdir()
    with pytest.raises(ConfigIOError):
        quick_host_exists("x", directory)
