import pytest

from sshcfg.classifier import is_config_candidate, should_skip

SSH_CONTENT = "Host example\n    HostName example.com\n    User testuser\n"
OTHER_CONTENT = "# This is not an SSH config file\nSome random content\n"


@pytest.mark.parametrize(
    "file_name",
    [
        "README",
        "README.txt",
        "README.md",
        "LICENSE",
        "config.backup",
        "script.sh",
        "data.json",
        "notes.txt",
        ".gitignore",
        "backup.bak",
        "old.orig",
        "log.log",
        "temp.tmp",
        "archive.zip",
        "image.jpg",
        "python.py",
        "golang.go",
        "config.yaml",
        "config.yml",
        "config.toml",
    ],
)
def test_excluded_by_name(tmp_path, file_name):
    path = tmp_path / file_name
    path.write_text(OTHER_CONTENT)
    assert should_skip(path)


@pytest.mark.parametrize(
    "file_name",
    ["config", "servers.conf", "production", "staging", "hosts", "ssh_config", "work-servers"],
)
def test_ssh_fragments_are_kept(tmp_path, file_name):
    path = tmp_path / file_name
    path.write_text(SSH_CONTENT)
    assert is_config_candidate(path)


@pytest.mark.parametrize(
    "content",
    [
        "<!DOCTYPE html>\n<html></html>\n",
        '<?xml version="1.0"?>\n<root/>\n',
        "#!/bin/bash\necho hi\n",
        "#!/usr/bin/env python3\nprint('hi')\n",
        "package main\n\nfunc main() {}\n",
        "import os\nos.getcwd()\n",
        "def main():\n    pass\n",
        "#include <stdio.h>\n",
        "SELECT * FROM hosts;\n",
        "# License\nMIT\n",
    ],
)
def test_excluded_by_content(tmp_path, content):
    path = tmp_path / "fragment"
    path.write_text(content)
    assert should_skip(path)


def test_binary_content_is_excluded(tmp_path):
    path = tmp_path / "blob"
    path.write_bytes(b"\x7fELF\x00\x01\x02")
    assert should_skip(path)


def test_lowercase_sql_words_in_comments_are_allowed(tmp_path):
    path = tmp_path / "work"
    path.write_text("# update the key before rotating\nHost work\n    HostName work.example.com\n")
    assert is_config_candidate(path)


def test_only_the_head_of_the_file_is_sniffed(tmp_path):
    path = tmp_path / "big"
    path.write_text(SSH_CONTENT * 200 + "#!/bin/sh\n")
    assert is_config_candidate(path)


def test_unreadable_content_does_not_exclude(tmp_path):
    assert is_config_candidate(tmp_path / "missing")
