"""Fast host existence check used on the connect path."""

import logging
from pathlib import Path

from sshcfg.config import default_ssh_config_path
from sshcfg.errors import ConfigIOError
from sshcfg.includes import (
    VisitedFiles,
    absolute,
    concrete_names,
    resolve_include,
    split_directive,
)
from sshcfg.ssh_config import read_config_text

logger = logging.getLogger(__name__)


def _search_file(name: str, path: Path, visited: VisitedFiles, *, strict: bool) -> bool:
    if not visited.add(path):
        return False

    try:
        text = read_config_text(path)
    except FileNotFoundError:
        return False
    except OSError as e:
        if strict:
            raise ConfigIOError(f"failed to read SSH config {path}: {e}") from e
        logger.debug("Skipping unreadable include %s: %s", path, e)
        return False

    for raw_line in text.splitlines():
        directive = split_directive(raw_line.strip())
        if directive is None:
            continue

        key, value = directive
        keyword = key.lower()

        if keyword == "host":
            if name in concrete_names(value):
                return True
        elif keyword == "include":
            for included in resolve_include(value, path):
                if _search_file(name, included, visited, strict=False):
                    return True

    return False


def quick_host_exists(
    name: str,
    config_path: str | Path | None = None,
    *,
    visited: VisitedFiles | None = None,
) -> bool:
    """Check whether *name* is defined anywhere in the include closure.

    Walks files exactly like :func:`sshcfg.ssh_config.load_hosts` but stops
    at the first Host line naming the host and builds no records. Unlike the
    loader it never creates a missing entry file.

    Raises:
        ConfigIOError: If the entry file exists but cannot be read.
    """
    entry = absolute(config_path) if config_path is not None else absolute(default_ssh_config_path())
    if visited is None:
        visited = VisitedFiles()
    return _search_file(name, entry, visited, strict=True)
