"""Line tokenizing and Include resolution shared by the loader and the prober.

Both traversals must agree on which files are reachable and on how a line is
split into keyword and value, so they go through the helpers in this module.
"""

import glob
import logging
import os
import re
from pathlib import Path

from sshcfg.classifier import should_skip

logger = logging.getLogger(__name__)

TAGS_PREFIX = "# Tags:"

# "Key Value", "Key=Value" and "Key = Value"
_DIRECTIVE_RE = re.compile(r"^([^\s=]+)(?:\s*=\s*|\s+)(.*\S)\s*$")


def split_directive(line: str) -> tuple[str, str] | None:
    """Split a stripped config line into ``(keyword, value)``.

    Returns None for blank lines, comments and keywords without a value.
    """
    if not line or line.startswith("#"):
        return None
    match = _DIRECTIVE_RE.match(line)
    if match is None:
        return None
    return match.group(1), match.group(2)


def parse_tags(line: str) -> list[str] | None:
    """Parse a ``# Tags: a, b`` comment; None if the line is not one."""
    if not line.startswith(TAGS_PREFIX):
        return None
    raw = line[len(TAGS_PREFIX):]
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def is_pattern(name: str) -> bool:
    """Wildcard or negated Host entries are patterns, not connectable hosts."""
    return "*" in name or "?" in name or name.startswith("!")


def concrete_names(value: str) -> list[str]:
    """Host names from the value of a Host line, patterns dropped."""
    return [name for name in value.split() if not is_pattern(name)]


def unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


class VisitedFiles:
    """Absolute paths already traversed, kept in visit order.

    One instance is threaded through a whole recursive load so include
    cycles and diamond includes are read at most once.
    """

    def __init__(self) -> None:
        self._paths: dict[Path, None] = {}

    def __contains__(self, path: Path) -> bool:
        return absolute(path) in self._paths

    def __iter__(self):
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def add(self, path: Path) -> bool:
        """Mark *path* visited; False if it already was."""
        path = absolute(path)
        if path in self._paths:
            return False
        self._paths[path] = None
        return True


def absolute(path: str | Path) -> Path:
    """Absolute path without resolving symlinks."""
    return Path(os.path.abspath(os.path.expanduser(str(path))))


def resolve_include(value: str, including_file: Path) -> list[Path]:
    """Expand the value of an Include directive into candidate files.

    Each whitespace-separated pattern is tilde-expanded, made relative to the
    including file's directory, and globbed. Directories and files rejected
    by the classifier are dropped. Visited-set filtering is left to the
    caller.

    Args:
        value: Everything after the ``Include`` keyword.
        including_file: File that contains the directive.

    Returns:
        Matching files in sorted order per pattern.
    """
    base_dir = absolute(including_file).parent
    matches: list[Path] = []

    for pattern in value.split():
        pattern = os.path.expanduser(unquote(pattern))
        if not os.path.isabs(pattern):
            pattern = str(base_dir / pattern)

        for match in sorted(glob.glob(pattern)):
            path = absolute(match)
            if path.is_dir():
                continue
            if should_skip(path):
                continue
            matches.append(path)

    if not matches:
        logger.debug("Include %r in %s matched no config files", value, including_file)
    return matches
