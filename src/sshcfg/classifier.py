"""Heuristics deciding whether a file pulled in by an Include glob is an SSH config fragment.

The checks lean towards exclusion: skipping a real fragment only hides its
hosts, while parsing a stray script or document would invent garbage hosts.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"

RESERVED_NAMES = frozenset({"readme", "readme.txt", "license", "changelog"})

EXCLUDED_EXTENSIONS = (
    ".txt", ".md", ".rst", ".doc", ".docx", ".pdf",
    ".log", ".tmp", ".bak", ".old", ".orig", ".swp",
    ".json", ".xml", ".yaml", ".yml", ".toml", ".ini",
    ".sh", ".bash", ".zsh", ".fish", ".ps1", ".bat", ".cmd",
    ".py", ".pl", ".rb", ".js", ".php", ".go", ".c", ".cpp",
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg",
    ".zip", ".tar", ".gz", ".bz2", ".xz",
)

# Matched against the lowercased head of the file
CONTENT_INDICATORS = (
    "<!doctype", "<html", "<xml>", "<?xml",
    "#!/",
    "# readme", "# documentation", "# license",
    "package main", "function ", "class ", "def ",
    "import ", "require ", "#include",
)

# Matched case-sensitively so that prose like "update the key" stays allowed
SQL_INDICATORS = ("SELECT ", "INSERT ", "UPDATE ", "DELETE ")

SNIFF_BYTES = 2048


def is_reserved_artifact(path: Path) -> bool:
    """Backups written by sshcfg, markdown and well-known documentation files."""
    name = path.name.lower()
    return name.endswith(BACKUP_SUFFIX) or name.endswith(".md") or name in RESERVED_NAMES


def has_excluded_extension(path: Path) -> bool:
    return path.name.lower().endswith(EXCLUDED_EXTENSIONS)


def is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def has_foreign_content(path: Path) -> bool:
    """Sniff the first few KB for signs of another file type.

    Unreadable files are not excluded here; reading them later fails and
    the include is skipped anyway.
    """
    try:
        with open(path, "rb") as f:
            head = f.read(SNIFF_BYTES)
    except OSError:
        return False

    if b"\x00" in head:
        return True

    text = head.decode("utf-8", errors="replace")
    lowered = text.lower()
    if any(indicator in lowered for indicator in CONTENT_INDICATORS):
        return True
    return any(indicator in text for indicator in SQL_INDICATORS)


_CHECKS = (
    ("reserved artifact", is_reserved_artifact),
    ("excluded extension", has_excluded_extension),
    ("hidden file", is_hidden),
    ("foreign content", has_foreign_content),
)


def should_skip(path: str | Path) -> bool:
    """Return True if an included path should not be parsed as SSH config.

    The content check runs last because it is the only one touching disk.
    """
    path = Path(path)
    for reason, check in _CHECKS:
        if check(path):
            logger.debug("Skipping include %s: %s", path, reason)
            return True
    return False


def is_config_candidate(path: str | Path) -> bool:
    """Inverse of :func:`should_skip`."""
    return not should_skip(path)
