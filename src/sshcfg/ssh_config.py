"""SSH config loader: resolves Include directives into a flat list of hosts."""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

from sshcfg.config import default_ssh_config_path, ensure_dir
from sshcfg.errors import ConfigIOError
from sshcfg.includes import (
    VisitedFiles,
    absolute,
    concrete_names,
    parse_tags,
    resolve_include,
    split_directive,
    unquote,
)

logger = logging.getLogger(__name__)

DEFAULT_PORT = "22"

# Directive keyword (lowercase) -> HostRecord attribute
SCALAR_FIELDS = {
    "hostname": "hostname",
    "user": "user",
    "port": "port",
    "identityfile": "identity",
    "proxyjump": "proxy_jump",
    "remotecommand": "remote_command",
    "requesttty": "request_tty",
}


@dataclass
class HostRecord:
    """One connectable host entry from the config."""

    name: str
    hostname: str | None = None
    user: str | None = None
    port: str = DEFAULT_PORT
    identity: str | None = None
    proxy_jump: str | None = None
    remote_command: str | None = None
    request_tty: str | None = None
    options: str = ""
    tags: list[str] = field(default_factory=list)
    source_file: Path | None = None

    @property
    def display_name(self) -> str:
        """Return a display-friendly name with connection details."""
        parts = [self.name]
        if self.user and self.hostname:
            parts.append(f"({self.user}@{self.hostname})")
        elif self.hostname:
            parts.append(f"({self.hostname})")
        if self.port and self.port != DEFAULT_PORT:
            parts.append(f":{self.port}")
        return " ".join(parts)

    def add_option(self, key: str, value: str) -> None:
        line = f"{key} {value}"
        self.options = f"{self.options}\n{line}" if self.options else line


def read_config_text(path: Path) -> str:
    """Read a config file, keeping undecodable bytes intact for rewriting."""
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
        return f.read()


def _create_entry_file(path: Path) -> None:
    """Create an empty, owner-only entry config file and its directory."""
    ensure_dir(path.parent, mode=0o700)
    try:
        path.touch(mode=0o600, exist_ok=True)
        path.chmod(0o600)
    except OSError as e:
        raise ConfigIOError(f"failed to create SSH config file {path}: {e}") from e
    logger.info("Created empty SSH config %s", path)


def _expand_aliases(host: HostRecord, aliases: list[str]) -> list[HostRecord]:
    return [host] + [replace(host, name=alias, tags=list(host.tags)) for alias in aliases]


def _apply_directive(host: HostRecord, seen: set[str], key: str, value: str) -> None:
    keyword = key.lower()
    attr = SCALAR_FIELDS.get(keyword)
    # ssh uses the first value it sees; later duplicates are kept verbatim
    if attr is None or keyword in seen:
        host.add_option(key, value)
        return
    seen.add(keyword)
    if attr == "identity":
        value = unquote(value)
    setattr(host, attr, value)


def _load_file(path: Path, visited: VisitedFiles, *, strict: bool) -> list[HostRecord]:
    if not visited.add(path):
        return []

    try:
        text = read_config_text(path)
    except FileNotFoundError:
        return []
    except OSError as e:
        if strict:
            raise ConfigIOError(f"failed to read SSH config {path}: {e}") from e
        logger.debug("Skipping unreadable include %s: %s", path, e)
        return []

    hosts: list[HostRecord] = []
    current: HostRecord | None = None
    aliases: list[str] = []
    seen: set[str] = set()
    pending_tags: list[str] | None = None

    for raw_line in text.splitlines():
        line = raw_line.strip()

        tags = parse_tags(line)
        if tags is not None:
            pending_tags = tags
            continue

        directive = split_directive(line)
        if directive is None:
            # Tags only bind to a Host line directly below them
            pending_tags = None
            continue

        key, value = directive
        keyword = key.lower()

        if keyword == "host":
            if current is not None:
                hosts.extend(_expand_aliases(current, aliases))
            names = concrete_names(value)
            if names:
                current = HostRecord(
                    name=names[0],
                    tags=pending_tags or [],
                    source_file=path,
                )
                aliases = names[1:]
            else:
                current, aliases = None, []
            seen = set()
            pending_tags = None
            continue

        pending_tags = None

        if keyword == "include":
            for included in resolve_include(value, path):
                hosts.extend(_load_file(included, visited, strict=False))
        elif keyword == "match":
            if current is not None:
                hosts.extend(_expand_aliases(current, aliases))
            current, aliases = None, []
        elif current is not None:
            _apply_directive(current, seen, key, value)

    if current is not None:
        hosts.extend(_expand_aliases(current, aliases))

    return hosts


def load_hosts(
    config_path: str | Path | None = None,
    *,
    visited: VisitedFiles | None = None,
) -> list[HostRecord]:
    """Parse an SSH config and everything it includes.

    The default ``~/.ssh/config`` is created empty when missing; any other
    missing entry file simply yields no hosts. Errors from included files
    are swallowed so one broken fragment cannot hide the rest.

    Args:
        config_path: Entry file. Defaults to ~/.ssh/config.
        visited: Shared visited set, filled with every file traversed.

    Returns:
        Hosts in file order, aliases expanded, patterns left out.

    Raises:
        ConfigIOError: If the entry file exists but cannot be read.
    """
    default = absolute(default_ssh_config_path())
    entry = absolute(config_path) if config_path is not None else default
    if visited is None:
        visited = VisitedFiles()

    if entry == default and not entry.exists():
        _create_entry_file(entry)

    return _load_file(entry, visited, strict=True)


def list_config_files(config_path: str | Path | None = None) -> list[Path]:
    """Return the include closure of *config_path* in traversal order."""
    visited = VisitedFiles()
    load_hosts(config_path, visited=visited)
    return list(visited)


def get_host_by_name(name: str, config_path: str | Path | None = None) -> HostRecord | None:
    """Get a specific host by name from SSH config.

    Args:
        name: The host name to find.
        config_path: Path to SSH config file. Defaults to ~/.ssh/config.

    Returns:
        HostRecord if found, None otherwise.
    """
    for host in load_hosts(config_path):
        if host.name == name:
            return host
    return None


def search_hosts(
    hosts: list[HostRecord],
    query: str,
    tags_only: bool = False,
    names_only: bool = False,
) -> list[HostRecord]:
    """Case-insensitive substring search over names, hostnames and tags."""
    if not query:
        return list(hosts)

    query = query.lower()
    matched = []
    for host in hosts:
        fields: list[str] = []
        if not tags_only:
            fields.append(host.name)
            if not names_only:
                fields.append(host.hostname or "")
        if not names_only:
            fields.extend(host.tags)
        if any(query in value.lower() for value in fields):
            matched.append(host)
    return matched
