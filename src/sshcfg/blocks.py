"""Host block location and rewriting on a config file's raw lines.

Edits work on the file as a list of lines with explicit block boundaries
instead of a parsed document, so every line outside the edited block is
written back exactly as it was read. Callers only need ``scan_blocks``,
``find_block``, ``render_block`` and the three rewrite functions; the
line-level details stay in here.
"""

from dataclasses import dataclass
from pathlib import Path

from sshcfg.errors import ConfigIOError
from sshcfg.includes import parse_tags, split_directive
from sshcfg.ssh_config import DEFAULT_PORT, HostRecord, read_config_text

INDENT = "    "


@dataclass
class HostBlock:
    """Location of one Host block inside a list of lines.

    ``start`` is the tag comment when there is one, otherwise the Host line.
    ``end`` is one past the last body line.
    """

    start: int
    host_line: int
    end: int
    names: list[str]

    @property
    def is_multi_host(self) -> bool:
        return len(self.names) > 1


def host_line_names(line: str) -> list[str] | None:
    """All names on a Host line, patterns included; None for other lines."""
    directive = split_directive(line.strip())
    if directive is None or directive[0].lower() != "host":
        return None
    return directive[1].split()


def _starts_section(line: str) -> bool:
    directive = split_directive(line.strip())
    return directive is not None and directive[0].lower() in ("host", "match")


def _ends_body(lines: list[str], index: int) -> bool:
    line = lines[index].strip()
    if not line or _starts_section(line):
        return True
    # A tag comment glued to the next Host line belongs to that host
    return (
        parse_tags(line) is not None
        and index + 1 < len(lines)
        and host_line_names(lines[index + 1]) is not None
    )


def scan_blocks(lines: list[str]) -> list[HostBlock]:
    """Locate every Host block in *lines*, in file order."""
    blocks: list[HostBlock] = []
    i = 0
    while i < len(lines):
        names = host_line_names(lines[i])
        if names is None:
            i += 1
            continue

        start = i
        if i > 0 and parse_tags(lines[i - 1].strip()) is not None:
            start = i - 1

        end = i + 1
        while end < len(lines) and not _ends_body(lines, end):
            end += 1

        blocks.append(HostBlock(start=start, host_line=i, end=end, names=names))
        i = end
    return blocks


def find_block(lines: list[str], names: str | list[str]) -> HostBlock | None:
    """First block whose Host line shares a name with *names*."""
    wanted = {names} if isinstance(names, str) else set(names)
    for block in scan_blocks(lines):
        if wanted.intersection(block.names):
            return block
    return None


def format_value(value: str) -> str:
    """Quote a value containing whitespace."""
    if value and any(ch.isspace() for ch in value):
        return f'"{value}"'
    return value


def render_block(record: HostRecord, names: list[str] | None = None) -> list[str]:
    """Render a host as config lines in canonical field order.

    Args:
        record: Properties and tags to write.
        names: Names for the Host line; defaults to ``[record.name]``.
    """
    lines: list[str] = []
    if record.tags:
        lines.append("# Tags: " + ", ".join(record.tags))
    lines.append("Host " + " ".join(names or [record.name]))

    if record.hostname:
        lines.append(f"{INDENT}HostName {record.hostname}")
    if record.user:
        lines.append(f"{INDENT}User {record.user}")
    if record.port and record.port != DEFAULT_PORT:
        lines.append(f"{INDENT}Port {record.port}")
    if record.identity:
        lines.append(f"{INDENT}IdentityFile {format_value(record.identity)}")
    if record.proxy_jump:
        lines.append(f"{INDENT}ProxyJump {record.proxy_jump}")
    if record.remote_command:
        lines.append(f"{INDENT}RemoteCommand {record.remote_command}")
    if record.request_tty:
        lines.append(f"{INDENT}RequestTTY {record.request_tty}")

    for option in record.options.splitlines():
        option = option.strip()
        if option:
            lines.append(f"{INDENT}{option}")
    return lines


def _skip_blank(lines: list[str], index: int) -> int:
    while index < len(lines) and not lines[index].strip():
        index += 1
    return index


def replace_block(lines: list[str], block: HostBlock, new_block: list[str]) -> list[str]:
    """Swap a whole block for *new_block*, keeping one blank line around it.

    A plain comment directly above the block stays attached to it.
    """
    head = lines[: block.start]
    above = head[-1].strip() if head else ""
    if above and not above.startswith("#"):
        head.append("")
    rest = lines[_skip_blank(lines, block.end):]
    return head + new_block + [""] + rest


def remove_block(lines: list[str], block: HostBlock) -> list[str]:
    """Drop a whole block together with the blank lines after it."""
    return lines[: block.start] + lines[_skip_blank(lines, block.end):]


def _rewrite_host_line(line: str, names: list[str]) -> str:
    indent = line[: len(line) - len(line.lstrip())]
    keyword = split_directive(line.strip())[0]
    return f"{indent}{keyword} {' '.join(names)}"


def split_block(
    lines: list[str],
    block: HostBlock,
    name: str,
    new_block: list[str] | None = None,
) -> list[str]:
    """Take *name* out of a multi-host block.

    The Host line loses *name*; tags and body stay untouched for the other
    names. With *new_block*, the standalone replacement is inserted right
    after the shared block.
    """
    remaining = [n for n in block.names if n != name]
    kept = (
        lines[: block.host_line]
        + [_rewrite_host_line(lines[block.host_line], remaining)]
        + lines[block.host_line + 1 : block.end]
    )
    if new_block is None:
        return kept + lines[block.end:]
    return kept + [""] + new_block + [""] + lines[_skip_blank(lines, block.end):]


def detect_multi_host(lines: list[str], name: str) -> tuple[bool, list[str]]:
    block = find_block(lines, name)
    if block is None:
        return False, []
    return block.is_multi_host, list(block.names)


def is_multi_host(name: str, config_path: str | Path) -> tuple[bool, list[str]]:
    """Check whether *name* shares its Host line with other names.

    Only the given physical file is scanned; includes are not followed.

    Returns:
        ``(shared, names)`` where *names* is the full Host line, or
        ``(False, [])`` when the host is not declared in the file.

    Raises:
        ConfigIOError: If the file cannot be read.
    """
    try:
        text = read_config_text(Path(config_path))
    except OSError as e:
        raise ConfigIOError(f"failed to read SSH config {config_path}: {e}") from e
    return detect_multi_host(text.splitlines(), name)
