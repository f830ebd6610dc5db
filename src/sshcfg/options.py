"""Conversion between ``-o Key=Value`` command flags and ``Key Value`` config lines."""


def _split_option_groups(cmdline: str) -> list[str]:
    """Group whitespace tokens into one string per ``-o`` option.

    Tokens that follow an option without a new ``-o`` belong to it, so values
    containing spaces survive the trip. Anything before the first ``-o`` is
    kept as its own group.
    """
    groups: list[list[str]] = []
    current: list[str] | None = None

    for token in cmdline.split():
        if token == "-o":
            current = []
            groups.append(current)
        elif token.startswith("-o") and len(token) > 2:
            current = [token[2:]]
            groups.append(current)
        else:
            if current is None:
                current = []
                groups.append(current)
            current.append(token)

    return [" ".join(group) for group in groups if group]


def to_config(cmdline: str) -> str:
    """Convert command-line options to config format.

    Example: ``"-o Compression=yes -o ServerAliveInterval=60"`` becomes
    ``"Compression yes\\nServerAliveInterval 60"``.

    Args:
        cmdline: Options as passed to ssh.

    Returns:
        Newline-joined ``Key Value`` lines.
    """
    if not cmdline:
        return ""

    lines = []
    for group in _split_option_groups(cmdline):
        # Only the first '=' separates key from value
        key, sep, value = group.partition("=")
        lines.append(f"{key} {value}" if sep else group)
    return "\n".join(lines)


def to_command_args(config_options: str) -> list[str]:
    """Convert config-format options into ssh argv tokens.

    Args:
        config_options: Newline-joined ``Key Value`` lines.

    Returns:
        Flat list such as ``["-o", "Compression=yes"]``.
    """
    args: list[str] = []
    for line in config_options.splitlines():
        line = line.strip()
        if not line:
            continue
        key, sep, value = line.partition(" ")
        args.extend(["-o", f"{key}={value.strip()}" if sep else line])
    return args


def to_command(config_options: str) -> str:
    """Convert config-format options to a command-line string.

    Example: ``"Compression yes\\nServerAliveInterval 60"`` becomes
    ``"-o Compression=yes -o ServerAliveInterval=60"``.
    """
    if not config_options:
        return ""
    return " ".join(to_command_args(config_options))
