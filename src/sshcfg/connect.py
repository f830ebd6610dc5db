"""Direct connection to a configured host."""

import subprocess
from dataclasses import dataclass
from pathlib import Path

from sshcfg.errors import ConfigIOError
from sshcfg.options import to_command_args
from sshcfg.store import ConfigStore


@dataclass
class ConnectResult:
    """Result of a connect attempt."""

    success: bool
    message: str
    return_code: int


def build_ssh_command(
    host_name: str,
    config_path: str | Path,
    extra_options: str = "",
) -> list[str]:
    """Build the ssh command arguments.

    Args:
        host_name: Host alias to connect to.
        config_path: Entry config passed with ``-F``.
        extra_options: Additional options in config format (``Key Value`` lines).

    Returns:
        List of command arguments.
    """
    cmd = ["ssh", "-F", str(config_path)]
    cmd.extend(to_command_args(extra_options))
    cmd.append(host_name)
    return cmd


def connect(host_name: str, store: ConfigStore, extra_options: str = "") -> ConnectResult:
    """Check that *host_name* exists with the quick probe, then run ssh.

    Args:
        host_name: Host alias to connect to.
        store: Store whose entry file is used for lookup and for ``ssh -F``.
        extra_options: Additional options in config format.

    Returns:
        ConnectResult with the outcome.
    """
    try:
        found = store.quick_exists(host_name)
    except ConfigIOError as e:
        return ConnectResult(success=False, message=f"Error reading SSH config: {e}", return_code=1)

    if not found:
        return ConnectResult(
            success=False,
            message=f"Host '{host_name}' not found in {store.config_path}",
            return_code=1,
        )

    cmd = build_ssh_command(host_name, store.config_path, extra_options)

    try:
        result = subprocess.run(cmd)
    except FileNotFoundError:
        return ConnectResult(
            success=False,
            message="ssh command not found. Please install OpenSSH.",
            return_code=1,
        )

    if result.returncode == 0:
        return ConnectResult(
            success=True,
            message=f"Connection to {host_name} closed",
            return_code=0,
        )
    return ConnectResult(
        success=False,
        message=f"ssh exited with status {result.returncode}",
        return_code=result.returncode,
    )
