"""Field validation for host records entered by users."""

import ipaddress
import os
import re
from pathlib import Path

from sshcfg.errors import HostValidationError
from sshcfg.includes import is_pattern
from sshcfg.ssh_config import HostRecord

MAX_HOST_NAME_LENGTH = 50

_HOSTNAME_RE = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?"
    r"(\.[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?)*$"
)


def validate_host_name(name: str) -> bool:
    """Alias used on the Host line: no whitespace, comments or patterns."""
    if not name or len(name) > MAX_HOST_NAME_LENGTH:
        return False
    if any(ch.isspace() for ch in name) or "#" in name:
        return False
    return not is_pattern(name)


def validate_ip(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def validate_hostname(hostname: str) -> bool:
    """DNS name or IP address."""
    if not hostname or len(hostname) > 253:
        return False
    return bool(_HOSTNAME_RE.match(hostname)) or validate_ip(hostname)


def validate_port(port: str | None) -> bool:
    """Empty means the default port."""
    if not port:
        return True
    try:
        number = int(port)
    except ValueError:
        return False
    return 1 <= number <= 65535


def validate_identity_file(path: str | None) -> bool:
    if not path:
        return True
    return Path(os.path.expanduser(path)).exists()


def validate_host(record: HostRecord, check_identity: bool = True) -> None:
    """Validate the user-editable fields of *record*.

    Args:
        record: Host to check.
        check_identity: Whether the identity file must exist on disk.

    Raises:
        HostValidationError: Describing the first invalid field.
    """
    if not record.name.strip():
        raise HostValidationError("host name is required")
    if not validate_host_name(record.name):
        raise HostValidationError(
            f"invalid host name '{record.name}': no spaces, '#' or wildcards, "
            f"at most {MAX_HOST_NAME_LENGTH} characters"
        )
    if not (record.hostname or "").strip():
        raise HostValidationError("hostname/IP is required")
    if not validate_hostname(record.hostname):
        raise HostValidationError(f"invalid hostname or IP address: {record.hostname}")
    if not validate_port(record.port):
        raise HostValidationError("port must be between 1 and 65535")
    if check_identity and not validate_identity_file(record.identity):
        raise HostValidationError(f"identity file does not exist: {record.identity}")
