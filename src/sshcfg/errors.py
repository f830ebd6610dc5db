"""Exceptions raised by the configuration store."""


class SSHConfigError(Exception):
    """Base class for all sshcfg errors."""


class HostNotFoundError(SSHConfigError, LookupError):
    """Raised when a host to update, delete or move is not defined."""

    def __init__(self, name: str, path: str | None = None):
        self.name = name
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(f"host '{name}' not found{where}")


class HostAlreadyExistsError(SSHConfigError):
    """Raised when adding a host whose name is already used in the same file."""

    def __init__(self, name: str, path: str | None = None):
        self.name = name
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(f"host '{name}' already exists{where}")


class ConfigIOError(SSHConfigError, OSError):
    """Raised when the primary config file cannot be read or written."""


class DirectoryCreationError(ConfigIOError):
    """Raised when the app, backup or ~/.ssh directory cannot be created."""


class InvalidMoveError(SSHConfigError):
    """Raised when a host is moved into the file that already holds it."""


class HostValidationError(SSHConfigError, ValueError):
    """Raised when a host record has invalid field values."""
