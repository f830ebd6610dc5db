"""Read and write access to an SSH config and its include tree.

``ConfigStore`` is the single entry point used by the CLI: reads go through
the loader and the quick prober, writes go through in-place text edits of
the physical file that defines the host. Nothing is cached between calls.
"""

import logging
import os
import stat
import tempfile
import threading
from contextlib import AbstractContextManager, suppress
from pathlib import Path
from typing import Callable

from sshcfg import blocks
from sshcfg.backup import BackupManager
from sshcfg.config import default_ssh_config_path, ensure_dir
from sshcfg.errors import (
    ConfigIOError,
    HostAlreadyExistsError,
    HostNotFoundError,
    InvalidMoveError,
    SSHConfigError,
)
from sshcfg.includes import absolute
from sshcfg.probe import quick_host_exists
from sshcfg.ssh_config import (
    HostRecord,
    get_host_by_name,
    list_config_files,
    load_hosts,
    read_config_text,
)

logger = logging.getLogger(__name__)


class ConfigStore:
    """Host directory backed by an SSH config entry file.

    All mutating calls run under ``lock``. Pass the same lock to several
    stores to serialize their writes too; it must be re-entrant because
    ``move`` holds it across its own ``add`` and ``delete``.

    Args:
        config_path: Entry file. Defaults to ~/.ssh/config.
        lock: Write lock shared by the mutating operations.
        backups: Where pre-write snapshots go.
    """

    def __init__(
        self,
        config_path: str | Path | None = None,
        *,
        lock: AbstractContextManager | None = None,
        backups: BackupManager | None = None,
    ):
        self.config_path = absolute(config_path) if config_path else absolute(default_ssh_config_path())
        self.lock = lock if lock is not None else threading.RLock()
        self.backups = backups if backups is not None else BackupManager()

    # Reads

    def load(self) -> list[HostRecord]:
        return load_hosts(self.config_path)

    def quick_exists(self, name: str) -> bool:
        return quick_host_exists(name, self.config_path)

    def list_config_files(self) -> list[Path]:
        return list_config_files(self.config_path)

    def find_host(self, name: str) -> HostRecord:
        """Return the first host called *name* across the include tree.

        Raises:
            HostNotFoundError: If no file defines the host.
        """
        host = get_host_by_name(name, self.config_path)
        if host is None:
            raise HostNotFoundError(name)
        return host

    def is_multi_host(self, name: str, config_path: str | Path | None = None) -> tuple[bool, list[str]]:
        return blocks.is_multi_host(name, config_path or self.find_host(name).source_file)

    def other_config_files(self, name: str) -> list[Path]:
        """Config files in the closure that do not hold *name*, for moves."""
        source = self.find_host(name).source_file
        return [path for path in self.list_config_files() if path != source]

    # Writes

    def add(self, record: HostRecord, config_path: str | Path | None = None) -> None:
        """Append *record* as a new block.

        Raises:
            HostAlreadyExistsError: If the file already declares the name.
        """
        target = absolute(config_path) if config_path else self.config_path

        def edit(lines: list[str]) -> list[str]:
            if blocks.find_block(lines, record.name) is not None:
                raise HostAlreadyExistsError(record.name, str(target))
            if lines and lines[-1] == "":
                lines = lines[:-1]
            separator = [""] if lines and lines[-1].strip() else []
            return lines + separator + blocks.render_block(record) + [""]

        self._rewrite(target, edit, create=True)
        logger.info("Added host %s to %s", record.name, target)

    def update(self, name: str, record: HostRecord, config_path: str | Path | None = None) -> None:
        """Replace host *name* with *record*, which may carry a new name.

        When *name* shares its Host line with other names, it is taken out of
        that line and *record* is written as its own block right after, so
        the siblings keep their settings.

        Raises:
            HostNotFoundError: If *name* is not declared in the file.
            HostAlreadyExistsError: If the new name is taken in the file.
        """
        target = absolute(config_path) if config_path else self._source_of(name)

        def edit(lines: list[str]) -> list[str]:
            block = blocks.find_block(lines, name)
            if block is None:
                raise HostNotFoundError(name, str(target))
            if record.name != name and blocks.find_block(lines, record.name) is not None:
                raise HostAlreadyExistsError(record.name, str(target))

            rendered = blocks.render_block(record)
            if any(other != name for other in block.names):
                return blocks.split_block(lines, block, name, rendered)
            return blocks.replace_block(lines, block, rendered)

        self._rewrite(target, edit)
        logger.info("Updated host %s in %s", name, target)

    def delete(self, name: str, config_path: str | Path | None = None) -> None:
        """Remove host *name*; siblings on a shared Host line are kept.

        Raises:
            HostNotFoundError: If *name* is not declared in the file.
        """
        target = absolute(config_path) if config_path else self._source_of(name)

        def edit(lines: list[str]) -> list[str]:
            block = blocks.find_block(lines, name)
            if block is None:
                raise HostNotFoundError(name, str(target))
            if any(other != name for other in block.names):
                return blocks.split_block(lines, block, name)
            return blocks.remove_block(lines, block)

        self._rewrite(target, edit)
        logger.info("Deleted host %s from %s", name, target)

    def move(self, name: str, target_path: str | Path) -> None:
        """Move host *name* into another config file.

        The host is added to the target first and then deleted from its
        source. If the delete fails, the added copy is removed again before
        the error is re-raised.

        Raises:
            HostNotFoundError: If the host is not defined anywhere.
            InvalidMoveError: If the host already lives in *target_path*.
        """
        target = absolute(target_path)
        with self.lock:
            host = self.find_host(name)
            if host.source_file == target:
                raise InvalidMoveError(f"host '{name}' is already in {target}")

            self.add(host, target)
            try:
                self.delete(name, host.source_file)
            except SSHConfigError:
                logger.warning("Removing %s from %s failed, rolling back add to %s", name, host.source_file, target)
                try:
                    self.delete(name, target)
                except SSHConfigError as rollback_error:
                    logger.error("Rollback failed, %s now exists in both files: %s", name, rollback_error)
                raise

    def update_multi_host_block(
        self,
        original_names: list[str],
        new_names: list[str],
        common: HostRecord,
        config_path: str | Path | None = None,
    ) -> None:
        """Rewrite a shared block with a new name list and shared properties.

        The first block naming any of *original_names* is replaced by a
        single ``Host <new_names>`` block carrying *common*'s fields and tags.

        Raises:
            HostNotFoundError: If no block names any of *original_names*.
            HostAlreadyExistsError: If a new name is declared by another block.
        """
        if not original_names or not new_names:
            raise ValueError("original_names and new_names must not be empty")
        target = absolute(config_path) if config_path else self._source_of(original_names[0])

        def edit(lines: list[str]) -> list[str]:
            block = blocks.find_block(lines, original_names)
            if block is None:
                raise HostNotFoundError(" ".join(original_names), str(target))
            for other in blocks.scan_blocks(lines):
                if other.start == block.start:
                    continue
                taken = set(new_names).intersection(other.names)
                if taken:
                    raise HostAlreadyExistsError(sorted(taken)[0], str(target))
            return blocks.replace_block(lines, block, blocks.render_block(common, new_names))

        self._rewrite(target, edit)
        logger.info("Rewrote block %s as %s in %s", original_names, new_names, target)

    # Internals

    def _source_of(self, name: str) -> Path:
        return self.find_host(name).source_file

    def _rewrite(
        self,
        path: Path,
        edit: Callable[[list[str]], list[str]],
        create: bool = False,
    ) -> None:
        """Backup, re-read, edit and write back *path* under the write lock."""
        with self.lock:
            self.backups.snapshot(path)

            try:
                text = read_config_text(path)
            except FileNotFoundError:
                if not create:
                    raise ConfigIOError(f"SSH config {path} does not exist")
                text = ""
            except OSError as e:
                raise ConfigIOError(f"failed to read SSH config {path}: {e}") from e

            newline = "\r\n" if "\r\n" in text else "\n"
            lines = text.split(newline) if text else []
            new_text = newline.join(edit(lines))
            if new_text and not new_text.endswith(newline):
                new_text += newline
            self._write(path, new_text)

    def _write(self, path: Path, text: str) -> None:
        """Atomically replace *path* with *text*.

        Symlinked configs are written through to the link target so the link
        itself survives.
        """
        real = Path(os.path.realpath(path))
        ensure_dir(real.parent, mode=0o700)
        fd, tmp_name = tempfile.mkstemp(dir=real.parent, prefix=f".{real.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            mode = stat.S_IMODE(real.stat().st_mode) if real.exists() else 0o600
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, real)
        except OSError as e:
            with suppress(OSError):
                os.unlink(tmp_name)
            raise ConfigIOError(f"failed to write SSH config {path}: {e}") from e
