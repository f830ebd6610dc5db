"""Rolling single-copy backups taken before every config write."""

import logging
import shutil
from pathlib import Path

from sshcfg.classifier import BACKUP_SUFFIX
from sshcfg.config import ensure_dir, get_backup_dir
from sshcfg.errors import ConfigIOError

logger = logging.getLogger(__name__)


class BackupManager:
    """Copies a config file to ``<backup_dir>/<basename>.backup``.

    Each call overwrites the previous backup for that file name; there is no
    history.
    """

    def __init__(self, backup_dir: Path | None = None):
        self._backup_dir = backup_dir

    @property
    def backup_dir(self) -> Path:
        # Resolved lazily so HOME/XDG changes after construction are honoured
        return self._backup_dir if self._backup_dir is not None else get_backup_dir()

    def backup_path(self, config_path: str | Path) -> Path:
        return self.backup_dir / f"{Path(config_path).name}{BACKUP_SUFFIX}"

    def snapshot(self, config_path: str | Path) -> Path | None:
        """Back up *config_path* if it exists.

        When the file does not exist yet, any older backup under the same
        name is removed.

        Returns:
            The backup path, or None when there was nothing to copy.

        Raises:
            DirectoryCreationError: If the backup directory cannot be created.
            ConfigIOError: If the copy or the stale backup removal fails.
        """
        source = Path(config_path)
        if not source.exists():
            stale = self.backup_path(source)
            try:
                stale.unlink(missing_ok=True)
            except OSError as e:
                raise ConfigIOError(f"failed to remove stale backup {stale}: {e}") from e
            logger.debug("Nothing to back up, %s does not exist", source)
            return None

        ensure_dir(self.backup_dir)
        target = self.backup_path(source)
        try:
            shutil.copyfile(source, target)
            target.chmod(0o600)
        except OSError as e:
            raise ConfigIOError(f"failed to back up {source}: {e}") from e

        logger.info("Backup created: %s", target)
        return target
