"""Snapshots of the configuration directory."""

import logging
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ..errors import BackupError
from ..models import Backup, PruneFailure, PruneResult

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S-%fZ"

# Accepts millisecond or microsecond precision, with an optional "-N" collision suffix
TIMESTAMP_PATTERN = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2})-(?P<frac>\d{3,6})Z(?:-\d+)?$"
)


class BackupManager:
    """Creates, lists, restores and prunes ``.claude.backup.<timestamp>`` copies.

    Snapshots live next to the configuration directory. Operations on the
    same project are not synchronized; callers must not run them
    concurrently.
    """

    def __init__(self, project_path: Path, output_dir: Path = Path(".claude")):
        """Initialize manager.

        Args:
            project_path: Project root holding the configuration directory
            output_dir: Configuration directory, relative to the project root
        """
        self.project_path = Path(project_path)
        self.config_dir = self.project_path / output_dir
        self.prefix = f"{self.config_dir.name}.backup."

    def snapshot(self) -> Optional[Path]:
        """Copy the configuration directory to a new timestamped sibling.

        Returns:
            Path of the snapshot, or None when there is nothing to back up

        Raises:
            BackupError: If the copy fails
        """
        if not self.config_dir.is_dir():
            return None

        timestamp = datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)
        target = self.config_dir.parent / f"{self.prefix}{timestamp}"
        suffix = 1
        while target.exists():
            target = self.config_dir.parent / f"{self.prefix}{timestamp}-{suffix}"
            suffix += 1

        try:
            shutil.copytree(self.config_dir, target)
        except (OSError, shutil.Error) as e:
            # A partial copy would otherwise be listed as the newest snapshot
            shutil.rmtree(target, ignore_errors=True)
            raise BackupError(f"Failed to backup {self.config_dir}: {e}") from e

        logger.info("Backed up %s to %s", self.config_dir, target.name)
        return target

    def list(self) -> List[Backup]:
        """List snapshots, newest first."""
        try:
            entries = list(self.config_dir.parent.iterdir())
        except OSError:
            return []

        backups = []
        for entry in entries:
            if not entry.name.startswith(self.prefix) or not entry.is_dir():
                continue
            timestamp = entry.name[len(self.prefix):]
            created = _parse_timestamp(timestamp) or _mtime(entry)
            if created is None:
                continue
            backups.append(
                Backup(name=entry.name, timestamp=timestamp, created=created, path=entry)
            )

        backups.sort(key=lambda b: (b.created, b.name), reverse=True)
        return backups

    def restore(self, backup_path: Path) -> None:
        """Replace the configuration directory with a snapshot.

        Destructive: the current directory is removed before the copy. If the
        copy fails afterwards the configuration directory may be left absent.

        Raises:
            BackupError: If the snapshot is missing or either step fails
        """
        backup_path = Path(backup_path)
        if not backup_path.is_dir():
            raise BackupError(f"Backup not found: {backup_path}")

        if self.config_dir.exists():
            try:
                shutil.rmtree(self.config_dir)
            except OSError as e:
                raise BackupError(f"Failed to remove {self.config_dir}: {e}") from e

        try:
            shutil.copytree(backup_path, self.config_dir)
        except (OSError, shutil.Error) as e:
            raise BackupError(
                f"Failed to restore {backup_path.name}; {self.config_dir} may be missing: {e}"
            ) from e

        logger.info("Restored %s from %s", self.config_dir, backup_path.name)

    def prune(self, keep: int = 5) -> PruneResult:
        """Remove all but the ``keep`` newest snapshots.

        A snapshot that cannot be removed is recorded in ``failures`` and the
        remaining ones are still attempted.
        """
        if keep < 0:
            raise ValueError("keep must be >= 0")

        backups = self.list()
        result = PruneResult()

        for backup in backups[keep:]:
            try:
                shutil.rmtree(backup.path)
            except OSError as e:
                logger.warning("Could not remove backup %s: %s", backup.name, e)
                result.failures.append(PruneFailure(path=backup.path, reason=str(e)))
                continue
            result.removed += 1

        result.kept = len(backups) - result.removed
        return result


def _parse_timestamp(timestamp: str) -> Optional[datetime]:
    match = TIMESTAMP_PATTERN.match(timestamp)
    if not match:
        return None
    frac = match.group("frac").ljust(6, "0")
    try:
        return datetime.strptime(
            f"{match.group('base')}-{frac}", "%Y-%m-%dT%H-%M-%S-%f"
        ).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def _mtime(path: Path) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    except OSError:
        return None
