from __future__ import annotations

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from dairy_app.core.config import BACKUP_DIR, BACKUP_MAX_COUNT, sqlite_database_path

logger = logging.getLogger(__name__)
BACKUP_PREFIX = "[BACKUP]"
BACKUP_FILE_PREFIX = "database-backup-"
BACKUP_FILE_SUFFIX = ".db"


class BackupError(RuntimeError):
    pass


def backup_file_name(moment: datetime) -> str:
    timestamp = moment.isoformat(timespec="milliseconds").replace(":", "-").replace(".", "-")
    return f"{BACKUP_FILE_PREFIX}{timestamp}{BACKUP_FILE_SUFFIX}"


class DatabaseBackup:
    """File-level copies of the SQLite database, newest ``max_backups`` retained."""

    def __init__(
        self,
        database_path: Optional[Path],
        backup_dir: Path = BACKUP_DIR,
        max_backups: int = BACKUP_MAX_COUNT,
    ) -> None:
        self.database_path = Path(database_path) if database_path else None
        self.backup_dir = Path(backup_dir)
        self.max_backups = max_backups

    def _ensure_backup_dir(self) -> None:
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def _list_backups(self) -> List[Path]:
        if not self.backup_dir.exists():
            return []
        files = [
            path
            for path in self.backup_dir.iterdir()
            if path.is_file() and path.name.startswith(BACKUP_FILE_PREFIX) and path.name.endswith(BACKUP_FILE_SUFFIX)
        ]
        return sorted(files, key=lambda path: path.stat().st_mtime, reverse=True)

    def create_backup(self, now: Optional[datetime] = None) -> Path:
        if self.database_path is None or not self.database_path.exists():
            logger.error("%s database file not found path=%s", BACKUP_PREFIX, self.database_path)
            raise BackupError("Database file not found")

        self._ensure_backup_dir()
        moment = now or datetime.now(timezone.utc)
        target = self.backup_dir / backup_file_name(moment)
        try:
            shutil.copyfile(self.database_path, target)
        except OSError as exc:
            logger.exception("%s copy failed target=%s", BACKUP_PREFIX, target)
            raise BackupError("Database copy failed") from exc

        logger.info("%s created file=%s", BACKUP_PREFIX, target.name)
        self.prune_old_backups()
        return target

    def prune_old_backups(self) -> List[Path]:
        backups = self._list_backups()
        if len(backups) <= self.max_backups:
            return []

        removed = []
        for path in backups[self.max_backups:]:
            try:
                path.unlink()
            except OSError:
                logger.exception("%s prune failed file=%s", BACKUP_PREFIX, path.name)
                continue
            removed.append(path)
            logger.info("%s pruned file=%s", BACKUP_PREFIX, path.name)

        logger.info("%s pruned_count=%s kept=%s", BACKUP_PREFIX, len(removed), self.max_backups)
        return removed

    def get_backup_info(self) -> Dict[str, Any]:
        backups = self._list_backups()
        return {
            "total_backups": len(backups),
            "newest_backup": backups[0].name if backups else None,
            "oldest_backup": backups[-1].name if backups else None,
            "backup_dir": str(self.backup_dir),
            "max_backups": self.max_backups,
        }


def get_database_backup() -> DatabaseBackup:
    return DatabaseBackup(database_path=sqlite_database_path())
