from __future__ import annotations

from datetime import date

from dairy_app.core import clock
from dairy_app.services.backup import DatabaseBackup, get_database_backup


def get_today() -> date:
    """Reference date for reports and order generation; tests override it."""
    return clock.today()


def get_backup_service() -> DatabaseBackup:
    return get_database_backup()
