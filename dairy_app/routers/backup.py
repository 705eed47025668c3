from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from dairy_app.deps import get_backup_service
from dairy_app.services.backup import BackupError, DatabaseBackup

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/backup", tags=["backup"])


@router.post("/manual")
def manual_backup(backup: DatabaseBackup = Depends(get_backup_service)):
    logger.info("[BACKUP] manual backup requested")
    try:
        path = backup.create_backup()
    except BackupError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Backup failed",
        ) from exc
    return {"message": "Manual backup completed", "file": path.name}


@router.get("/info")
def backup_info(backup: DatabaseBackup = Depends(get_backup_service)):
    return backup.get_backup_info()
