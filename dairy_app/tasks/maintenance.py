from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from dairy_app.core.config import ORDER_GENERATION_HORIZON_DAYS
from dairy_app.core.database import SessionLocal
from dairy_app.services.backup import BackupError, get_database_backup
from dairy_app.services.subscription_orders import generate_subscription_orders
from dairy_app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="dairy_app.tasks.run_scheduled_backup")
def run_scheduled_backup() -> Optional[str]:
    """Timer-driven backup; a failure is logged and simply waits for the next run."""
    logger.info("[BACKUP] scheduled backup started")
    try:
        path = get_database_backup().create_backup()
    except BackupError:
        logger.exception("[BACKUP] scheduled backup failed")
        return None
    return path.name


@celery_app.task(name="dairy_app.tasks.generate_upcoming_orders")
def generate_upcoming_orders(horizon_days: int = ORDER_GENERATION_HORIZON_DAYS) -> Dict[str, Any]:
    db = SessionLocal()
    try:
        result = generate_subscription_orders(db, horizon_days=horizon_days)
        return {
            "created": result.created_count,
            "skipped": result.skipped,
            "failed": result.failed,
        }
    finally:
        db.close()
