from datetime import datetime

import pytz
from celery import Celery
from celery.schedules import crontab

from dairy_app.core.config import (
    APP_TIMEZONE,
    BACKUP_HOUR,
    BACKUP_MINUTE,
    BACKUP_TIMEZONE,
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    ORDER_GENERATION_HOUR,
    ORDER_GENERATION_MINUTE,
)

celery_app = Celery(
    "dairy_app",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
    include=["dairy_app.tasks.maintenance"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=APP_TIMEZONE,
    enable_utc=True,
)


def _backup_now() -> datetime:
    return datetime.now(pytz.timezone(BACKUP_TIMEZONE))


# Daily jobs; the backup follows its own timezone
celery_app.conf.beat_schedule = {
    "daily-database-backup": {
        "task": "dairy_app.tasks.run_scheduled_backup",
        "schedule": crontab(hour=BACKUP_HOUR, minute=BACKUP_MINUTE, nowfun=_backup_now),
    },
    "daily-subscription-orders": {
        "task": "dairy_app.tasks.generate_upcoming_orders",
        "schedule": crontab(hour=ORDER_GENERATION_HOUR, minute=ORDER_GENERATION_MINUTE),
    },
}

if __name__ == "__main__":
    celery_app.start()
