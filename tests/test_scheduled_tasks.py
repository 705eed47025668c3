from celery.schedules import crontab

from dairy_app.models.subscription import WEEKDAYS
from dairy_app.services.backup import DatabaseBackup
import dairy_app.tasks.celery_app as celery_config
from dairy_app.tasks import maintenance
from dairy_app.tasks.celery_app import celery_app
from tests.factories import make_customer, make_subscription


def test_beat_schedule_registers_daily_jobs():
    schedule = celery_app.conf.beat_schedule

    assert schedule["daily-database-backup"]["task"] == "dairy_app.tasks.run_scheduled_backup"
    assert schedule["daily-subscription-orders"]["task"] == "dairy_app.tasks.generate_upcoming_orders"
    assert isinstance(schedule["daily-database-backup"]["schedule"], crontab)


def test_backup_schedule_uses_backup_timezone(monkeypatch):
    backup_schedule = celery_app.conf.beat_schedule["daily-database-backup"]["schedule"]
    monkeypatch.setattr(celery_config, "BACKUP_TIMEZONE", "America/New_York")

    assert backup_schedule.nowfun().tzinfo.zone == "America/New_York"


def test_scheduled_backup_writes_a_copy(tmp_path, monkeypatch):
    database = tmp_path / "database.db"
    database.write_bytes(b"data")
    service = DatabaseBackup(database, backup_dir=tmp_path / "backups", max_backups=2)
    monkeypatch.setattr(maintenance, "get_database_backup", lambda: service)

    name = maintenance.run_scheduled_backup()

    assert name is not None
    assert (tmp_path / "backups" / name).exists()


def test_scheduled_backup_failure_is_swallowed(tmp_path, monkeypatch):
    service = DatabaseBackup(tmp_path / "missing.db", backup_dir=tmp_path / "backups")
    monkeypatch.setattr(maintenance, "get_database_backup", lambda: service)

    assert maintenance.run_scheduled_backup() is None


def test_generate_upcoming_orders_task(db_session, monkeypatch):
    customer = make_customer(db_session)
    make_subscription(db_session, customer, list(WEEKDAYS))
    monkeypatch.setattr(maintenance, "SessionLocal", lambda: db_session)

    result = maintenance.generate_upcoming_orders(horizon_days=3)

    assert result == {"created": 3, "skipped": 0, "failed": 0}
