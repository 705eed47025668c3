import os
from pathlib import Path

from dotenv import load_dotenv

# Loads .env from the project root
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./database.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_TEST = ENV_NORMALIZED == "test"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Business "today" for reports and order generation
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "Europe/Istanbul").strip()

# Subscription order generation
ORDER_GENERATION_HORIZON_DAYS = int(os.getenv("ORDER_GENERATION_HORIZON_DAYS", "7"))
ORDER_GENERATION_HOUR = int(os.getenv("ORDER_GENERATION_HOUR", "0"))
ORDER_GENERATION_MINUTE = int(os.getenv("ORDER_GENERATION_MINUTE", "5"))

# Backup
BACKUP_DIR = Path(os.getenv("BACKUP_DIR", "./backups"))
BACKUP_MAX_COUNT = int(os.getenv("BACKUP_MAX_COUNT", "30"))
BACKUP_TIMEZONE = os.getenv("BACKUP_TIMEZONE", APP_TIMEZONE).strip()
BACKUP_HOUR = int(os.getenv("BACKUP_HOUR", "20"))
BACKUP_MINUTE = int(os.getenv("BACKUP_MINUTE", "0"))

# Celery
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")

# Migrations
AUTO_APPLY_MIGRATIONS = _env_flag("AUTO_APPLY_MIGRATIONS", "0" if IS_TEST else "1")
REPO_ROOT = Path(__file__).resolve().parents[2]
ALEMBIC_CONFIG_PATH = Path(os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini")))

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]


def sqlite_database_path(url: str = DATABASE_URL) -> Path | None:
    """Return the file behind a ``sqlite:///`` URL, or None for other backends."""
    if not url.startswith("sqlite"):
        return None
    _, _, path = url.partition(":///")
    if not path or path.startswith(":memory:"):
        return None
    return Path(path)
