import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dairy_app.core.config import ALEMBIC_CONFIG_PATH, CORS_ORIGINS
from dairy_app.core.database import engine
from dairy_app.core.errors import register_exception_handlers
from dairy_app.core.logging_setup import configure_logging
from dairy_app.core.startup_checks import apply_migrations, ensure_database_directory, ensure_migrations_applied
from dairy_app.middleware.observability import ObservabilityMiddleware
import dairy_app.models  # registers every table on Base.metadata

from dairy_app.routers.backup import router as backup_router
from dairy_app.routers.customers import router as customers_router
from dairy_app.routers.orders import router as orders_router
from dairy_app.routers.reports import router as reports_router
from dairy_app.routers.subscriptions import router as subscriptions_router

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"


def _startup_tasks() -> None:
    try:
        ensure_database_directory()
        apply_migrations(alembic_config_path=ALEMBIC_CONFIG_PATH)
        ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise
    logger.info("%s ready", STARTUP_PREFIX)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Dairy Delivery API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)
register_exception_handlers(app)

# Routers
app.include_router(customers_router)
app.include_router(orders_router)
app.include_router(subscriptions_router)
app.include_router(reports_router)
app.include_router(backup_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
@app.get("/api/health")
def health():
    return {"status": "OK", "message": "Server is running"}
