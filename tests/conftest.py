import os

os.environ.setdefault("ENV", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dairy_app.core.database import Base, get_db
from dairy_app.deps import get_today
from tests.factories import TODAY


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def client(db_session, monkeypatch):
    from dairy_app import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    main.app.dependency_overrides[get_db] = override_get_db
    main.app.dependency_overrides[get_today] = lambda: TODAY
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()
