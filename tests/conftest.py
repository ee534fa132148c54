from __future__ import annotations

import os

os.environ.setdefault("APP_ENV", "test")

import datetime as dt  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, func, select  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from monitor_web.core.config import settings  # noqa: E402
from monitor_web.db import session as db_session  # noqa: E402
from monitor_web.db.base_class import Base  # noqa: E402
from monitor_web.db.session import SessionLocal  # noqa: E402
from monitor_web.models import alert_models  # noqa: E402,F401
from monitor_web.models.alert_schemas import AlertEventIn  # noqa: E402

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")


test_engine = create_engine(
    TEST_DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Ensure application code uses the test engine
settings.DATABASE_URL = TEST_DATABASE_URL  # type: ignore[attr-defined]
settings.ENV = "test"  # type: ignore[attr-defined]
db_session.engine = test_engine  # type: ignore[assignment]
SessionLocal.configure(bind=test_engine)


@pytest.fixture(autouse=True)
def _reset_database_state():
    """Ensure each test sees a fresh, empty set of alert tables."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Keep ingestion rate-limit counters from leaking between tests."""
    from monitor_web.api.rate_limit import limiter

    limiter.reset()
    yield


@pytest.fixture
def db_session():
    """Provide a database session bound to the test engine."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def event_factory():
    """Factory for probe events; keyword overrides replace the defaults."""
    def _create(**overrides) -> AlertEventIn:
        data = {
            "timestamp": "2025-09-03T10:15:00Z",
            "module": "redis",
            "service_name": "redis-cache",
            "event_name": "big_keys_detected",
            "details": "3 keys above 10MB",
            "host_ip": "10.0.0.12",
            "alert_type": "warning",
            "cluster_name": "prod-a",
            "hostname": "cache-01",
        }
        data.update(overrides)
        return AlertEventIn.model_validate(data)
    return _create


@pytest.fixture
def alert_row_factory(db_session):
    """Insert stored alerts directly, bypassing the dispatcher."""
    def _create(model, timestamp: dt.datetime, **overrides):
        data = {
            "timestamp": timestamp,
            "module": overrides.pop("module", model.__tablename__.removesuffix("_alerts")),
            "service_name": "svc",
            "event_name": "evt",
            "details": "",
            "host_ip": "10.0.0.1",
            "alert_type": "warning",
            "cluster_name": "prod-a",
            "hostname": "node-1",
        }
        data.update(overrides)
        row = model(**data)
        db_session.add(row)
        db_session.commit()
        return row
    return _create


@pytest.fixture
def row_count():
    """Count committed rows in a table using a fresh session."""
    def _count(model) -> int:
        with SessionLocal() as session:
            return session.scalar(select(func.count()).select_from(model))
    return _count


# FastAPI TestClient fixture
from monitor_web.api.main import app  # noqa: E402


@pytest.fixture
def client():  # noqa: D401 - simple factory fixture
    """Provide a FastAPI TestClient bound to the application."""
    yield TestClient(app)
    app.dependency_overrides.clear()
