"""Database engine setup.

Production talks to MySQL (PyMySQL driver) through a shared connection pool.
For test runs (ENV=test) we fall back to a shared-cache in-memory SQLite
database so logic tests need no server.
"""

from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from monitor_web.core.config import settings


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        if settings.ENV.lower() == "test" and ":memory:" in url:
            # shared cache lets several connections see the same database
            url = "sqlite:///file:monitor_test_db?mode=memory&cache=shared&uri=true"
        else:
            db_path = make_url(url).database
            if db_path and db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(url, future=True, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        future=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
    )


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

