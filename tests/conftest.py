import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from coursehub.db.base import Base

ADMIN_KEY = "test-admin-key"


@pytest.fixture()
def db_session():
    """In-memory SQLite session with all tables created."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def seeded_session(db_session: Session) -> Session:
    from coursehub.catalog.seed import seed_catalog

    seed_catalog(db_session)
    return db_session


@pytest.fixture
def client(seeded_session: Session, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    """TestClient with get_db overridden to use the seeded in-memory session."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.setenv("SEED_CATALOG", "false")
    monkeypatch.setenv("PAYMENT_DEMO_MODE", "true")
    monkeypatch.setenv("PAYMENT_DEMO_DELAY_S", "0")
    monkeypatch.setenv("ADMIN_API_KEY", ADMIN_KEY)

    from coursehub.core.settings import get_settings

    get_settings.cache_clear()

    from coursehub.api.deps import get_db
    from coursehub.main import app

    def _override_db():
        yield seeded_session

    app.dependency_overrides[get_db] = _override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

    get_settings.cache_clear()
    os.environ.pop("DATABASE_URL", None)
