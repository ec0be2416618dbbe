import os
from datetime import datetime, timezone

# Settings are read at import time; make sure the app can start without a .env
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from connectfive.main import app  # noqa: E402
from connectfive.core.database import Base, get_db  # noqa: E402
from connectfive.core.limiter import limiter  # noqa: E402
from connectfive.services.notifications import stats_changes  # noqa: E402

# In-memory SQLite; StaticPool ensures one shared DB across all connections
SQLALCHEMY_DATABASE_URL = "sqlite://"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def override_get_db():
    database = TestingSessionLocal()
    try:
        yield database
    finally:
        database.close()


@pytest.fixture(autouse=True)
def _disable_rate_limiter():
    """Disable the rate limiter for all tests so rapid requests don't return 429."""
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture(autouse=True)
def _reset_stats_changes():
    """Drop subscribers registered during a test."""
    yield
    stats_changes.clear()


@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def file_session_factory(tmp_path):
    """
    Session factory over a file-backed SQLite database.

    Every session gets its own connection, which is what the
    optimistic-concurrency tests need; the shared in-memory engine above
    would hand all threads the same connection.
    """
    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'player_stats.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=file_engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    finally:
        file_engine.dispose()


@pytest.fixture(scope="function")
def client():
    Base.metadata.create_all(bind=engine)
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clock():
    """Deterministic clock for stat timestamps."""
    return fixed_clock
