"""
Shared fixtures for the study store test suite.

DATABASE_URL is pointed at a throwaway SQLite file before the package is
imported, because the SQLAlchemy engine is built at import time.
"""
from datetime import datetime, timedelta, timezone
import os
from pathlib import Path
import tempfile

import pytest

_TMP_DIR = Path(tempfile.mkdtemp(prefix="study_store_tests_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'study_store.db'}"

from study_store.config import Settings  # noqa: E402
from study_store.database import Base, engine  # noqa: E402
from study_store.models import account as _account  # noqa: E402,F401
from study_store.models import catalog as _catalog  # noqa: E402,F401

ADMIN_EMAIL = "admin@study.com"
ADMIN_PASSWORD = "admin123"


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        jwt_secret="test-secret",
        bills_dir=str(tmp_path / "bills"),
        files_dir=str(tmp_path / "files"),
        credential_sweep_seconds=0,
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def app(settings):
    from study_store.main import create_app

    return create_app(settings)


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def buyer(client):
    """Registered buyer account; returns (email, password)."""
    response = client.post(
        "/signup",
        json={"name": "Asha Rao", "email": "asha@example.com", "password": "pa55"},
    )
    assert response.status_code == 201, response.text
    return "asha@example.com", "pa55"


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD, "role": "admin"},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
