from __future__ import annotations

import os
import tempfile

import pytest
from fastapi.testclient import TestClient

# Settings are read at import time, so the environment is fixed before the app loads
_db_path = os.path.join(tempfile.gettempdir(), f"eventhub-test-{os.getpid()}.db")
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", f"sqlite:///{_db_path}")
os.environ.setdefault("JWT_SECRET", "test_jwt_secret_32_chars_minimum")
os.environ.setdefault("ACCESS_TOKEN_TTL_SECONDS", "900")
os.environ.setdefault("ENV", "local")
os.environ.setdefault("EVENT_TIMEZONE", "UTC")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ.pop("SMTP_HOST", None)

from eventhub import notifications  # noqa: E402
from eventhub.db import SessionLocal, engine  # noqa: E402
from eventhub.main import app  # noqa: E402
from eventhub.models import Base  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)
    engine.dispose()
    if os.path.exists(_db_path):
        os.remove(_db_path)


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def clean_db():
    # Ensure a clean slate for each test
    db = SessionLocal()
    try:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch) -> list[dict]:
    outbox: list[dict] = []

    def _capture(to, subject, text, html=None):
        outbox.append({"to": to, "subject": subject, "text": text, "html": html})

    monkeypatch.setattr(notifications, "queue_email", _capture)
    return outbox
