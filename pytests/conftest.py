from __future__ import annotations

import os
import tempfile

# Keep test runs from writing into ./logs.
os.environ.setdefault(
    "INSIDER_FILINGS_LOG_DIR",
    os.path.join(tempfile.gettempdir(), "insider_filings_test_logs"),
)

import pytest

from api.services.form4_service import Form4Service
from app import create_app
from pytests.common import FakeSession, create_empty_sqlite_db, default_routes, patch_app_db


@pytest.fixture()
def sec_session() -> FakeSession:
    """Fake SEC backend for AAPL with one Form 4 filing (see pytests.common)."""

    return FakeSession(default_routes())


@pytest.fixture()
def form4_service(sec_session) -> Form4Service:
    return Form4Service(session=sec_session)


@pytest.fixture()
def app(tmp_path, monkeypatch, form4_service):
    """Flask app backed by a temp SQLite DB and the fake SEC session."""

    session, engine = create_empty_sqlite_db(tmp_path / "test.sqlite")
    session.close()
    patch_app_db(monkeypatch, engine)

    flask_app = create_app(form4_service=form4_service)
    flask_app.config.update(TESTING=True)
    yield flask_app

    engine.dispose()


@pytest.fixture()
def client(app):
    with app.test_client() as c:
        yield c
