import importlib
import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from alembic import command
from alembic.config import Config

from tests.db_utils import provision_test_database

ROOT_DIR = Path(__file__).resolve().parents[1]


def _setup_app(database_url: str, uploads_dir: Path):
    os.environ["DATABASE_URL"] = database_url
    os.environ["SECRET_KEY"] = "test-secret"
    os.environ["ATTACHMENTS_STORAGE_PATH"] = str(uploads_dir)

    import app.salesdesk.core.config as config
    import app.salesdesk.db.session as session
    import app.main as main

    importlib.reload(config)
    importlib.reload(session)
    importlib.reload(main)

    return main.create_app(), session


def _run_migrations(database_url: str):
    os.environ["DATABASE_URL"] = database_url
    config = Config(str(ROOT_DIR / "alembic.ini"))
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")


@pytest.fixture()
def attachment_store(tmp_path: Path):
    from app.salesdesk.services.attachments import LocalAttachmentStore

    return LocalAttachmentStore(root=tmp_path / "uploads", url_prefix="/uploads")


@pytest.fixture()
def database_url(tmp_path: Path, monkeypatch):
    url, cleanup = provision_test_database(os.getenv("DATABASE_URL"), tmp_path)
    # Restored after the test so the next one starts from the caller's URL.
    monkeypatch.setenv("DATABASE_URL", url)
    _run_migrations(url)
    yield url
    if cleanup:
        cleanup()


@pytest.fixture()
def client(database_url: str, attachment_store):
    from app.salesdesk.core.deps import get_attachment_store
    from app.salesdesk.core.metrics import metrics

    metrics.reset()
    app, session = _setup_app(database_url, attachment_store.root)
    app.dependency_overrides[get_attachment_store] = lambda: attachment_store

    with TestClient(app) as client:
        yield client

    session.engine.dispose()


@pytest.fixture()
def db_session(client):
    from app.salesdesk.db.session import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
