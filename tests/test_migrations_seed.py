import os
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, func, inspect, select
from sqlalchemy.orm import sessionmaker

from app.salesdesk.core.security import verify_password
from app.salesdesk.db.models import User
from app.salesdesk.db.seed import run_seed

ROOT_DIR = Path(__file__).resolve().parents[1]


def _run_migrations(database_url: str):
    os.environ["DATABASE_URL"] = database_url
    config = Config(str(ROOT_DIR / "alembic.ini"))
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")


def test_migrations_apply(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "")
    database_url = f"sqlite+pysqlite:///{tmp_path / 'migrations.db'}"
    _run_migrations(database_url)

    engine = create_engine(database_url, future=True)
    inspector = inspect(engine)
    tables = set(inspector.get_table_names())

    assert {
        "cities",
        "locations",
        "pos_terminals",
        "users",
        "user_pos",
        "sales_types",
        "sales_entries",
        "sales_entry_details",
    } <= tables

    unique_constraints = {
        tuple(constraint["column_names"]) for constraint in inspector.get_unique_constraints("sales_entries")
    }
    unique_indexes = {
        tuple(index["column_names"]) for index in inspector.get_indexes("sales_entries") if index.get("unique")
    }
    assert ("pos_id", "entry_date") in unique_constraints | unique_indexes
    engine.dispose()


def test_seed_is_idempotent(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "")
    database_url = f"sqlite+pysqlite:///{tmp_path / 'seed.db'}"
    _run_migrations(database_url)

    engine = create_engine(database_url, future=True)
    SessionLocal = sessionmaker(bind=engine, future=True)

    with SessionLocal() as db:
        first = run_seed(db)
        users_count = db.scalar(select(func.count()).select_from(User))

        second = run_seed(db)
        users_count_after = db.scalar(select(func.count()).select_from(User))

        assert users_count == users_count_after == 1
        assert first.id == second.id
        assert second.role == "SUPERADMIN"
        assert second.status == "active"
        assert verify_password("change-me", second.hashed_password)
    engine.dispose()
