import os
import threading
from datetime import date

import pytest
from sqlalchemy import func, select

from app.salesdesk.core.context import RequestContext
from app.salesdesk.core.error_catalog import AppError, ErrorCatalog
from app.salesdesk.db.models import SalesEntry, SalesEntryDetail
from app.salesdesk.repos.sales_entries import SalesEntryRepository
from app.salesdesk.services.sales_ledger import SalesLedger
from tests.db_utils import is_postgres_url
from tests.ledger_helpers import create_roster, create_sales_type, create_user, login, submit_entry


def _context(user) -> RequestContext:
    return RequestContext(user_id=user.id, role=user.role, name=user.name, trace_id="dup-test")


def test_storage_constraint_rejects_duplicate_without_precheck(client, db_session, attachment_store, monkeypatch):
    roster = create_roster(db_session)
    cash = create_sales_type(db_session, name="Cash")
    user = create_user(db_session, name="Field", email="field@example.com", terminals=roster.terminals)
    pos_id = roster.terminals[0].id

    monkeypatch.setattr(SalesEntryRepository, "get_by_pos_and_date", lambda self, pos_id, entry_date: None)

    from app.salesdesk.db.session import SessionLocal

    first = SessionLocal()
    second = SessionLocal()
    try:
        SalesLedger(first, store=attachment_store).submit(
            _context(user), pos_id=pos_id, entry_date=date.today(), line_amounts={cash.id: "10"}
        )
        with pytest.raises(AppError) as exc_info:
            SalesLedger(second, store=attachment_store).submit(
                _context(user), pos_id=pos_id, entry_date=date.today(), line_amounts={cash.id: "20"}
            )
    finally:
        first.close()
        second.close()

    assert exc_info.value.error is ErrorCatalog.DUPLICATE_ENTRY
    assert db_session.scalar(select(func.count()).select_from(SalesEntry)) == 1
    assert db_session.scalar(select(func.count()).select_from(SalesEntryDetail)) == 1


def test_duplicate_metric_recorded(client, db_session):
    roster = create_roster(db_session)
    cash = create_sales_type(db_session, name="Cash")
    create_user(db_session, name="Field", email="field@example.com", terminals=roster.terminals)
    token = login(client, "field@example.com")

    assert submit_entry(client, token, pos_id=roster.terminals[0].id, entries={cash.id: "1"}).status_code == 200
    assert submit_entry(client, token, pos_id=roster.terminals[0].id, entries={cash.id: "1"}).status_code == 400

    body = client.get("/ops/metrics").text
    assert "sales_entries_duplicate_total 1.0" in body
    assert "sales_entries_submitted_total 1.0" in body


def test_same_terminal_different_days_are_independent(client, db_session):
    roster = create_roster(db_session)
    cash = create_sales_type(db_session, name="Cash")
    create_user(db_session, name="Field", email="field@example.com", terminals=roster.terminals)
    token = login(client, "field@example.com")

    today = submit_entry(client, token, pos_id=roster.terminals[0].id, entries={cash.id: "1"})
    yesterday = submit_entry(
        client,
        token,
        pos_id=roster.terminals[0].id,
        entries={cash.id: "1"},
        entry_date=date.fromordinal(date.today().toordinal() - 1),
    )

    assert today.status_code == 200
    assert yesterday.status_code == 200


@pytest.mark.skipif(
    not is_postgres_url(os.getenv("DATABASE_URL")),
    reason="concurrent writers need a server database",
)
def test_concurrent_submissions_leave_one_entry(client, db_session, attachment_store):
    roster = create_roster(db_session)
    cash = create_sales_type(db_session, name="Cash")
    user = create_user(db_session, name="Field", email="field@example.com", terminals=roster.terminals)
    pos_id = roster.terminals[0].id
    workers = 8
    barrier = threading.Barrier(workers)
    outcomes: list[str] = []
    lock = threading.Lock()

    from app.salesdesk.db.session import SessionLocal

    def _submit(amount: int) -> None:
        db = SessionLocal()
        try:
            barrier.wait()
            SalesLedger(db, store=attachment_store).submit(
                _context(user), pos_id=pos_id, entry_date=date.today(), line_amounts={cash.id: str(amount)}
            )
            result = "ok"
        except AppError as exc:
            result = exc.error.code
        finally:
            db.close()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=_submit, args=(index,)) for index in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("DUPLICATE_ENTRY") == workers - 1
    assert db_session.scalar(select(func.count()).select_from(SalesEntry)) == 1
    assert db_session.scalar(select(func.count()).select_from(SalesEntryDetail)) == 1
