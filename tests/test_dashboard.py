from datetime import date, datetime, timedelta
from decimal import Decimal

from app.salesdesk.db.models import SalesEntry, SalesEntryDetail
from tests.ledger_helpers import auth_headers, create_roster, create_sales_type, create_user, login


def _add_entry(db_session, *, user, terminal, sales_type, entry_date: date, amount: str, submitted_at=None):
    entry = SalesEntry(
        user_id=user.id,
        pos_id=terminal.id,
        entry_date=entry_date,
        status="submitted",
        submitted_at=submitted_at or datetime.combine(entry_date, datetime.min.time()) + timedelta(hours=20),
    )
    db_session.add(entry)
    db_session.flush()
    db_session.add(SalesEntryDetail(sales_entry_id=entry.id, sales_type_id=sales_type.id, amount=Decimal(amount)))
    db_session.commit()
    return entry


def _expected(entries: list[tuple[date, Decimal]], today: date) -> dict[str, Decimal]:
    week_start = today - timedelta(days=6)
    month_start = today.replace(day=1)
    return {
        "today_total": sum((amount for day, amount in entries if day == today), Decimal("0.00")),
        "week_to_date_total": sum((amount for day, amount in entries if week_start <= day <= today), Decimal("0.00")),
        "month_to_date_total": sum((amount for day, amount in entries if month_start <= day <= today), Decimal("0.00")),
    }


def _setup(db_session):
    roster = create_roster(db_session, terminal_names=("POS 1", "POS 2", "POS 3"))
    cash = create_sales_type(db_session, name="Cash")
    alice = create_user(db_session, name="Alice", email="alice@example.com", terminals=roster.terminals[:1])
    bob = create_user(db_session, name="Bob", email="bob@example.com", terminals=roster.terminals[1:2])
    create_user(db_session, name="Supervisor", email="sup@example.com", role="ADMIN")
    today = date.today()
    plan = [
        (alice, roster.terminals[0], today, "100.00"),
        (alice, roster.terminals[0], today - timedelta(days=3), "40.00"),
        (alice, roster.terminals[0], today - timedelta(days=10), "7.00"),
        (alice, roster.terminals[0], today - timedelta(days=40), "1000.00"),
        (bob, roster.terminals[1], today, "55.55"),
        (bob, roster.terminals[1], today + timedelta(days=1), "999.00"),
    ]
    for user, terminal, day, amount in plan:
        _add_entry(db_session, user=user, terminal=terminal, sales_type=cash, entry_date=day, amount=amount)
    return today, plan, alice, bob


def test_stats_for_base_user_are_self_scoped(client, db_session):
    today, plan, alice, _ = _setup(db_session)
    own = [(day, Decimal(amount)) for user, _, day, amount in plan if user is alice]

    response = client.get("/dashboard/stats", headers=auth_headers(login(client, "alice@example.com")))

    assert response.status_code == 200
    payload = response.json()
    expected = _expected(own, today)
    for key, value in expected.items():
        assert Decimal(payload[key]) == value, key
    assert payload["pending_count"] == 0
    assert payload["scope"] == "self"


def test_stats_for_supervisor_cover_everyone(client, db_session):
    today, plan, _, _ = _setup(db_session)
    everything = [(day, Decimal(amount)) for _, _, day, amount in plan]

    response = client.get("/dashboard/stats", headers=auth_headers(login(client, "sup@example.com")))

    assert response.status_code == 200
    payload = response.json()
    expected = _expected(everything, today)
    for key, value in expected.items():
        assert Decimal(payload[key]) == value, key
    assert Decimal(payload["today_total"]) == Decimal("155.55")
    # POS 3 is the only active terminal without an entry today.
    assert payload["pending_count"] == 1
    assert payload["scope"] == "all"


def test_recent_entries_are_scoped_and_ordered(client, db_session):
    _setup(db_session)

    alice_view = client.get("/dashboard/recent-entries", headers=auth_headers(login(client, "alice@example.com")))
    sup_view = client.get(
        "/dashboard/recent-entries",
        params={"limit": 3},
        headers=auth_headers(login(client, "sup@example.com")),
    )

    assert alice_view.status_code == 200
    alice_entries = alice_view.json()["entries"]
    assert {entry["user_name"] for entry in alice_entries} == {"Alice"}
    assert len(alice_entries) == 4
    submitted = [entry["submitted_at"] for entry in alice_entries]
    assert submitted == sorted(submitted, reverse=True)
    assert alice_entries[0]["total_amount"] == "100.00"
    assert alice_entries[0]["city_name"] == "Lima"
    assert alice_entries[0]["location_name"] == "Centro"

    sup_entries = sup_view.json()["entries"]
    assert len(sup_entries) == 3
    assert sup_entries[0]["user_name"] == "Bob"
    assert sup_entries[0]["total_amount"] == "999.00"


def test_recent_entries_default_limit(client, db_session):
    roster = create_roster(db_session)
    cash = create_sales_type(db_session, name="Cash")
    user = create_user(db_session, name="Alice", email="alice@example.com", terminals=roster.terminals)
    for offset in range(12):
        _add_entry(
            db_session,
            user=user,
            terminal=roster.terminals[0],
            sales_type=cash,
            entry_date=date.today() - timedelta(days=offset),
            amount="1.00",
        )

    response = client.get("/dashboard/recent-entries", headers=auth_headers(login(client, "alice@example.com")))

    assert response.status_code == 200
    assert len(response.json()["entries"]) == 10


def test_dashboard_requires_login(client):
    assert client.get("/dashboard/stats").status_code == 401
