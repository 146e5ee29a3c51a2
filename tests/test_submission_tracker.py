from datetime import date, timedelta

from sqlalchemy import select

from app.salesdesk.db.models import City, Location, PosTerminal
from app.salesdesk.services.tracker import TrackerReconciler
from tests.ledger_helpers import (
    auth_headers,
    card_receipt,
    create_cash_card_catalog,
    create_roster,
    create_sales_type,
    create_user,
    login,
    submit_entry,
)


def test_tracker_lists_every_active_terminal_once(client, db_session):
    roster = create_roster(db_session, terminal_names=("POS B", "POS A", "POS C"))
    roster.terminals[2].status = "inactive"
    db_session.commit()
    cash = create_sales_type(db_session, name="Cash")
    create_user(db_session, name="Field", email="field@example.com", terminals=roster.terminals[:1])
    create_user(db_session, name="Supervisor", email="sup@example.com", role="ADMIN")

    token = login(client, "field@example.com")
    assert submit_entry(client, token, pos_id=roster.terminals[0].id, entries={cash.id: "42.10"}).status_code == 200

    response = client.get("/submissions/tracker", headers=auth_headers(login(client, "sup@example.com")))

    assert response.status_code == 200
    payload = response.json()
    assert payload["date"] == date.today().isoformat()
    names = [row["pos_name"] for row in payload["rows"]]
    assert names == ["POS A", "POS B"]
    by_name = {row["pos_name"]: row for row in payload["rows"]}
    assert by_name["POS B"]["status"] == "submitted"
    assert by_name["POS B"]["total_amount"] == "42.10"
    assert by_name["POS B"]["entry_id"]
    assert by_name["POS B"]["submitted_at"]
    assert by_name["POS B"]["assigned_user_name"] == "Field"
    assert by_name["POS A"]["status"] == "not_submitted"
    assert by_name["POS A"]["entry_id"] is None
    assert by_name["POS A"]["submitted_at"] is None
    assert by_name["POS A"]["total_amount"] == "0.00"
    assert by_name["POS A"]["assigned_user_name"] is None
    assert payload["summary"] == {"total": 2, "submitted": 1, "not_submitted": 1}


def test_cash_card_scenario_shows_up_in_tracker(client, db_session):
    roster = create_roster(db_session)
    cash, card = create_cash_card_catalog(db_session)
    create_user(db_session, name="Field", email="field@example.com", terminals=roster.terminals)
    create_user(db_session, name="Supervisor", email="sup@example.com", role="ADMIN")
    field_token = login(client, "field@example.com")
    sup_token = login(client, "sup@example.com")

    rejected = submit_entry(client, field_token, pos_id=roster.terminals[0].id, entries={cash.id: "500", card.id: "300"})
    assert rejected.status_code == 400
    row = client.get("/submissions/tracker", headers=auth_headers(sup_token)).json()["rows"][0]
    assert row["status"] == "not_submitted"

    accepted = submit_entry(
        client,
        field_token,
        pos_id=roster.terminals[0].id,
        entries={cash.id: "500", card.id: "300"},
        files=card_receipt(card.id),
    )
    assert accepted.status_code == 200
    row = client.get("/submissions/tracker", headers=auth_headers(sup_token)).json()["rows"][0]
    assert row["status"] == "submitted"
    assert row["total_amount"] == "800.00"


def test_tracker_orders_by_city_location_terminal(client, db_session):
    create_roster(db_session, city_name="Trujillo", location_name="Plaza", terminal_names=("T1",))
    create_roster(db_session, city_name="Arequipa", location_name="Yanahuara", terminal_names=("Z1", "A1"))
    arequipa = db_session.execute(select(City).where(City.name == "Arequipa")).scalars().one()
    extra = Location(city_id=arequipa.id, name="Cayma")
    db_session.add(extra)
    db_session.flush()
    db_session.add(PosTerminal(location_id=extra.id, name="M1"))
    db_session.commit()

    rows = TrackerReconciler(db_session).status_for_date(date.today())

    assert [(row.city_name, row.location_name, row.pos_name) for row in rows] == [
        ("Arequipa", "Cayma", "M1"),
        ("Arequipa", "Yanahuara", "A1"),
        ("Arequipa", "Yanahuara", "Z1"),
        ("Trujillo", "Plaza", "T1"),
    ]


def test_multi_assignee_uses_lowest_user_id(client, db_session):
    roster = create_roster(db_session)
    first = create_user(db_session, name="Zoe", email="zoe@example.com", terminals=roster.terminals)
    second = create_user(db_session, name="Adam", email="adam@example.com", terminals=roster.terminals)

    rows = TrackerReconciler(db_session).status_for_date(date.today())

    assert first.id < second.id
    assert rows[0].assigned_user_name == "Zoe"


def test_tracker_for_another_date(client, db_session):
    roster = create_roster(db_session)
    cash = create_sales_type(db_session, name="Cash")
    create_user(db_session, name="Field", email="field@example.com", terminals=roster.terminals)
    create_user(db_session, name="Supervisor", email="sup@example.com", role="ADMIN")
    yesterday = date.today() - timedelta(days=1)
    token = login(client, "field@example.com")
    assert submit_entry(client, token, pos_id=roster.terminals[0].id, entries={cash.id: "7"}, entry_date=yesterday).status_code == 200

    sup_headers = auth_headers(login(client, "sup@example.com"))
    past = client.get("/submissions/tracker", params={"date": yesterday.isoformat()}, headers=sup_headers).json()
    today = client.get("/submissions/tracker", headers=sup_headers).json()

    assert past["rows"][0]["status"] == "submitted"
    assert today["rows"][0]["status"] == "not_submitted"


def test_tracker_requires_supervisor(client, db_session):
    create_user(db_session, name="Field", email="field@example.com")

    response = client.get("/submissions/tracker", headers=auth_headers(login(client, "field@example.com")))

    assert response.status_code == 403
    assert response.json()["code"] == "PERMISSION_DENIED"


def test_tracker_rejects_malformed_date(client, db_session):
    create_user(db_session, name="Supervisor", email="sup@example.com", role="ADMIN")

    response = client.get(
        "/submissions/tracker",
        params={"date": "19-10-2026"},
        headers=auth_headers(login(client, "sup@example.com")),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
