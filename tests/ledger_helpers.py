from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date

from app.salesdesk.core.security import get_password_hash
from app.salesdesk.db.models import City, Location, PosTerminal, SalesType, User

DEFAULT_PASSWORD = "Pass1234!"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
PDF_BYTES = b"%PDF-1.4\n%test\n"


@dataclass
class Roster:
    city: City
    location: Location
    terminals: list[PosTerminal]


def login(client, email: str, password: str = DEFAULT_PASSWORD) -> str:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def create_roster(
    db_session,
    *,
    city_name: str = "Lima",
    location_name: str = "Centro",
    terminal_names: tuple[str, ...] = ("POS 1",),
) -> Roster:
    city = City(name=city_name)
    db_session.add(city)
    db_session.flush()
    location = Location(city_id=city.id, name=location_name)
    db_session.add(location)
    db_session.flush()
    terminals = [PosTerminal(location_id=location.id, name=name) for name in terminal_names]
    db_session.add_all(terminals)
    db_session.commit()
    return Roster(city=city, location=location, terminals=terminals)


def create_user(
    db_session,
    *,
    name: str,
    email: str,
    role: str = "USER",
    status: str = "active",
    terminals: list[PosTerminal] | None = None,
    password: str = DEFAULT_PASSWORD,
) -> User:
    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(password),
        role=role,
        status=status,
    )
    user.terminals = list(terminals or [])
    db_session.add(user)
    db_session.commit()
    return user


def create_sales_type(
    db_session,
    *,
    name: str,
    attachment_applicable: bool = False,
    attachment_required: bool = False,
    status: str = "active",
) -> SalesType:
    sales_type = SalesType(
        name=name,
        attachment_applicable=attachment_applicable,
        attachment_required=attachment_required,
        status=status,
    )
    db_session.add(sales_type)
    db_session.commit()
    return sales_type


def create_cash_card_catalog(db_session) -> tuple[SalesType, SalesType]:
    cash = create_sales_type(db_session, name="Cash")
    card = create_sales_type(db_session, name="Card", attachment_applicable=True, attachment_required=True)
    return cash, card


def submit_entry(
    client,
    token: str,
    *,
    pos_id: int,
    entries: dict,
    entry_date: date | None = None,
    files: dict | None = None,
):
    data = {
        "pos_id": str(pos_id),
        "entry_date": (entry_date or date.today()).isoformat(),
        "entries": json.dumps({str(key): str(value) for key, value in entries.items()}),
    }
    return client.post(
        "/sales-entries/submit",
        data=data,
        files=files or {},
        headers=auth_headers(token),
    )


def card_receipt(sales_type_id: int, *, filename: str = "receipt.png", content: bytes = PNG_BYTES, content_type: str = "image/png"):
    return {f"attachment_{sales_type_id}": (filename, content, content_type)}
