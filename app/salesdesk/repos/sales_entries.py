from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import and_, func, select

from app.salesdesk.db.models import (
    City,
    Location,
    PosTerminal,
    SalesEntry,
    SalesEntryDetail,
    SalesType,
    User,
)


@dataclass(frozen=True)
class EntryHeaderRow:
    id: int
    pos_id: int
    pos_name: str | None
    entry_date: date
    user_id: int
    user_name: str | None
    status: str
    submitted_at: datetime


@dataclass(frozen=True)
class EntryLineRow:
    sales_type_id: int
    sales_type_name: str | None
    amount: Decimal
    attachment_ref: str | None


@dataclass(frozen=True)
class EntryTotalRow:
    entry_id: int
    pos_id: int
    submitted_at: datetime
    total_amount: Decimal


@dataclass(frozen=True)
class RecentEntryRow:
    id: int
    entry_date: date
    submitted_at: datetime
    status: str
    pos_id: int
    pos_name: str | None
    location_name: str | None
    city_name: str | None
    user_id: int
    user_name: str | None
    total_amount: Decimal


@dataclass(frozen=True)
class DailyTypeTotalRow:
    entry_date: date
    sales_type_id: int
    sales_type_name: str | None
    entry_count: int
    total_amount: Decimal


def _decimal(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(Decimal("0.01"))


class SalesEntryRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, entry_id: int) -> SalesEntry | None:
        return self.db.get(SalesEntry, entry_id)

    def get_by_pos_and_date(self, pos_id: int, entry_date: date) -> SalesEntry | None:
        stmt = select(SalesEntry).where(SalesEntry.pos_id == pos_id, SalesEntry.entry_date == entry_date)
        return self.db.execute(stmt).scalars().first()

    def get_header(self, entry_id: int) -> EntryHeaderRow | None:
        stmt = (
            select(
                SalesEntry.id,
                SalesEntry.pos_id,
                PosTerminal.name,
                SalesEntry.entry_date,
                SalesEntry.user_id,
                User.name,
                SalesEntry.status,
                SalesEntry.submitted_at,
            )
            .outerjoin(PosTerminal, SalesEntry.pos_id == PosTerminal.id)
            .outerjoin(User, SalesEntry.user_id == User.id)
            .where(SalesEntry.id == entry_id)
        )
        row = self.db.execute(stmt).first()
        return EntryHeaderRow(*row) if row is not None else None

    def get_lines(self, entry_id: int) -> list[EntryLineRow]:
        stmt = (
            select(
                SalesEntryDetail.sales_type_id,
                SalesType.name,
                SalesEntryDetail.amount,
                SalesEntryDetail.attachment_ref,
            )
            .outerjoin(SalesType, SalesEntryDetail.sales_type_id == SalesType.id)
            .where(SalesEntryDetail.sales_entry_id == entry_id)
            .order_by(SalesType.name, SalesEntryDetail.sales_type_id)
        )
        return [
            EntryLineRow(
                sales_type_id=type_id,
                sales_type_name=name,
                amount=_decimal(amount),
                attachment_ref=attachment_ref,
            )
            for type_id, name, amount, attachment_ref in self.db.execute(stmt).all()
        ]

    def get_details_by_type(self, entry_id: int) -> dict[int, SalesEntryDetail]:
        stmt = select(SalesEntryDetail).where(SalesEntryDetail.sales_entry_id == entry_id)
        return {detail.sales_type_id: detail for detail in self.db.execute(stmt).scalars().all()}

    def totals_for_date(self, entry_date: date) -> dict[int, EntryTotalRow]:
        stmt = (
            select(
                SalesEntry.id,
                SalesEntry.pos_id,
                SalesEntry.submitted_at,
                func.coalesce(func.sum(SalesEntryDetail.amount), 0),
            )
            .outerjoin(SalesEntryDetail, SalesEntryDetail.sales_entry_id == SalesEntry.id)
            .where(SalesEntry.entry_date == entry_date)
            .group_by(SalesEntry.id, SalesEntry.pos_id, SalesEntry.submitted_at)
        )
        totals: dict[int, EntryTotalRow] = {}
        for entry_id, pos_id, submitted_at, total in self.db.execute(stmt).all():
            totals[pos_id] = EntryTotalRow(
                entry_id=entry_id,
                pos_id=pos_id,
                submitted_at=submitted_at,
                total_amount=_decimal(total),
            )
        return totals

    def sum_amounts(self, start: date, end: date, *, user_id: int | None = None) -> Decimal:
        stmt = (
            select(func.coalesce(func.sum(SalesEntryDetail.amount), 0))
            .select_from(SalesEntry)
            .join(SalesEntryDetail, SalesEntryDetail.sales_entry_id == SalesEntry.id)
            .where(SalesEntry.entry_date >= start, SalesEntry.entry_date <= end)
        )
        if user_id is not None:
            stmt = stmt.where(SalesEntry.user_id == user_id)
        return _decimal(self.db.execute(stmt).scalar_one())

    def count_unreported_terminals(self, entry_date: date) -> int:
        stmt = (
            select(func.count(PosTerminal.id))
            .select_from(PosTerminal)
            .outerjoin(
                SalesEntry,
                and_(SalesEntry.pos_id == PosTerminal.id, SalesEntry.entry_date == entry_date),
            )
            .where(PosTerminal.status == "active", SalesEntry.id.is_(None))
        )
        return self.db.execute(stmt).scalar_one()

    def list_recent(self, *, limit: int, user_id: int | None = None) -> list[RecentEntryRow]:
        totals = (
            select(
                SalesEntryDetail.sales_entry_id.label("entry_id"),
                func.sum(SalesEntryDetail.amount).label("total_amount"),
            )
            .group_by(SalesEntryDetail.sales_entry_id)
            .subquery()
        )
        stmt = (
            select(
                SalesEntry.id,
                SalesEntry.entry_date,
                SalesEntry.submitted_at,
                SalesEntry.status,
                SalesEntry.pos_id,
                PosTerminal.name,
                Location.name,
                City.name,
                SalesEntry.user_id,
                User.name,
                totals.c.total_amount,
            )
            .outerjoin(PosTerminal, SalesEntry.pos_id == PosTerminal.id)
            .outerjoin(Location, PosTerminal.location_id == Location.id)
            .outerjoin(City, Location.city_id == City.id)
            .outerjoin(User, SalesEntry.user_id == User.id)
            .outerjoin(totals, totals.c.entry_id == SalesEntry.id)
            .order_by(SalesEntry.submitted_at.desc(), SalesEntry.id.desc())
            .limit(limit)
        )
        if user_id is not None:
            stmt = stmt.where(SalesEntry.user_id == user_id)
        rows = []
        for row in self.db.execute(stmt).all():
            *head, total = row
            rows.append(RecentEntryRow(*head, total_amount=_decimal(total)))
        return rows

    def totals_by_day_and_type(self, start: date, end: date, *, limit: int) -> list[DailyTypeTotalRow]:
        stmt = (
            select(
                SalesEntry.entry_date,
                SalesEntryDetail.sales_type_id,
                SalesType.name,
                func.count(SalesEntry.id),
                func.coalesce(func.sum(SalesEntryDetail.amount), 0),
            )
            .select_from(SalesEntry)
            .join(SalesEntryDetail, SalesEntryDetail.sales_entry_id == SalesEntry.id)
            .outerjoin(SalesType, SalesEntryDetail.sales_type_id == SalesType.id)
            .where(SalesEntry.entry_date >= start, SalesEntry.entry_date <= end)
            .group_by(SalesEntry.entry_date, SalesEntryDetail.sales_type_id, SalesType.name)
            .order_by(SalesEntry.entry_date.desc(), SalesType.name)
            .limit(limit)
        )
        return [
            DailyTypeTotalRow(
                entry_date=entry_date,
                sales_type_id=type_id,
                sales_type_name=name,
                entry_count=count,
                total_amount=_decimal(total),
            )
            for entry_date, type_id, name, count, total in self.db.execute(stmt).all()
        ]
