from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from app.salesdesk.repos.roster import RosterRepository
from app.salesdesk.repos.sales_entries import SalesEntryRepository

STATUS_SUBMITTED = "submitted"
STATUS_NOT_SUBMITTED = "not_submitted"


@dataclass(frozen=True)
class TrackerRow:
    pos_id: int
    pos_name: str
    location_name: str
    city_name: str
    assigned_user_name: str | None
    entry_id: int | None
    submitted_at: datetime | None
    status: str
    total_amount: Decimal


class TrackerReconciler:
    """Per-terminal submission status for one calendar day."""

    def __init__(self, db):
        self.roster = RosterRepository(db)
        self.entries = SalesEntryRepository(db)

    def status_for_date(self, entry_date: date) -> list[TrackerRow]:
        terminals = self.roster.list_active_roster()
        assignees = self.roster.primary_assignees([terminal.pos_id for terminal in terminals])
        totals = self.entries.totals_for_date(entry_date)

        rows: list[TrackerRow] = []
        for terminal in terminals:
            entry = totals.get(terminal.pos_id)
            rows.append(
                TrackerRow(
                    pos_id=terminal.pos_id,
                    pos_name=terminal.pos_name,
                    location_name=terminal.location_name,
                    city_name=terminal.city_name,
                    assigned_user_name=assignees.get(terminal.pos_id),
                    entry_id=entry.entry_id if entry else None,
                    submitted_at=entry.submitted_at if entry else None,
                    status=STATUS_SUBMITTED if entry else STATUS_NOT_SUBMITTED,
                    total_amount=entry.total_amount if entry else Decimal("0.00"),
                )
            )
        return rows

    @staticmethod
    def summarize(rows: list[TrackerRow]) -> dict[str, int]:
        submitted = sum(1 for row in rows if row.status == STATUS_SUBMITTED)
        return {"total": len(rows), "submitted": submitted, "not_submitted": len(rows) - submitted}
