from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel


class TrackerItem(BaseModel):
    pos_id: int
    pos_name: str
    location_name: str
    city_name: str
    assigned_user_name: str | None
    entry_id: int | None
    submitted_at: datetime | None
    status: Literal["submitted", "not_submitted"]
    total_amount: Decimal


class TrackerSummary(BaseModel):
    total: int
    submitted: int
    not_submitted: int


class TrackerResponse(BaseModel):
    date: date
    rows: list[TrackerItem]
    summary: TrackerSummary
    trace_id: str
