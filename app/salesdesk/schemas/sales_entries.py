from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel


class SalesEntrySubmitResponse(BaseModel):
    entry_id: int
    message: str
    trace_id: str


class SalesEntryAmendRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {"entries": {"1": "520.00", "2": "310.50"}}
        }
    }

    entries: dict[int, Decimal | str | int | float]


class SalesEntryAmendResponse(BaseModel):
    entry_id: int
    message: str
    trace_id: str


class SalesEntryLine(BaseModel):
    sales_type_id: int
    sales_type_name: str | None
    amount: Decimal
    attachment_ref: str | None
    attachment_url: str | None


class SalesEntryEditView(BaseModel):
    id: int
    pos_id: int
    pos_name: str | None
    entry_date: date
    user_id: int
    user_name: str | None
    status: str
    lines: list[SalesEntryLine]


class SalesEntryDetailView(SalesEntryEditView):
    submitted_at: datetime


class SalesEntryEditResponse(BaseModel):
    entry: SalesEntryEditView
    trace_id: str


class SalesEntryViewResponse(BaseModel):
    entry: SalesEntryDetailView
    trace_id: str
