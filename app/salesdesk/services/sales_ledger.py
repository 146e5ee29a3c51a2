"""Daily sales ledger: one entry per terminal per calendar day.

Submissions are written in a single scoped transaction. The (pos_id,
entry_date) unique constraint is the final arbiter of duplicates; the
pre-check only gives the common case a friendlier path. Attachments are
written before their detail row so a committed row never points at a blob
that failed to land.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
import logging
from typing import Callable, Mapping

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.salesdesk.core.context import RequestContext
from app.salesdesk.core.error_catalog import AppError, ErrorCatalog
from app.salesdesk.core.errors import is_lock_timeout
from app.salesdesk.core.logging import log_json
from app.salesdesk.core.metrics import metrics
from app.salesdesk.db.models import SalesEntry, SalesEntryDetail, SalesType
from app.salesdesk.db.session import scoped_transaction
from app.salesdesk.repos.roster import RosterRepository
from app.salesdesk.repos.sales_entries import SalesEntryRepository
from app.salesdesk.repos.sales_types import SalesTypeRepository
from app.salesdesk.services.access_policy import SCOPE_ALL, Capability, ensure_allowed
from app.salesdesk.services.attachments import (
    AttachmentRejected,
    AttachmentStoreError,
    AttachmentUpload,
    LocalAttachmentStore,
)

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")
_AMOUNT_TYPE = SalesEntryDetail.__table__.c.amount.type
# Largest value the amount column stores exactly.
MAX_AMOUNT = Decimal(10) ** (_AMOUNT_TYPE.precision - _AMOUNT_TYPE.scale) - _CENT
_DUPLICATE_MARKERS = (
    "uq_sales_entries_pos_date",
    "sales_entries.pos_id, sales_entries.entry_date",
)


@dataclass(frozen=True)
class EntryLine:
    sales_type_id: int
    sales_type_name: str | None
    amount: Decimal
    attachment_ref: str | None
    attachment_url: str | None


@dataclass(frozen=True)
class EntryProjection:
    id: int
    pos_id: int
    pos_name: str | None
    entry_date: date
    user_id: int
    user_name: str | None
    status: str
    submitted_at: datetime
    lines: list[EntryLine]


def parse_amount(value, *, field: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": f"{field} must be a number"})
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": f"{field} must be a number"}) from exc
    if not amount.is_finite():
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": f"{field} must be finite"})
    if amount < 0:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": f"{field} must not be negative"})
    if amount > MAX_AMOUNT:
        raise AppError(
            ErrorCatalog.VALIDATION_ERROR,
            details={"message": f"{field} must not exceed {MAX_AMOUNT}", "max_amount": MAX_AMOUNT},
        )
    try:
        return amount.quantize(_CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": f"{field} must be a number"}) from exc


def parse_line_amounts(line_amounts: Mapping) -> dict[int, Decimal]:
    if not isinstance(line_amounts, Mapping):
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": "entries must be an object"})
    parsed: dict[int, Decimal] = {}
    for raw_key, raw_amount in line_amounts.items():
        try:
            sales_type_id = int(str(raw_key).strip())
        except ValueError as exc:
            raise AppError(
                ErrorCatalog.VALIDATION_ERROR,
                details={"message": "sales type id must be an integer", "sales_type_id": raw_key},
            ) from exc
        parsed[sales_type_id] = parse_amount(raw_amount, field=f"amount for sales type {sales_type_id}")
    return parsed


def _is_duplicate_entry(exc: IntegrityError) -> bool:
    message = str(exc.orig if exc.orig is not None else exc)
    return any(marker in message for marker in _DUPLICATE_MARKERS)


class SalesLedger:
    def __init__(
        self,
        db,
        *,
        store: LocalAttachmentStore | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.db = db
        self.store = store or LocalAttachmentStore()
        self.today = today
        self.entries = SalesEntryRepository(db)
        self.roster = RosterRepository(db)
        self.sales_types = SalesTypeRepository(db)

    def submit(
        self,
        context: RequestContext,
        *,
        pos_id: int,
        entry_date: date,
        line_amounts: Mapping,
        attachments: Mapping[int, AttachmentUpload] | None = None,
    ) -> int:
        decision = ensure_allowed(context, Capability.SALES_ENTRY_SUBMIT)
        self._ensure_terminal(context, pos_id, elevated=decision.scope == SCOPE_ALL)
        if entry_date > self.today():
            raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": "entry_date cannot be in the future"})

        catalog = list(self.sales_types.list_active())
        amounts = self._complete_amounts(catalog, parse_line_amounts(line_amounts))
        uploads = self._accepted_uploads(catalog, attachments or {})

        try:
            with scoped_transaction(self.db):
                if self.entries.get_by_pos_and_date(pos_id, entry_date) is not None:
                    raise AppError(ErrorCatalog.DUPLICATE_ENTRY)
                entry = SalesEntry(
                    user_id=context.user_id,
                    pos_id=pos_id,
                    entry_date=entry_date,
                    status="submitted",
                    submitted_at=datetime.utcnow(),
                )
                self.db.add(entry)
                self.db.flush()
                for sales_type in catalog:
                    reference = None
                    upload = uploads.get(sales_type.id)
                    if upload is not None:
                        reference = self._store_upload(upload, sales_type, context)
                    self.db.add(
                        SalesEntryDetail(
                            sales_entry_id=entry.id,
                            sales_type_id=sales_type.id,
                            amount=amounts[sales_type.id],
                            attachment_ref=reference,
                        )
                    )
                self.db.flush()
                entry_id = entry.id
        except IntegrityError as exc:
            if not _is_duplicate_entry(exc):
                raise self._storage_failure(context, exc, action="submit") from exc
            self._log_duplicate(context, pos_id, entry_date, source="constraint")
            raise AppError(ErrorCatalog.DUPLICATE_ENTRY) from exc
        except SQLAlchemyError as exc:
            if is_lock_timeout(exc):
                raise
            raise self._storage_failure(context, exc, action="submit") from exc
        except AppError as exc:
            if exc.error is ErrorCatalog.DUPLICATE_ENTRY:
                self._log_duplicate(context, pos_id, entry_date, source="precheck")
            raise

        metrics.increment_sales_entry_submitted()
        log_json(
            logger,
            {
                "event": "sales_entry.submitted",
                "trace_id": context.trace_id,
                "user_id": context.user_id,
                "entry_id": entry_id,
                "pos_id": pos_id,
                "entry_date": entry_date.isoformat(),
                "line_count": len(catalog),
                "attachment_count": len(uploads),
            },
        )
        return entry_id

    def amend(self, context: RequestContext, entry_id: int, line_amounts: Mapping) -> None:
        """Overwrite amounts of existing detail rows; never adds rows."""
        ensure_allowed(context, Capability.SALES_ENTRY_AMEND)
        if self.entries.get_by_id(entry_id) is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"message": "sales entry not found"})
        amounts = parse_line_amounts(line_amounts)

        updated: list[int] = []
        try:
            with scoped_transaction(self.db):
                details = self.entries.get_details_by_type(entry_id)
                for sales_type_id, amount in amounts.items():
                    detail = details.get(sales_type_id)
                    if detail is None:
                        continue
                    detail.amount = amount
                    updated.append(sales_type_id)
                self.db.flush()
        except SQLAlchemyError as exc:
            if is_lock_timeout(exc):
                raise
            raise self._storage_failure(context, exc, action="amend", entry_id=entry_id) from exc

        log_json(
            logger,
            {
                "event": "sales_entry.amended",
                "trace_id": context.trace_id,
                "user_id": context.user_id,
                "entry_id": entry_id,
                "updated_sales_type_ids": sorted(updated),
                "ignored_sales_type_ids": sorted(set(amounts) - set(updated)),
            },
        )

    def fetch_for_edit(self, context: RequestContext, entry_id: int) -> EntryProjection:
        ensure_allowed(context, Capability.SALES_ENTRY_AMEND)
        return self._project(entry_id)

    def fetch_for_view(self, context: RequestContext, entry_id: int) -> EntryProjection:
        ensure_allowed(context, Capability.SALES_ENTRY_VIEW_OTHERS)
        return self._project(entry_id)

    def _project(self, entry_id: int) -> EntryProjection:
        header = self.entries.get_header(entry_id)
        if header is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"message": "sales entry not found"})
        lines = [
            EntryLine(
                sales_type_id=line.sales_type_id,
                sales_type_name=line.sales_type_name,
                amount=line.amount,
                attachment_ref=line.attachment_ref,
                attachment_url=self.store.url_for(line.attachment_ref),
            )
            for line in self.entries.get_lines(entry_id)
        ]
        return EntryProjection(
            id=header.id,
            pos_id=header.pos_id,
            pos_name=header.pos_name,
            entry_date=header.entry_date,
            user_id=header.user_id,
            user_name=header.user_name,
            status=header.status,
            submitted_at=header.submitted_at,
            lines=lines,
        )

    def _ensure_terminal(self, context: RequestContext, pos_id: int, *, elevated: bool) -> None:
        terminal = self.roster.get_terminal(pos_id)
        if not elevated:
            # Unknown and unassigned terminals look the same to the base tier.
            if terminal is None or not self.roster.is_assigned(context.user_id, pos_id):
                raise AppError(ErrorCatalog.PERMISSION_DENIED, details={"message": "terminal not assigned to user"})
        elif terminal is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"message": "terminal not found"})
        if terminal.status != "active":
            raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": "terminal is not active"})

    @staticmethod
    def _complete_amounts(catalog: list[SalesType], amounts: dict[int, Decimal]) -> dict[int, Decimal]:
        active_ids = {sales_type.id for sales_type in catalog}
        unknown = sorted(set(amounts) - active_ids)
        if unknown:
            raise AppError(
                ErrorCatalog.VALIDATION_ERROR,
                details={"message": "amounts given for unknown or inactive sales types", "sales_type_ids": unknown},
            )
        missing = [sales_type.name for sales_type in catalog if sales_type.id not in amounts]
        if missing:
            raise AppError(
                ErrorCatalog.VALIDATION_ERROR,
                details={"message": "amount required for every active sales type", "missing": missing},
            )
        return amounts

    def _accepted_uploads(
        self,
        catalog: list[SalesType],
        attachments: Mapping[int, AttachmentUpload],
    ) -> dict[int, AttachmentUpload]:
        accepted: dict[int, AttachmentUpload] = {}
        for sales_type in catalog:
            upload = attachments.get(sales_type.id)
            present = upload is not None and not upload.is_empty
            if sales_type.attachment_required and not present:
                raise AppError(
                    ErrorCatalog.VALIDATION_ERROR,
                    details={"message": f"attachment required for {sales_type.name}", "sales_type_id": sales_type.id},
                )
            if not present or not sales_type.attachment_applicable:
                continue
            try:
                self.store.validate(upload)
            except AttachmentRejected as exc:
                raise AppError(
                    ErrorCatalog.VALIDATION_ERROR,
                    details={"message": str(exc), "sales_type_id": sales_type.id},
                ) from exc
            accepted[sales_type.id] = upload
        return accepted

    def _store_upload(self, upload: AttachmentUpload, sales_type: SalesType, context: RequestContext) -> str:
        try:
            return self.store.put(upload, label=f"attachment_{sales_type.id}", trace_id=context.trace_id)
        except AttachmentRejected as exc:
            raise AppError(
                ErrorCatalog.VALIDATION_ERROR,
                details={"message": str(exc), "sales_type_id": sales_type.id},
            ) from exc
        except AttachmentStoreError as exc:
            raise AppError(
                ErrorCatalog.STORAGE_FAILURE,
                details={"message": "attachment could not be stored", "sales_type_id": sales_type.id},
            ) from exc

    def _storage_failure(
        self,
        context: RequestContext,
        exc: SQLAlchemyError,
        *,
        action: str,
        entry_id: int | None = None,
    ) -> AppError:
        log_json(
            logger,
            {
                "event": "sales_entry.storage_failed",
                "trace_id": context.trace_id,
                "user_id": context.user_id,
                "action": action,
                "entry_id": entry_id,
                "error_class": exc.__class__.__name__,
            },
            level=logging.ERROR,
        )
        return AppError(
            ErrorCatalog.STORAGE_FAILURE,
            details={"message": f"sales entry could not be saved ({action})"},
        )

    def _log_duplicate(self, context: RequestContext, pos_id: int, entry_date: date, *, source: str) -> None:
        metrics.increment_duplicate_entry()
        log_json(
            logger,
            {
                "event": "sales_entry.duplicate",
                "trace_id": context.trace_id,
                "user_id": context.user_id,
                "pos_id": pos_id,
                "entry_date": entry_date.isoformat(),
                "source": source,
            },
            level=logging.WARNING,
        )
