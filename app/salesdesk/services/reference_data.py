"""Admin CRUD over the five reference-data kinds.

Each kind is a ``ReferenceKind`` entry in ``REFERENCE_KINDS``: its model,
its create/update schemas, the parent rows it points at and the rows that
would block a delete. Uniqueness and in-use violations surface as
REFERENCE_CONFLICT.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
from typing import Any, Callable

from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.salesdesk.core.context import RequestContext
from app.salesdesk.core.error_catalog import AppError, ErrorCatalog
from app.salesdesk.core.logging import log_json
from app.salesdesk.core.security import get_password_hash
from app.salesdesk.db.models import (
    City,
    Location,
    PosTerminal,
    SalesEntry,
    SalesEntryDetail,
    SalesType,
    User,
)
from app.salesdesk.db.session import scoped_transaction
from app.salesdesk.schemas.reference_data import (
    CityCreate,
    CityUpdate,
    LocationCreate,
    LocationUpdate,
    PosCreate,
    PosUpdate,
    SalesTypeCreate,
    SalesTypeUpdate,
    UserCreate,
    UserUpdate,
)
from app.salesdesk.services.access_policy import Capability, ensure_allowed

logger = logging.getLogger(__name__)


def _city_item(city: City) -> dict:
    return {"id": city.id, "name": city.name, "status": city.status, "created_at": city.created_at}


def _location_item(location: Location) -> dict:
    return {
        "id": location.id,
        "city_id": location.city_id,
        "name": location.name,
        "status": location.status,
        "created_at": location.created_at,
    }


def _pos_item(terminal: PosTerminal) -> dict:
    return {
        "id": terminal.id,
        "location_id": terminal.location_id,
        "name": terminal.name,
        "status": terminal.status,
        "created_at": terminal.created_at,
    }


def _user_item(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "status": user.status,
        "pos_ids": user.pos_ids,
        "created_at": user.created_at,
    }


def _sales_type_item(sales_type: SalesType) -> dict:
    return {
        "id": sales_type.id,
        "name": sales_type.name,
        "attachment_applicable": sales_type.attachment_applicable,
        "attachment_required": sales_type.attachment_required,
        "status": sales_type.status,
        "created_at": sales_type.created_at,
    }


def _count(db, model, column, value) -> int:
    return int(db.execute(select(func.count()).select_from(model).where(column == value)).scalar_one() or 0)


@dataclass(frozen=True)
class ReferenceKind:
    name: str
    model: type
    create_schema: type[BaseModel]
    update_schema: type[BaseModel]
    serialize: Callable[[Any], dict]
    order_by: Callable[[], tuple]
    parents: dict[str, type] = field(default_factory=dict)
    dependencies: Callable[[Any, int], dict[str, int]] = lambda db, record_id: {}


REFERENCE_KINDS: dict[str, ReferenceKind] = {
    "cities": ReferenceKind(
        name="cities",
        model=City,
        create_schema=CityCreate,
        update_schema=CityUpdate,
        serialize=_city_item,
        order_by=lambda: (City.name, City.id),
        dependencies=lambda db, record_id: {"locations": _count(db, Location, Location.city_id, record_id)},
    ),
    "locations": ReferenceKind(
        name="locations",
        model=Location,
        create_schema=LocationCreate,
        update_schema=LocationUpdate,
        serialize=_location_item,
        order_by=lambda: (Location.name, Location.id),
        parents={"city_id": City},
        dependencies=lambda db, record_id: {
            "pos_terminals": _count(db, PosTerminal, PosTerminal.location_id, record_id)
        },
    ),
    "pos": ReferenceKind(
        name="pos",
        model=PosTerminal,
        create_schema=PosCreate,
        update_schema=PosUpdate,
        serialize=_pos_item,
        order_by=lambda: (PosTerminal.name, PosTerminal.id),
        parents={"location_id": Location},
        dependencies=lambda db, record_id: {"sales_entries": _count(db, SalesEntry, SalesEntry.pos_id, record_id)},
    ),
    "users": ReferenceKind(
        name="users",
        model=User,
        create_schema=UserCreate,
        update_schema=UserUpdate,
        serialize=_user_item,
        order_by=lambda: (User.name, User.id),
        dependencies=lambda db, record_id: {"sales_entries": _count(db, SalesEntry, SalesEntry.user_id, record_id)},
    ),
    "sales-types": ReferenceKind(
        name="sales-types",
        model=SalesType,
        create_schema=SalesTypeCreate,
        update_schema=SalesTypeUpdate,
        serialize=_sales_type_item,
        order_by=lambda: (SalesType.name, SalesType.id),
        dependencies=lambda db, record_id: {
            "sales_entry_details": _count(db, SalesEntryDetail, SalesEntryDetail.sales_type_id, record_id)
        },
    ),
}


def get_kind(kind: str) -> ReferenceKind:
    try:
        return REFERENCE_KINDS[kind]
    except KeyError as exc:
        raise AppError(
            ErrorCatalog.NOT_FOUND,
            details={"message": "unknown reference kind", "kind": kind, "allowed": sorted(REFERENCE_KINDS)},
        ) from exc


class ReferenceDataService:
    def __init__(self, db):
        self.db = db

    def list(self, context: RequestContext, kind: str) -> list[dict]:
        ensure_allowed(context, Capability.REFERENCE_DATA_MANAGE)
        spec = get_kind(kind)
        records = self.db.execute(select(spec.model).order_by(*spec.order_by())).scalars().all()
        return [spec.serialize(record) for record in records]

    def get(self, context: RequestContext, kind: str, record_id: int) -> dict:
        ensure_allowed(context, Capability.REFERENCE_DATA_MANAGE)
        spec = get_kind(kind)
        return spec.serialize(self._load(spec, record_id))

    def create(self, context: RequestContext, kind: str, payload: dict) -> dict:
        ensure_allowed(context, Capability.REFERENCE_DATA_MANAGE)
        spec = get_kind(kind)
        data = self._parse(spec.create_schema, payload).model_dump()
        self._ensure_parents(spec, data)
        pos_ids = data.pop("pos_ids", None)
        password = data.pop("password", None)
        if spec.model is User:
            data["email"] = data["email"].strip().lower()
            data["hashed_password"] = get_password_hash(password)
        record = spec.model(**data)
        with self._conflicts_as_app_error(spec):
            with scoped_transaction(self.db):
                self.db.add(record)
                if pos_ids is not None:
                    record.terminals = self._load_terminals(pos_ids)
                self.db.flush()
        self.db.refresh(record)
        self._log(context, spec, "created", record.id)
        return spec.serialize(record)

    def update(self, context: RequestContext, kind: str, record_id: int, payload: dict) -> dict:
        ensure_allowed(context, Capability.REFERENCE_DATA_MANAGE)
        spec = get_kind(kind)
        record = self._load(spec, record_id)
        data = self._parse(spec.update_schema, payload).model_dump(exclude_unset=True)
        data = {key: value for key, value in data.items() if value is not None}
        self._ensure_parents(spec, data)
        pos_ids = data.pop("pos_ids", None)
        password = data.pop("password", None)
        if password is not None:
            data["hashed_password"] = get_password_hash(password)
        if "email" in data:
            data["email"] = data["email"].strip().lower()
        if spec.model is SalesType:
            applicable = data.get("attachment_applicable", record.attachment_applicable)
            required = data.get("attachment_required", record.attachment_required)
            if required and not applicable:
                raise AppError(
                    ErrorCatalog.VALIDATION_ERROR,
                    details={"message": "attachment_required needs attachment_applicable"},
                )
        with self._conflicts_as_app_error(spec):
            with scoped_transaction(self.db):
                for key, value in data.items():
                    setattr(record, key, value)
                if pos_ids is not None:
                    record.terminals = self._load_terminals(pos_ids)
                self.db.flush()
        self.db.refresh(record)
        self._log(context, spec, "updated", record.id)
        return spec.serialize(record)

    def delete(self, context: RequestContext, kind: str, record_id: int) -> None:
        ensure_allowed(context, Capability.REFERENCE_DATA_MANAGE)
        spec = get_kind(kind)
        record = self._load(spec, record_id)
        if spec.model is User and record.id == context.user_id:
            raise AppError(ErrorCatalog.REFERENCE_CONFLICT, details={"message": "cannot delete the current user"})
        dependencies = {name: count for name, count in spec.dependencies(self.db, record_id).items() if count > 0}
        if dependencies:
            raise AppError(
                ErrorCatalog.REFERENCE_CONFLICT,
                details={"message": f"cannot delete {spec.name} record in use", "dependencies": dependencies},
            )
        with self._conflicts_as_app_error(spec):
            with scoped_transaction(self.db):
                self.db.delete(record)
        self._log(context, spec, "deleted", record_id)

    def _load(self, spec: ReferenceKind, record_id: int):
        record = self.db.get(spec.model, record_id)
        if record is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"message": f"{spec.name} record not found"})
        return record

    def _load_terminals(self, pos_ids: list[int]) -> list[PosTerminal]:
        unique_ids = sorted(set(pos_ids))
        if not unique_ids:
            return []
        terminals = self.db.execute(select(PosTerminal).where(PosTerminal.id.in_(unique_ids))).scalars().all()
        missing = sorted(set(unique_ids) - {terminal.id for terminal in terminals})
        if missing:
            raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": "unknown pos_ids", "pos_ids": missing})
        return list(terminals)

    def _ensure_parents(self, spec: ReferenceKind, data: dict) -> None:
        for field_name, parent_model in spec.parents.items():
            parent_id = data.get(field_name)
            if parent_id is not None and self.db.get(parent_model, parent_id) is None:
                raise AppError(
                    ErrorCatalog.VALIDATION_ERROR,
                    details={"message": f"{field_name} does not exist", "field": field_name},
                )

    @staticmethod
    def _parse(schema: type[BaseModel], payload: dict) -> BaseModel:
        try:
            return schema.model_validate(payload)
        except ValidationError as exc:
            raise RequestValidationError(exc.errors(include_url=False)) from exc

    @contextmanager
    def _conflicts_as_app_error(self, spec: ReferenceKind):
        try:
            yield
        except IntegrityError as exc:
            raise AppError(
                ErrorCatalog.REFERENCE_CONFLICT,
                details={"message": f"{spec.name} record conflicts with existing data"},
            ) from exc

    def _log(self, context: RequestContext, spec: ReferenceKind, action: str, record_id: int) -> None:
        log_json(
            logger,
            {
                "event": f"reference_data.{action}",
                "kind": spec.name,
                "record_id": record_id,
                "user_id": context.user_id,
                "trace_id": context.trace_id,
            },
        )
