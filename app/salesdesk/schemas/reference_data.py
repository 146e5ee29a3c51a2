from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, EmailStr, Field, model_validator

from app.salesdesk.services.access_policy import Role

RecordStatus = Literal["active", "inactive"]
UserRole = Literal["USER", "ADMIN", "SUPERADMIN"]


class CityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    status: RecordStatus = "active"


class CityUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=150)
    status: RecordStatus | None = None


class LocationCreate(BaseModel):
    city_id: int
    name: str = Field(..., min_length=1, max_length=150)
    status: RecordStatus = "active"


class LocationUpdate(BaseModel):
    city_id: int | None = None
    name: str | None = Field(None, min_length=1, max_length=150)
    status: RecordStatus | None = None


class PosCreate(BaseModel):
    location_id: int
    name: str = Field(..., min_length=1, max_length=150)
    status: RecordStatus = "active"


class PosUpdate(BaseModel):
    location_id: int | None = None
    name: str | None = Field(None, min_length=1, max_length=150)
    status: RecordStatus | None = None


class UserCreate(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Jane Field",
                "email": "jane@example.com",
                "password": "Secret123",
                "role": "USER",
                "pos_ids": [1, 2],
            }
        }
    }

    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=255)
    role: UserRole = Role.USER.value
    status: RecordStatus = "active"
    pos_ids: list[int] = Field(default_factory=list)


class UserUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=150)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=8, max_length=255)
    role: UserRole | None = None
    status: RecordStatus | None = None
    pos_ids: list[int] | None = None


class SalesTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    attachment_applicable: bool = False
    attachment_required: bool = False
    status: RecordStatus = "active"

    @model_validator(mode="after")
    def required_implies_applicable(self):
        if self.attachment_required and not self.attachment_applicable:
            raise ValueError("attachment_required needs attachment_applicable")
        return self


class SalesTypeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=150)
    attachment_applicable: bool | None = None
    attachment_required: bool | None = None
    status: RecordStatus | None = None


class ReferenceRecordResponse(BaseModel):
    kind: str
    record: dict
    trace_id: str


class ReferenceListResponse(BaseModel):
    kind: str
    records: list[dict]
    trace_id: str


class ReferenceDeleteResponse(BaseModel):
    kind: str
    resource_id: int
    deleted: bool
    trace_id: str
