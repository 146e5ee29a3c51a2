from pydantic import BaseModel


class UserPosItem(BaseModel):
    pos_id: int
    pos_name: str
    location_name: str
    city_name: str


class UserPosResponse(BaseModel):
    terminals: list[UserPosItem]
    trace_id: str


class SalesTypeItem(BaseModel):
    id: int
    name: str
    attachment_applicable: bool
    attachment_required: bool


class SalesTypeListResponse(BaseModel):
    sales_types: list[SalesTypeItem]
    trace_id: str
