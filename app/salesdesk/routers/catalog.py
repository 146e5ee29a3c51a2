from fastapi import APIRouter, Depends, Request

from app.salesdesk.core.context import RequestContext
from app.salesdesk.core.deps import require_request_context
from app.salesdesk.db.session import get_db
from app.salesdesk.repos.roster import RosterRepository
from app.salesdesk.repos.sales_types import SalesTypeRepository
from app.salesdesk.schemas.catalog import (
    SalesTypeItem,
    SalesTypeListResponse,
    UserPosItem,
    UserPosResponse,
)

router = APIRouter()


@router.get("/pos/user-pos", response_model=UserPosResponse)
def list_user_pos(
    request: Request,
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
):
    rows = RosterRepository(db).list_active_for_user(context.user_id)
    return UserPosResponse(
        terminals=[
            UserPosItem(
                pos_id=row.pos_id,
                pos_name=row.pos_name,
                location_name=row.location_name,
                city_name=row.city_name,
            )
            for row in rows
        ],
        trace_id=getattr(request.state, "trace_id", ""),
    )


@router.get("/sales-types/active", response_model=SalesTypeListResponse)
def list_active_sales_types(
    request: Request,
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
):
    sales_types = SalesTypeRepository(db).list_active()
    return SalesTypeListResponse(
        sales_types=[
            SalesTypeItem(
                id=sales_type.id,
                name=sales_type.name,
                attachment_applicable=sales_type.attachment_applicable,
                attachment_required=sales_type.attachment_required,
            )
            for sales_type in sales_types
        ],
        trace_id=getattr(request.state, "trace_id", ""),
    )
