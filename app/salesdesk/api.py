from fastapi import APIRouter

from app.salesdesk.core.config import settings
from app.salesdesk.routers.admin import router as admin_router
from app.salesdesk.routers.auth import router as auth_router
from app.salesdesk.routers.catalog import router as catalog_router
from app.salesdesk.routers.dashboard import router as dashboard_router
from app.salesdesk.routers.health import router as health_router
from app.salesdesk.routers.metrics import router as metrics_router
from app.salesdesk.routers.reports import router as reports_router
from app.salesdesk.routers.sales_entries import router as sales_entries_router
from app.salesdesk.routers.submissions import router as submissions_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(catalog_router, tags=["catalog"])
api_router.include_router(sales_entries_router, prefix="/sales-entries", tags=["sales-entries"])
api_router.include_router(submissions_router, prefix="/submissions", tags=["submissions"])
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(reports_router, prefix="/reports", tags=["reports"])
api_router.include_router(admin_router, prefix="/admin", tags=["admin"])
if settings.METRICS_ENABLED:
    api_router.include_router(metrics_router, tags=["ops"])
