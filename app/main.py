from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.salesdesk.api import api_router
from app.salesdesk.core.config import settings
from app.salesdesk.core.errors import setup_exception_handlers
from app.salesdesk.core.logging import configure_logging
from app.salesdesk.middleware.identity import IdentityMiddleware
from app.salesdesk.middleware.observability import ObservabilityMiddleware
from app.salesdesk.middleware.trace import TraceIdMiddleware


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.APP_NAME)
    app.add_middleware(IdentityMiddleware)
    app.add_middleware(TraceIdMiddleware)
    app.add_middleware(ObservabilityMiddleware)
    setup_exception_handlers(app)
    app.include_router(api_router)

    uploads_dir = Path(settings.ATTACHMENTS_STORAGE_PATH)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount(settings.ATTACHMENTS_URL_PREFIX, StaticFiles(directory=uploads_dir), name="uploads")
    return app


app = create_app()
