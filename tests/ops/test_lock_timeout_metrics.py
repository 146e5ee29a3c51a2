from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.salesdesk.core.error_catalog import AppError, ErrorCatalog
from app.salesdesk.core.errors import setup_exception_handlers
from app.salesdesk.core.metrics import metrics


def test_lock_timeout_increments_metric():
    metrics.reset()
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/lock-timeout")
    def lock_timeout():
        raise OperationalError("SELECT 1", {}, Exception("lock timeout"))

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/lock-timeout")

    assert response.status_code == 409
    assert response.json()["code"] == "LOCK_TIMEOUT"

    snapshot = metrics.render()
    content = snapshot.content.decode("utf-8")
    if metrics.enabled:
        assert "lock_wait_timeout_total" in content
    else:
        assert "metrics_disabled" in content


def test_access_denied_increments_metric():
    metrics.reset()
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/denied")
    def denied():
        raise AppError(ErrorCatalog.PERMISSION_DENIED)

    with TestClient(app) as client:
        response = client.get("/denied")

    assert response.status_code == 403
    assert response.json()["code"] == "PERMISSION_DENIED"
    if metrics.enabled:
        assert "access_denied_total 1.0" in metrics.render().content.decode("utf-8")
