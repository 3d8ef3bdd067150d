from __future__ import annotations

from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import IntegrityError

from keystore_service.api.v1.routes import key_stores
from keystore_service.core.config import settings
from keystore_service.core.logging import get_logger, setup_logging
from keystore_service.db.session import dispose_engine, get_engine, init_db
from keystore_service.services.exceptions import StoreError

sentry_sdk.init(
    dsn=settings.SENTRY_DSN,
    send_default_pii=False,
    release=settings.SENTRY_RELEASE,
    environment=settings.ENVIRONMENT,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Crea la tabella se manca (nessuna migrazione)
    init_db(get_engine())
    logger.info("%s %s started", settings.SERVICE_NAME, settings.SERVICE_VERSION)
    yield
    dispose_engine()


app = FastAPI(
    title=settings.SERVICE_NAME,
    default_response_class=ORJSONResponse,
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)


_INTERNAL_DETAILS = {"reason", "cause", "rollback_error"}


def _status_for(exc: StoreError) -> int:
    if isinstance(exc.exc, IntegrityError):
        return 409
    reason = exc.details.get("reason")
    if reason == "not_found":
        return 404
    if reason == "tenant_mismatch":
        return 403
    return 500


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> ORJSONResponse:
    status_code = _status_for(exc)
    logger.warning("%s failed (%s): %s", exc.operation, status_code, exc.details)
    if status_code == 500:
        sentry_sdk.capture_exception(exc)
    # le cause interne (SQL, rollback) restano nei log e in Sentry
    details = {k: v for k, v in exc.details.items() if k not in _INTERNAL_DETAILS}
    return ORJSONResponse(
        status_code=status_code,
        content={"message": exc.message, "details": details, "operation": exc.operation},
    )


# Routers
app.include_router(
    key_stores.router,
    prefix=f"{settings.API_PREFIX}/tenants/{{tenant_id}}/keystores",
    tags=["keystores"],
)


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok", "service": settings.SERVICE_NAME}
