from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cert_engine.api.certificates import router as certificates_router
from cert_engine.api.health import router as health_router
from cert_engine.api.metrics_endpoint import router as metrics_router
from cert_engine.core.config import SETTINGS
from cert_engine.core.logging import setup_logging
from cert_engine.db.engine import lifespan_db
from cert_engine.db.redis import lifespan_redis
from cert_engine.middleware.request_context import RequestContextMiddleware
from cert_engine.services.errors import CertificationError, RequirementsNotMet

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Nested so teardown runs in reverse order even if one side fails
    async with lifespan_db():
        async with lifespan_redis():
            yield


app = FastAPI(
    title="certificate-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext (outermost) → CORS → route handler
app.add_middleware(RequestContextMiddleware)


@app.exception_handler(CertificationError)
async def certification_error_handler(
    _request: Request, exc: CertificationError
) -> JSONResponse:
    body: dict = {"detail": exc.detail, "kind": exc.kind}
    if isinstance(exc, RequirementsNotMet):
        body["unmet"] = exc.unmet
    return JSONResponse(status_code=exc.status_code, content=body)


app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(certificates_router)

logger.info(
    "certificate-service started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
