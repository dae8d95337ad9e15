"""
EcoFreight shipment service.

Shipment lifecycle, delivery updates and reviews, with best-effort
blockchain verification references and carbon reporting.
"""

import os
import subprocess
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ecofreight.api import auth, reviews, shipments, sustainability, verification
from ecofreight.core import RequestLoggingMiddleware, ServiceHealth, get_logger, setup_logging
from ecofreight.core_settings import get_settings
from ecofreight.domain.errors import (
    EcoFreightError,
    InvalidTransition,
    NotEligible,
    NotFound,
    PersistenceError,
    ValidationError,
)
from ecofreight.infrastructure.db import get_engine, init_models

SERVICE_NAME = "ecofreight-service"
SERVICE_DESCRIPTION = "Shipment tracking, delivery updates and reviews"

settings = get_settings()

setup_logging(service_name=SERVICE_NAME, level=settings.LOG_LEVEL, version=settings.SERVICE_VERSION)
logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {SERVICE_NAME} version {settings.SERVICE_VERSION}")

    logger.info("Running database migrations")
    result = subprocess.run(
        ["alembic", "upgrade", "head"],
        cwd=os.path.join(os.path.dirname(__file__), ".."),
        capture_output=True,
        text=True,
        check=False
    )
    if result.returncode != 0:
        logger.warning(f"Migration output: {result.stderr}")
    else:
        logger.info("Database migrations completed")

    try:
        init_models()
        logger.info("Database models initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database models: {e}")
        raise

    if not settings.VERIFICATION_URL:
        logger.warning("VERIFICATION_URL not set; records will be saved without verification references")

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")

app = FastAPI(
    title=SERVICE_NAME,
    description=SERVICE_DESCRIPTION,
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

ERROR_STATUS = {
    ValidationError: 422,
    NotFound: 404,
    NotEligible: 403,
    InvalidTransition: 409,
}

@app.exception_handler(EcoFreightError)
async def domain_error_handler(request: Request, exc: EcoFreightError) -> JSONResponse:
    if isinstance(exc, PersistenceError):
        return JSONResponse(status_code=503, content={
            "detail": "The request could not be saved. Please try again.",
            "error": "persistence_error",
        })
    status_code = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 500)
    if status_code == 500:
        logger.error(f"Unhandled domain error: {exc.detail}")
    return JSONResponse(status_code=status_code, content={
        "detail": exc.detail,
        "error": type(exc).__name__,
    })

health_service = ServiceHealth(SERVICE_NAME, settings.SERVICE_VERSION, get_engine)
app.include_router(health_service.create_health_router())

app.include_router(auth.router)
app.include_router(shipments.router)
app.include_router(reviews.router)
app.include_router(sustainability.router)
app.include_router(verification.router)
if settings.ENABLE_VERIFICATION_STUB:
    app.include_router(verification.stub_router)

@app.get("/")
async def root():
    return {
        "service": SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "status": "running",
        "docs": "/api/docs"
    }
