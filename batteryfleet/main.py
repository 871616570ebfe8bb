# batteryfleet/main.py
"""
Main application file for BatteryFleet.
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
import logging
import json
from datetime import datetime
import os

from batteryfleet.api.api import api_router
from batteryfleet.core.config import settings
from batteryfleet.core.events import setup_event_handlers
from batteryfleet.core.exceptions import BatteryFleetException, EntityNotFoundException

LOG_LEVEL = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("batteryfleet")

DEV_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API for tracking batteries, their shipments and transport conditions",
    version="1.0.0",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
)

origins = [str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS if origin] or DEV_CORS_ORIGINS
logger.info(f"CORS origins: {origins}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    logger.warning(f"Rejected {request.method} {request.url.path}: body={body} errors={errors}")
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": errors})


@app.exception_handler(BatteryFleetException)
async def domain_exception_handler(request: Request, exc: BatteryFleetException):
    # Routes map domain errors themselves; this covers anything that slips through
    status_code = (
        status.HTTP_404_NOT_FOUND
        if isinstance(exc, EntityNotFoundException)
        else status.HTTP_400_BAD_REQUEST
    )
    logger.warning(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "error": exc.to_dict()})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = datetime.now()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        raise
    elapsed = (datetime.now() - start_time).total_seconds()
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.3f}s)")
    return response


setup_event_handlers(app)
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/", tags=["Root"])
def read_root():
    """API name, version and where to find the docs."""
    return {
        "message": "BatteryFleet API is running",
        "project_name": settings.PROJECT_NAME,
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "docs_url": app.docs_url,
    }


@app.get("/health", tags=["Health"])
def health_check():
    return {"status": "ok", "timestamp": datetime.now().isoformat()}
