import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from yoga_builder.api import admin, health, poses, profile, public, sequences
from yoga_builder.core.config import settings
from yoga_builder.core.db import dispose_engine, wait_for_database
from yoga_builder.core.logging_config import setup_logging
from yoga_builder.services.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ServiceError,
    StorageError,
    ValidationError,
)


logger = logging.getLogger(__name__)


STATUS_BY_ERROR = {
    NotFoundError: 404,
    ConflictError: 409,
    PermissionDeniedError: 403,
    ValidationError: 422,
    StorageError: 502,
}


app = FastAPI(
    title="Yoga Sequence Builder",
    version="0.1.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(poses.router)
app.include_router(poses.variations_router)
app.include_router(sequences.router)
app.include_router(profile.router)
app.include_router(public.router)
app.include_router(admin.router)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    status = STATUS_BY_ERROR.get(type(exc), 400)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    error_id = uuid.uuid4().hex[:8]
    logger.exception("Unhandled error %s on %s %s", error_id, request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Something went wrong. Please try again.", "error_id": error_id},
    )


@app.on_event("startup")
async def startup():
    setup_logging()
    await wait_for_database()


@app.on_event("shutdown")
async def shutdown():
    await dispose_engine()
