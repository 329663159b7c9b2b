# src/cobranza/main.py
"""Main entry point for the collection API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cobranza.api.v1 import (
    auth_router,
    clients_router,
    payments_router,
    tickets_router,
)
from cobranza.core.errors import ApiError, InternalError, TransientError, ValidationError
from cobranza.core.logging import configure_logging
from cobranza.core.settings import settings

logger = logging.getLogger(__name__)

configure_logging()

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Payment collection and ticket folio API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(clients_router, prefix="/api/v1")
app.include_router(payments_router, prefix="/api/v1")
app.include_router(tickets_router, prefix="/api/v1")


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render service errors with the shared error envelope."""
    headers = None
    if isinstance(exc, TransientError):
        headers = {"Retry-After": str(exc.retry_after_seconds)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies, headers and parameters as VALIDATION_ERROR."""
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    error = ValidationError(f"Invalid request: {_describe_validation(exc)}")
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler so clients always receive the error envelope."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


def _describe_validation(exc: RequestValidationError) -> str:
    fields = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        fields.append(location or "body")
    return ", ".join(dict.fromkeys(fields)) or "payload"


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Payment collection and ticket folio API",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("cobranza.main:app", host="0.0.0.0", port=8080, reload=settings.debug)
