"""Nomad Leads Service - FastAPI server for the blog's newsletter and lead magnet forms."""

import os
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.shared.leads.config import LEAD_FORMS, SettingsError, get_mailerlite_api_key, get_spam_detector_name
from src.shared.leads.responses import SERVER_ERROR, create_error_response
from src.shared.leads.rate_limit import get_rate_limiter
from src.shared.leads.routes import router as leads_router
from src.shared.diagnostics.routes import router as diagnostics_router

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:4321",
    "http://localhost:3000",
]


def get_allowed_origins() -> list:
    raw = os.environ.get("CORS_ALLOWED_ORIGINS")
    if not raw:
        return DEFAULT_ALLOWED_ORIGINS
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def configure_logging() -> None:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


configure_logging()

ALLOWED_ORIGINS = get_allowed_origins()

app = FastAPI(
    title="Nomad Leads Service",
    description="Newsletter and lead magnet signups for the travel blog, forwarded to MailerLite",
    version="0.1.0"
)


@app.on_event("startup")
async def startup_event():
    limiter = get_rate_limiter()
    logging.info(
        f"Lead intake ready: {len(LEAD_FORMS)} forms, "
        f"rate limit {limiter.max_requests} per {limiter.window_ms // 1000}s, "
        f"spam detector '{get_spam_detector_name()}'"
    )
    if not get_mailerlite_api_key():
        # Not fatal: submissions will answer 503 until the key is set
        logging.warning("MAILERLITE_API_KEY is not set")


# Include lead intake routes
app.include_router(leads_router)

# Include diagnostic routes
app.include_router(diagnostics_router)

# CORS configuration - must be added before exception handlers
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


def _cors_headers(request: Request) -> dict:
    """CORS headers for responses produced by exception handlers."""
    headers = {}
    origin = request.headers.get("origin")
    if origin in ALLOWED_ORIGINS:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Access-Control-Allow-Credentials"] = "true"
        headers["Access-Control-Allow-Methods"] = "*"
        headers["Access-Control-Allow-Headers"] = "*"
    return headers


def _detail_content(detail) -> dict:
    if isinstance(detail, (str, dict)):
        return {"detail": detail}
    return {"detail": str(detail)}


# Global exception handlers to ensure CORS headers are always added
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Ensure CORS headers are added to FastAPI HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_detail_content(exc.detail),
        headers={**(exc.headers or {}), **_cors_headers(request)}
    )


@app.exception_handler(StarletteHTTPException)
async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Ensure CORS headers are added to Starlette HTTP exceptions (404, 405, ...)."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_detail_content(exc.detail),
        headers={**(exc.headers or {}), **_cors_headers(request)}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Ensure CORS headers are added to validation errors."""
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors()},
        headers=_cors_headers(request)
    )


@app.exception_handler(SettingsError)
async def settings_exception_handler(request: Request, exc: SettingsError):
    """A malformed setting hit while resolving lead dependencies still answers with the lead envelope."""
    logging.error(f"Invalid configuration: {str(exc)}")
    response = create_error_response(
        "Error processing your request. Please try again.",
        500,
        SERVER_ERROR
    )
    response.headers.update(_cors_headers(request))
    return response


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Ensure CORS headers are added to all exceptions."""
    logging.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
        headers=_cors_headers(request)
    )


@app.get("/")
async def root():
    return {"message": "Nomad Leads Service API is running", "status": "ok"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 8000)))
