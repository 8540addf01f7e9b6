"""Standard JSON envelopes for lead endpoints."""

import logging
from typing import Optional

from fastapi import status
from fastapi.responses import JSONResponse

from src.shared.leads.schemas import LeadResponse

VALIDATION_ERROR = "validation_error"
RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
MAILERLITE_ERROR = "mailerlite_error"
SERVER_ERROR = "server_error"

RATE_LIMIT_MESSAGE = "Too many requests. Please wait a moment and try again."

# Upstream status -> (our status, user-facing message)
MAILERLITE_ERROR_MAP = {
    422: (422, "This email address is already subscribed."),
    400: (400, "Invalid email address. Please check and try again."),
    401: (503, "Service temporarily unavailable. Please try again later."),
    429: (429, RATE_LIMIT_MESSAGE),
}
MAILERLITE_DEFAULT_ERROR = (500, "Failed to subscribe. Please try again.")


def create_error_response(
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    error_code: str = SERVER_ERROR,
) -> JSONResponse:
    envelope = LeadResponse(success=False, message=message, error=error_code)
    return JSONResponse(status_code=status_code, content=envelope.to_content())


def create_success_response(message: str, redirect_url: Optional[str] = None) -> JSONResponse:
    envelope = LeadResponse(success=True, message=message, redirect_url=redirect_url)
    return JSONResponse(status_code=status.HTTP_200_OK, content=envelope.to_content())


def handle_mailerlite_error(upstream_status: int) -> JSONResponse:
    """Classifies an upstream failure by HTTP status only."""
    status_code, message = MAILERLITE_ERROR_MAP.get(upstream_status, MAILERLITE_DEFAULT_ERROR)
    if upstream_status == 401:
        logging.error("MailerLite rejected credentials; check MAILERLITE_API_KEY")
    return create_error_response(message, status_code, MAILERLITE_ERROR)
