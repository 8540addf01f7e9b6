"""Lead intake routes: newsletter and lead magnet signups forwarded to MailerLite."""

import json
import logging
from datetime import datetime, timezone
from typing import Callable

import httpx
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.shared.leads.config import LEAD_FORMS, SPAM_DROP_MESSAGE, LeadForm
from src.shared.leads.mailerlite import MailerLiteClient, get_subscriber_client
from src.shared.leads.rate_limit import SlidingWindowRateLimiter, get_client_ip, get_rate_limiter
from src.shared.leads.responses import (
    RATE_LIMIT_EXCEEDED,
    RATE_LIMIT_MESSAGE,
    SERVER_ERROR,
    VALIDATION_ERROR,
    create_error_response,
    create_success_response,
    handle_mailerlite_error,
)
from src.shared.leads.schemas import LeadResponse, LeadSubmission
from src.shared.leads.spam import SpamDetector, get_spam_detector
from src.shared.leads.validation import log_form_submission, mask_email, validate_form_data

router = APIRouter(prefix="/api", tags=["leads"])


class InvalidRequestBody(ValueError):
    """Request body is not parseable JSON."""


async def _read_submission(request: Request) -> LeadSubmission:
    raw = await request.body()
    try:
        data = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidRequestBody(str(e)) from e
    if not isinstance(data, dict):
        data = {}
    return LeadSubmission.model_validate(data)


def _subscriber_fields(form: LeadForm, payload: LeadSubmission) -> dict:
    return {
        "source": form.source,
        "signup_date": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "lead_magnet": form.lead_magnet,
        "user_agent": payload.user_agent or "unknown",
    }


async def handle_lead_submission(
    form: LeadForm,
    request: Request,
    limiter: SlidingWindowRateLimiter,
    spam_detector: SpamDetector,
    client: MailerLiteClient,
) -> JSONResponse:
    """
    Runs one submission through rate limiting, validation, spam screening
    and the MailerLite call. Every outcome, including unexpected exceptions,
    becomes a LeadResponse envelope.
    """
    try:
        client_ip = get_client_ip(request)
        if not limiter.allow(client_ip):
            logging.warning(f"{form.label}: rate limit exceeded for {client_ip}")
            return create_error_response(
                RATE_LIMIT_MESSAGE,
                status.HTTP_429_TOO_MANY_REQUESTS,
                RATE_LIMIT_EXCEEDED,
            )

        try:
            payload = await _read_submission(request)
        except InvalidRequestBody as e:
            logging.warning(f"{form.label}: invalid request body: {str(e)}")
            # 400, not 500: a malformed body is a client error even though it is reported as server_error
            return create_error_response("Invalid request format.", status.HTTP_400_BAD_REQUEST, SERVER_ERROR)
        except ValidationError as e:
            first = e.errors()[0]
            field_name = ".".join(str(part) for part in first.get("loc", ()))
            return create_error_response(
                f"Invalid value for {field_name or 'request'}",
                status.HTTP_400_BAD_REQUEST,
                VALIDATION_ERROR,
            )

        log_form_submission(form.label, payload)

        validation_errors = validate_form_data(payload)
        if validation_errors:
            return create_error_response(validation_errors[0], status.HTTP_400_BAD_REQUEST, VALIDATION_ERROR)

        spam_indicators = spam_detector.detect(payload)
        if spam_indicators:
            logging.info(f"{form.label}: spam detected for {mask_email(payload.email)}: {spam_indicators}")
            return create_success_response(SPAM_DROP_MESSAGE, form.redirect_path)

        result = await client.add_subscriber(
            email=payload.email,
            group_id=form.group_id,
            fields=_subscriber_fields(form, payload),
        )
        if result.ok:
            return create_success_response(form.success_message, form.redirect_path)
        return handle_mailerlite_error(result.status_code)

    except httpx.HTTPError as e:
        logging.error(f"{form.label}: MailerLite request failed: {str(e)}")
        return create_error_response(
            "Service temporarily unavailable. Please try again later.",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            SERVER_ERROR,
        )
    except Exception as e:
        logging.error(f"{form.label}: unexpected error: {str(e)}", exc_info=True)
        return create_error_response(
            "Error processing your request. Please try again.",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            SERVER_ERROR,
        )


def make_lead_endpoint(form: LeadForm) -> Callable:
    async def submit_lead(
        request: Request,
        limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
        spam_detector: SpamDetector = Depends(get_spam_detector),
        client: MailerLiteClient = Depends(get_subscriber_client),
    ) -> JSONResponse:
        return await handle_lead_submission(form, request, limiter, spam_detector, client)

    submit_lead.__name__ = f"submit_{form.endpoint.replace('-', '_')}"
    submit_lead.__doc__ = f"{form.label}: subscribe an email to MailerLite group {form.group_id}."
    return submit_lead


for _form in LEAD_FORMS:
    router.add_api_route(
        f"/{_form.endpoint}",
        make_lead_endpoint(_form),
        methods=["POST"],
        response_model=LeadResponse,
        name=_form.endpoint,
    )
