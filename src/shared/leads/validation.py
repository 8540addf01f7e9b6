"""
Email validation and privacy-preserving submission logging for lead forms.
"""

import re
import logging
from typing import List, Optional

from src.shared.leads.schemas import LeadSubmission


MAX_EMAIL_LENGTH = 254  # RFC 5321 practical bound
MAX_LOGGED_USER_AGENT_LENGTH = 50

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[a-zA-Z]{2,}$")


def validate_email(email) -> bool:
    """
    Syntactic email check. No DNS or MX lookup is performed.

    Args:
        email: Candidate address

    Returns:
        True if the address is well formed and at most 254 characters
    """
    if not isinstance(email, str):
        return False
    # fullmatch: "$" alone would accept a trailing newline
    return bool(EMAIL_REGEX.fullmatch(email)) and len(email) <= MAX_EMAIL_LENGTH


def validate_form_data(payload: LeadSubmission) -> List[str]:
    """Returns validation errors in display order; empty when the payload is valid."""
    errors = []

    if not payload.email:
        errors.append("Email address is required")
    elif not validate_email(payload.email):
        errors.append("Please enter a valid email address")

    return errors


def mask_email(email: Optional[str]) -> str:
    if not email:
        return "missing"
    return email[:3] + "***"


def _truncate_user_agent(user_agent: Optional[str]) -> str:
    if not user_agent:
        return "missing"
    return user_agent[:MAX_LOGGED_USER_AGENT_LENGTH] + "..."


def log_form_submission(form_label: str, payload: LeadSubmission) -> None:
    """Log a submission without ever writing the full email address."""
    summary = {
        "email": mask_email(payload.email),
        "hasWebsite": bool(payload.website),
        "timestamp": payload.timestamp,
        "userAgent": _truncate_user_agent(payload.user_agent),
    }
    logging.info(f"{form_label} form submission: {summary}")
