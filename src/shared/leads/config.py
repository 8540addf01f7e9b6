"""Lead magnet form registry and environment-backed settings."""

import os
from dataclasses import dataclass
from typing import Dict, List, Optional

MAILERLITE_DEFAULT_API_URL = "https://connect.mailerlite.com"
MAILERLITE_DEFAULT_TIMEOUT_SECONDS = 10.0

# Nominal limit of 3 per minute, doubled while the forms are being tuned
RATE_LIMIT_BASE_REQUESTS = 3
RATE_LIMIT_LENIENCY = 2
RATE_LIMIT_MAX_REQUESTS = RATE_LIMIT_BASE_REQUESTS * RATE_LIMIT_LENIENCY
RATE_LIMIT_WINDOW_SECONDS = 60
RATE_LIMIT_MAX_IDENTIFIERS = 10_000

SPAM_DROP_MESSAGE = "Thank you for your interest!"


@dataclass(frozen=True)
class LeadForm:
    """Everything that differs between two lead intake endpoints."""
    endpoint: str
    label: str
    group_id: str
    source: str
    lead_magnet: str
    redirect_path: Optional[str] = None
    success_message: str = "Successfully subscribed!"


LEAD_FORMS: List[LeadForm] = [
    LeadForm(
        endpoint="newsletter-subscribe",
        label="Newsletter subscription",
        group_id="161603576977688029",
        source="newsletter_subscription",
        lead_magnet="newsletter",
        success_message="Successfully subscribed to our newsletter!",
    ),
    LeadForm(
        endpoint="job-bookmarks-lead-magnet",
        label="Job bookmarks lead magnet",
        group_id="161870683514603166",
        source="job_bookmarks_lead_magnet",
        lead_magnet="job_sites_bookmarks",
        redirect_path="/thank-you-job-bookmarks",
    ),
    LeadForm(
        endpoint="ai-tools-bookmarks-lead-magnet",
        label="AI tools bookmarks lead magnet",
        group_id="161977862879970899",
        source="ai_tools_bookmarks_lead_magnet",
        lead_magnet="ai_tools_bookmarks",
        redirect_path="/thank-you-ai-tools",
    ),
    LeadForm(
        endpoint="visa-guide-download",
        label="Visa guide download",
        group_id="161603580674966558",
        source="visa_guide_download",
        lead_magnet="family_visa_guide",
        redirect_path="/thank-you-visa-guide",
    ),
    LeadForm(
        endpoint="vibe-nomads-signup",
        label="Vibe Nomads community signup",
        # Shares the newsletter group
        group_id="161603576977688029",
        source="vibe_nomads_community_signup",
        lead_magnet="vibe_nomads_community",
        redirect_path="/thank-you-vibe-nomads",
    ),
]

LEAD_FORMS_BY_ENDPOINT: Dict[str, LeadForm] = {form.endpoint: form for form in LEAD_FORMS}


class SettingsError(ValueError):
    """An environment setting is present but cannot be parsed."""


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise SettingsError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise SettingsError(f"{name} must be a number, got {raw!r}") from e


def get_mailerlite_api_key() -> Optional[str]:
    """Read at request time so a rotated key is picked up without a restart."""
    return os.environ.get("MAILERLITE_API_KEY") or None


def get_mailerlite_api_url() -> str:
    return os.environ.get("MAILERLITE_API_URL", MAILERLITE_DEFAULT_API_URL).rstrip("/")


def get_mailerlite_timeout() -> float:
    return _env_float("MAILERLITE_TIMEOUT_SECONDS", MAILERLITE_DEFAULT_TIMEOUT_SECONDS)


def get_rate_limit_max_requests() -> int:
    return _env_int("LEADS_RATE_LIMIT_MAX_REQUESTS", RATE_LIMIT_MAX_REQUESTS)


def get_rate_limit_window_seconds() -> int:
    return _env_int("LEADS_RATE_LIMIT_WINDOW_SECONDS", RATE_LIMIT_WINDOW_SECONDS)


def get_rate_limit_max_identifiers() -> int:
    return _env_int("LEADS_RATE_LIMIT_MAX_IDENTIFIERS", RATE_LIMIT_MAX_IDENTIFIERS)


def get_spam_detector_name() -> str:
    return os.environ.get("LEADS_SPAM_DETECTOR", "none").strip().lower()
