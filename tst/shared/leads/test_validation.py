import logging

import pytest

from src.shared.leads.schemas import LeadSubmission
from src.shared.leads.validation import (
    log_form_submission,
    mask_email,
    validate_email,
    validate_form_data,
)


@pytest.mark.parametrize("email", [
    "test@example.com",
    "test+tag@example.com",
    "first.last@sub.example.co.uk",
    "a@b.io",
])
def test_valid_emails(email):
    assert validate_email(email)


@pytest.mark.parametrize("email", [
    "invalid-email",
    "test@",
    "@example.com",
    "test@example",
    "test@example.c",
    "test@example.c0m",
    "te st@example.com",
    "test@@example.com",
    "test@example.com\n",
    "\ntest@example.com",
    "",
    None,
    123,
])
def test_invalid_emails(email):
    assert not validate_email(email)


def test_length_bound():
    domain = "@example.com"
    at_limit = "a" * (254 - len(domain)) + domain
    assert len(at_limit) == 254
    assert validate_email(at_limit)
    assert not validate_email("a" + at_limit)


def test_form_data_requires_email():
    assert validate_form_data(LeadSubmission()) == ["Email address is required"]
    assert validate_form_data(LeadSubmission(email="")) == ["Email address is required"]


def test_form_data_rejects_malformed_email():
    assert validate_form_data(LeadSubmission(email="nope")) == ["Please enter a valid email address"]


def test_form_data_accepts_valid_email():
    assert validate_form_data(LeadSubmission(email="new@user.com")) == []


def test_mask_email():
    assert mask_email("traveller@example.com") == "tra***"
    assert mask_email(None) == "missing"


def test_log_form_submission_masks_email(caplog):
    payload = LeadSubmission.model_validate({
        "email": "traveller@example.com",
        "userAgent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36",
    })
    with caplog.at_level(logging.INFO):
        log_form_submission("Newsletter subscription", payload)

    assert "traveller@example.com" not in caplog.text
    assert "tra***" in caplog.text
    assert "Newsletter subscription form submission" in caplog.text
    assert "AppleWebKit" not in caplog.text


def test_log_form_submission_short_user_agent(caplog):
    payload = LeadSubmission.model_validate({"email": "traveller@example.com", "userAgent": "curl/8.4.0"})
    with caplog.at_level(logging.INFO):
        log_form_submission("Visa guide download", payload)

    assert "'userAgent': 'curl/8.4.0...'" in caplog.text


def test_log_form_submission_without_user_agent(caplog):
    with caplog.at_level(logging.INFO):
        log_form_submission("Visa guide download", LeadSubmission(email="traveller@example.com"))

    assert "'userAgent': 'missing'" in caplog.text
