"""
Spam heuristics for lead forms.

A positive detection must never be visible to the submitter: the caller
answers with a normal success envelope and skips the subscription call.
"""

import logging
from typing import List

from src.shared.leads.config import get_spam_detector_name
from src.shared.leads.schemas import LeadSubmission


class SpamDetector:
    """Returns indicator strings for a submission; an empty list means clean."""

    name = "base"

    def detect(self, payload: LeadSubmission) -> List[str]:
        raise NotImplementedError


class NoopSpamDetector(SpamDetector):
    """Detection switched off."""

    name = "none"

    def detect(self, payload: LeadSubmission) -> List[str]:
        return []


class HoneypotSpamDetector(SpamDetector):
    """Flags submissions that filled in the hidden `website` field."""

    name = "honeypot"

    def detect(self, payload: LeadSubmission) -> List[str]:
        if payload.website and payload.website.strip():
            return ["honeypot_filled"]
        return []


SPAM_DETECTORS = {
    NoopSpamDetector.name: NoopSpamDetector,
    HoneypotSpamDetector.name: HoneypotSpamDetector,
}


def get_spam_detector() -> SpamDetector:
    name = get_spam_detector_name()
    detector_cls = SPAM_DETECTORS.get(name)
    if detector_cls is None:
        logging.warning(f"Unknown LEADS_SPAM_DETECTOR {name!r}, spam detection disabled")
        detector_cls = NoopSpamDetector
    return detector_cls()
