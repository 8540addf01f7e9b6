"""MailerLite subscriber API client."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from src.shared.leads.config import (
    get_mailerlite_api_key,
    get_mailerlite_api_url,
    get_mailerlite_timeout,
)
from src.shared.leads.validation import mask_email


@dataclass
class SubscriberResult:
    status_code: int
    body: Any = field(default=None)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class MailerLiteClient:
    """
    Adds contacts to MailerLite groups.

    Each call is attempted exactly once. Network errors and timeouts propagate
    as httpx.HTTPError; HTTP error statuses are returned, not raised.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://connect.mailerlite.com",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def add_subscriber(self, email: str, group_id: str, fields: Dict[str, str]) -> SubscriberResult:
        if not self.api_key:
            # Same outcome as MailerLite rejecting a bad key, minus the round trip
            logging.error("MAILERLITE_API_KEY is not configured")
            return SubscriberResult(status_code=401, body={"message": "Unauthenticated."})

        payload = {
            "email": email,
            "groups": [group_id],
            "fields": fields,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(f"{self.base_url}/api/subscribers", json=payload, headers=headers)

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if response.is_success:
            logging.info(f"Successfully added {mask_email(email)} to group {group_id}")
        else:
            logging.error(f"MailerLite API error ({response.status_code}): {body}")
        return SubscriberResult(status_code=response.status_code, body=body)


def get_subscriber_client() -> MailerLiteClient:
    """Built per request so the API key is read at request time."""
    return MailerLiteClient(
        api_key=get_mailerlite_api_key(),
        base_url=get_mailerlite_api_url(),
        timeout=get_mailerlite_timeout(),
    )
