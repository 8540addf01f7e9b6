"""
Shared fixtures: a TestClient whose rate limiter, spam detector and
MailerLite transport are replaced per test.
"""
import json
from typing import Callable, Generator, List

import httpx
import pytest
from fastapi.testclient import TestClient

from src.app import app
from src.shared.leads.mailerlite import MailerLiteClient, get_subscriber_client
from src.shared.leads.rate_limit import SlidingWindowRateLimiter, get_rate_limiter
from src.shared.leads.spam import NoopSpamDetector, get_spam_detector


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeMailerLite:
    """Records outbound subscriber calls and answers with a configurable status."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.response_body = {"data": {"id": "1", "email": "new@user.com"}}
        self.error: Exception = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.response_body)

    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)

    def client(self, api_key: str = "test-api-key") -> MailerLiteClient:
        return MailerLiteClient(
            api_key=api_key,
            base_url="https://mailerlite.test",
            timeout=5.0,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(max_requests=6, window_ms=60_000, clock=clock)


@pytest.fixture
def mailerlite() -> FakeMailerLite:
    return FakeMailerLite()


@pytest.fixture
def spam_detector():
    return NoopSpamDetector()


@pytest.fixture
def client(limiter, mailerlite, spam_detector) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_subscriber_client] = lambda: mailerlite.client()
    app.dependency_overrides[get_spam_detector] = lambda: spam_detector
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def post_lead(client) -> Callable:
    """POST a JSON body to /api/<endpoint> from a given client IP."""
    def _post(endpoint: str, body=None, ip: str = "203.0.113.7", **kwargs):
        headers = {"X-Forwarded-For": ip}
        headers.update(kwargs.pop("headers", {}))
        return client.post(f"/api/{endpoint}", json=body, headers=headers, **kwargs)
    return _post
