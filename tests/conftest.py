"""
Test Configuration

Pytest configuration and fixtures for the test suite.
"""

from typing import Callable, Generator, List

import httpx
import pytest
from fastapi.testclient import TestClient

from hookreplay.config import get_settings
from hookreplay.fixtures import load_delivery, load_headers, load_payload
from hookreplay.models import WebhookDelivery


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Run every test against default settings, ignoring any local .env."""
    for name in ("REPLAY_TARGET_URL", "WEBHOOK_SECRET", "MAX_REPLAY_COUNT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_JSON_FORMAT", "false")
    monkeypatch.chdir("/")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def app():
    from hookreplay.main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for synchronous tests."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def review_payload() -> dict:
    """The captured pull_request_review payload."""
    return load_payload("pull_request_review")


@pytest.fixture
def review_headers() -> dict:
    """The captured pull_request_review headers."""
    return load_headers("pull_request_review")


@pytest.fixture
def review_delivery() -> WebhookDelivery:
    """The captured pull_request_review delivery."""
    return load_delivery("pull_request_review")


@pytest.fixture
def received() -> List[httpx.Request]:
    """Requests seen by the mock receiver."""
    return []


@pytest.fixture
def receiver(received: List[httpx.Request]) -> Callable[..., httpx.MockTransport]:
    """
    Build a mock webhook receiver.

    Records each request it sees and answers with ``status_code``.
    """
    def make(status_code: int = 200, body: bytes = b'{"ok": true}') -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            received.append(request)
            return httpx.Response(status_code, content=body)

        return httpx.MockTransport(handler)

    return make
