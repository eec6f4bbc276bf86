"""
Webhook Fixtures Package

Captured GitHub webhook deliveries stored as JSON under ``data/``.
Each file holds one delivery with two top-level keys:

- headers: the HTTP headers GitHub sent, spelled as captured
- payload: the JSON body of the delivery

Fixtures are constants. Every accessor hands out a fresh copy, so a test
that mutates what it was given cannot leak into the next test.
"""

import copy
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from hookreplay.logging_config import get_logger
from hookreplay.models import WebhookDelivery

logger = get_logger(__name__)

DATA_DIR = Path(__file__).parent / "data"


class FixtureNotFoundError(KeyError):
    """Raised when no fixture exists for the requested event."""
    pass


class FixtureFormatError(Exception):
    """Raised when a fixture file is not a valid delivery document."""
    pass


def available_events() -> List[str]:
    """Names of all packaged fixtures, sorted."""
    return sorted(path.stem for path in DATA_DIR.glob("*.json"))


@lru_cache(maxsize=None)
def _read_fixture(event: str) -> Dict[str, Any]:
    """Read and validate one fixture file. Cached; never hand this out."""
    if event not in available_events():
        raise FixtureNotFoundError(event)
    path = DATA_DIR / f"{event}.json"

    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise FixtureFormatError(f"Fixture '{event}' is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise FixtureFormatError(f"Fixture '{event}' must be a JSON object")

    missing = {"headers", "payload"} - document.keys()
    if missing:
        raise FixtureFormatError(
            f"Fixture '{event}' is missing keys: {', '.join(sorted(missing))}"
        )

    logger.debug("Loaded webhook fixture", github_event=event, path=str(path))
    return document


def load_payload(event: str) -> Dict[str, Any]:
    """
    Get the payload of a fixture.

    Args:
        event: Fixture name, e.g. "pull_request_review"

    Returns:
        A deep copy of the captured JSON body

    Raises:
        FixtureNotFoundError: If no fixture exists for the event
        FixtureFormatError: If the fixture file is malformed
    """
    return copy.deepcopy(_read_fixture(event)["payload"])


def load_headers(event: str) -> Dict[str, str]:
    """Get a copy of the captured headers of a fixture, spelling preserved."""
    return dict(_read_fixture(event)["headers"])


def load_delivery(event: str) -> WebhookDelivery:
    """Get a complete fixture delivery (event name, headers and payload)."""
    return WebhookDelivery(
        event=event,
        headers=load_headers(event),
        payload=load_payload(event)
    )


__all__ = [
    "DATA_DIR",
    "FixtureFormatError",
    "FixtureNotFoundError",
    "available_events",
    "load_delivery",
    "load_headers",
    "load_payload",
]
