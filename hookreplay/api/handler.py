"""
Fixture Handler Module

This module defines the FastAPI endpoints that expose the packaged
webhook fixtures and replay them at a receiver under test. Harnesses that
are not written in Python use these endpoints instead of importing the
fixtures.
"""

from typing import Any, AsyncGenerator, Dict

from fastapi import APIRouter, Depends, HTTPException, Response, status

from hookreplay.config import get_settings
from hookreplay.fixtures import (
    FixtureFormatError,
    FixtureNotFoundError,
    available_events,
    load_delivery,
)
from hookreplay.logging_config import get_logger
from hookreplay.models import ReplayRequest, ReplayResponse, WebhookDelivery
from hookreplay.services.delivery import serialize_payload
from hookreplay.services.replay_client import ReplayClient, ReplayError

logger = get_logger(__name__)

router = APIRouter(prefix="/fixtures", tags=["fixtures"])

FIXTURE_HEADER_PREFIX = "X-Fixture-"


async def get_replay_client() -> AsyncGenerator[ReplayClient, None]:
    """Provide a replay client for one request and close it afterwards."""
    async with ReplayClient() as client:
        yield client


def _get_delivery(event: str) -> WebhookDelivery:
    """Load a fixture, mapping loader errors to HTTP errors."""
    try:
        return load_delivery(event)
    except FixtureNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown fixture: {event}"
        )
    except FixtureFormatError as e:
        logger.error("Broken fixture file", github_event=event, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )


@router.get("")
async def list_fixtures() -> Dict[str, Any]:
    """List the names of all packaged fixtures."""
    return {"events": available_events()}


@router.get("/health")
async def fixtures_health() -> Dict[str, str]:
    """
    Health check endpoint for the fixture service.

    Returns:
        Simple health status
    """
    return {"status": "healthy", "service": "fixtures"}


@router.get("/{event}")
async def get_fixture(event: str) -> Dict[str, Any]:
    """Return a fixture's headers and payload exactly as captured."""
    delivery = _get_delivery(event)
    return {
        "event": delivery.event,
        "headers": delivery.headers,
        "payload": delivery.payload
    }


@router.get("/{event}/payload")
async def get_fixture_payload(event: str) -> Response:
    """
    Return the raw payload body.

    The captured delivery headers are echoed as X-Fixture-* response
    headers so a harness can rebuild the original request from one call.
    """
    delivery = _get_delivery(event)
    headers = {
        f"{FIXTURE_HEADER_PREFIX}{name}": value
        for name, value in delivery.headers.items()
    }
    return Response(
        content=serialize_payload(delivery.payload),
        media_type="application/json",
        headers=headers
    )


@router.post("/{event}/replay", response_model=ReplayResponse)
async def replay_fixture(
    event: str,
    replay_request: ReplayRequest,
    client: ReplayClient = Depends(get_replay_client)
) -> ReplayResponse:
    """
    Replay a fixture at a webhook receiver.

    Args:
        event: Fixture name
        replay_request: Target, count and signing options
        client: Replay client (injected)

    Returns:
        One result per send

    Raises:
        HTTPException: 404 unknown fixture, 400 missing target or secret,
            422 bad target_url or count out of range, 502 receiver unreachable
    """
    settings = get_settings()
    delivery = _get_delivery(event)

    target_url = replay_request.target_url or settings.replay_target_url
    if not target_url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No target_url given and REPLAY_TARGET_URL is not configured"
        )

    if replay_request.resign and not settings.can_resign:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Re-signing requested but WEBHOOK_SECRET is not configured"
        )

    if replay_request.count > client.max_replay_count:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"count must be at most {client.max_replay_count}"
        )

    secret = settings.webhook_secret if replay_request.resign else None

    try:
        results = await client.replay(
            delivery,
            target_url,
            count=replay_request.count,
            secret=secret,
            fresh_delivery_id=replay_request.fresh_delivery_id
        )
    except ReplayError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )

    return ReplayResponse(event=event, target_url=target_url, results=results)
