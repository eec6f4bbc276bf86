"""
Replay Client Module

This module POSTs prepared webhook deliveries at a receiver under test,
the way GitHub's delivery service would.

Design Decisions:
- Use httpx for async HTTP requests
- Any HTTP status is a result, not an exception; only transport
  failures raise
- Each delivery is sent exactly once; there are no retries
- Repeated sends are paced with an async rate limiter
"""

import time
from typing import List, Optional

import httpx
from aiolimiter import AsyncLimiter

from hookreplay import __version__
from hookreplay.config import get_settings
from hookreplay.logging_config import get_logger
from hookreplay.models import PreparedDelivery, ReplayResult, WebhookDelivery
from hookreplay.services.delivery import prepare_delivery, set_header

logger = get_logger(__name__)


class ReplayError(Exception):
    """Custom exception for deliveries that never got a response."""
    def __init__(self, message: str, target_url: str = None, delivery_id: str = None):
        super().__init__(message)
        self.target_url = target_url
        self.delivery_id = delivery_id


class ReplayClient:
    """
    Async client that replays webhook deliveries.

    Usage:
        async with ReplayClient() as client:
            results = await client.replay(delivery, "http://localhost:9000/hook")
    """

    # GitHub's deliveries carry a GitHub-Hookshot/<id> user agent
    USER_AGENT = f"GitHub-Hookshot/hookreplay-{__version__}"

    def __init__(
        self,
        timeout: Optional[float] = None,
        rate_limit_rpm: Optional[int] = None,
        response_body_limit: Optional[int] = None,
        max_replay_count: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the replay client.

        Unset arguments fall back to the application settings.

        Args:
            timeout: Per-request timeout in seconds
            rate_limit_rpm: Maximum sends per minute
            response_body_limit: Bytes of response body kept per result
            max_replay_count: Upper bound on ``count`` in ``replay``
            transport: Optional httpx transport (tests use MockTransport)

        Raises:
            ValueError: If rate_limit_rpm is not positive
        """
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.replay_timeout
        self.response_body_limit = (
            response_body_limit if response_body_limit is not None
            else settings.response_body_limit
        )
        self.max_replay_count = (
            max_replay_count if max_replay_count is not None
            else settings.max_replay_count
        )

        self.rate_limit_rpm = (
            rate_limit_rpm if rate_limit_rpm is not None
            else settings.replay_rate_limit_rpm
        )
        if self.rate_limit_rpm <= 0:
            raise ValueError(f"rate_limit_rpm must be positive, got {self.rate_limit_rpm}")

        self._rate_limiter = AsyncLimiter(
            max_rate=self.rate_limit_rpm,
            time_period=60
        )
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def __aenter__(self) -> "ReplayClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(self, prepared: PreparedDelivery, target_url: str) -> ReplayResult:
        """
        POST one prepared delivery.

        Args:
            prepared: Body and headers to send
            target_url: Receiver URL

        Returns:
            ReplayResult with the receiver's status code and response

        Raises:
            ReplayError: On connection errors, timeouts and other
                transport failures
        """
        headers = dict(prepared.headers)
        set_header(headers, "User-Agent", self.USER_AGENT)

        async with self._rate_limiter:
            started = time.perf_counter()
            try:
                response = await self._client.post(
                    target_url,
                    content=prepared.body,
                    headers=headers
                )
            except httpx.HTTPError as e:
                logger.error(
                    "Delivery replay failed",
                    github_event=prepared.event,
                    delivery_id=prepared.delivery_id,
                    target_url=target_url,
                    error=str(e),
                    error_type=type(e).__name__
                )
                raise ReplayError(
                    f"Failed to deliver to {target_url}: {type(e).__name__}: {e}",
                    target_url=target_url,
                    delivery_id=prepared.delivery_id
                ) from e
            elapsed = time.perf_counter() - started

        body = response.content[:self.response_body_limit].decode("utf-8", errors="replace")

        result = ReplayResult(
            target_url=target_url,
            event=prepared.event,
            delivery_id=prepared.delivery_id,
            status_code=response.status_code,
            elapsed_seconds=elapsed,
            response_body=body
        )

        log = logger.info if result.succeeded else logger.warning
        log(
            "Delivery replayed",
            github_event=prepared.event,
            delivery_id=prepared.delivery_id,
            target_url=target_url,
            status_code=response.status_code,
            elapsed_seconds=round(elapsed, 4)
        )
        return result

    async def replay(
        self,
        delivery: WebhookDelivery,
        target_url: str,
        *,
        count: int = 1,
        secret: Optional[str] = None,
        fresh_delivery_id: bool = False
    ) -> List[ReplayResult]:
        """
        Prepare and send a delivery ``count`` times, one after another.

        Args:
            delivery: Captured delivery to replay
            target_url: Receiver URL
            count: Number of sends
            secret: Re-sign with this secret (see ``prepare_delivery``)
            fresh_delivery_id: New X-GitHub-Delivery for every send

        Returns:
            One ReplayResult per send, in order

        Raises:
            ValueError: If count is out of range
            ReplayError: If a send gets no response; earlier sends stand
        """
        if not 1 <= count <= self.max_replay_count:
            raise ValueError(
                f"count must be between 1 and {self.max_replay_count}, got {count}"
            )

        logger.info(
            "Replaying delivery",
            github_event=delivery.event,
            target_url=target_url,
            count=count,
            resign=secret is not None
        )

        results = []
        for _ in range(count):
            prepared = prepare_delivery(
                delivery,
                secret=secret,
                fresh_delivery_id=fresh_delivery_id
            )
            results.append(await self.send(prepared, target_url))
        return results
