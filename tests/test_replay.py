"""
Tests for the Replay Client

Replays go to an httpx MockTransport standing in for the receiver.
"""

import json

import httpx
import pytest

from hookreplay.models import WebhookDelivery
from hookreplay.services.delivery import prepare_delivery
from hookreplay.services.replay_client import ReplayClient, ReplayError
from hookreplay.services.signing import compute_signature

TARGET = "http://receiver.test/webhook"


class TestSend:
    """Test suite for single sends."""

    async def test_posts_body_and_headers(self, review_delivery: WebhookDelivery, receiver, received):
        prepared = prepare_delivery(review_delivery)

        async with ReplayClient(transport=receiver()) as client:
            result = await client.send(prepared, TARGET)

        assert result.succeeded
        assert result.status_code == 200
        assert result.delivery_id == "61109660-71f6-11e7-9b49-619c5e386bdf"
        assert result.response_body == '{"ok": true}'

        request = received[0]
        assert request.method == "POST"
        assert str(request.url) == TARGET
        assert request.content == prepared.body
        assert json.loads(request.content)["action"] == "created"
        assert request.headers["X-GitHub-Event"] == "pull_request_review"
        assert request.headers["X-Hub-Signature"] == prepared.headers["X-Hub-Signature"]
        assert request.headers["content-type"] == "application/json"
        assert request.headers["user-agent"].startswith("GitHub-Hookshot/")

    async def test_error_status_is_a_result(self, review_delivery: WebhookDelivery, receiver):
        prepared = prepare_delivery(review_delivery)

        async with ReplayClient(transport=receiver(status_code=500, body=b"boom")) as client:
            result = await client.send(prepared, TARGET)

        assert not result.succeeded
        assert result.status_code == 500
        assert result.response_body == "boom"

    async def test_response_body_truncated(self, review_delivery: WebhookDelivery, receiver):
        prepared = prepare_delivery(review_delivery)

        async with ReplayClient(
            transport=receiver(body=b"x" * 100),
            response_body_limit=10
        ) as client:
            result = await client.send(prepared, TARGET)

        assert result.response_body == "x" * 10

    async def test_transport_failure(self, review_delivery: WebhookDelivery):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        prepared = prepare_delivery(review_delivery)

        async with ReplayClient(transport=httpx.MockTransport(refuse)) as client:
            with pytest.raises(ReplayError) as exc_info:
                await client.send(prepared, TARGET)

        assert exc_info.value.target_url == TARGET
        assert exc_info.value.delivery_id == prepared.delivery_id
        assert "ConnectError" in str(exc_info.value)

    async def test_no_retry_on_failure(self, review_delivery: WebhookDelivery):
        calls = []

        def refuse(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        async with ReplayClient(transport=httpx.MockTransport(refuse)) as client:
            with pytest.raises(ReplayError):
                await client.send(prepare_delivery(review_delivery), TARGET)

        assert len(calls) == 1


class TestReplay:
    """Test suite for repeated replays."""

    async def test_count(self, review_delivery: WebhookDelivery, receiver, received):
        async with ReplayClient(transport=receiver()) as client:
            results = await client.replay(review_delivery, TARGET, count=3)

        assert len(results) == 3
        assert len(received) == 3
        assert all(result.succeeded for result in results)
        assert {r.headers["X-GitHub-Delivery"] for r in received} == {
            "61109660-71f6-11e7-9b49-619c5e386bdf"
        }

    async def test_fresh_delivery_ids(self, review_delivery: WebhookDelivery, receiver, received):
        async with ReplayClient(transport=receiver()) as client:
            results = await client.replay(
                review_delivery, TARGET, count=2, fresh_delivery_id=True
            )

        assert results[0].delivery_id != results[1].delivery_id
        assert [r.headers["X-GitHub-Delivery"] for r in received] == [
            result.delivery_id for result in results
        ]

    async def test_resign(self, review_delivery: WebhookDelivery, receiver, received):
        async with ReplayClient(transport=receiver()) as client:
            await client.replay(review_delivery, TARGET, secret="s3cret")

        request = received[0]
        assert request.headers["X-Hub-Signature-256"] == compute_signature(
            "s3cret", request.content, "sha256"
        )

    @pytest.mark.parametrize("count", [0, -1, 6])
    async def test_count_out_of_range(self, review_delivery: WebhookDelivery, receiver, received, count: int):
        async with ReplayClient(transport=receiver(), max_replay_count=5) as client:
            with pytest.raises(ValueError):
                await client.replay(review_delivery, TARGET, count=count)

        assert received == []


class TestClientSettings:
    """Constructor arguments override configured defaults."""

    @pytest.mark.parametrize("rate_limit_rpm", [0, -1])
    def test_rate_limit_must_be_positive(self, rate_limit_rpm: int):
        with pytest.raises(ValueError, match="rate_limit_rpm"):
            ReplayClient(rate_limit_rpm=rate_limit_rpm)

    async def test_explicit_rate_limit_kept(self, receiver):
        async with ReplayClient(transport=receiver(), rate_limit_rpm=5) as client:
            assert client.rate_limit_rpm == 5
