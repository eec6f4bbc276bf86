"""
Delivery Preparation Module

Renders a captured delivery into the exact request a receiver will see:
the serialized body bytes and the header map.

Design Decisions:
- Captured headers are sent verbatim unless re-signing is requested
- Header spelling from the fixture is preserved; replacements match
  case-insensitively
- The body is compact JSON in the captured key order
"""

import json
import uuid
from typing import Any, Dict, Mapping, Optional

from hookreplay.logging_config import get_logger
from hookreplay.models import PreparedDelivery, WebhookDelivery, WebhookHeaders
from hookreplay.services.signing import signature_headers

logger = get_logger(__name__)

DELIVERY_HEADER = "X-GitHub-Delivery"
CONTENT_TYPE_HEADER = "content-type"


def serialize_payload(payload: Mapping[str, Any]) -> bytes:
    """Serialize a payload to the UTF-8 JSON bytes that get POSTed."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def set_header(headers: Dict[str, str], name: str, value: str) -> None:
    """
    Set a header in place, matching existing names case-insensitively.

    An existing key keeps its spelling; a new key uses ``name``.
    """
    for existing in headers:
        if existing.lower() == name.lower():
            headers[existing] = value
            return
    headers[name] = value


def prepare_delivery(
    delivery: WebhookDelivery,
    *,
    secret: Optional[str] = None,
    fresh_delivery_id: bool = False
) -> PreparedDelivery:
    """
    Prepare a delivery for sending.

    Without a secret the captured headers, including the captured
    X-Hub-Signature, go out unchanged. That signature was made with a
    secret we do not have, so receivers that verify signatures need
    ``secret`` set to one they know.

    Args:
        delivery: Captured delivery to send
        secret: When given, recompute X-Hub-Signature and X-Hub-Signature-256
        fresh_delivery_id: Replace X-GitHub-Delivery with a new UUID

    Returns:
        PreparedDelivery with body bytes and final headers

    Raises:
        SigningError: If ``secret`` is given but empty
    """
    body = serialize_payload(delivery.payload)
    headers = dict(delivery.headers)

    if not any(name.lower() == CONTENT_TYPE_HEADER for name in headers):
        headers[CONTENT_TYPE_HEADER] = "application/json"

    if fresh_delivery_id:
        set_header(headers, DELIVERY_HEADER, str(uuid.uuid4()))

    if secret is not None:
        for name, value in signature_headers(secret, body).items():
            set_header(headers, name, value)

    delivery_id = WebhookHeaders.from_mapping(headers).delivery_id

    logger.debug(
        "Prepared delivery",
        github_event=delivery.event,
        delivery_id=delivery_id,
        resigned=secret is not None,
        body_bytes=len(body)
    )

    return PreparedDelivery(
        event=delivery.event,
        delivery_id=delivery_id,
        headers=headers,
        body=body
    )
