"""
Webhook Signing Module

This module produces GitHub-style webhook signatures for replayed
deliveries. GitHub signs each delivery body with HMAC using the webhook
secret and sends the result in X-Hub-Signature (SHA-1) and
X-Hub-Signature-256 (SHA-256).

Signatures are only produced here, never checked: checking them is the
job of the receiver under test.
"""

import hashlib
import hmac
from typing import Dict

from hookreplay.logging_config import get_logger

logger = get_logger(__name__)

SIGNATURE_ALGORITHMS = {
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
}

SIGNATURE_HEADERS = {
    "sha1": "X-Hub-Signature",
    "sha256": "X-Hub-Signature-256",
}


class SigningError(Exception):
    """Custom exception for signing failures."""
    pass


def compute_signature(secret: str, body: bytes, algorithm: str = "sha256") -> str:
    """
    Compute the signature header value GitHub would send for a body.

    Args:
        secret: Webhook secret shared with the receiver
        body: Exact request body bytes
        algorithm: "sha1" or "sha256"

    Returns:
        Header value such as "sha256=<hex digest>"

    Raises:
        SigningError: If the secret is empty or the algorithm is unsupported
    """
    if not secret:
        raise SigningError("Webhook secret must not be empty")

    hash_func = SIGNATURE_ALGORITHMS.get(algorithm)
    if hash_func is None:
        raise SigningError(
            f"Unsupported signature algorithm: {algorithm}. "
            f"Must be one of {sorted(SIGNATURE_ALGORITHMS)}"
        )

    digest = hmac.new(secret.encode(), body, hash_func).hexdigest()
    return f"{algorithm}={digest}"


def signature_headers(secret: str, body: bytes) -> Dict[str, str]:
    """Both signature headers for a body, keyed by their canonical names."""
    headers = {
        SIGNATURE_HEADERS[algorithm]: compute_signature(secret, body, algorithm)
        for algorithm in SIGNATURE_ALGORITHMS
    }
    logger.debug("Computed delivery signatures", body_bytes=len(body))
    return headers
