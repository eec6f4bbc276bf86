"""
Services Package

This package contains the delivery services:
- signing: GitHub-style webhook signatures
- delivery: rendering a delivery into body bytes and headers
- replay_client: POSTing deliveries at a receiver
"""

from hookreplay.services.delivery import prepare_delivery, serialize_payload
from hookreplay.services.replay_client import ReplayClient, ReplayError
from hookreplay.services.signing import SigningError, compute_signature

__all__ = [
    "prepare_delivery",
    "serialize_payload",
    "ReplayClient",
    "ReplayError",
    "SigningError",
    "compute_signature",
]
