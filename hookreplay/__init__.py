"""
GitHub Webhook Delivery Fixtures

Captured GitHub webhook deliveries (headers plus JSON payload) packaged as
test fixtures, with a small service that replays them at a webhook
receiver under test.
"""

__version__ = "1.0.0"
__author__ = "hookreplay maintainers"
