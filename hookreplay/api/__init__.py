"""
API Package

This package contains the HTTP endpoints:
- handler: FastAPI routes for listing, serving and replaying fixtures
"""

from hookreplay.api.handler import router

__all__ = ["router"]
