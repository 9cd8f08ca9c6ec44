"""Middleware for the FastAPI application.

This module provides ASGI middleware for:
- Security headers (X-Request-Id, nosniff, HSTS) and access logging
"""

from .security_headers import SecurityHeadersMiddleware

__all__ = [
    "SecurityHeadersMiddleware",
]
