"""Security headers middleware.

Adds security headers and a request id to all HTTP responses using the pure
ASGI pattern, and writes one access log line per request.
"""

import logging
import time
from uuid import uuid4

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware:
    """
    Add security headers to all responses.

    Uses pure ASGI middleware pattern instead of BaseHTTPMiddleware so SSE
    streams are passed through unbuffered.

    Headers added:
        - X-Request-Id: Unique request identifier for tracing
        - X-Content-Type-Options: nosniff
        - X-Frame-Options: DENY
        - Cache-Control: no-store (unless the endpoint set its own)
        - Strict-Transport-Security: (when hsts=True)
    """

    def __init__(self, app, hsts: bool = False):
        self.app = app
        self.hsts = hsts

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid4())
        start = time.perf_counter()
        status_code = 0

        async def send_with_headers(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = list(message.get("headers", []))
                names = {name.lower() for name, _ in headers}
                headers.append((b"x-request-id", request_id.encode()))
                headers.append((b"x-content-type-options", b"nosniff"))
                headers.append((b"x-frame-options", b"DENY"))
                if b"cache-control" not in names:
                    headers.append((b"cache-control", b"no-store"))
                if self.hsts:
                    headers.append(
                        (b"strict-transport-security", b"max-age=31536000; includeSubDomains")
                    )
                message = {**message, "headers": headers}
                # Streams stay open; log when headers go out
                latency_ms = int((time.perf_counter() - start) * 1000)
                logger.info(
                    f"{scope['method']} {scope['path']} -> {status_code} "
                    f"({latency_ms}ms, request_id={request_id})"
                )
            await send(message)

        await self.app(scope, receive, send_with_headers)
