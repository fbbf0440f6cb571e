"""
Request logging middleware.

One log line per request, plus the client address helper the vote
endpoint uses as the voter identity.
"""

import logging
import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

QUIET_PREFIXES = ("/health", "/uploads/")


def get_client_ip(request: Request, trust_proxy_headers: bool = False) -> str:
    """
    Address of the calling client.

    The socket peer is used unless trust_proxy_headers is set, in which
    case the first X-Forwarded-For hop, then X-Real-IP, take precedence.
    Those headers are client-controlled, so only trust them behind a
    proxy that overwrites them.
    """
    if trust_proxy_headers:
        forwarded_for = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

        real_ip = request.headers.get("x-real-ip", "").strip()
        if real_ip:
            return real_ip

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log method, path, status and duration of each request.

    Health probes and static image fetches are served without logging.
    Every response carries X-Request-ID (echoed or generated) and
    X-Process-Time in milliseconds.
    """

    def __init__(
        self,
        app: ASGIApp,
        quiet_prefixes: tuple[str, ...] = QUIET_PREFIXES,
        trust_proxy_headers: bool = False,
    ) -> None:
        super().__init__(app)
        self._quiet_prefixes = quiet_prefixes
        self._trust_proxy_headers = trust_proxy_headers

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        client_ip = get_client_ip(request, self._trust_proxy_headers)
        path = request.url.path
        quiet = path.startswith(self._quiet_prefixes)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                f"{request.method} {path} failed",
                extra={"request_id": request_id, "client_ip": client_ip},
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        if not quiet:
            level = logging.WARNING if response.status_code >= 500 else logging.INFO
            logger.log(
                level,
                f"{request.method} {path} -> {response.status_code} ({elapsed_ms:.1f}ms)",
                extra={
                    "request_id": request_id,
                    "client_ip": client_ip,
                    "status_code": response.status_code,
                },
            )

        response.headers["X-Process-Time"] = f"{elapsed_ms:.2f}"
        response.headers["X-Request-ID"] = request_id
        return response
