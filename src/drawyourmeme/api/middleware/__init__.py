"""
Middleware for the DrawYourMeme API.
"""

from drawyourmeme.api.middleware.cors import add_cors_middleware
from drawyourmeme.api.middleware.logging import RequestLoggingMiddleware, get_client_ip

__all__ = [
    "add_cors_middleware",
    "RequestLoggingMiddleware",
    "get_client_ip",
]
