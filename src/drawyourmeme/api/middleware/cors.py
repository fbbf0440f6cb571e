"""
Cross-origin access for the drawing front-end and the Telegram web app.

Both load the JSON API and the uploaded images from another origin.
Requests carry no cookies, so credentials stay disabled and a wildcard
origin list is allowed.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

API_METHODS = ["GET", "POST", "OPTIONS"]
API_HEADERS = ["accept", "content-type", "x-request-id"]
EXPOSED_HEADERS = ["X-Process-Time", "X-Request-ID"]


def add_cors_middleware(app: FastAPI, origins: list[str] | None = None, max_age: int = 600) -> None:
    """Allow the given origins (every origin when empty) to call the API."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=False,
        allow_methods=API_METHODS,
        allow_headers=API_HEADERS,
        expose_headers=EXPOSED_HEADERS,
        max_age=max_age,
    )
