"""
API route handlers.

This package contains all route definitions for the DrawYourMeme API.
"""

from drawyourmeme.api.routes import health, tokens, users

__all__ = [
    "health",
    "tokens",
    "users",
]
