"""
DrawYourMeme Core Module.

Provides the record types and the exception hierarchy shared by the
registry, the HTTP layer and the Telegram bot.
"""

__all__ = [
    "RegistryStats",
    "Token",
    "User",
    "Vote",
    # Exceptions
    "DrawYourMemeError",
    "RegistryError",
    "NotFoundError",
    "TokenNotFoundError",
    "DuplicateIdentityError",
    "DuplicateVoteError",
    "ValidationError",
    "InvalidImageError",
    "ConfigurationError",
]

from drawyourmeme.core.exceptions import (
    ConfigurationError,
    DrawYourMemeError,
    DuplicateIdentityError,
    DuplicateVoteError,
    InvalidImageError,
    NotFoundError,
    RegistryError,
    TokenNotFoundError,
    ValidationError,
)
from drawyourmeme.core.models import RegistryStats, Token, User, Vote
