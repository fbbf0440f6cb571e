"""
Pydantic schemas for API request/response validation.

This module exports all request and response schemas used by the API.
"""

from drawyourmeme.api.schemas.exceptions import (
    APIException,
    BadRequestError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from drawyourmeme.api.schemas.requests import (
    TokenLaunchRequest,
    UserLoginRequest,
    UserRegisterRequest,
    is_valid_solana_address,
)
from drawyourmeme.api.schemas.responses import (
    AddressAvailabilityResponse,
    HealthResponse,
    PublicUser,
    TokenLaunchResponse,
    UserResponse,
    VoteResponse,
    VoteSummary,
)

__all__ = [
    # Exceptions
    "APIException",
    "BadRequestError",
    "ValidationError",
    "NotFoundError",
    "InternalError",
    # Requests
    "UserRegisterRequest",
    "UserLoginRequest",
    "TokenLaunchRequest",
    "is_valid_solana_address",
    # Responses
    "PublicUser",
    "UserResponse",
    "AddressAvailabilityResponse",
    "TokenLaunchResponse",
    "VoteResponse",
    "VoteSummary",
    "HealthResponse",
]
