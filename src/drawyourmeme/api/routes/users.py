"""
User endpoints.

Registration, address availability and login by Solana address.
"""

import logging

from fastapi import APIRouter, Depends, status

from drawyourmeme.api.dependencies import get_registry
from drawyourmeme.api.schemas.exceptions import BadRequestError, NotFoundError
from drawyourmeme.api.schemas.requests import (
    UserLoginRequest,
    UserRegisterRequest,
    is_valid_solana_address,
)
from drawyourmeme.api.schemas.responses import (
    AddressAvailabilityResponse,
    PublicUser,
    UserResponse,
)
from drawyourmeme.core.exceptions import DuplicateIdentityError
from drawyourmeme.registry.storage import Registry

router = APIRouter()
logger = logging.getLogger(__name__)

_DUPLICATE_MESSAGES = {
    "solana_address": "Solana address already registered",
    "telegram_id": "Telegram account already linked to another user",
}


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    request: UserRegisterRequest,
    registry: Registry = Depends(get_registry),
) -> UserResponse:
    """
    Register a Solana address, optionally linking a Telegram account.

    Raises:
        BadRequestError: If the address or Telegram account is already taken
    """
    try:
        user = registry.create_user(
            solana_address=request.solana_address,
            telegram_id=request.telegram_id,
            telegram_username=request.telegram_username,
        )
    except DuplicateIdentityError as e:
        raise BadRequestError(
            message=_DUPLICATE_MESSAGES.get(e.field or "", e.message),
            detail=e.field,
        ) from e

    return UserResponse(
        message="User registered successfully",
        user=PublicUser.from_user(user),
    )


@router.get("/check-address/{address}", response_model=AddressAvailabilityResponse)
async def check_address(
    address: str,
    registry: Registry = Depends(get_registry),
) -> AddressAvailabilityResponse:
    """Report whether a Solana address is still free to register."""
    if not is_valid_solana_address(address):
        raise BadRequestError(message="Invalid Solana address format")

    existing = registry.find_user_by_solana_address(address)
    return AddressAvailabilityResponse(available=existing is None)


@router.post("/login", response_model=UserResponse)
async def login_user(
    request: UserLoginRequest,
    registry: Registry = Depends(get_registry),
) -> UserResponse:
    """
    Look up a registered user by Solana address.

    Raises:
        NotFoundError: If no user has that address
    """
    user = registry.find_user_by_solana_address(request.solana_address)
    if user is None:
        raise NotFoundError(message="User not found")

    return UserResponse(message="Login successful", user=PublicUser.from_user(user))
