"""
Pydantic request schemas for API endpoints.

All incoming API requests are validated against these schemas.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SOLANA_ADDRESS_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

TOKEN_NAME_MAX_LENGTH = 50
TICKER_MIN_LENGTH = 2
TICKER_MAX_LENGTH = 10


def is_valid_solana_address(value: object) -> bool:
    """Whether value looks like a base58 Solana address."""
    return isinstance(value, str) and bool(SOLANA_ADDRESS_PATTERN.match(value))


class CamelRequest(BaseModel):
    """Request body accepting camelCase or snake_case keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class UserRegisterRequest(CamelRequest):
    """Request to register a Solana address."""

    solana_address: str = Field(
        ...,
        description="Base58 Solana wallet address",
        examples=["7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"],
    )
    telegram_id: str | None = Field(None, description="Telegram user id to link")
    telegram_username: str | None = Field(None, description="Telegram username")

    @field_validator("solana_address")
    @classmethod
    def validate_solana_address(cls, v: str) -> str:
        if not is_valid_solana_address(v):
            raise ValueError("Invalid Solana address format")
        return v

    @field_validator("telegram_id", "telegram_username", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class UserLoginRequest(CamelRequest):
    """Request to look up a user by Solana address."""

    solana_address: str = Field(..., description="Base58 Solana wallet address")

    @field_validator("solana_address")
    @classmethod
    def validate_solana_address(cls, v: str) -> str:
        if not is_valid_solana_address(v):
            raise ValueError("Invalid Solana address format")
        return v


class TokenLaunchRequest(CamelRequest):
    """Name and ticker submitted with a token launch."""

    name: str = Field(..., min_length=1, max_length=TOKEN_NAME_MAX_LENGTH)
    ticker: str = Field(..., min_length=TICKER_MIN_LENGTH, max_length=TICKER_MAX_LENGTH)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("ticker", mode="before")
    @classmethod
    def normalize_ticker(cls, v):
        return v.strip().upper() if isinstance(v, str) else v
