"""
Core data models for DrawYourMeme.

Users, tokens and votes are immutable pydantic records. The registry
replaces a record with an updated copy instead of mutating it, so a
record handed to a caller never changes underneath them.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class RecordModel(BaseModel):
    """Base for stored records: frozen, camelCase on the wire."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class User(RecordModel):
    """A registered identity keyed by its Solana address."""

    id: str
    solana_address: str
    telegram_id: str | None = None
    telegram_username: str | None = None
    # Stored as "true"/"false" strings
    is_verified: Literal["true", "false"] = "false"
    created_at: datetime
    updated_at: datetime

    @field_validator("telegram_id", mode="before")
    @classmethod
    def telegram_id_as_str(cls, v):
        # Telegram hands out integer ids; the registry keys on their string form
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if isinstance(v, str):
            v = v.strip()
        return v or None

    @field_validator("telegram_username", mode="before")
    @classmethod
    def blank_username_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v or None

    @field_validator("is_verified", mode="before")
    @classmethod
    def verified_flag(cls, v):
        if isinstance(v, bool):
            return "true" if v else "false"
        return v


class Token(RecordModel):
    """A launched meme token."""

    id: str
    name: str
    ticker: str
    image_url: str
    pumpfun_link: str | None = None
    votes: int = Field(default=0, ge=0)
    created_at: datetime | None = None


class Vote(RecordModel):
    """The fact that an identity voted for a token."""

    id: str
    token_id: str
    voter_identity: str
    timestamp: datetime


# Fields of User that update_user may change
USER_UPDATABLE_FIELDS = frozenset(
    {"telegram_id", "telegram_username", "is_verified"}
)


@dataclass(frozen=True)
class RegistryStats:
    """Aggregate counters over the registry contents."""

    total_tokens: int
    total_votes: int
    total_users: int
    top_token: Token | None = None
