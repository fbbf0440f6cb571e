"""
Pydantic response schemas for API endpoints.

All API responses conform to these schemas for consistent output.
Fields serialize in camelCase.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from drawyourmeme.core.models import Token, User, Vote


class CamelResponse(BaseModel):
    """Response body serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PublicUser(CamelResponse):
    """User fields safe to return to the browser."""

    id: str
    solana_address: str
    is_verified: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(
            id=user.id,
            solana_address=user.solana_address,
            is_verified=user.is_verified,
            created_at=user.created_at,
        )


class UserResponse(CamelResponse):
    """Response for registration and login."""

    message: str
    user: PublicUser


class AddressAvailabilityResponse(CamelResponse):
    """Whether a Solana address can still be registered."""

    available: bool


class TokenLaunchResponse(Token):
    """A freshly launched token plus a confirmation message."""

    message: str = "Token launched successfully!"

    @classmethod
    def from_token(cls, token: Token, message: str | None = None) -> "TokenLaunchResponse":
        data = token.model_dump()
        if message:
            data["message"] = message
        return cls(**data)


class VoteResponse(CamelResponse):
    """Result of a successful vote."""

    message: str = "Vote added successfully"
    votes: int = Field(..., ge=0, description="Token vote count after the vote")


class VoteSummary(CamelResponse):
    """A vote without the voter identity."""

    id: str
    token_id: str
    timestamp: datetime

    @classmethod
    def from_vote(cls, vote: Vote) -> "VoteSummary":
        return cls(id=vote.id, token_id=vote.token_id, timestamp=vote.timestamp)


class HealthResponse(CamelResponse):
    """Service health and registry counters."""

    status: str = Field(..., description="Overall status")
    version: str = Field(..., description="Service version")
    timestamp: str = Field(..., description="Check timestamp")
    components: dict[str, int] = Field(default_factory=dict, description="Registry counts")
