"""
Token endpoints.

Listing, launching and voting on meme tokens.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from pydantic import ValidationError as PydanticValidationError

from drawyourmeme.api.dependencies import get_image_store, get_registry, get_settings
from drawyourmeme.api.middleware.logging import get_client_ip
from drawyourmeme.api.schemas.exceptions import (
    BadRequestError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from drawyourmeme.api.schemas.requests import TokenLaunchRequest
from drawyourmeme.api.schemas.responses import TokenLaunchResponse, VoteResponse, VoteSummary
from drawyourmeme.artifacts.storage import ImageStore
from drawyourmeme.config import Settings
from drawyourmeme.core.exceptions import (
    DuplicateVoteError,
    InvalidImageError,
    TokenNotFoundError,
)
from drawyourmeme.core.models import Token
from drawyourmeme.launch import deploy_token
from drawyourmeme.registry.storage import Registry

router = APIRouter()
logger = logging.getLogger(__name__)


def parse_limit(raw: str | None, default: int) -> int:
    """Turn a query-string limit into a positive int, falling back to default."""
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


def _require_token(registry: Registry, token_id: str) -> Token:
    if token is None:
        raise NotFoundError(message="Token not found")
    return token


@router.get("", response_model=list[Token])
async def list_tokens(registry: Registry = Depends(get_registry)) -> list[Token]:
    """All launched tokens in launch order."""
    return registry.list_all_tokens()


# Specific routes must be defined before parameterized routes
@router.get("/recent", response_model=list[Token])
async def recent_tokens(
    limit: str | None = Query(None, description="Maximum results"),
    registry: Registry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
) -> list[Token]:
    """
    Most recently launched tokens, newest first.

    A missing, non-numeric or non-positive limit falls back to the
    configured default.
    """
    return registry.list_recent_tokens(parse_limit(limit, settings.recent_tokens_default))


@router.get("/trending", response_model=list[Token])
async def trending_tokens(registry: Registry = Depends(get_registry)) -> list[Token]:
    """Tokens ordered by votes, highest first."""
    return registry.list_tokens_by_votes_descending()


@router.post("/launch", response_model=TokenLaunchResponse, status_code=status.HTTP_201_CREATED)
async def launch_token(
    image: UploadFile | None = File(None),
    name: str | None = Form(None),
    ticker: str | None = Form(None),
    registry: Registry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
    image_store: ImageStore = Depends(get_image_store),
) -> TokenLaunchResponse:
    """
    Launch a token from an uploaded drawing.

    Stores the image, simulates deployment and registers the token.

    Raises:
        BadRequestError: If no image was uploaded
        ValidationError: If the name, ticker or image is invalid
    """
    if image is None or not image.filename:
        raise BadRequestError(message="Image file is required")

    try:
        launch = TokenLaunchRequest(name=name or "", ticker=ticker or "")
    except PydanticValidationError as e:
        fields = {
            ".".join(str(p) for p in err["loc"]) or "body": err["msg"]
            for err in e.errors()
        }
        raise ValidationError(fields=fields, message="Invalid input") from e

    # One byte past the limit is enough for validate() to reject oversized uploads
    data = await image.read(image_store.max_bytes + 1)
    try:
        image_url = image_store.save(data, image.content_type, image.filename)
    except InvalidImageError as e:
        raise ValidationError(fields={"image": e.message}, message=e.message) from e
    except OSError as e:
        logger.exception("Failed to store uploaded image")
        raise InternalError(message="Failed to store image") from e

    try:
        pumpfun_link = await deploy_token(launch.ticker, settings.launch_delay_seconds)
        token = registry.create_token(
            name=launch.name,
            ticker=launch.ticker,
            image_url=image_url,
            pumpfun_link=pumpfun_link,
        )
    except BaseException:
        image_store.discard(image_url)
        raise

    return TokenLaunchResponse.from_token(token)


# Parameterized routes (defined after specific routes)
@router.get("/{token_id}", response_model=Token)
async def get_token(token_id: str, registry: Registry = Depends(get_registry)) -> Token:
    """
    Get a single token.

    Raises:
        NotFoundError: If the token doesn't exist
    """
    return _require_token(registry, token_id)


@router.get("/{token_id}/votes", response_model=list[VoteSummary])
async def get_token_votes(
    token_id: str, registry: Registry = Depends(get_registry)
) -> list[VoteSummary]:
    """
    Votes cast for a token, without voter identities.

    Raises:
        NotFoundError: If the token doesn't exist
    """
    _require_token(registry, token_id)
    return [VoteSummary.from_vote(v) for v in registry.get_token_votes(token_id)]


@router.post("/{token_id}/vote", response_model=VoteResponse)
async def vote_for_token(
    token_id: str,
    request: Request,
    registry: Registry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
) -> VoteResponse:
    """
    Vote for a token once per client address (see get_client_ip).

    Raises:
        NotFoundError: If the token doesn't exist
        BadRequestError: If this client already voted for the token
    """
    voter_identity = get_client_ip(request, settings.trust_proxy_headers)

    try:
        token = registry.cast_vote(token_id, voter_identity)
    except TokenNotFoundError as e:
        raise NotFoundError(message="Token not found") from e
    except DuplicateVoteError as e:
        raise BadRequestError(message="You have already voted for this token") from e

    return VoteResponse(votes=token.votes)
