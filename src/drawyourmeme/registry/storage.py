"""
Registry Storage - in-memory users, tokens and votes.

The registry is the only writer of the three collections. A single
re-entrant lock guards every operation, so the check-then-act sequences
(uniqueness checks on user creation, token lookup plus duplicate check plus
insert plus increment on voting) run as one unit and readers always see a
consistent snapshot.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from drawyourmeme.core.exceptions import (
    DuplicateIdentityError,
    DuplicateVoteError,
    NotFoundError,
    TokenNotFoundError,
    ValidationError,
)
from drawyourmeme.core.models import (
    USER_UPDATABLE_FIELDS,
    RegistryStats,
    Token,
    User,
    Vote,
)

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 10

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def recency_key(token: Token) -> datetime:
    """Sort key for the recent feed; tokens without a creation time are oldest."""
    if token.created_at is None:
        return _EPOCH
    if token.created_at.tzinfo is None:
        return token.created_at.replace(tzinfo=timezone.utc)
    return token.created_at


class Registry:
    """
    In-memory registry backend.

    Holds:
    - users, keyed by id, indexed by Solana address and Telegram id
    - tokens, keyed by id, in launch order
    - votes, keyed by id, indexed by (token_id, voter_identity) and token id

    One instance is shared by every request handler and the bot for the
    lifetime of the process. Construct it explicitly and pass it along.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None):
        """Initialize an empty registry.

        Args:
            clock: Callable returning the current time, used for every
                timestamp the registry assigns
        """
        self._clock = clock or utc_now
        self._lock = threading.RLock()

        self._users: dict[str, User] = {}
        self._users_by_address: dict[str, str] = {}
        self._users_by_telegram: dict[str, str] = {}

        self._tokens: dict[str, Token] = {}

        self._votes: dict[str, Vote] = {}
        self._vote_keys: set[tuple[str, str]] = set()
        self._votes_by_token: dict[str, list[str]] = {}

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def create_user(
        self,
        solana_address: str,
        telegram_id: str | None = None,
        telegram_username: str | None = None,
    ) -> User:
        """
        Register a new user.

        Raises:
            DuplicateIdentityError: If the Solana address or Telegram id
                already belongs to a user
            ValidationError: If a field has the wrong type
        """
        with self._lock:
            now = self._clock()
            user = self._build_user(
                {
                    "id": self._new_id(),
                    "solana_address": solana_address,
                    "telegram_id": telegram_id,
                    "telegram_username": telegram_username,
                    "is_verified": "false",
                    "created_at": now,
                    "updated_at": now,
                }
            )
            self._check_address_free(user.solana_address, operation="create_user")
            if user.telegram_id:
                self._check_telegram_free(user.telegram_id, operation="create_user")

            self._users[user.id] = user
            self._users_by_address[user.solana_address] = user.id
            if user.telegram_id:
                self._users_by_telegram[user.telegram_id] = user.id

        logger.info(f"Registered user {user.id}")
        return user

    def get_user(self, user_id: str) -> User | None:
        """Look up a user by id."""
        with self._lock:
            return self._users.get(user_id)

    def find_user_by_solana_address(self, address: str) -> User | None:
        """Look up a user by Solana address."""
        with self._lock:
            user_id = self._users_by_address.get(address)
            return self._users.get(user_id) if user_id else None

    def find_user_by_telegram_id(self, telegram_id: str) -> User | None:
        """Look up a user by Telegram id."""
        with self._lock:
            user_id = self._users_by_telegram.get(telegram_id)
            return self._users.get(user_id) if user_id else None

    def update_user(self, user_id: str, **fields: Any) -> User:
        """
        Merge the given fields into an existing user.

        Only telegram_id, telegram_username and is_verified may be changed;
        the Solana address is fixed at registration. updated_at is refreshed
        on every call. A changed Telegram id is re-checked for uniqueness.

        Raises:
            NotFoundError: If the user does not exist
            ValidationError: If a field cannot be updated
            DuplicateIdentityError: If the new Telegram id is already linked
        """
        unknown = sorted(set(fields) - USER_UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(
                f"Cannot update user field(s): {', '.join(unknown)}",
                field=unknown[0],
            )

        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFoundError(
                    f"User '{user_id}' not found",
                    entity_type="user",
                    entity_id=user_id,
                    operation="update_user",
                )

            updated = self._build_user(
                {**user.model_dump(), **fields, "updated_at": self._clock()}
            )
            if updated.telegram_id and updated.telegram_id != user.telegram_id:
                self._check_telegram_free(updated.telegram_id, operation="update_user")

            if updated.telegram_id != user.telegram_id:
                if user.telegram_id:
                    del self._users_by_telegram[user.telegram_id]
                if updated.telegram_id:
                    self._users_by_telegram[updated.telegram_id] = user_id
            self._users[user_id] = updated

        logger.info(f"Updated user {user_id}: {', '.join(sorted(fields)) or 'timestamp'}")
        return updated

    def count_users(self) -> int:
        """Number of registered users."""
        with self._lock:
            return len(self._users)

    @staticmethod
    def _build_user(data: dict[str, Any]) -> User:
        try:
            return User.model_validate(data)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first["loc"]) or None
            raise ValidationError(f"Invalid user data: {first['msg']}", field=field) from e

    def _check_address_free(self, address: str, *, operation: str) -> None:
        if address in self._users_by_address:
            logger.warning(f"Rejected duplicate Solana address on {operation}")
            raise DuplicateIdentityError(
                "Solana address already registered",
                field="solana_address",
                value=address,
                operation=operation,
            )

    def _check_telegram_free(self, telegram_id: str, *, operation: str) -> None:
        if telegram_id in self._users_by_telegram:
            logger.warning(f"Rejected duplicate Telegram id on {operation}")
            raise DuplicateIdentityError(
                "Telegram account already linked to another user",
                field="telegram_id",
                value=telegram_id,
                operation=operation,
            )

    # -------------------------------------------------------------------------
    # Tokens
    # -------------------------------------------------------------------------

    def create_token(
        self,
        name: str,
        ticker: str,
        image_url: str,
        pumpfun_link: str | None = None,
    ) -> Token:
        """Store a newly launched token with zero votes.

        Names and tickers are not unique; the same meme can launch twice.
        """
        with self._lock:
            token = Token(
                id=self._new_id(),
                name=name,
                ticker=ticker,
                image_url=image_url,
                pumpfun_link=pumpfun_link or None,
                votes=0,
                created_at=self._clock(),
            )
            self._tokens[token.id] = token
            self._votes_by_token[token.id] = []

        logger.info(f"Launched token {token.id} ({token.ticker})")
        return token

    def get_token(self, token_id: str) -> Token | None:
        """Look up a token by id."""
        with self._lock:
            return self._tokens.get(token_id)

    def list_all_tokens(self) -> list[Token]:
        """All tokens in launch order."""
        with self._lock:
            return list(self._tokens.values())

    def list_tokens_by_votes_descending(self) -> list[Token]:
        """All tokens by vote count, highest first.

        The sort is stable over launch order, so among tokens with equal
        votes the earlier launch comes first.
        """
        return sorted(self.list_all_tokens(), key=lambda t: t.votes, reverse=True)

    def list_recent_tokens(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[Token]:
        """
        Newest tokens first, truncated to limit.

        Raises:
            ValidationError: If limit is not a positive integer
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError(
                f"limit must be a positive integer, got {limit!r}",
                field="limit",
            )
        ordered = sorted(self.list_all_tokens(), key=recency_key, reverse=True)
        return ordered[:limit]

    # -------------------------------------------------------------------------
    # Votes
    # -------------------------------------------------------------------------

    def record_vote(self, token_id: str, voter_identity: str) -> Vote:
        """
        Record a vote and increment the token's counter.

        The token lookup, duplicate check, vote insert and counter
        increment happen under one lock acquisition.

        Raises:
            TokenNotFoundError: If the token does not exist
            DuplicateVoteError: If this identity already voted for the token
        """
        vote, _ = self._insert_vote(token_id, voter_identity)
        return vote

    def cast_vote(self, token_id: str, voter_identity: str) -> Token:
        """Like record_vote, but return the token as of this vote's increment."""
        _, token = self._insert_vote(token_id, voter_identity)
        return token

    def _insert_vote(self, token_id: str, voter_identity: str) -> tuple[Vote, Token]:
        with self._lock:
            token = self._tokens.get(token_id)
            if token is None:
                logger.warning(f"Vote rejected: token {token_id} not found")
                raise TokenNotFoundError(
                    f"Token '{token_id}' not found",
                    token_id=token_id,
                )

            key = (token_id, voter_identity)
            if key in self._vote_keys:
                logger.warning(f"Vote rejected: duplicate vote for token {token_id}")
                raise DuplicateVoteError(
                    "You have already voted for this token",
                    token_id=token_id,
                    voter_identity=voter_identity,
                )

            vote = Vote(
                id=self._new_id(),
                token_id=token_id,
                voter_identity=voter_identity,
                timestamp=self._clock(),
            )
            updated = token.model_copy(update={"votes": token.votes + 1})
            self._votes[vote.id] = vote
            self._vote_keys.add(key)
            self._votes_by_token[token_id].append(vote.id)
            self._tokens[token_id] = updated

        logger.info(f"Recorded vote for token {token_id}")
        return vote, updated

    def has_voted(self, token_id: str, voter_identity: str) -> bool:
        """Whether the identity has voted for the token.

        Advisory only; record_vote is what rejects duplicates.
        """
        with self._lock:
            return (token_id, voter_identity) in self._vote_keys

    def get_token_votes(self, token_id: str) -> list[Vote]:
        """All votes cast for a token; empty for unknown tokens."""
        with self._lock:
            return [self._votes[vid] for vid in self._votes_by_token.get(token_id, [])]

    # -------------------------------------------------------------------------
    # Aggregates
    # -------------------------------------------------------------------------

    def stats(self) -> RegistryStats:
        """Totals over all tokens and users, with the current top token."""
        with self._lock:
            trending = self.list_tokens_by_votes_descending()
            return RegistryStats(
                total_tokens=len(trending),
                total_votes=sum(t.votes for t in trending),
                total_users=len(self._users),
                top_token=trending[0] if trending else None,
            )
