"""Tests for the in-memory registry."""

import threading
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from drawyourmeme.core.exceptions import (
    DuplicateIdentityError,
    DuplicateVoteError,
    NotFoundError,
    TokenNotFoundError,
    ValidationError,
)
from drawyourmeme.core.models import Token
from drawyourmeme.registry.storage import Registry, recency_key

ADDRESS_A = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
ADDRESS_B = "9yj3zvLS3fDMqi1F8zhkaWfq8TZpZWHe6cz1Sgt7djXf"
ADDRESS_C = "So11111111111111111111111111111111111111112"


def _vote_n(registry: Registry, token_id: str, n: int, prefix: str = "10.0.0.") -> None:
    for i in range(n):
        registry.record_vote(token_id, f"{prefix}{i}")


class TestUsers:
    """Tests for user registration, lookup and update."""

    def test_create_user_defaults(self, registry: Registry) -> None:
        """New users are unverified and stamped with equal timestamps."""
        user = registry.create_user(ADDRESS_A)

        assert user.id
        assert user.solana_address == ADDRESS_A
        assert user.telegram_id is None
        assert user.telegram_username is None
        assert user.is_verified == "false"
        assert user.created_at == user.updated_at

    def test_create_user_with_telegram(self, registry: Registry) -> None:
        """Telegram identity is stored and indexed."""
        user = registry.create_user(ADDRESS_A, telegram_id="42", telegram_username="alice")

        assert registry.find_user_by_telegram_id("42") == user
        assert user.telegram_username == "alice"

    def test_lookups(self, registry: Registry) -> None:
        """Users can be found by id, address and Telegram id."""
        user = registry.create_user(ADDRESS_A, telegram_id="42")

        assert registry.get_user(user.id) == user
        assert registry.find_user_by_solana_address(ADDRESS_A) == user
        assert registry.find_user_by_telegram_id("42") == user

    def test_lookups_not_found(self, registry: Registry) -> None:
        """Missing users resolve to None."""
        assert registry.get_user("missing") is None
        assert registry.find_user_by_solana_address(ADDRESS_A) is None
        assert registry.find_user_by_telegram_id("42") is None

    def test_duplicate_address_rejected(self, registry: Registry) -> None:
        """A second registration of the same address fails and stores nothing."""
        registry.create_user(ADDRESS_A)

        with pytest.raises(DuplicateIdentityError) as exc_info:
            registry.create_user(ADDRESS_A, telegram_id="7")

        assert exc_info.value.field == "solana_address"
        assert registry.count_users() == 1
        assert registry.find_user_by_telegram_id("7") is None

    def test_duplicate_telegram_id_rejected(self, registry: Registry) -> None:
        """A Telegram id can only be linked to one user."""
        registry.create_user(ADDRESS_A, telegram_id="42")

        with pytest.raises(DuplicateIdentityError) as exc_info:
            registry.create_user(ADDRESS_B, telegram_id="42")

        assert exc_info.value.field == "telegram_id"
        assert registry.count_users() == 1
        assert registry.find_user_by_solana_address(ADDRESS_B) is None

    def test_no_two_users_share_address(self, registry: Registry) -> None:
        """Any sequence of creates leaves addresses unique."""
        for address in [ADDRESS_A, ADDRESS_B, ADDRESS_A, ADDRESS_C, ADDRESS_B]:
            try:
                registry.create_user(address)
            except DuplicateIdentityError:
                pass

        addresses = [
            registry.find_user_by_solana_address(a).solana_address
            for a in (ADDRESS_A, ADDRESS_B, ADDRESS_C)
        ]
        assert len(set(addresses)) == 3
        assert registry.count_users() == 3

    def test_update_user_merges_fields(self, registry: Registry) -> None:
        """Only given fields change and updated_at moves forward."""
        user = registry.create_user(ADDRESS_A)

        updated = registry.update_user(user.id, telegram_id="42", telegram_username="alice")

        assert updated.telegram_id == "42"
        assert updated.telegram_username == "alice"
        assert updated.solana_address == ADDRESS_A
        assert updated.created_at == user.created_at
        assert updated.updated_at > user.updated_at
        assert registry.find_user_by_telegram_id("42") == updated

    def test_update_user_not_found(self, registry: Registry) -> None:
        """Updating a missing user raises NotFoundError."""
        with pytest.raises(NotFoundError):
            registry.update_user("missing", telegram_username="bob")

    def test_update_user_unknown_field(self, registry: Registry) -> None:
        """Fields outside the updatable set are rejected."""
        user = registry.create_user(ADDRESS_A)

        with pytest.raises(ValidationError):
            registry.update_user(user.id, votes=3)

    def test_update_user_rechecks_telegram_uniqueness(self, registry: Registry) -> None:
        """Linking a Telegram id already used elsewhere fails."""
        registry.create_user(ADDRESS_A, telegram_id="42")
        other = registry.create_user(ADDRESS_B)

        with pytest.raises(DuplicateIdentityError):
            registry.update_user(other.id, telegram_id="42")

        assert registry.get_user(other.id).telegram_id is None

    def test_update_user_same_telegram_id_allowed(self, registry: Registry) -> None:
        """Re-sending the user's own Telegram id is not a collision."""
        user = registry.create_user(ADDRESS_A, telegram_id="42")

        updated = registry.update_user(user.id, telegram_id="42", telegram_username="new")

        assert updated.telegram_username == "new"

    def test_update_user_address_is_immutable(self, registry: Registry) -> None:
        """The Solana address cannot be changed after registration."""
        user = registry.create_user(ADDRESS_A)

        with pytest.raises(ValidationError):
            registry.update_user(user.id, solana_address=ADDRESS_B)

        assert registry.find_user_by_solana_address(ADDRESS_A).id == user.id
        assert registry.find_user_by_solana_address(ADDRESS_B) is None

    def test_update_user_integer_telegram_id_collides(self, registry: Registry) -> None:
        """An integer Telegram id matches the same id already linked as a string."""
        registry.create_user(ADDRESS_A, telegram_id="123")
        other = registry.create_user(ADDRESS_B)

        with pytest.raises(DuplicateIdentityError):
            registry.update_user(other.id, telegram_id=123)

        assert registry.get_user(other.id).telegram_id is None
        assert registry.find_user_by_telegram_id("123").solana_address == ADDRESS_A

    def test_create_user_integer_telegram_id_collides(self, registry: Registry) -> None:
        registry.create_user(ADDRESS_A, telegram_id="123")

        with pytest.raises(DuplicateIdentityError):
            registry.create_user(ADDRESS_B, telegram_id=123)

        assert registry.count_users() == 1

    def test_update_user_normalizes_values(self, registry: Registry) -> None:
        """Updated values are validated into their stored types."""
        user = registry.create_user(ADDRESS_A)

        updated = registry.update_user(user.id, telegram_id=456, is_verified=True)

        assert updated.telegram_id == "456"
        assert updated.is_verified == "true"
        assert registry.find_user_by_telegram_id("456").id == user.id

    def test_update_user_rejects_bad_values(self, registry: Registry) -> None:
        user = registry.create_user(ADDRESS_A)

        with pytest.raises(ValidationError):
            registry.update_user(user.id, is_verified="maybe")

        assert registry.get_user(user.id) == user

    def test_update_user_blank_telegram_id_unlinks(self, registry: Registry) -> None:
        """An empty Telegram id clears the link and frees the id."""
        user = registry.create_user(ADDRESS_A, telegram_id="42", telegram_username="alice")

        updated = registry.update_user(user.id, telegram_id="", telegram_username="")

        assert updated.telegram_id is None
        assert updated.telegram_username is None
        assert registry.find_user_by_telegram_id("42") is None
        assert registry.find_user_by_telegram_id("") is None
        assert registry.create_user(ADDRESS_B, telegram_id="42").telegram_id == "42"

    def test_returned_records_are_immutable(self, registry: Registry) -> None:
        """Records cannot be mutated behind the registry's back."""
        user = registry.create_user(ADDRESS_A)

        with pytest.raises(PydanticValidationError):
            user.solana_address = ADDRESS_B


class TestTokens:
    """Tests for token creation and listing."""

    def test_create_token(self, registry: Registry) -> None:
        """New tokens start with zero votes and a creation time."""
        token = registry.create_token("Doge", "DOGE", "/uploads/a.png", "https://pump.fun/x")

        assert token.votes == 0
        assert token.created_at is not None
        assert token.pumpfun_link == "https://pump.fun/x"
        assert registry.get_token(token.id) == token

    def test_duplicate_names_allowed(self, registry: Registry) -> None:
        """Names and tickers need not be unique."""
        first = registry.create_token("Doge", "DOGE", "/uploads/a.png")
        second = registry.create_token("Doge", "DOGE", "/uploads/b.png")

        assert first.id != second.id
        assert len(registry.list_all_tokens()) == 2

    def test_get_token_not_found(self, registry: Registry) -> None:
        """Unknown ids resolve to None."""
        assert registry.get_token("missing") is None

    def test_list_all_tokens_is_live(self, registry: Registry) -> None:
        """Each call reflects the current set."""
        assert registry.list_all_tokens() == []
        token = registry.create_token("Doge", "DOGE", "/uploads/a.png")

        assert [t.id for t in registry.list_all_tokens()] == [token.id]

    def test_trending_order_is_stable(self, registry: Registry) -> None:
        """Ties keep launch order; higher votes come first."""
        a = registry.create_token("A", "AAA", "/uploads/a.png")
        b = registry.create_token("B", "BBB", "/uploads/b.png")
        c = registry.create_token("C", "CCC", "/uploads/c.png")
        _vote_n(registry, a.id, 5)
        _vote_n(registry, b.id, 5)
        _vote_n(registry, c.id, 7)

        ordered = registry.list_tokens_by_votes_descending()

        assert [t.id for t in ordered] == [c.id, a.id, b.id]

    def test_trending_ties_with_zero_votes(self, registry: Registry) -> None:
        """With no votes trending order is launch order."""
        ids = [registry.create_token(n, "TK", "/uploads/x.png").id for n in "XYZ"]

        assert [t.id for t in registry.list_tokens_by_votes_descending()] == ids

    def test_recent_tokens_truncated(self, registry: Registry) -> None:
        """The three newest of five tokens come back newest first."""
        tokens = [registry.create_token(f"T{i}", "TK", "/uploads/x.png") for i in range(5)]

        recent = registry.list_recent_tokens(3)

        assert [t.id for t in recent] == [tokens[4].id, tokens[3].id, tokens[2].id]

    def test_recent_tokens_limit_larger_than_set(self, registry: Registry) -> None:
        """A large limit returns everything."""
        registry.create_token("Only", "ONE", "/uploads/x.png")

        assert len(registry.list_recent_tokens(50)) == 1

    @pytest.mark.parametrize("limit", [0, -1])
    def test_recent_tokens_rejects_non_positive_limit(self, registry: Registry, limit: int) -> None:
        """Limit must be positive."""
        with pytest.raises(ValidationError):
            registry.list_recent_tokens(limit)

    def test_recency_key_treats_missing_time_as_oldest(self) -> None:
        """Tokens without created_at sort after dated ones."""
        dated = Token(
            id="1",
            name="Dated",
            ticker="DT",
            image_url="/uploads/a.png",
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        undated = Token(id="2", name="Undated", ticker="UD", image_url="/uploads/b.png")

        ordered = sorted([undated, dated], key=recency_key, reverse=True)

        assert [t.id for t in ordered] == ["1", "2"]


class TestVotes:
    """Tests for voting and the vote/counter invariant."""

    def test_end_to_end_scenario(self, registry: Registry) -> None:
        """Votes count once per identity."""
        token = registry.create_token("Doge", "DOGE", "/uploads/a.png")
        assert token.votes == 0

        registry.record_vote(token.id, "9.9.9.9")
        assert registry.get_token(token.id).votes == 1

        with pytest.raises(DuplicateVoteError):
            registry.record_vote(token.id, "9.9.9.9")
        assert registry.get_token(token.id).votes == 1

        registry.record_vote(token.id, "8.8.8.8")
        assert registry.get_token(token.id).votes == 2

    def test_vote_record_fields(self, registry: Registry) -> None:
        """The returned vote references the token and identity."""
        token = registry.create_token("Doge", "DOGE", "/uploads/a.png")

        vote = registry.record_vote(token.id, "1.2.3.4")

        assert vote.token_id == token.id
        assert vote.voter_identity == "1.2.3.4"
        assert vote.timestamp is not None
        assert registry.get_token_votes(token.id) == [vote]

    def test_vote_missing_token(self, registry: Registry) -> None:
        """Voting on an unknown token fails and records nothing."""
        with pytest.raises(TokenNotFoundError):
            registry.record_vote("nonexistent-id", "1.2.3.4")

        assert registry.get_token_votes("nonexistent-id") == []
        assert not registry.has_voted("nonexistent-id", "1.2.3.4")

    def test_cast_vote_returns_counted_token(self, registry: Registry) -> None:
        """cast_vote reports the count produced by its own increment."""
        token = registry.create_token("Doge", "DOGE", "/uploads/a.png")
        registry.record_vote(token.id, "1.1.1.1")

        counted = registry.cast_vote(token.id, "2.2.2.2")
        registry.record_vote(token.id, "3.3.3.3")

        assert counted.id == token.id
        assert counted.votes == 2
        assert registry.get_token(token.id).votes == 3
        with pytest.raises(DuplicateVoteError):
            registry.cast_vote(token.id, "2.2.2.2")

    def test_has_voted(self, registry: Registry) -> None:
        """has_voted reflects recorded votes per token."""
        first = registry.create_token("A", "AAA", "/uploads/a.png")
        second = registry.create_token("B", "BBB", "/uploads/b.png")
        registry.record_vote(first.id, "1.2.3.4")

        assert registry.has_voted(first.id, "1.2.3.4")
        assert not registry.has_voted(second.id, "1.2.3.4")
        assert not registry.has_voted(first.id, "5.6.7.8")

    def test_same_identity_can_vote_on_different_tokens(self, registry: Registry) -> None:
        """Deduplication is per token."""
        first = registry.create_token("A", "AAA", "/uploads/a.png")
        second = registry.create_token("B", "BBB", "/uploads/b.png")

        registry.record_vote(first.id, "1.2.3.4")
        registry.record_vote(second.id, "1.2.3.4")

        assert registry.get_token(first.id).votes == 1
        assert registry.get_token(second.id).votes == 1

    def test_counter_matches_ledger(self, registry: Registry) -> None:
        """votes always equals the number of vote records."""
        tokens = [registry.create_token(f"T{i}", "TK", "/uploads/x.png") for i in range(3)]
        for i, token in enumerate(tokens):
            _vote_n(registry, token.id, i * 2)
            try:
                registry.record_vote(token.id, "10.0.0.0")
            except DuplicateVoteError:
                pass

        for token in registry.list_all_tokens():
            assert token.votes == len(registry.get_token_votes(token.id))

    def test_earlier_snapshot_unchanged_by_vote(self, registry: Registry) -> None:
        """A token read before a vote keeps its old count."""
        token = registry.create_token("Doge", "DOGE", "/uploads/a.png")

        registry.record_vote(token.id, "1.2.3.4")

        assert token.votes == 0
        assert registry.get_token(token.id).votes == 1

    def test_concurrent_duplicate_votes(self, registry: Registry) -> None:
        """Racing votes from one identity produce exactly one success."""
        token = registry.create_token("Doge", "DOGE", "/uploads/a.png")
        workers = 16
        barrier = threading.Barrier(workers)
        successes: list[str] = []
        duplicates: list[str] = []
        results_lock = threading.Lock()

        def vote() -> None:
            barrier.wait()
            try:
                registry.record_vote(token.id, "9.9.9.9")
                outcome = successes
            except DuplicateVoteError:
                outcome = duplicates
            with results_lock:
                outcome.append("x")

        threads = [threading.Thread(target=vote) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(successes) == 1
        assert len(duplicates) == workers - 1
        assert registry.get_token(token.id).votes == 1
        assert len(registry.get_token_votes(token.id)) == 1

    def test_concurrent_distinct_votes_not_lost(self, registry: Registry) -> None:
        """Racing votes from different identities are all counted."""
        token = registry.create_token("Doge", "DOGE", "/uploads/a.png")
        workers = 16
        barrier = threading.Barrier(workers)

        def vote(i: int) -> None:
            barrier.wait()
            registry.record_vote(token.id, f"10.0.0.{i}")

        threads = [threading.Thread(target=vote, args=(i,)) for i in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert registry.get_token(token.id).votes == workers


class TestStats:
    """Tests for registry aggregates."""

    def test_empty_stats(self, registry: Registry) -> None:
        """An empty registry has no top token."""
        stats = registry.stats()

        assert stats.total_tokens == 0
        assert stats.total_votes == 0
        assert stats.total_users == 0
        assert stats.top_token is None

    def test_stats_totals(self, registry: Registry) -> None:
        """Totals sum across tokens; the earliest of tied leaders is top."""
        registry.create_user(ADDRESS_A)
        a = registry.create_token("A", "AAA", "/uploads/a.png")
        b = registry.create_token("B", "BBB", "/uploads/b.png")
        _vote_n(registry, a.id, 2)
        _vote_n(registry, b.id, 2)

        stats = registry.stats()

        assert stats.total_tokens == 2
        assert stats.total_votes == 4
        assert stats.total_users == 1
        assert stats.top_token.id == a.id
