"""
DrawYourMeme Registry Module.

Provides the in-memory store of users, launched tokens and votes.
"""

__all__ = [
    "DEFAULT_RECENT_LIMIT",
    "Registry",
    "recency_key",
]

from drawyourmeme.registry.storage import DEFAULT_RECENT_LIMIT, Registry, recency_key
