"""
Ports (hexagonal interfaces) for token infrastructure.

- :mod:`token_provider`: :class:`~.TokenProvider`, minting and reading bearer tokens.
- :mod:`denylist_store`: :class:`~.TokenDenylistStore`, revoked access-token ids.

Concrete adapters live under ``forum.infra``; the in-memory/stub versions
here back development without Redis and the unit tests.
"""

from __future__ import annotations

from .denylist_store import InMemoryDenylistStore, TokenDenylistStore
from .token_provider import StubTokenProvider, TokenDecodeError, TokenProvider

__all__ = [
    "InMemoryDenylistStore",
    "StubTokenProvider",
    "TokenDecodeError",
    "TokenDenylistStore",
    "TokenProvider",
]
