"""
malldir.services._shared.ports
==============================

Ports (hexagonal interfaces) for token infrastructure.

Modules
-------
- :mod:`token_codec`:
    :class:`~.TokenCodec`, signing and decoding of compact JWS tokens.

- :mod:`revocation_registry`:
    :class:`~.RevocationRegistry`, set of rejected access-token strings.

- :mod:`refresh_session_store`:
    :class:`~.RefreshSessionStore`, :class:`~.RotationResult` and
    :class:`~.RefreshSessionView` for refresh-token rotation.

Concrete adapters (PyJWT, Redis) live under ``malldir.infra``; the
in-memory implementations here back single-process deployments and tests.
"""

from __future__ import annotations

from .refresh_session_store import (
    InMemoryRefreshSessionStore,
    RefreshSessionStore,
    RefreshSessionView,
    RotationResult,
)
from .revocation_registry import InMemoryRevocationRegistry, RevocationRegistry
from .token_codec import TokenCodec

__all__ = [
    "TokenCodec",
    "RevocationRegistry",
    "InMemoryRevocationRegistry",
    "RefreshSessionStore",
    "RefreshSessionView",
    "RotationResult",
    "InMemoryRefreshSessionStore",
]
