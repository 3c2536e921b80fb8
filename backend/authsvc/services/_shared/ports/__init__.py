"""
authsvc.services._shared.ports
==============================

Collection of *ports* (hexagonal interfaces) that define the contracts the
token lifecycle engine depends on.

Modules
-------
- :mod:`claim_codec`:
    Defines :class:`~.ClaimCodec`: signing and verification of token claims.

- :mod:`metadata_store`:
    Defines :class:`~.TokenMetadataStore` and :class:`~.InMemoryTokenMetadataStore`
    for persistence of per-token metadata (revocation flag, timestamps).

- :mod:`user_directory`:
    Defines :class:`~.UserDirectory` and :class:`~.InMemoryUserDirectory`
    for lookup of the current identity behind a token subject.

Design Notes
------------
Concrete adapters (PyJWT, SQLAlchemy) live under ``authsvc.infra``.
"""

from __future__ import annotations

from .claim_codec import ClaimCodec
from .metadata_store import InMemoryTokenMetadataStore, TokenMetadataStore
from .user_directory import InMemoryUserDirectory, UserDirectory

__all__ = [
    "ClaimCodec",
    "TokenMetadataStore",
    "InMemoryTokenMetadataStore",
    "UserDirectory",
    "InMemoryUserDirectory",
]
