"""Persistence-only query objects, one per table."""

from authsvc.repositories.token_metadata import TokenMetadataRepository
from authsvc.repositories.user import UserRepository

__all__ = ["TokenMetadataRepository", "UserRepository"]
