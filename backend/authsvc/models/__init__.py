"""ORM models; importing this package registers every table on ``db.metadata``."""

from authsvc.models.token_metadata import TokenMetadata
from authsvc.models.user import ROLES, User

__all__ = ["ROLES", "TokenMetadata", "User"]
