"""User accounts: profiles and self-service account management."""

from .dto import UserPrivateOut, UserPublicOut, UserUpdateIn
from .service import IdentityService

__all__ = ["IdentityService", "UserPrivateOut", "UserPublicOut", "UserUpdateIn"]
