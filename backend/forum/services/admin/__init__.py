"""Site administration: accounts, restrictions and reserved community names."""

from .dto import (
    AdminUserListOut,
    AdminUserOut,
    ReservedTermCreateIn,
    ReservedTermListOut,
    ReservedTermOut,
    RestrictionCreateIn,
    RestrictionListOut,
    RestrictionOut,
    RestrictionSearchIn,
    UserSearchIn,
)
from .service import AdminService

__all__ = [
    "AdminService",
    "AdminUserListOut",
    "AdminUserOut",
    "ReservedTermCreateIn",
    "ReservedTermListOut",
    "ReservedTermOut",
    "RestrictionCreateIn",
    "RestrictionListOut",
    "RestrictionOut",
    "RestrictionSearchIn",
    "UserSearchIn",
]
