"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`forum.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``forum.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Shared DTOs (from ``forum.services._shared.dto``)
    * :class:`CursorIn`
    * :class:`PageMeta`, :class:`CursorMeta`

- Use-case services, one per domain package
    * :class:`AuthService` (``forum.services.auth``)
    * :class:`IdentityService` (``forum.services.identity``)
    * :class:`CommunityCommandService`, :class:`CommunityQueryService`,
      :class:`MembershipService`, :class:`CommunityRuleService`
      (``forum.services.communities``)
    * :class:`PostCommandService`, :class:`PostQueryService` (``forum.services.posts``)
    * :class:`CommentService` (``forum.services.comments``)
    * :class:`VoteService` (``forum.services.votes``)
    * :class:`AdminService` (``forum.services.admin``)

DTOs stay in their domain package (e.g. ``forum.services.posts.dto``).
"""

from __future__ import annotations

# Base primitives (service base + request-scoped context)
from ._shared.base import BaseService, ServiceContext

# Shared DTOs (compose these in endpoint-specific DTOs)
from ._shared.dto import CursorIn, CursorMeta, PageMeta
from .admin import AdminService
from .auth import AuthService
from .comments import CommentService
from .communities import (
    CommunityCommandService,
    CommunityQueryService,
    CommunityRuleService,
    MembershipService,
)
from .identity import IdentityService
from .posts import PostCommandService, PostQueryService
from .votes import VoteService

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Shared DTOs
    "CursorIn",
    "CursorMeta",
    "PageMeta",
    # Services
    "AdminService",
    "AuthService",
    "CommentService",
    "CommunityCommandService",
    "CommunityQueryService",
    "CommunityRuleService",
    "IdentityService",
    "MembershipService",
    "PostCommandService",
    "PostQueryService",
    "VoteService",
]
