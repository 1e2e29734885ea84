"""Communities: lifecycle, memberships, rules and recent activity."""

from .command import CommunityCommandService
from .dto import (
    CommunityCreateIn,
    CommunityListOut,
    CommunityOut,
    CommunitySearchIn,
    CommunityUpdateIn,
    MemberListOut,
    MemberOut,
    MembershipOut,
    RecentCommunityOut,
    RuleCreateIn,
    RuleIn,
    RuleListIn,
    RuleListOut,
    RuleOut,
    RuleUpdateIn,
)
from .membership import MembershipService
from .query import CommunityQueryService
from .rules import CommunityRuleService

__all__ = [
    "CommunityCommandService",
    "CommunityCreateIn",
    "CommunityListOut",
    "CommunityOut",
    "CommunityQueryService",
    "CommunityRuleService",
    "CommunitySearchIn",
    "CommunityUpdateIn",
    "MemberListOut",
    "MemberOut",
    "MembershipOut",
    "MembershipService",
    "RecentCommunityOut",
    "RuleCreateIn",
    "RuleIn",
    "RuleListIn",
    "RuleListOut",
    "RuleOut",
    "RuleUpdateIn",
]
