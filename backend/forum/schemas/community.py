"""Community, membership and rule schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from forum.models.community import COMMUNITY_NAME_PATTERN, CommunityCategory

from .common import PaginationQuerySchema, UTCDateTime
from .user import UserPublicSchema

CATEGORY_CHOICES = [c.value for c in CommunityCategory]


class RuleInputSchema(Schema):
    order_index = fields.Integer(required=True, validate=validate.Range(min=1))
    text = fields.String(required=True, validate=validate.Length(min=1, max=100))


class CommunityCreateSchema(Schema):
    """Payload for creating a community."""

    name = fields.String(
        required=True,
        validate=[validate.Length(min=3, max=30), validate.Regexp(COMMUNITY_NAME_PATTERN)],
    )
    category = fields.String(required=True, validate=validate.OneOf(CATEGORY_CHOICES))
    description = fields.String(load_default=None, validate=validate.Length(max=500))
    logo_uri = fields.Url(load_default=None, validate=validate.Length(max=500))
    banner_uri = fields.Url(load_default=None, validate=validate.Length(max=500))
    rules = fields.List(
        fields.Nested(RuleInputSchema), load_default=list, validate=validate.Length(max=20)
    )


class CommunityUpdateSchema(Schema):
    """Partial update of a community; the name cannot change."""

    description = fields.String(validate=validate.Length(max=500))
    category = fields.String(validate=validate.OneOf(CATEGORY_CHOICES))
    logo_uri = fields.Url(validate=validate.Length(max=500))
    banner_uri = fields.Url(validate=validate.Length(max=500))


class CommunitySearchSchema(PaginationQuerySchema):
    """Query parameters for searching communities."""

    q = fields.String(load_default=None, validate=validate.Length(min=1, max=100))
    category = fields.String(load_default=None, validate=validate.OneOf(CATEGORY_CHOICES))


class RuleSchema(Schema):
    id = fields.Integer(required=True)
    community_id = fields.Integer(required=True)
    order_index = fields.Integer(required=True)
    text = fields.String(required=True)
    created_at = UTCDateTime(required=True)
    updated_at = UTCDateTime(required=True)


class RuleCreateSchema(RuleInputSchema):
    """Payload for adding a rule to a community."""


class RuleUpdateSchema(Schema):
    order_index = fields.Integer(validate=validate.Range(min=1))
    text = fields.String(validate=validate.Length(min=1, max=100))


class RuleListQuerySchema(Schema):
    """Keyset query parameters for listing rules."""

    class Meta:
        unknown = EXCLUDE

    sort = fields.String(load_default="order", validate=validate.OneOf(["order", "created_at"]))
    order = fields.String(load_default="asc", validate=validate.OneOf(["asc", "desc"]))
    q = fields.String(load_default=None, validate=validate.Length(min=1, max=100))


class CommunitySchema(Schema):
    """Public representation of a community."""

    id = fields.Integer(required=True)
    name = fields.String(required=True)
    category = fields.String(required=True)
    description = fields.String(allow_none=True)
    logo_uri = fields.String(allow_none=True)
    banner_uri = fields.String(allow_none=True)
    owner_id = fields.Integer(required=True)
    member_count = fields.Integer(required=True)
    last_active_at = UTCDateTime(required=True)
    created_at = UTCDateTime(required=True)
    updated_at = UTCDateTime(required=True)
    rules = fields.List(fields.Nested(RuleSchema))
    joined = fields.Boolean(allow_none=True)


class MembershipInputSchema(Schema):
    join = fields.Boolean(required=True)


class MembershipSchema(Schema):
    community_id = fields.Integer(required=True)
    joined = fields.Boolean(required=True)
    member_count = fields.Integer(required=True)
    joined_at = UTCDateTime(allow_none=True)


class MemberSchema(Schema):
    user = fields.Nested(UserPublicSchema, required=True)
    joined_at = UTCDateTime(required=True)


class RecentCommunitySchema(Schema):
    community = fields.Nested(CommunitySchema, exclude=("rules",), required=True)
    last_activity_at = UTCDateTime(required=True)
