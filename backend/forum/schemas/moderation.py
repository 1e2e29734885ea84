"""Site administration schemas."""

from __future__ import annotations

from datetime import timezone

from marshmallow import Schema, fields, validate

from forum.models.moderation import RestrictionType

from .common import PaginationQuerySchema, UTCDateTime


class RestrictionCreateSchema(Schema):
    user_id = fields.Integer(required=True, validate=validate.Range(min=1))
    restriction_type = fields.String(
        required=True, validate=validate.OneOf([t.value for t in RestrictionType])
    )
    reason = fields.String(load_default=None, validate=validate.Length(max=500))
    restricted_until = fields.AwareDateTime(load_default=None, default_timezone=timezone.utc)


class RestrictionQuerySchema(PaginationQuerySchema):
    user_id = fields.Integer(load_default=None, validate=validate.Range(min=1))
    active = fields.Boolean(load_default=None)


class RestrictionSchema(Schema):
    id = fields.Integer(required=True)
    user_id = fields.Integer(required=True)
    issued_by_id = fields.Integer(allow_none=True)
    restriction_type = fields.String(required=True)
    reason = fields.String(allow_none=True)
    restricted_until = UTCDateTime(allow_none=True)
    revoked_at = UTCDateTime(allow_none=True)
    is_active = fields.Boolean(required=True)
    created_at = UTCDateTime(required=True)
    updated_at = UTCDateTime(required=True)


class ReservedTermCreateSchema(Schema):
    term = fields.String(required=True, validate=validate.Length(min=1, max=30))


class ReservedTermSchema(Schema):
    id = fields.Integer(required=True)
    term = fields.String(required=True)
    created_at = UTCDateTime(required=True)
