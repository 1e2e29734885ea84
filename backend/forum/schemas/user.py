"""User resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from .common import UTCDateTime

USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"


class UserPublicSchema(Schema):
    """Public representation of a user (profiles, authors, members)."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    display_name = fields.String(allow_none=True)
    created_at = UTCDateTime(required=True)


class UserPrivateSchema(UserPublicSchema):
    """The caller's own account."""

    email = fields.Email(required=True)
    role = fields.String(required=True)
    last_login_at = UTCDateTime(allow_none=True)
    updated_at = UTCDateTime(required=True)


class AdminUserSchema(UserPrivateSchema):
    """Account view for administrators."""

    deleted_at = UTCDateTime(allow_none=True)


class UserUpdateSchema(Schema):
    """Partial profile update. ``display_name: null`` clears the display name."""

    username = fields.String(
        validate=[validate.Length(min=3, max=30), validate.Regexp(USERNAME_PATTERN)]
    )
    display_name = fields.String(allow_none=True, validate=validate.Length(min=1, max=32))


class UserFilterSchema(Schema):
    """Supported query parameters for the admin user listing."""

    class Meta:
        unknown = EXCLUDE

    q = fields.String(load_default=None, validate=validate.Length(min=1, max=254))
