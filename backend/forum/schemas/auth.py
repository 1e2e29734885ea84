"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .common import UTCDateTime
from .user import USERNAME_PATTERN, UserPrivateSchema


class JoinSchema(Schema):
    """Input payload for member registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    username = fields.String(
        required=True,
        validate=[validate.Length(min=3, max=30), validate.Regexp(USERNAME_PATTERN)],
    )
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))
    display_name = fields.String(load_default=None, validate=validate.Length(min=1, max=32))
    client_platform = fields.String(load_default=None, validate=validate.Length(max=64))


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    client_platform = fields.String(load_default=None, validate=validate.Length(max=64))


class RefreshSchema(Schema):
    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class PasswordChangeSchema(Schema):
    current_password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    new_password = fields.String(required=True, validate=validate.Length(min=8, max=128))


class GuestJoinSchema(Schema):
    """Input payload for guest access."""

    device_fingerprint = fields.String(required=True, validate=validate.Length(min=8, max=128))
    user_agent = fields.String(load_default=None, validate=validate.Length(max=512))


class TokenPairSchema(Schema):
    """Response payload containing an access/refresh token pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(required=True)
    expires_in = fields.Integer(required=True)


class AuthorizedSchema(Schema):
    user = fields.Nested(UserPrivateSchema, required=True)
    token = fields.Nested(TokenPairSchema, required=True)


class GuestTokenSchema(Schema):
    guest_id = fields.Integer(required=True)
    access_token = fields.String(required=True)
    token_type = fields.String(required=True)
    expires_in = fields.Integer(required=True)


class SessionSchema(Schema):
    """A login session as shown to its owner."""

    id = fields.Integer(required=True)
    user_agent = fields.String(allow_none=True)
    ip = fields.String(allow_none=True)
    client_platform = fields.String(allow_none=True)
    created_at = UTCDateTime(required=True)
    expires_at = UTCDateTime(required=True)
    last_seen_at = UTCDateTime(allow_none=True)
    revoked_at = UTCDateTime(allow_none=True)
    is_active = fields.Boolean(required=True)
    is_current = fields.Boolean(required=True)
