"""Query-string parsing and ``meta`` blocks shared by every listing endpoint."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from forum.models.base import as_utc


class UTCDateTime(fields.DateTime):
    """ISO-8601 output that always carries ``+00:00``, even from SQLite."""

    def _serialize(self, value, attr, obj, **kwargs):
        return super()._serialize(as_utc(value), attr, obj, **kwargs)


class _LimitQuerySchema(Schema):
    """``limit`` defaulted and capped by the app's pagination settings."""

    class Meta:
        unknown = EXCLUDE

    limit = fields.Integer(validate=validate.Range(min=1))

    def __init__(self, *, default_limit: int = 20, max_limit: int = 100, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.default_limit = default_limit
        self.max_limit = max_limit

    @post_load
    def cap_limit(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data["limit"] = min(data.get("limit", self.default_limit), self.max_limit)
        return data


class PaginationQuerySchema(_LimitQuerySchema):
    """``?page=2&limit=50&sort=-created_at,username``; ``sort`` becomes a token list."""

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    sort = fields.String(load_default="")

    @post_load
    def split_sort(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data["sort"] = [token.strip() for token in data["sort"].split(",") if token.strip()]
        return data


class CursorQuerySchema(_LimitQuerySchema):
    cursor = fields.String(load_default=None, validate=validate.Length(min=1, max=512))


class MetaSchema(Schema):
    total = fields.Integer(required=True)
    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)


class CursorMetaSchema(Schema):
    limit = fields.Integer(required=True)
    next_cursor = fields.String(allow_none=True)
    total = fields.Integer(required=True)


meta_schema = MetaSchema()
cursor_meta_schema = CursorMetaSchema()


def build_meta(meta: Any) -> dict[str, Any]:
    """``meta`` of an offset page, from a :class:`PageMeta`."""
    return meta_schema.dump(meta)


def build_cursor_meta(meta: Any) -> dict[str, Any]:
    """``meta`` of a keyset page, from a :class:`CursorMeta`."""
    return cursor_meta_schema.dump(meta)
