"""Post, comment and vote schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from .common import UTCDateTime

POST_SORTS = ["newest", "top"]
COMMENT_SORTS = ["newest", "oldest", "top"]
VOTE_STATES = ["upvote", "downvote"]


class PostCreateSchema(Schema):
    """Payload for publishing a post."""

    community_name = fields.String(required=True, validate=validate.Length(min=3, max=30))
    title = fields.String(required=True, validate=validate.Length(min=5, max=120))
    body = fields.String(required=True, validate=validate.Length(min=10, max=10000))
    author_display_name = fields.String(load_default=None, validate=validate.Length(min=1, max=32))


class PostUpdateSchema(Schema):
    title = fields.String(validate=validate.Length(min=5, max=120))
    body = fields.String(validate=validate.Length(min=10, max=10000))
    author_display_name = fields.String(validate=validate.Length(min=1, max=32))


class PostFeedQuerySchema(Schema):
    """Feed query parameters (cursor parameters are parsed separately)."""

    class Meta:
        unknown = EXCLUDE

    sort = fields.String(load_default="newest", validate=validate.OneOf(POST_SORTS))
    q = fields.String(load_default=None, validate=validate.Length(max=100))


class AuthorSchema(Schema):
    id = fields.Integer(required=True)
    username = fields.String(required=True)
    display_name = fields.String(allow_none=True)


class PostCommunitySchema(Schema):
    id = fields.Integer(required=True)
    name = fields.String(required=True)


class PostSchema(Schema):
    """Public representation of a post."""

    id = fields.Integer(required=True)
    community = fields.Nested(PostCommunitySchema, required=True)
    author = fields.Nested(AuthorSchema, required=True)
    title = fields.String(required=True)
    body = fields.String(required=True)
    author_display_name = fields.String(allow_none=True)
    score = fields.Integer(required=True)
    comment_count = fields.Integer(required=True)
    my_vote = fields.String(allow_none=True)
    created_at = UTCDateTime(required=True)
    updated_at = UTCDateTime(required=True)


class PostSnapshotSchema(Schema):
    id = fields.Integer(required=True)
    post_id = fields.Integer(required=True)
    editor_id = fields.Integer(required=True)
    title = fields.String(required=True)
    body = fields.String(required=True)
    author_display_name = fields.String(allow_none=True)
    created_at = UTCDateTime(required=True)


class CommentCreateSchema(Schema):
    content = fields.String(required=True, validate=validate.Length(min=2, max=2000))
    parent_id = fields.Integer(load_default=None, validate=validate.Range(min=1))


class CommentUpdateSchema(Schema):
    content = fields.String(required=True, validate=validate.Length(min=2, max=2000))


class CommentListQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    sort = fields.String(load_default="newest", validate=validate.OneOf(COMMENT_SORTS))
    q = fields.String(load_default=None, validate=validate.Length(max=100))


class CommentSchema(Schema):
    """Public representation of a comment."""

    id = fields.Integer(required=True)
    post_id = fields.Integer(required=True)
    parent_id = fields.Integer(allow_none=True)
    author = fields.Nested(AuthorSchema, required=True)
    content = fields.String(required=True)
    depth = fields.Integer(required=True)
    score = fields.Integer(required=True)
    my_vote = fields.String(allow_none=True)
    created_at = UTCDateTime(required=True)
    updated_at = UTCDateTime(required=True)


class CommentSnapshotSchema(Schema):
    id = fields.Integer(required=True)
    comment_id = fields.Integer(required=True)
    editor_id = fields.Integer(required=True)
    content = fields.String(required=True)
    created_at = UTCDateTime(required=True)


class VoteSchema(Schema):
    """Payload for casting a vote."""

    state = fields.String(required=True, validate=validate.OneOf(VOTE_STATES))


class PostVoteSchema(Schema):
    post_id = fields.Integer(required=True)
    score = fields.Integer(required=True)
    my_vote = fields.String(required=True)


class CommentVoteSchema(Schema):
    comment_id = fields.Integer(required=True)
    score = fields.Integer(required=True)
    my_vote = fields.String(required=True)
