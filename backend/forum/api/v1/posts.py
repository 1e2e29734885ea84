"""Post endpoints: publishing, feeds, history, comments and votes."""

from __future__ import annotations

from flask import Blueprint, request

from forum.api.deps import (
    json_response,
    no_content,
    optional_auth,
    parse_cursor,
    parse_pagination,
    require_auth,
    service_context,
    timing,
)
from forum.api.etag import if_match_header, set_response_etag
from forum.schemas import (
    CommentCreateSchema,
    CommentListQuerySchema,
    CommentSchema,
    PostCreateSchema,
    PostFeedQuerySchema,
    PostSchema,
    PostSnapshotSchema,
    PostUpdateSchema,
    PostVoteSchema,
    VoteSchema,
    build_cursor_meta,
    build_meta,
)
from forum.services.comments import CommentCreateIn, CommentListIn, CommentService
from forum.services.posts import (
    PostCommandService,
    PostCreateIn,
    PostFeedIn,
    PostQueryService,
    PostUpdateIn,
)
from forum.services.votes import VoteIn, VoteService

bp = Blueprint("posts", __name__, url_prefix="/posts")

post_schema = PostSchema()
post_list_schema = PostSchema(many=True)
post_create_schema = PostCreateSchema()
post_update_schema = PostUpdateSchema()
feed_query_schema = PostFeedQuerySchema()
snapshot_schema = PostSnapshotSchema()
snapshot_list_schema = PostSnapshotSchema(many=True)
comment_schema = CommentSchema()
comment_list_schema = CommentSchema(many=True)
comment_create_schema = CommentCreateSchema()
comment_query_schema = CommentListQuerySchema()
vote_schema = VoteSchema()
post_vote_schema = PostVoteSchema()


def _post_response(out, *, status: int = 200):
    response = json_response({"data": post_schema.dump(out)}, status=status)
    return set_response_etag(response, out.etag)


# --------------------------------------------------------------------------- #
# Posts
# --------------------------------------------------------------------------- #


@bp.post("")
@require_auth
@timing
def create_post():
    """Publish a post in a community."""

    data = post_create_schema.load(request.get_json(silent=True) or {})
    service = PostCommandService(ctx=service_context())
    out = service.create(PostCreateIn(**data))
    return _post_response(out, status=201)


@bp.get("")
@optional_auth
@timing
def global_feed():
    """Return a keyset page of posts across every community."""

    args = feed_query_schema.load(request.args)
    cursor = parse_cursor()
    service = PostQueryService(ctx=service_context())
    out = service.feed(PostFeedIn(sort=args["sort"], q=args["q"], cursor=cursor.cursor, limit=cursor.limit))
    return json_response({"data": post_list_schema.dump(out.items), "meta": build_cursor_meta(out.meta)})


@bp.get("/latest")
@optional_auth
@timing
def latest_posts():
    service = PostQueryService(ctx=service_context())
    items = service.latest()
    return json_response({"data": post_list_schema.dump(items)})


@bp.get("/search")
@optional_auth
@timing
def search_posts():
    """Search titles and bodies; ``q`` needs at least two characters."""

    args = feed_query_schema.load(request.args)
    cursor = parse_cursor()
    service = PostQueryService(ctx=service_context())
    out = service.search(q=args["q"], sort=args["sort"], cursor=cursor.cursor, limit=cursor.limit)
    return json_response({"data": post_list_schema.dump(out.items), "meta": build_cursor_meta(out.meta)})


@bp.get("/<int:post_id>")
@optional_auth
@timing
def get_post(post_id: int):
    service = PostQueryService(ctx=service_context())
    return _post_response(service.get(post_id))


@bp.put("/<int:post_id>")
@require_auth
@timing
def update_post(post_id: int):
    """Edit a post (author only); honours ``If-Match``."""

    data = post_update_schema.load(request.get_json(silent=True) or {})
    service = PostCommandService(ctx=service_context())
    out = service.update(PostUpdateIn(post_id=post_id, if_match=if_match_header(), **data))
    return _post_response(out)


@bp.delete("/<int:post_id>")
@require_auth
@timing
def delete_post(post_id: int):
    service = PostCommandService(ctx=service_context())
    service.delete(post_id)
    return no_content()


@bp.get("/<int:post_id>/history")
@optional_auth
@timing
def post_history(post_id: int):
    """Return earlier versions of a post, newest first."""

    pagination = parse_pagination()
    service = PostQueryService(ctx=service_context())
    out = service.history(post_id, page=pagination.page, limit=pagination.limit)
    return json_response({"data": snapshot_list_schema.dump(out.items), "meta": build_meta(out.meta)})


@bp.get("/<int:post_id>/history/<int:snapshot_id>")
@optional_auth
@timing
def post_history_item(post_id: int, snapshot_id: int):
    service = PostQueryService(ctx=service_context())
    out = service.history_item(post_id, snapshot_id)
    return json_response({"data": snapshot_schema.dump(out)})


# --------------------------------------------------------------------------- #
# Comments
# --------------------------------------------------------------------------- #


@bp.post("/<int:post_id>/comments")
@require_auth
@timing
def create_comment(post_id: int):
    """Comment on a post, optionally replying to another comment."""

    data = comment_create_schema.load(request.get_json(silent=True) or {})
    service = CommentService(ctx=service_context())
    out = service.create(CommentCreateIn(post_id=post_id, content=data["content"], parent_id=data["parent_id"]))
    response = json_response({"data": comment_schema.dump(out)}, status=201)
    return set_response_etag(response, out.etag)


@bp.get("/<int:post_id>/comments")
@optional_auth
@timing
def list_comments(post_id: int):
    """Return a keyset page of top-level comments."""

    args = comment_query_schema.load(request.args)
    cursor = parse_cursor()
    service = CommentService(ctx=service_context())
    out = service.list_for_post(
        post_id, CommentListIn(sort=args["sort"], cursor=cursor.cursor, limit=cursor.limit)
    )
    return json_response({"data": comment_list_schema.dump(out.items), "meta": build_cursor_meta(out.meta)})


# --------------------------------------------------------------------------- #
# Votes
# --------------------------------------------------------------------------- #


@bp.put("/<int:post_id>/vote")
@require_auth
@timing
def vote_post(post_id: int):
    """Upvote or downvote a post; returns the recomputed score."""

    data = vote_schema.load(request.get_json(silent=True) or {})
    service = VoteService(ctx=service_context())
    out = service.set_post_vote(VoteIn(target_id=post_id, state=data["state"]))
    return json_response({"data": post_vote_schema.dump(out)})


@bp.delete("/<int:post_id>/vote")
@require_auth
@timing
def clear_post_vote(post_id: int):
    service = VoteService(ctx=service_context())
    service.clear_post_vote(post_id)
    return no_content()
