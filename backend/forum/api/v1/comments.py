"""Comment endpoints addressed by comment id."""

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
    CommentListQuerySchema,
    CommentSchema,
    CommentSnapshotSchema,
    CommentUpdateSchema,
    CommentVoteSchema,
    VoteSchema,
    build_cursor_meta,
    build_meta,
)
from forum.services.comments import CommentListIn, CommentService, CommentUpdateIn
from forum.services.votes import VoteIn, VoteService

bp = Blueprint("comments", __name__, url_prefix="/comments")

comment_schema = CommentSchema()
comment_list_schema = CommentSchema(many=True)
comment_update_schema = CommentUpdateSchema()
comment_query_schema = CommentListQuerySchema()
snapshot_list_schema = CommentSnapshotSchema(many=True)
vote_schema = VoteSchema()
comment_vote_schema = CommentVoteSchema()


@bp.get("/search")
@optional_auth
@timing
def search_comments():
    """Search comment contents; ``q`` needs at least two characters."""

    args = comment_query_schema.load(request.args)
    cursor = parse_cursor()
    service = CommentService(ctx=service_context())
    out = service.search(args["q"], CommentListIn(sort=args["sort"], cursor=cursor.cursor, limit=cursor.limit))
    return json_response({"data": comment_list_schema.dump(out.items), "meta": build_cursor_meta(out.meta)})


@bp.get("/<int:comment_id>")
@optional_auth
@timing
def get_comment(comment_id: int):
    service = CommentService(ctx=service_context())
    out = service.get(comment_id)
    response = json_response({"data": comment_schema.dump(out)})
    return set_response_etag(response, out.etag)


@bp.put("/<int:comment_id>")
@require_auth
@timing
def update_comment(comment_id: int):
    """Edit a comment (author only); honours ``If-Match``."""

    data = comment_update_schema.load(request.get_json(silent=True) or {})
    service = CommentService(ctx=service_context())
    out = service.update(
        CommentUpdateIn(comment_id=comment_id, content=data["content"], if_match=if_match_header())
    )
    response = json_response({"data": comment_schema.dump(out)})
    return set_response_etag(response, out.etag)


@bp.delete("/<int:comment_id>")
@require_auth
@timing
def delete_comment(comment_id: int):
    service = CommentService(ctx=service_context())
    service.delete(comment_id)
    return no_content()


@bp.get("/<int:comment_id>/replies")
@optional_auth
@timing
def list_replies(comment_id: int):
    """Return direct replies, oldest first."""

    cursor = parse_cursor()
    service = CommentService(ctx=service_context())
    out = service.replies(comment_id, CommentListIn(sort="oldest", cursor=cursor.cursor, limit=cursor.limit))
    return json_response({"data": comment_list_schema.dump(out.items), "meta": build_cursor_meta(out.meta)})


@bp.get("/<int:comment_id>/history")
@optional_auth
@timing
def comment_history(comment_id: int):
    pagination = parse_pagination()
    service = CommentService(ctx=service_context())
    out = service.history(comment_id, page=pagination.page, limit=pagination.limit)
    return json_response({"data": snapshot_list_schema.dump(out.items), "meta": build_meta(out.meta)})


@bp.put("/<int:comment_id>/vote")
@require_auth
@timing
def vote_comment(comment_id: int):
    data = vote_schema.load(request.get_json(silent=True) or {})
    service = VoteService(ctx=service_context())
    out = service.set_comment_vote(VoteIn(target_id=comment_id, state=data["state"]))
    return json_response({"data": comment_vote_schema.dump(out)})


@bp.delete("/<int:comment_id>/vote")
@require_auth
@timing
def clear_comment_vote(comment_id: int):
    service = VoteService(ctx=service_context())
    service.clear_comment_vote(comment_id)
    return no_content()
