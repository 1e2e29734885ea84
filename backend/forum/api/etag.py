"""ETag helpers enabling optimistic concurrency for mutable resources."""

from __future__ import annotations

from flask import Response, request


def if_match_header() -> str | None:
    """Return the first entity tag of ``If-Match`` without quotes, if any.

    ``*`` means "any current representation" and is treated as absent.
    """
    raw = request.headers.get("If-Match")
    if not raw:
        return None
    tag = raw.split(",")[0].strip()
    if tag.startswith("W/"):
        tag = tag[2:]
    tag = tag.strip('"')
    if not tag or tag == "*":
        return None
    return tag


def set_response_etag(response: Response, etag: str | None) -> Response:
    """Attach an ``ETag`` header to a Flask response when a value is known."""
    if etag is not None:
        response.set_etag(etag)
    return response
