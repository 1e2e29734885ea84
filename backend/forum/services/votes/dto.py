"""DTOs for voting on posts and comments."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class VoteIn:
    """
    Desired vote state of the caller on a target.

    :param target_id: Post or comment id.
    :param state: ``"upvote"``, ``"downvote"`` or ``"none"`` (clears).
    """

    target_id: int
    state: str


@dataclass(frozen=True, slots=True)
class PostVoteOut:
    """
    Score of a post after a vote.

    :param score: ``SUM(value)`` over every vote on the post.
    :param my_vote: Caller's state after the change.
    """

    post_id: int
    score: int
    my_vote: str


@dataclass(frozen=True, slots=True)
class CommentVoteOut:
    comment_id: int
    score: int
    my_vote: str
