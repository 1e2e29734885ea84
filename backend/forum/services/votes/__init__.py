"""Voting and score aggregation for posts and comments."""

from .dto import CommentVoteOut, PostVoteOut, VoteIn
from .service import VoteService

__all__ = ["CommentVoteOut", "PostVoteOut", "VoteIn", "VoteService"]
