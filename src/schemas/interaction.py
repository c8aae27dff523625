"""Response schemas for upvote, bookmark and counter endpoints."""
from typing import Literal

from schemas.base import CamelModel


class UpvoteToggleResponse(CamelModel):
    """Result of an upvote toggle: new membership and the fresh upvote total."""

    upvoted: bool
    count: int


class BookmarkToggleResponse(CamelModel):
    """Result of a bookmark toggle."""

    bookmarked: bool


class SuccessResponse(CamelModel):
    """Acknowledgement for fire-and-forget operations (copy tracking, deletes)."""

    success: Literal[True] = True
