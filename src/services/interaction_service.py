"""Resolve which prompts a viewer has upvoted and bookmarked."""
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.interaction import Bookmark, Upvote
from schemas.feed import InteractionState
from services.utils import with_storage_timeout


async def resolve_interaction_state(
    db: AsyncSession,
    viewer_id: UUID | None,
    prompt_ids: Sequence[UUID],
) -> InteractionState:
    """
    Get the viewer's upvote and bookmark membership for a set of prompts.

    Anonymous viewers and empty id lists short-circuit without touching storage.

    Args:
        db: Database session.
        viewer_id: The viewing user's id, or None for anonymous viewers.
        prompt_ids: Prompt ids to check (typically one feed page).

    Returns:
        InteractionState whose sets are subsets of prompt_ids.
    """
    if viewer_id is None or not prompt_ids:
        return InteractionState()

    ids = list(dict.fromkeys(prompt_ids))
    upvoted = await with_storage_timeout(
        db.scalars(
            select(Upvote.prompt_id).where(
                Upvote.user_id == viewer_id,
                Upvote.prompt_id.in_(ids),
            ),
        ),
    )
    bookmarked = await with_storage_timeout(
        db.scalars(
            select(Bookmark.prompt_id).where(
                Bookmark.user_id == viewer_id,
                Bookmark.prompt_id.in_(ids),
            ),
        ),
    )
    return InteractionState(
        upvoted_ids=set(upvoted.all()),
        bookmarked_ids=set(bookmarked.all()),
    )
