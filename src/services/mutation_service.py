"""
Mutation handlers for per-user relations and prompt counters.

Toggles decide between create and delete from the current stored state, never
from what the client believes. The (user_id, prompt_id) unique constraint is
the final guard: an insert that loses a race to a concurrent duplicate is
treated as "already present" and removed instead. Every mutation marks the
feed stale; the cache is invalidated when the request commits.
"""
import logging
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.feed_cache import mark_feed_stale
from models.interaction import Bookmark, Upvote
from models.prompt import Prompt
from services.exceptions import PromptNotFoundError
from services.utils import with_storage_timeout

logger = logging.getLogger(__name__)

RelationModel = type[Upvote] | type[Bookmark]


async def _ensure_prompt_exists(db: AsyncSession, prompt_id: UUID) -> None:
    found = await with_storage_timeout(
        db.scalar(select(Prompt.id).where(Prompt.id == prompt_id)),
    )
    if found is None:
        raise PromptNotFoundError(prompt_id)


async def _delete_relation(
    db: AsyncSession,
    model: RelationModel,
    user_id: UUID,
    prompt_id: UUID,
) -> int:
    """Delete the (user, prompt) row if present. Returns the number of rows removed."""
    result = await with_storage_timeout(
        db.execute(
            delete(model)
            .where(model.user_id == user_id, model.prompt_id == prompt_id)
            .execution_options(synchronize_session=False),
        ),
    )
    return result.rowcount


async def _toggle_relation(
    db: AsyncSession,
    model: RelationModel,
    user_id: UUID,
    prompt_id: UUID,
) -> bool:
    """
    Flip a binary user/prompt relation.

    Returns:
        True if the relation now exists, False if it was removed.

    Raises:
        PromptNotFoundError: If the prompt does not exist or was deleted mid-toggle.
    """
    await _ensure_prompt_exists(db, prompt_id)

    if await _delete_relation(db, model, user_id, prompt_id) > 0:
        return False

    try:
        async with db.begin_nested():
            db.add(model(user_id=user_id, prompt_id=prompt_id))
    except IntegrityError:
        # Either a concurrent toggle inserted the row first, or the prompt was
        # deleted underneath us (foreign key violation)
        await _ensure_prompt_exists(db, prompt_id)
        logger.info(
            "relation_toggle_conflict relation=%s user_id=%s prompt_id=%s",
            model.__tablename__,
            user_id,
            prompt_id,
        )
        await _delete_relation(db, model, user_id, prompt_id)
        return False
    return True


async def count_upvotes(db: AsyncSession, prompt_id: UUID) -> int:
    """Fresh COUNT of upvotes for a prompt."""
    return await with_storage_timeout(
        db.scalar(select(func.count(Upvote.id)).where(Upvote.prompt_id == prompt_id)),
    )


async def toggle_upvote(db: AsyncSession, user_id: UUID, prompt_id: UUID) -> tuple[bool, int]:
    """
    Toggle the user's upvote on a prompt.

    Returns:
        Tuple of (upvoted, count) where count is the post-toggle upvote total,
        recomputed from storage rather than tracked incrementally.

    Raises:
        PromptNotFoundError: If the prompt does not exist.
    """
    upvoted = await _toggle_relation(db, Upvote, user_id, prompt_id)
    count = await count_upvotes(db, prompt_id)
    logger.info(
        "upvote_toggled user_id=%s prompt_id=%s upvoted=%s count=%s",
        user_id,
        prompt_id,
        upvoted,
        count,
    )
    mark_feed_stale(db)
    return upvoted, count


async def toggle_bookmark(db: AsyncSession, user_id: UUID, prompt_id: UUID) -> bool:
    """
    Toggle the user's bookmark on a prompt.

    Returns:
        True if the prompt is now bookmarked.

    Raises:
        PromptNotFoundError: If the prompt does not exist.
    """
    bookmarked = await _toggle_relation(db, Bookmark, user_id, prompt_id)
    logger.info(
        "bookmark_toggled user_id=%s prompt_id=%s bookmarked=%s",
        user_id,
        prompt_id,
        bookmarked,
    )
    mark_feed_stale(db)
    return bookmarked


async def _increment_counter(db: AsyncSession, prompt_id: UUID, field: str) -> None:
    """
    Increment a counter column with a single UPDATE ... SET x = x + 1.

    updated_at is pinned so counter traffic does not look like an edit.

    Raises:
        PromptNotFoundError: If the prompt does not exist.
    """
    column = getattr(Prompt, field)
    stmt = (
        update(Prompt)
        .where(Prompt.id == prompt_id)
        .values({column: column + 1, Prompt.updated_at: Prompt.updated_at})
        .execution_options(synchronize_session=False)
    )
    result = await with_storage_timeout(db.execute(stmt))
    if result.rowcount == 0:
        raise PromptNotFoundError(prompt_id)
    logger.debug("prompt_counter_incremented prompt_id=%s field=%s", prompt_id, field)
    mark_feed_stale(db)


async def increment_view(db: AsyncSession, prompt_id: UUID) -> None:
    """Record one view of a prompt. Callable by anyone."""
    await _increment_counter(db, prompt_id, "views")


async def increment_copy(db: AsyncSession, prompt_id: UUID) -> None:
    """Record one copy of a prompt's content. Callable by anyone."""
    await _increment_counter(db, prompt_id, "copy_count")
