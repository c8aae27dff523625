"""Service layer for prompt comments."""
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.feed_cache import mark_feed_stale
from models.comment import Comment
from services.exceptions import CommentNotFoundError, ForbiddenError
from services.prompt_service import get_visible_prompt
from services.utils import with_storage_timeout

logger = logging.getLogger(__name__)


async def list_comments(
    db: AsyncSession,
    prompt_id: UUID,
    viewer_id: UUID | None,
) -> list[Comment]:
    """
    Get a prompt's comments, newest first, with their authors loaded.

    Raises:
        PromptNotFoundError: If the prompt does not exist or is another user's draft.
    """
    await get_visible_prompt(db, prompt_id, viewer_id)
    result = await with_storage_timeout(
        db.scalars(
            select(Comment)
            .where(Comment.prompt_id == prompt_id)
            .options(selectinload(Comment.user))
            .order_by(Comment.created_at.desc(), Comment.id.desc()),
        ),
    )
    return list(result.all())


async def create_comment(
    db: AsyncSession,
    user_id: UUID,
    prompt_id: UUID,
    content: str,
) -> Comment:
    """
    Add a comment to a prompt.

    Args:
        db: Database session.
        user_id: Author of the comment.
        prompt_id: Prompt being commented on.
        content: Already trimmed and validated comment text.

    Raises:
        PromptNotFoundError: If the prompt does not exist or is another user's draft.
    """
    await get_visible_prompt(db, prompt_id, user_id)
    comment = Comment(user_id=user_id, prompt_id=prompt_id, content=content)
    db.add(comment)
    await with_storage_timeout(db.flush())
    await db.refresh(comment, attribute_names=["user"])
    logger.info("comment_created comment_id=%s prompt_id=%s", comment.id, prompt_id)
    # Comment totals are part of cached feed summaries
    mark_feed_stale(db)
    return comment


async def delete_comment(db: AsyncSession, user_id: UUID, comment_id: UUID) -> None:
    """
    Delete a comment authored by the user.

    Raises:
        CommentNotFoundError: If the comment does not exist.
        ForbiddenError: If the comment was written by another user.
    """
    comment = await with_storage_timeout(db.get(Comment, comment_id))
    if comment is None:
        raise CommentNotFoundError(comment_id)
    if comment.user_id != user_id:
        raise ForbiddenError("You can only delete your own comments")
    await db.delete(comment)
    await with_storage_timeout(db.flush())
    logger.info("comment_deleted comment_id=%s user_id=%s", comment_id, user_id)
    mark_feed_stale(db)
