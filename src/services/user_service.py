"""Service layer for the authenticated user's profile, prompts and saved prompts."""
import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.feed_cache import mark_feed_stale
from models.interaction import Bookmark, Upvote
from models.prompt import Prompt
from models.user import User
from schemas.prompt import PromptSummary, UserRef
from schemas.user import UserStats, UserUpdate
from services.prompt_service import build_summary, summary_select
from services.utils import with_storage_timeout

logger = logging.getLogger(__name__)


async def update_profile(db: AsyncSession, user: User, data: UserUpdate) -> User:
    """Apply a partial profile update (name, bio, image)."""
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    await with_storage_timeout(db.flush())
    await db.refresh(user)
    logger.info("user_profile_updated user_id=%s", user.id)
    # Author name and image are part of cached feed summaries
    mark_feed_stale(db)
    return user


async def delete_account(db: AsyncSession, user: User) -> None:
    """
    Delete the user and everything they own.

    Prompts, upvotes, bookmarks and comments are removed by ON DELETE CASCADE.
    """
    await db.delete(user)
    await with_storage_timeout(db.flush())
    logger.info("user_deleted user_id=%s", user.id)
    mark_feed_stale(db)


async def get_user_stats(db: AsyncSession, user_id: UUID) -> UserStats:
    """Totals across every prompt the user authored, drafts included."""
    totals = (
        await with_storage_timeout(
            db.execute(
                select(
                    func.count(Prompt.id),
                    func.coalesce(func.sum(Prompt.views), 0),
                    func.coalesce(func.sum(Prompt.copy_count), 0),
                ).where(Prompt.author_id == user_id),
            ),
        )
    ).one()
    total_upvotes = await with_storage_timeout(
        db.scalar(
            select(func.count(Upvote.id))
            .join(Prompt, Prompt.id == Upvote.prompt_id)
            .where(Prompt.author_id == user_id),
        ),
    )
    total_prompts, total_views, total_copies = totals
    return UserStats(
        total_prompts=total_prompts,
        total_upvotes=total_upvotes or 0,
        total_views=total_views,
        total_copies=total_copies,
    )


async def list_bookmarked_prompts(db: AsyncSession, user_id: UUID) -> list[PromptSummary]:
    """
    Get the user's saved prompts, most recently saved first.

    Each summary embeds ``upvotes``/``bookmarks`` membership arrays restricted to
    this user, so the client can render toggle state without a separate lookup.
    """
    stmt = (
        summary_select()
        .join(Bookmark, Bookmark.prompt_id == Prompt.id)
        .where(Bookmark.user_id == user_id)
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
    )
    rows = (await with_storage_timeout(db.execute(stmt))).all()
    if not rows:
        return []

    prompt_ids = [row[0].id for row in rows]
    upvoted = set(
        (
            await with_storage_timeout(
                db.scalars(
                    select(Upvote.prompt_id).where(
                        Upvote.user_id == user_id,
                        Upvote.prompt_id.in_(prompt_ids),
                    ),
                ),
            )
        ).all(),
    )

    summaries = []
    for prompt, upvotes, bookmarks, comments in rows:
        summary = build_summary(prompt, upvotes, bookmarks, comments)
        summary.upvotes = [UserRef(user_id=user_id)] if prompt.id in upvoted else []
        summary.bookmarks = [UserRef(user_id=user_id)]
        summaries.append(summary)
    return summaries
