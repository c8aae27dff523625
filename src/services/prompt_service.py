"""Service layer for prompt CRUD and the shared prompt summary shape."""
import logging
from collections.abc import Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.feed_cache import mark_feed_stale
from models.base import utcnow
from models.comment import Comment
from models.interaction import Bookmark, Upvote
from models.prompt import Prompt, PromptResult
from schemas.comment import CommentResponse
from schemas.prompt import (
    AuthorDetail,
    AuthorSummary,
    PromptCounts,
    PromptCreate,
    PromptDetail,
    PromptResultResponse,
    PromptSummary,
    PromptUpdate,
)
from services.exceptions import ForbiddenError, PromptNotFoundError, ValidationFailedError
from services.interaction_service import resolve_interaction_state
from services.mutation_service import increment_view
from services.utils import with_storage_timeout

logger = logging.getLogger(__name__)

# Correlated aggregate counts, usable in the columns clause or ORDER BY of any
# SELECT over Prompt
UPVOTE_COUNT = (
    select(func.count(Upvote.id))
    .where(Upvote.prompt_id == Prompt.id)
    .correlate(Prompt)
    .scalar_subquery()
)
BOOKMARK_COUNT = (
    select(func.count(Bookmark.id))
    .where(Bookmark.prompt_id == Prompt.id)
    .correlate(Prompt)
    .scalar_subquery()
)
COMMENT_COUNT = (
    select(func.count(Comment.id))
    .where(Comment.prompt_id == Prompt.id)
    .correlate(Prompt)
    .scalar_subquery()
)

# Fields that may not be cleared by an update
_NON_NULLABLE_FIELDS = {"title", "content", "category", "difficulty", "published"}


def summary_select() -> Select:
    """
    SELECT returning (Prompt, upvote_count, bookmark_count, comment_count) rows.

    Eager-loads everything PromptSummary needs so no lazy loads happen on the
    async session.
    """
    return select(
        Prompt,
        UPVOTE_COUNT.label("upvote_count"),
        BOOKMARK_COUNT.label("bookmark_count"),
        COMMENT_COUNT.label("comment_count"),
    ).options(
        selectinload(Prompt.author),
        selectinload(Prompt.tag_objects),
        selectinload(Prompt.ai_tool_objects),
    )


def _summary_fields(prompt: Prompt, upvotes: int, bookmarks: int, comments: int) -> dict[str, Any]:
    return {
        "id": prompt.id,
        "title": prompt.title,
        "content": prompt.content,
        "description": prompt.description,
        "category": prompt.category,
        "ai_tool": prompt.ai_tools,
        "tags": prompt.tags,
        "difficulty": prompt.difficulty,
        "views": prompt.views,
        "copy_count": prompt.copy_count,
        "published": prompt.published,
        "created_at": prompt.created_at,
        "updated_at": prompt.updated_at,
        "author_id": prompt.author_id,
        "author": AuthorSummary.model_validate(prompt.author),
        "counts": PromptCounts(upvotes=upvotes, bookmarks=bookmarks, comments=comments),
    }


def build_summary(prompt: Prompt, upvotes: int, bookmarks: int, comments: int) -> PromptSummary:
    """Build the wire summary for a prompt loaded via summary_select()."""
    return PromptSummary(**_summary_fields(prompt, upvotes, bookmarks, comments))


def summaries_from_rows(rows: Sequence[Any]) -> list[PromptSummary]:
    """Convert summary_select() rows into PromptSummary objects, preserving order."""
    return [
        build_summary(prompt, upvotes, bookmarks, comments)
        for prompt, upvotes, bookmarks, comments in rows
    ]


async def get_visible_prompt(
    db: AsyncSession,
    prompt_id: UUID,
    viewer_id: UUID | None,
) -> Prompt:
    """
    Get a prompt row the viewer is allowed to see.

    Drafts are visible only to their author; to everyone else they do not exist.

    Raises:
        PromptNotFoundError: If the prompt does not exist or is a draft of another user.
    """
    prompt = await with_storage_timeout(db.get(Prompt, prompt_id))
    if prompt is None:
        raise PromptNotFoundError(prompt_id)
    if not prompt.published and prompt.author_id != viewer_id:
        raise PromptNotFoundError(prompt_id)
    return prompt


async def _get_owned_prompt(db: AsyncSession, user_id: UUID, prompt_id: UUID) -> Prompt:
    """
    Get a prompt for modification by its author.

    Raises:
        PromptNotFoundError: If the prompt does not exist.
        ForbiddenError: If the prompt belongs to another user.
    """
    prompt = await with_storage_timeout(db.get(Prompt, prompt_id))
    if prompt is None:
        raise PromptNotFoundError(prompt_id)
    if prompt.author_id != user_id:
        raise ForbiddenError("You can only modify your own prompts")
    return prompt


async def _load_detail(
    db: AsyncSession,
    prompt_id: UUID,
    viewer_id: UUID | None,
) -> PromptDetail:
    stmt = (
        summary_select()
        .where(Prompt.id == prompt_id)
        .options(
            selectinload(Prompt.results),
            selectinload(Prompt.comments).selectinload(Comment.user),
        )
        .execution_options(populate_existing=True)
    )
    row = (await with_storage_timeout(db.execute(stmt))).one_or_none()
    if row is None:
        raise PromptNotFoundError(prompt_id)
    prompt, upvotes, bookmarks, comments = row

    state = await resolve_interaction_state(db, viewer_id, [prompt.id])
    fields = _summary_fields(prompt, upvotes, bookmarks, comments)
    fields["author"] = AuthorDetail.model_validate(prompt.author)
    return PromptDetail(
        **fields,
        results=[PromptResultResponse.model_validate(r) for r in prompt.results],
        comments=[
            CommentResponse.model_validate(c)
            for c in sorted(prompt.comments, key=lambda c: (c.created_at, c.id), reverse=True)
        ],
        is_upvoted=prompt.id in state.upvoted_ids,
        is_bookmarked=prompt.id in state.bookmarked_ids,
    )


async def create_prompt(db: AsyncSession, author_id: UUID, data: PromptCreate) -> PromptDetail:
    """
    Create a new prompt for the author.

    Counters start at zero. The feed is marked stale because a published
    prompt changes feed membership.
    """
    prompt = Prompt(
        author_id=author_id,
        title=data.title,
        content=data.content,
        description=data.description,
        category=data.category,
        difficulty=data.difficulty,
        published=data.published,
        views=0,
        copy_count=0,
    )
    prompt.set_tags(data.tags)
    prompt.set_ai_tools(data.ai_tool)
    prompt.results = [
        PromptResult(type=result.type, url=result.url, content=result.content)
        for result in data.results
    ]
    db.add(prompt)
    await with_storage_timeout(db.flush())
    logger.info("prompt_created prompt_id=%s author_id=%s", prompt.id, author_id)

    mark_feed_stale(db)
    return await _load_detail(db, prompt.id, author_id)


async def get_prompt_detail(
    db: AsyncSession,
    prompt_id: UUID,
    viewer_id: UUID | None,
) -> PromptDetail:
    """
    Get the full prompt for its detail page and record one view.

    Raises:
        PromptNotFoundError: If the prompt does not exist or is another user's draft.
    """
    await get_visible_prompt(db, prompt_id, viewer_id)
    await increment_view(db, prompt_id)
    return await _load_detail(db, prompt_id, viewer_id)


async def update_prompt(
    db: AsyncSession,
    user_id: UUID,
    prompt_id: UUID,
    data: PromptUpdate,
) -> PromptDetail:
    """
    Apply a partial update to a prompt owned by the user.

    Raises:
        PromptNotFoundError: If the prompt does not exist.
        ForbiddenError: If the prompt belongs to another user.
        ValidationFailedError: If a required field is explicitly set to null.
    """
    changes = data.model_dump(exclude_unset=True)
    for field in _NON_NULLABLE_FIELDS & changes.keys():
        if changes[field] is None:
            raise ValidationFailedError(f"{field} cannot be null")

    prompt = await _get_owned_prompt(db, user_id, prompt_id)
    if changes:
        # Child collections must be loaded before replacement on an async session
        await db.refresh(prompt, attribute_names=["tag_objects", "ai_tool_objects"])
        tags = changes.pop("tags", None)
        ai_tools = changes.pop("ai_tool", None)
        if "tags" in data.model_fields_set:
            prompt.set_tags(tags or [])
        if "ai_tool" in data.model_fields_set:
            prompt.set_ai_tools(ai_tools or [])
        for field, value in changes.items():
            setattr(prompt, field, value)
        prompt.updated_at = utcnow()
        await with_storage_timeout(db.flush())
        logger.info(
            "prompt_updated prompt_id=%s fields=%s",
            prompt_id,
            sorted(data.model_fields_set),
        )
        mark_feed_stale(db)

    return await _load_detail(db, prompt_id, user_id)


async def delete_prompt(db: AsyncSession, user_id: UUID, prompt_id: UUID) -> None:
    """
    Delete a prompt owned by the user.

    Upvotes, bookmarks, comments, tags, AI tools and results are removed by the
    database's ON DELETE CASCADE.

    Raises:
        PromptNotFoundError: If the prompt does not exist.
        ForbiddenError: If the prompt belongs to another user.
    """
    prompt = await _get_owned_prompt(db, user_id, prompt_id)
    await db.delete(prompt)
    await with_storage_timeout(db.flush())
    logger.info("prompt_deleted prompt_id=%s user_id=%s", prompt_id, user_id)
    mark_feed_stale(db)


async def list_user_prompts(db: AsyncSession, user_id: UUID) -> list[PromptSummary]:
    """All of the user's prompts, drafts included, newest first."""
    stmt = (
        summary_select()
        .where(Prompt.author_id == user_id)
        .order_by(Prompt.created_at.desc(), Prompt.id.desc())
    )
    rows = (await with_storage_timeout(db.execute(stmt))).all()
    return summaries_from_rows(rows)
