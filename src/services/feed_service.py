"""
Feed query engine: filtered, sorted, paginated listing of published prompts.

Results are viewer-independent and are cached per exact query for a short
window. Viewer-specific state (upvoted/bookmarked) is resolved separately by
interaction_service so cached pages can be shared across viewers.
"""
import logging
import math

from sqlalchemy import ColumnElement, Select, UnaryExpression, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.feed_cache import get_feed_cache
from models.enums import FeedSort
from models.prompt import Prompt, PromptAiTool, PromptTag
from schemas.feed import FeedPage, FeedQuery
from schemas.validators import normalize_tag
from services.prompt_service import (
    BOOKMARK_COUNT,
    UPVOTE_COUNT,
    summaries_from_rows,
    summary_select,
)
from services.utils import ILIKE_ESCAPE, escape_ilike, with_storage_timeout

logger = logging.getLogger(__name__)


def build_filters(query: FeedQuery) -> list[ColumnElement[bool]]:
    """
    Build WHERE criteria for a feed query.

    Published-only is always enforced. Multi-valued fields match any listed
    value; different fields must all match.
    """
    filters: list[ColumnElement[bool]] = [Prompt.published.is_(True)]

    if query.category:
        filters.append(Prompt.category.in_(query.category))

    if query.ai_tool:
        filters.append(
            select(PromptAiTool.prompt_id)
            .where(
                PromptAiTool.prompt_id == Prompt.id,
                PromptAiTool.ai_tool.in_(query.ai_tool),
            )
            .exists(),
        )

    if query.difficulty is not None:
        filters.append(Prompt.difficulty == query.difficulty)

    if query.search:
        pattern = f"%{escape_ilike(query.search)}%"
        filters.append(
            or_(
                Prompt.title.ilike(pattern, escape=ILIKE_ESCAPE),
                Prompt.description.ilike(pattern, escape=ILIKE_ESCAPE),
                Prompt.content.ilike(pattern, escape=ILIKE_ESCAPE),
                # Tags are stored normalized, so exact membership compares normalized text
                select(PromptTag.prompt_id)
                .where(
                    PromptTag.prompt_id == Prompt.id,
                    PromptTag.name == normalize_tag(query.search),
                )
                .exists(),
            ),
        )

    return filters


def build_order_by(sort: FeedSort) -> list[UnaryExpression]:
    """
    ORDER BY clauses for a sort key.

    Every ordering ends with created_at and id so pages are deterministic: rows
    with equal signals never swap places between page requests.
    """
    newest_first = [Prompt.created_at.desc(), Prompt.id.desc()]
    primary = {
        FeedSort.TRENDING: UPVOTE_COUNT,
        FeedSort.UPVOTES: UPVOTE_COUNT,
        FeedSort.SAVED: BOOKMARK_COUNT,
        FeedSort.VIEWS: Prompt.views,
        FeedSort.COPIES: Prompt.copy_count,
    }
    if sort == FeedSort.NEWEST:
        return newest_first
    if sort == FeedSort.OLDEST:
        return [Prompt.created_at.asc(), Prompt.id.asc()]
    return [primary[sort].desc(), *newest_first]


def build_page_query(query: FeedQuery) -> Select:
    """SELECT for one page of summary rows."""
    return (
        summary_select()
        .where(*build_filters(query))
        .order_by(*build_order_by(query.sort))
        .offset(query.offset)
        .limit(query.limit)
    )


def build_count_query(query: FeedQuery) -> Select:
    """SELECT COUNT of every row matching the filters (sort and page independent)."""
    return select(func.count(Prompt.id)).where(*build_filters(query))


async def _query_feed(db: AsyncSession, query: FeedQuery) -> FeedPage:
    total = (await db.execute(build_count_query(query))).scalar_one()
    if total == 0 or query.offset >= total:
        rows = []
    else:
        rows = (await db.execute(build_page_query(query))).all()
    return FeedPage(
        prompts=summaries_from_rows(rows),
        total=total,
        page=query.page,
        total_pages=math.ceil(total / query.limit),
    )


async def get_prompts(db: AsyncSession, query: FeedQuery) -> FeedPage:
    """
    Get one page of the feed for a query.

    Served from the feed cache when an entry for the exact query exists;
    otherwise read from storage and cached.

    Raises:
        TransientStorageError: If storage is unavailable or times out. Stale
            data is never substituted for a storage failure.
    """
    cache = get_feed_cache()
    generation = None
    if cache is not None:
        # Pinned before the read: a page built from rows older than an
        # invalidation is written under the generation that invalidation retired.
        generation = await cache.generation()
        cached = await cache.get(query, generation)
        if cached is not None:
            return cached

    page = await with_storage_timeout(_query_feed(db, query))
    logger.debug(
        "feed_queried sort=%s page=%s limit=%s total=%s",
        query.sort.value,
        query.page,
        query.limit,
        page.total,
    )

    if cache is not None and generation is not None:
        await cache.set(query, page, generation)
    return page
