"""Tests for user_service and category_service."""
from collections.abc import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from core.feed_cache import FeedCache, set_feed_cache
from core.redis import RedisClient
from db.session import commit_session
from models.enums import Category
from models.prompt import Prompt
from models.user import User
from schemas.feed import FeedQuery
from schemas.user import UserUpdate
from services.category_service import get_category_counts
from services.feed_service import get_prompts
from services.mutation_service import toggle_bookmark
from services.user_service import (
    delete_account,
    get_user_stats,
    list_bookmarked_prompts,
    update_profile,
)

MakePrompt = Callable[..., Awaitable[Prompt]]


class TestProfile:
    """Profile update and account deletion."""

    async def test__update_profile__partial(self, db_session: AsyncSession, user: User) -> None:
        updated = await update_profile(db_session, user, UserUpdate(bio="Prompt engineer"))

        assert updated.bio == "Prompt engineer"
        assert updated.name == "Alice"

    async def test__delete_account__removes_authored_prompts(
        self, db_session: AsyncSession, user: User, make_prompt: MakePrompt,
    ) -> None:
        prompt = await make_prompt(user)
        prompt_id = prompt.id
        db_session.expunge(prompt)

        await delete_account(db_session, user)

        assert await db_session.get(Prompt, prompt_id) is None

    async def test__delete_account__drops_cached_feed_pages(
        self,
        db_session: AsyncSession,
        redis_client: RedisClient,
        user: User,
        other_user: User,
        make_prompt: MakePrompt,
    ) -> None:
        cache = FeedCache(redis_client)
        set_feed_cache(cache)
        await make_prompt(user, "Mine")
        await make_prompt(other_user, "Theirs")
        assert (await get_prompts(db_session, FeedQuery())).total == 2

        await delete_account(db_session, user)
        await commit_session(db_session)

        assert await cache.get(FeedQuery()) is None
        page = await get_prompts(db_session, FeedQuery())
        assert [p.title for p in page.prompts] == ["Theirs"]

    async def test__update_profile__drops_cached_feed_pages(
        self,
        db_session: AsyncSession,
        redis_client: RedisClient,
        user: User,
        make_prompt: MakePrompt,
    ) -> None:
        cache = FeedCache(redis_client)
        set_feed_cache(cache)
        await make_prompt(user)
        await get_prompts(db_session, FeedQuery())

        await update_profile(db_session, user, UserUpdate(name="Alice B."))
        await commit_session(db_session)

        page = await get_prompts(db_session, FeedQuery())
        assert page.prompts[0].author.name == "Alice B."


class TestUserStats:
    """Tests for get_user_stats."""

    async def test__get_user_stats__sums_across_all_prompts(
        self,
        db_session: AsyncSession,
        user: User,
        other_user: User,
        make_prompt: MakePrompt,
        add_upvotes: Callable[..., Awaitable[None]],
    ) -> None:
        first = await make_prompt(user, views=10, copy_count=2)
        draft = await make_prompt(user, published=False, views=1, copy_count=1)
        theirs = await make_prompt(other_user, views=100)
        await add_upvotes(first, user, other_user)
        await add_upvotes(draft, other_user)
        await add_upvotes(theirs, user)

        stats = await get_user_stats(db_session, user.id)

        assert stats.total_prompts == 2
        assert stats.total_views == 11
        assert stats.total_copies == 3
        assert stats.total_upvotes == 3

    async def test__get_user_stats__no_prompts(
        self, db_session: AsyncSession, user: User,
    ) -> None:
        stats = await get_user_stats(db_session, user.id)

        assert stats.model_dump() == {
            "total_prompts": 0,
            "total_upvotes": 0,
            "total_views": 0,
            "total_copies": 0,
        }


class TestBookmarkedPrompts:
    """Tests for list_bookmarked_prompts."""

    async def test__list_bookmarked_prompts__most_recently_saved_first(
        self, db_session: AsyncSession, user: User, other_user: User, make_prompt: MakePrompt,
    ) -> None:
        saved_first = await make_prompt(other_user, "Saved first")
        saved_second = await make_prompt(other_user, "Saved second")
        await make_prompt(other_user, "Never saved")
        await toggle_bookmark(db_session, user.id, saved_first.id)
        await toggle_bookmark(db_session, user.id, saved_second.id)

        prompts = await list_bookmarked_prompts(db_session, user.id)

        assert [p.title for p in prompts] == ["Saved second", "Saved first"]
        assert all([ref.user_id for ref in p.bookmarks] == [user.id] for p in prompts)
        assert prompts[0].upvotes == []

    async def test__list_bookmarked_prompts__embeds_own_upvote(
        self,
        db_session: AsyncSession,
        user: User,
        other_user: User,
        make_prompt: MakePrompt,
        add_upvotes: Callable[..., Awaitable[None]],
    ) -> None:
        prompt = await make_prompt(other_user)
        await toggle_bookmark(db_session, user.id, prompt.id)
        await add_upvotes(prompt, user)

        prompts = await list_bookmarked_prompts(db_session, user.id)

        assert [ref.user_id for ref in prompts[0].upvotes] == [user.id]

    async def test__list_bookmarked_prompts__empty(
        self, db_session: AsyncSession, user: User,
    ) -> None:
        assert await list_bookmarked_prompts(db_session, user.id) == []


async def test__get_category_counts__published_only_most_populated_first(
    db_session: AsyncSession, user: User, make_prompt: MakePrompt,
) -> None:
    await make_prompt(user, category=Category.WRITING)
    await make_prompt(user, category=Category.CODING)
    await make_prompt(user, category=Category.CODING)
    await make_prompt(user, category=Category.MARKETING, published=False)

    counts = await get_category_counts(db_session)

    assert [(c.category, c.count) for c in counts] == [
        (Category.CODING, 2),
        (Category.WRITING, 1),
    ]
