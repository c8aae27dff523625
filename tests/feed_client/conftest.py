"""Fixtures for feed client tests: in-memory API fakes and page builders."""
import asyncio
import math
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest
from uuid6 import uuid7

from feed_client.api_client import FeedApiError
from feed_client.filters import FeedFilters
from models.enums import Category, Difficulty
from schemas.feed import FeedResponse, InteractionStateResponse
from schemas.interaction import BookmarkToggleResponse, UpvoteToggleResponse
from schemas.prompt import AuthorSummary, PromptCounts, PromptSummary

LIMIT = 12


class RecordingNotifier:
    """Notifier that remembers every message."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.successes: list[str] = []

    def error(self, message: str) -> None:
        self.errors.append(message)

    def success(self, message: str) -> None:
        self.successes.append(message)


class FakeFeedApi:
    """
    In-memory stand-in for FeedApiClient.

    Serves pages from a fixed result list per filter selection. ``hold()`` makes
    the next fetch wait on an event, so tests control response ordering.
    """

    def __init__(self, results: dict[FeedFilters, list[PromptSummary]]) -> None:
        self.results = results
        self.calls: list[tuple[FeedFilters, int]] = []
        self.error: FeedApiError | None = None
        self.upvote_responses: list[UpvoteToggleResponse | FeedApiError] = []
        self.bookmark_responses: list[BookmarkToggleResponse | FeedApiError] = []
        self.copies: list[UUID] = []
        self.copy_error: FeedApiError | None = None
        self._holds: list[asyncio.Event] = []

    def hold(self) -> asyncio.Event:
        """Block the next call until the returned event is set."""
        event = asyncio.Event()
        self._holds.append(event)
        return event

    async def _wait(self) -> None:
        if self._holds:
            await self._holds.pop(0).wait()

    async def fetch_feed(
        self,
        filters: FeedFilters,
        page: int,
        limit: int,
        user_id: UUID | None = None,
    ) -> FeedResponse:
        self.calls.append((filters, page))
        await self._wait()
        if self.error is not None:
            raise self.error
        return page_of(self.results.get(filters, []), page, limit)

    async def toggle_upvote(self, prompt_id: UUID) -> UpvoteToggleResponse:
        await self._wait()
        outcome = self.upvote_responses.pop(0)
        if isinstance(outcome, FeedApiError):
            raise outcome
        return outcome

    async def toggle_bookmark(self, prompt_id: UUID) -> BookmarkToggleResponse:
        await self._wait()
        outcome = self.bookmark_responses.pop(0)
        if isinstance(outcome, FeedApiError):
            raise outcome
        return outcome

    async def track_copy(self, prompt_id: UUID) -> None:
        self.copies.append(prompt_id)
        if self.copy_error is not None:
            raise self.copy_error


def page_of(
    prompts: list[PromptSummary],
    page: int,
    limit: int = LIMIT,
    state: InteractionStateResponse | None = None,
) -> FeedResponse:
    """Slice a result list the way the server paginates it."""
    start = (page - 1) * limit
    return FeedResponse(
        prompts=prompts[start:start + limit],
        total=len(prompts),
        page=page,
        total_pages=math.ceil(len(prompts) / limit),
        interaction_state=state or InteractionStateResponse(),
    )


def _summary(title: str, position: int, upvotes: int = 0, copy_count: int = 0) -> PromptSummary:
    created = datetime(2026, 1, 1, tzinfo=UTC) - timedelta(minutes=position)
    author_id = uuid7()
    return PromptSummary(
        id=uuid7(),
        title=title,
        content=f"{title} content",
        description=None,
        category=Category.CODING,
        ai_tool=[],
        tags=[],
        difficulty=Difficulty.BEGINNER,
        views=0,
        copy_count=copy_count,
        published=True,
        created_at=created,
        updated_at=created,
        author_id=author_id,
        author=AuthorSummary(id=author_id, name="Author", image=None),
        counts=PromptCounts(upvotes=upvotes),
    )


@pytest.fixture
def make_summaries() -> Callable[..., list[PromptSummary]]:
    """Build n prompt summaries titled '<prefix> 0' .. '<prefix> n-1'."""

    def _make(n: int, prefix: str = "Prompt", **fields: int) -> list[PromptSummary]:
        return [_summary(f"{prefix} {i}", i, **fields) for i in range(n)]

    return _make


@pytest.fixture
def make_page() -> Callable[..., FeedResponse]:
    """Expose page_of to tests."""
    return page_of


@pytest.fixture
def notifier() -> RecordingNotifier:
    """A notifier that records messages."""
    return RecordingNotifier()


@pytest.fixture
def make_api() -> Callable[..., FakeFeedApi]:
    """Factory for FakeFeedApi instances."""
    return FakeFeedApi
