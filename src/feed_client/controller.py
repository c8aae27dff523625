"""
Infinite-scroll feed controller.

Owns the current filters, the rendered prompt list and paging state. Two kinds
of fetch exist:

- replace: filters changed (or navigation did), page resets to 1 and the list
  is swapped for the first page of the new results.
- append: the viewer scrolled near the bottom; the next page is concatenated.

Every replace bumps a generation counter. A response is applied only if the
generation it was issued under is still current, so a "load more" started
under old filters can never append onto the new list.
"""
import asyncio
import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

from feed_client.api_client import FeedApiClient, FeedApiError
from feed_client.filters import FeedFilters
from feed_client.interactions import InteractionOverlay
from feed_client.notifier import Notifier
from schemas.feed import FeedResponse
from schemas.prompt import PromptSummary

logger = logging.getLogger(__name__)

FEED_LOAD_FAILED = "Failed to load prompts"

# Scroll checks closer together than this are dropped (leading-edge throttle)
SCROLL_THROTTLE_SECONDS = 0.15
# Load more when the viewport bottom is within this distance of the page end
SCROLL_THRESHOLD_PX = 300


@dataclass(frozen=True, eq=False)
class _PageRequest:
    """An append fetch: the page asked for and the reset generation it belongs to."""

    generation: int
    page: int


class FeedState(StrEnum):
    """Fetch activity of the controller."""

    IDLE = "idle"
    LOADING = "loading"
    LOADING_MORE = "loading_more"


class FeedController:
    """
    Drives the discover feed: filter resets, infinite scroll, and stale-response suppression.

    The controller is seeded with the first page the caller already rendered, so
    construction performs no fetch. Errors never clear rendered prompts; they are
    reported through the notifier and kept in ``last_error``.
    """

    def __init__(
        self,
        api: FeedApiClient,
        notifier: Notifier,
        initial: FeedResponse,
        filters: FeedFilters | None = None,
        limit: int = 12,
        viewer_id: UUID | None = None,
        overlay: InteractionOverlay | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._api = api
        self._notifier = notifier
        self._limit = limit
        self._viewer_id = viewer_id
        self._clock = clock
        self.overlay = overlay or InteractionOverlay()

        self._filters = filters or FeedFilters()
        self._prompts: list[PromptSummary] = []
        self._seen_ids: set[UUID] = set()
        self._page = 1
        self._total = 0
        self._total_pages = 0
        self._apply_replace(initial)

        self._state = FeedState.IDLE
        self._generation = 0
        # Set synchronously before the first await of a load-more; only the
        # owning call (or a reset) clears it
        self._load_more_token: _PageRequest | None = None
        self._last_scroll_check: float | None = None
        self._navigation_synced = False
        self._scroll_tasks: set[asyncio.Task] = set()
        self.last_error: FeedApiError | None = None

    @property
    def prompts(self) -> tuple[PromptSummary, ...]:
        """Rendered prompts in display order."""
        return tuple(self._prompts)

    @property
    def filters(self) -> FeedFilters:
        """Filters the rendered list was fetched with."""
        return self._filters

    @property
    def page(self) -> int:
        """Last page successfully loaded."""
        return self._page

    @property
    def total(self) -> int:
        """Total prompts matching the current filters."""
        return self._total

    @property
    def has_more(self) -> bool:
        """Whether another page exists for the current filters."""
        return self._page < self._total_pages

    @property
    def state(self) -> FeedState:
        """Current fetch activity."""
        return self._state

    @property
    def is_loading_more(self) -> bool:
        """Whether an append fetch is in flight."""
        return self._load_more_token is not None

    def _dedupe(self, prompts: Sequence[PromptSummary]) -> list[PromptSummary]:
        fresh = []
        for prompt in prompts:
            if prompt.id not in self._seen_ids:
                self._seen_ids.add(prompt.id)
                fresh.append(prompt)
        return fresh

    def _apply_paging(self, response: FeedResponse, replace: bool) -> None:
        self._page = response.page
        self._total = response.total
        self._total_pages = response.total_pages
        self.overlay.apply_page(response.prompts, response.interaction_state, replace=replace)

    def _apply_replace(self, response: FeedResponse) -> None:
        self._seen_ids = set()
        self._prompts = self._dedupe(response.prompts)
        self._apply_paging(response, replace=True)

    def _apply_append(self, response: FeedResponse) -> None:
        # Offset paging can repeat a row when rankings shift between requests
        self._prompts.extend(self._dedupe(response.prompts))
        self._apply_paging(response, replace=False)

    def _report(self, error: FeedApiError) -> None:
        self.last_error = error
        self._notifier.error(FEED_LOAD_FAILED)

    async def set_filters(self, filters: FeedFilters) -> bool:
        """
        Reset to page 1 of new filters and replace the list.

        Any load-more still in flight is orphaned: its response will be dropped.

        Returns:
            True if the new results were applied; False if the fetch failed or a
            later reset superseded it.
        """
        self._generation += 1
        generation = self._generation
        self._load_more_token = None
        self._state = FeedState.LOADING
        logger.debug("feed_reset generation=%s filters=%s", generation, filters.to_query_params())

        try:
            response = await self._api.fetch_feed(
                filters, page=1, limit=self._limit, user_id=self._viewer_id,
            )
        except FeedApiError as e:
            if generation == self._generation:
                self._state = FeedState.IDLE
                self._report(e)
            return False

        if generation != self._generation:
            logger.debug("feed_stale_reset_discarded generation=%s", generation)
            return False

        self._filters = filters
        self._apply_replace(response)
        self._state = FeedState.IDLE
        self.last_error = None
        return True

    async def sync_navigation(self, params: Mapping[str, str | Sequence[str]]) -> bool:
        """
        Follow a change of URL query parameters made elsewhere (e.g. a search box).

        The first sync after construction is skipped: the initial page was
        already supplied for those parameters.

        Returns:
            True if a replace fetch was applied.
        """
        if not self._navigation_synced:
            self._navigation_synced = True
            return False
        try:
            filters = FeedFilters.from_query_params(params)
        except ValueError as e:
            logger.warning("feed_navigation_invalid_params error=%s", e)
            return False
        return await self.set_filters(filters)

    async def refresh(self) -> bool:
        """Reload page 1 of the current filters."""
        return await self.set_filters(self._filters)

    def _claim_load_more(self) -> _PageRequest | None:
        """Synchronously take the single load-more slot, or return None if unavailable."""
        if self._load_more_token is not None:
            return None
        if self._state == FeedState.LOADING or not self.has_more:
            return None
        request = _PageRequest(generation=self._generation, page=self._page + 1)
        self._load_more_token = request
        self._state = FeedState.LOADING_MORE
        return request

    async def load_more(self) -> bool:
        """
        Fetch and append the next page.

        Ignored while another load-more is in flight, while a replace is loading,
        or when there are no more pages.

        Returns:
            True if a page was appended.
        """
        request = self._claim_load_more()
        if request is None:
            return False
        return await self._run_load_more(request)

    async def _run_load_more(self, request: _PageRequest) -> bool:
        try:
            response = await self._api.fetch_feed(
                self._filters, page=request.page, limit=self._limit, user_id=self._viewer_id,
            )
        except FeedApiError as e:
            # Page is only advanced on success, so a retry asks for the same page
            if request.generation == self._generation:
                self._report(e)
            return False
        else:
            if request.generation != self._generation:
                logger.debug(
                    "feed_stale_page_discarded page=%s generation=%s",
                    request.page,
                    request.generation,
                )
                return False
            self._apply_append(response)
            return True
        finally:
            if self._load_more_token is request:
                self._load_more_token = None
                self._state = FeedState.IDLE

    def should_load_more(
        self,
        scroll_y: float,
        viewport_height: float,
        document_height: float,
    ) -> bool:
        """Whether the viewport bottom is within the threshold of the document end."""
        return scroll_y + viewport_height >= document_height - SCROLL_THRESHOLD_PX

    def handle_scroll(
        self,
        scroll_y: float,
        viewport_height: float,
        document_height: float,
    ) -> asyncio.Task | None:
        """
        Scroll event hook.

        Checks are throttled to one per SCROLL_THROTTLE_SECONDS. When the viewer
        is near the bottom and a next page exists, a load-more is scheduled on the
        running loop.

        Returns:
            The scheduled load-more task, or None if nothing was scheduled.
        """
        now = self._clock()
        if (
            self._last_scroll_check is not None
            and now - self._last_scroll_check < SCROLL_THROTTLE_SECONDS
        ):
            return None
        self._last_scroll_check = now

        if not self.should_load_more(scroll_y, viewport_height, document_height):
            return None
        request = self._claim_load_more()
        if request is None:
            return None

        task = asyncio.get_running_loop().create_task(self._run_load_more(request))
        self._scroll_tasks.add(task)
        task.add_done_callback(self._scroll_tasks.discard)
        return task
