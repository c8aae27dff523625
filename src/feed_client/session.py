"""Wiring for one discover feed view: HTTP client, first page, controller and toggles."""
import logging
from uuid import UUID

import httpx

from feed_client.api_client import FeedApiClient, FeedApiError, create_http_client
from feed_client.config import ClientSettings, get_client_settings
from feed_client.controller import FeedController
from feed_client.filters import FeedFilters
from feed_client.interactions import InteractionOverlay, InteractionToggler
from feed_client.notifier import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)


class FeedSession:
    """A feed controller and interaction toggler sharing one overlay and API client."""

    def __init__(
        self,
        api: FeedApiClient,
        controller: FeedController,
        toggler: InteractionToggler,
    ) -> None:
        self.api = api
        self.controller = controller
        self.toggler = toggler

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.api.aclose()


async def open_feed_session(
    token: str | None = None,
    filters: FeedFilters | None = None,
    viewer_id: UUID | None = None,
    notifier: Notifier | None = None,
    settings: ClientSettings | None = None,
    client: httpx.AsyncClient | None = None,
) -> FeedSession:
    """
    Fetch the first page for ``filters`` and build a ready-to-use feed session.

    Args:
        token: Session token; omit for an anonymous viewer.
        filters: Initial filter/sort selection (defaults to the trending feed).
        viewer_id: The signed-in viewer, sent so the first page carries their
            interaction state.
        notifier: Where user-facing messages go; logs them when omitted.
        settings: Client settings; read from the environment when omitted.
        client: An existing httpx client (tests pass one wired to a mock).

    Raises:
        FeedApiError: If the first page cannot be loaded. The HTTP client is
            closed before the error propagates.
    """
    settings = settings or get_client_settings()
    filters = filters or FeedFilters()
    notifier = notifier or LoggingNotifier()
    api = FeedApiClient(client or create_http_client(settings), token=token)

    try:
        initial = await api.fetch_feed(
            filters, page=1, limit=settings.page_size, user_id=viewer_id,
        )
    except FeedApiError:
        await api.aclose()
        raise

    overlay = InteractionOverlay()
    controller = FeedController(
        api,
        notifier,
        initial,
        filters=filters,
        limit=settings.page_size,
        viewer_id=viewer_id,
        overlay=overlay,
    )
    logger.debug("feed_session_opened total=%s page_size=%s", initial.total, settings.page_size)
    return FeedSession(api, controller, InteractionToggler(api, notifier, overlay))
