"""
Viewer interaction state for rendered prompts, with optimistic toggles.

A toggle flips local state immediately, then reconciles with the server's
answer. Failures revert the flip and notify; they never leave the overlay in
a state the server did not confirm.
"""
import asyncio
import logging
from collections.abc import Iterable
from enum import StrEnum
from uuid import UUID

from feed_client.api_client import FeedApiClient, FeedApiError
from feed_client.notifier import Notifier
from schemas.feed import InteractionStateResponse
from schemas.prompt import PromptSummary

logger = logging.getLogger(__name__)

UPVOTE_FAILED = "Failed to update upvote. Please sign in."
BOOKMARK_FAILED = "Failed to update bookmark. Please sign in."
UNEXPECTED_FAILURE = "Something went wrong"
BOOKMARK_SAVED = "Prompt saved!"
BOOKMARK_REMOVED = "Bookmark removed"


class InteractionKind(StrEnum):
    """Kinds of per-viewer toggles."""

    UPVOTE = "upvote"
    BOOKMARK = "bookmark"


class InteractionOverlay:
    """Which rendered prompts the viewer upvoted or bookmarked, plus visible counters."""

    def __init__(self) -> None:
        self.upvoted_ids: set[UUID] = set()
        self.bookmarked_ids: set[UUID] = set()
        self.upvote_counts: dict[UUID, int] = {}
        self.copy_counts: dict[UUID, int] = {}
        # Upvote totals confirmed by a toggle response since the last replace
        self._confirmed_upvote_counts: dict[UUID, int] = {}
        self._pending: set[tuple[InteractionKind, UUID]] = set()

    def is_upvoted(self, prompt_id: UUID) -> bool:
        """Whether the viewer has upvoted the prompt."""
        return prompt_id in self.upvoted_ids

    def is_bookmarked(self, prompt_id: UUID) -> bool:
        """Whether the viewer has bookmarked the prompt."""
        return prompt_id in self.bookmarked_ids

    def is_pending(self, kind: InteractionKind, prompt_id: UUID) -> bool:
        """Whether a toggle of this kind is in flight for the prompt."""
        return (kind, prompt_id) in self._pending

    def mark_pending(self, kind: InteractionKind, prompt_id: UUID) -> None:
        """Record that a toggle of this kind is in flight for the prompt."""
        self._pending.add((kind, prompt_id))

    def clear_pending(self, kind: InteractionKind, prompt_id: UUID) -> None:
        """Record that the in-flight toggle finished."""
        self._pending.discard((kind, prompt_id))

    def confirm_upvote_count(self, prompt_id: UUID, count: int) -> None:
        """Adopt the upvote total a toggle response reported for the prompt."""
        self.upvote_counts[prompt_id] = count
        self._confirmed_upvote_counts[prompt_id] = count

    def apply_page(
        self,
        prompts: Iterable[PromptSummary],
        state: InteractionStateResponse,
        replace: bool = False,
    ) -> None:
        """
        Adopt the server's membership and counters for a freshly fetched page.

        Prompts with a toggle in flight keep their optimistic value; the toggle's
        own response reconciles them. Feed pages may be served from a short-lived
        cache, so an appended page never overrides an upvote total confirmed by a
        toggle; a replace starts over from the page's totals.
        """
        if replace:
            self._confirmed_upvote_counts.clear()
        upvoted = set(state.upvoted_ids)
        bookmarked = set(state.bookmarked_ids)
        for prompt in prompts:
            if not self.is_pending(InteractionKind.UPVOTE, prompt.id):
                _set_membership(self.upvoted_ids, prompt.id, prompt.id in upvoted)
                self.upvote_counts[prompt.id] = self._confirmed_upvote_counts.get(
                    prompt.id, prompt.counts.upvotes,
                )
            if not self.is_pending(InteractionKind.BOOKMARK, prompt.id):
                _set_membership(self.bookmarked_ids, prompt.id, prompt.id in bookmarked)
            self.copy_counts[prompt.id] = max(
                self.copy_counts.get(prompt.id, 0), prompt.copy_count,
            )


def _set_membership(ids: set[UUID], prompt_id: UUID, present: bool) -> None:
    if present:
        ids.add(prompt_id)
    else:
        ids.discard(prompt_id)


def _failure_message(error: FeedApiError, rejected_message: str) -> str:
    if error.is_transport_error:
        return UNEXPECTED_FAILURE
    return rejected_message


class InteractionToggler:
    """
    Optimistic upvote/bookmark toggles over an InteractionOverlay.

    At most one toggle per (prompt, kind) is in flight; clicks while one is
    pending are ignored, like a disabled button.
    """

    def __init__(
        self,
        api: FeedApiClient,
        notifier: Notifier,
        overlay: InteractionOverlay,
    ) -> None:
        self._api = api
        self._notifier = notifier
        self.overlay = overlay
        self._background: set[asyncio.Task] = set()

    async def toggle_upvote(self, prompt_id: UUID) -> bool | None:
        """
        Flip the viewer's upvote.

        Returns:
            The confirmed upvote state, or None if the click was ignored or failed.
        """
        kind = InteractionKind.UPVOTE
        if self.overlay.is_pending(kind, prompt_id):
            return None

        was_upvoted = self.overlay.is_upvoted(prompt_id)
        previous_count = self.overlay.upvote_counts.get(prompt_id, 0)
        _set_membership(self.overlay.upvoted_ids, prompt_id, not was_upvoted)
        self.overlay.upvote_counts[prompt_id] = max(
            previous_count + (-1 if was_upvoted else 1), 0,
        )

        self.overlay.mark_pending(kind, prompt_id)
        try:
            result = await self._api.toggle_upvote(prompt_id)
        except FeedApiError as e:
            _set_membership(self.overlay.upvoted_ids, prompt_id, was_upvoted)
            self.overlay.upvote_counts[prompt_id] = previous_count
            self._notifier.error(_failure_message(e, UPVOTE_FAILED))
            return None
        finally:
            self.overlay.clear_pending(kind, prompt_id)

        # Server state is authoritative (e.g. a concurrent toggle from another tab)
        _set_membership(self.overlay.upvoted_ids, prompt_id, result.upvoted)
        self.overlay.confirm_upvote_count(prompt_id, result.count)
        return result.upvoted

    async def toggle_bookmark(self, prompt_id: UUID) -> bool | None:
        """
        Flip the viewer's bookmark.

        Returns:
            The confirmed bookmark state, or None if the click was ignored or failed.
        """
        kind = InteractionKind.BOOKMARK
        if self.overlay.is_pending(kind, prompt_id):
            return None

        was_bookmarked = self.overlay.is_bookmarked(prompt_id)
        _set_membership(self.overlay.bookmarked_ids, prompt_id, not was_bookmarked)

        self.overlay.mark_pending(kind, prompt_id)
        try:
            result = await self._api.toggle_bookmark(prompt_id)
        except FeedApiError as e:
            _set_membership(self.overlay.bookmarked_ids, prompt_id, was_bookmarked)
            self._notifier.error(_failure_message(e, BOOKMARK_FAILED))
            return None
        finally:
            self.overlay.clear_pending(kind, prompt_id)

        _set_membership(self.overlay.bookmarked_ids, prompt_id, result.bookmarked)
        self._notifier.success(BOOKMARK_SAVED if result.bookmarked else BOOKMARK_REMOVED)
        return result.bookmarked

    def track_copy(self, prompt_id: UUID) -> asyncio.Task:
        """
        Count a successful clipboard copy.

        The visible counter goes up immediately; the server call runs in the
        background and its failure is only logged.
        """
        self.overlay.copy_counts[prompt_id] = self.overlay.copy_counts.get(prompt_id, 0) + 1
        task = asyncio.get_running_loop().create_task(self._send_copy(prompt_id))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _send_copy(self, prompt_id: UUID) -> None:
        try:
            await self._api.track_copy(prompt_id)
        except FeedApiError as e:
            logger.warning("copy_tracking_failed prompt_id=%s error=%s", prompt_id, e)
