"""HTTP client for the prompts API, used by the feed controller and toggles."""
import logging
from typing import Any, TypeVar
from uuid import UUID

import httpx
from pydantic import BaseModel, ValidationError

from feed_client.config import ClientSettings, get_client_settings
from feed_client.filters import FeedFilters
from schemas.feed import FeedResponse
from schemas.interaction import BookmarkToggleResponse, SuccessResponse, UpvoteToggleResponse

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class FeedApiError(Exception):
    """Raised when an API call fails for any reason (HTTP error, timeout, transport, bad body)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_unauthorized(self) -> bool:
        """True when the server rejected the call for missing or invalid credentials."""
        return self.status_code == 401

    @property
    def is_transport_error(self) -> bool:
        """True when no HTTP response was received (network failure or timeout)."""
        return self.status_code is None


def create_http_client(settings: ClientSettings | None = None) -> httpx.AsyncClient:
    """Create an httpx client pointed at the configured API."""
    settings = settings or get_client_settings()
    return httpx.AsyncClient(base_url=settings.api_url, timeout=settings.api_timeout)


def _error_detail(response: httpx.Response) -> str:
    """Best-effort human readable error from a JSON error body."""
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    if isinstance(detail, str):
        return detail
    return f"Request failed with status {response.status_code}"


class FeedApiClient:
    """
    Typed wrapper over the prompts API.

    Every response body is validated into the same pydantic schemas the server
    uses, so callers never inspect raw JSON.
    """

    def __init__(self, client: httpx.AsyncClient, token: str | None = None) -> None:
        self._client = client
        self._token = token

    def _headers(self) -> dict[str, str]:
        if self._token:
            return {"Authorization": f"Bearer {self._token}"}
        return {}

    async def _request(
        self,
        method: str,
        path: str,
        model: type[ModelT],
        params: dict[str, Any] | None = None,
    ) -> ModelT:
        try:
            response = await self._client.request(
                method, path, params=params, headers=self._headers(),
            )
        except httpx.TimeoutException as e:
            logger.warning("api_timeout method=%s path=%s", method, path)
            raise FeedApiError("Request timed out") from e
        except httpx.HTTPError as e:
            logger.warning("api_transport_error method=%s path=%s error=%s", method, path, e)
            raise FeedApiError("Could not reach the server") from e

        if response.is_error:
            logger.info(
                "api_error method=%s path=%s status=%s", method, path, response.status_code,
            )
            raise FeedApiError(_error_detail(response), status_code=response.status_code)

        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise FeedApiError(
                "Malformed response from server", status_code=response.status_code,
            ) from e

    async def fetch_feed(
        self,
        filters: FeedFilters,
        page: int,
        limit: int,
        user_id: UUID | None = None,
    ) -> FeedResponse:
        """Get one page of the feed for the given filters."""
        params: dict[str, Any] = {**filters.to_query_params(), "page": page, "limit": limit}
        if user_id is not None:
            params["userId"] = str(user_id)
        return await self._request("GET", "/prompts", FeedResponse, params=params)

    async def toggle_upvote(self, prompt_id: UUID) -> UpvoteToggleResponse:
        """Flip the caller's upvote; returns the new state and upvote total."""
        return await self._request("POST", f"/prompts/{prompt_id}/upvote", UpvoteToggleResponse)

    async def toggle_bookmark(self, prompt_id: UUID) -> BookmarkToggleResponse:
        """Flip the caller's bookmark; returns the new state."""
        return await self._request(
            "POST", f"/prompts/{prompt_id}/bookmark", BookmarkToggleResponse,
        )

    async def track_copy(self, prompt_id: UUID) -> None:
        """Record a copy of the prompt's content."""
        await self._request("POST", f"/prompts/{prompt_id}/copy", SuccessResponse)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
