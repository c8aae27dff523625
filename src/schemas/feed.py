"""Schemas for the prompt feed: query parameters, cached page, and wire response."""
import hashlib
import json
from typing import Any
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from core.config import get_settings
from models.enums import AiTool, Category, Difficulty, FeedSort
from schemas.base import CamelModel
from schemas.prompt import PromptSummary
from schemas.validators import split_multi_value


class FeedQuery(CamelModel):
    """
    Filter, sort and pagination specification for the feed.

    Multi-valued filters accept comma-joined strings. They are de-duplicated and
    sorted so that equivalent requests produce the same cache key; the order of
    values never affects results (OR within a field).
    """

    category: list[Category] = Field(default_factory=list)
    ai_tool: list[AiTool] = Field(default_factory=list)
    difficulty: Difficulty | None = None
    search: str | None = None
    sort: FeedSort = FeedSort.TRENDING
    page: int = Field(default=1, ge=1)
    limit: int | None = Field(default=None, ge=1)

    @field_validator("category", "ai_tool", mode="before")
    @classmethod
    def split_comma_values(cls, v: Any) -> list[str]:
        """Accept 'a,b', ['a', 'b'] or ['a,b']."""
        if v is None or isinstance(v, (str, list)):
            return split_multi_value(v)
        return v

    @field_validator("category", "ai_tool")
    @classmethod
    def canonicalize(cls, v: list) -> list:
        """Remove duplicates and sort for a stable cache key."""
        return sorted(set(v), key=lambda member: member.value)

    @field_validator("difficulty", mode="before")
    @classmethod
    def blank_difficulty(cls, v: Any) -> Any:
        """Treat an empty difficulty as absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("sort", mode="before")
    @classmethod
    def blank_sort(cls, v: Any) -> Any:
        """An empty or missing sort key means the default (trending)."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return FeedSort.TRENDING
        return v

    @field_validator("search", mode="before")
    @classmethod
    def normalize_search(cls, v: Any) -> Any:
        """Trim search text; empty search imposes no constraint."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @model_validator(mode="after")
    def apply_limit_bounds(self) -> "FeedQuery":
        """Default the page size and enforce the configured maximum."""
        settings = get_settings()
        if self.limit is None:
            self.limit = settings.feed_default_page_size
        if self.limit > settings.feed_max_page_size:
            raise ValueError(
                f"limit must be at most {settings.feed_max_page_size} (got {self.limit})",
            )
        return self

    @property
    def offset(self) -> int:
        """Rows to skip: (page - 1) * limit."""
        return (self.page - 1) * self.limit

    def cache_key(self) -> str:
        """Stable digest of the full specification (filters, sort, page, limit)."""
        payload = json.dumps(self.model_dump(mode="json"), sort_keys=True)
        return hashlib.sha256(payload.encode()).hexdigest()[:32]


class FeedPage(CamelModel):
    """
    One page of feed results.

    This is the viewer-independent part of a feed response, and the unit stored
    in the feed cache.
    """

    prompts: list[PromptSummary]
    total: int
    page: int
    total_pages: int


class InteractionState(CamelModel):
    """Which of a set of prompts the viewer has upvoted and bookmarked."""

    upvoted_ids: set[UUID] = Field(default_factory=set)
    bookmarked_ids: set[UUID] = Field(default_factory=set)


class InteractionStateResponse(CamelModel):
    """Wire form of InteractionState (JSON has no sets)."""

    upvoted_ids: list[UUID] = Field(default_factory=list)
    bookmarked_ids: list[UUID] = Field(default_factory=list)

    @classmethod
    def from_state(cls, state: InteractionState) -> "InteractionStateResponse":
        """Convert resolved sets into sorted lists."""
        return cls(
            upvoted_ids=sorted(state.upvoted_ids, key=str),
            bookmarked_ids=sorted(state.bookmarked_ids, key=str),
        )


class FeedResponse(FeedPage):
    """Feed page plus the viewer's interaction state for the prompts on it."""

    interaction_state: InteractionStateResponse = Field(
        default_factory=InteractionStateResponse,
    )
