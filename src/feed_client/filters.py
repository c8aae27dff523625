"""Feed filter and sort state, and its query-string (URL) form."""
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from models.enums import AiTool, Category, Difficulty, FeedSort
from schemas.validators import split_multi_value


class FeedFilters(BaseModel):
    """
    Immutable filter/sort selection for the discover feed.

    Multi-valued fields are kept sorted and de-duplicated, so two selections
    with the same values compare equal regardless of click order.
    """

    model_config = ConfigDict(frozen=True)

    category: tuple[Category, ...] = ()
    ai_tool: tuple[AiTool, ...] = ()
    difficulty: Difficulty | None = None
    search: str = ""
    sort: FeedSort = FeedSort.TRENDING

    @field_validator("category", "ai_tool", mode="before")
    @classmethod
    def split_values(cls, v: Any) -> Any:
        """Accept comma-joined strings as well as sequences."""
        if v is None or isinstance(v, str):
            return split_multi_value(v)
        if isinstance(v, Sequence):
            return split_multi_value([str(item) for item in v])
        return v

    @field_validator("category", "ai_tool")
    @classmethod
    def canonicalize(cls, v: tuple) -> tuple:
        """Sort and de-duplicate."""
        return tuple(sorted(set(v), key=lambda member: member.value))

    @field_validator("difficulty", mode="before")
    @classmethod
    def blank_difficulty(cls, v: Any) -> Any:
        """Treat an empty difficulty as no filter."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("search", mode="before")
    @classmethod
    def strip_search(cls, v: Any) -> Any:
        """Trim search text; None means no search."""
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    @field_validator("sort", mode="before")
    @classmethod
    def default_sort(cls, v: Any) -> Any:
        """Empty sort means trending."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return FeedSort.TRENDING
        return v

    def replace(self, **changes: Any) -> "FeedFilters":
        """Return a copy with some fields changed (validated)."""
        return FeedFilters.model_validate({**self.model_dump(), **changes})

    def to_query_params(self) -> dict[str, str]:
        """
        Query parameters for this selection, omitting empty fields.

        Multi-valued fields are comma-joined. Pagination and viewer parameters
        are added by the API client.
        """
        params: dict[str, str] = {}
        if self.search:
            params["search"] = self.search
        if self.category:
            params["category"] = ",".join(c.value for c in self.category)
        if self.ai_tool:
            params["aiTool"] = ",".join(t.value for t in self.ai_tool)
        if self.difficulty is not None:
            params["difficulty"] = self.difficulty.value
        params["sort"] = self.sort.value
        return params

    @classmethod
    def from_query_params(cls, params: Mapping[str, str | Sequence[str]]) -> "FeedFilters":
        """
        Build filters from URL query parameters.

        Values may be single strings or lists (repeated parameters); each may be
        comma-joined.

        Raises:
            ValueError: If a value is not one of the known categories, tools,
                difficulties or sort keys.
        """
        return cls(
            category=params.get("category"),
            ai_tool=params.get("aiTool"),
            difficulty=_single(params.get("difficulty")),
            search=_single(params.get("search")),
            sort=_single(params.get("sort")),
        )


def _single(value: str | Sequence[str] | None) -> str | None:
    """First value of a possibly repeated query parameter."""
    if value is None or isinstance(value, str):
        return value
    return value[0] if value else None
