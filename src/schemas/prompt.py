"""Pydantic schemas for prompt endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from models.enums import AiTool, Category, Difficulty, ResultType
from schemas.base import CamelModel
from schemas.comment import CommentResponse
from schemas.validators import (
    validate_and_normalize_tags,
    validate_content_length,
    validate_description_length,
    validate_title_length,
)


def _dedupe_ai_tools(tools: list[AiTool]) -> list[AiTool]:
    """Drop repeated AI tools, keeping first occurrence order."""
    return list(dict.fromkeys(tools))


class PromptResultCreate(CamelModel):
    """Example output supplied when creating a prompt."""

    type: ResultType
    url: str | None = None
    content: str | None = None


class PromptResultResponse(CamelModel):
    """Example output attached to a prompt."""

    id: UUID
    type: ResultType
    url: str | None
    content: str | None


class PromptCreate(CamelModel):
    """Schema for creating a new prompt."""

    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    description: str | None = None
    category: Category
    ai_tool: list[AiTool] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    difficulty: Difficulty = Difficulty.BEGINNER
    published: bool = True
    results: list[PromptResultCreate] = Field(default_factory=list)

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        """Trim required text so whitespace-only values fail min_length."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("title")
    @classmethod
    def check_title_length(cls, v: str) -> str:
        """Validate title length."""
        return validate_title_length(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str | None) -> str | None:
        """Validate description length."""
        return validate_description_length(v)

    @field_validator("content")
    @classmethod
    def check_content_length(cls, v: str) -> str:
        """Validate content length."""
        return validate_content_length(v)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str]:
        """Normalize and validate tags."""
        if v is None:
            return []
        return validate_and_normalize_tags(v)

    @field_validator("ai_tool")
    @classmethod
    def dedupe_ai_tools(cls, v: list[AiTool]) -> list[AiTool]:
        """Each AI tool is stored at most once per prompt."""
        return _dedupe_ai_tools(v)


class PromptUpdate(CamelModel):
    """
    Schema for updating an existing prompt.

    Omitted fields are left unchanged. ``description`` may be set to null to clear it.
    """

    title: str | None = Field(default=None, min_length=1)
    content: str | None = Field(default=None, min_length=1)
    description: str | None = None
    category: Category | None = None
    ai_tool: list[AiTool] | None = None
    tags: list[str] | None = None
    difficulty: Difficulty | None = None
    published: bool | None = None

    @field_validator("title")
    @classmethod
    def check_title_length(cls, v: str | None) -> str | None:
        """Validate title length."""
        return validate_title_length(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str | None) -> str | None:
        """Validate description length."""
        return validate_description_length(v)

    @field_validator("content")
    @classmethod
    def check_content_length(cls, v: str | None) -> str | None:
        """Validate content length."""
        return validate_content_length(v)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str] | None:
        """Normalize and validate tags if provided."""
        if v is None:
            return None
        return validate_and_normalize_tags(v)

    @field_validator("ai_tool")
    @classmethod
    def dedupe_ai_tools(cls, v: list[AiTool] | None) -> list[AiTool] | None:
        """Each AI tool is stored at most once per prompt."""
        if v is None:
            return None
        return _dedupe_ai_tools(v)


class AuthorSummary(CamelModel):
    """Public author fields shown on prompt cards."""

    id: UUID
    name: str | None
    image: str | None


class AuthorDetail(AuthorSummary):
    """Author fields shown on the prompt detail page."""

    bio: str | None = None


class PromptCounts(CamelModel):
    """Aggregate relation counts for a prompt."""

    upvotes: int = 0
    bookmarks: int = 0
    comments: int = 0


class UserRef(CamelModel):
    """Membership marker: the referenced user holds the relation."""

    user_id: UUID


class PromptSummary(CamelModel):
    """
    Prompt as it appears in feeds and lists.

    ``upvotes``/``bookmarks`` are only embedded by endpoints that disambiguate the
    viewer's membership client-side (e.g. the saved-prompts list); the feed sends
    ``interactionState`` alongside the page instead.
    """

    id: UUID
    title: str
    content: str
    description: str | None
    category: Category
    ai_tool: list[AiTool]
    tags: list[str]
    difficulty: Difficulty
    views: int
    copy_count: int
    published: bool
    created_at: datetime
    updated_at: datetime
    author_id: UUID
    author: AuthorSummary
    counts: PromptCounts = Field(alias="_count")
    upvotes: list[UserRef] | None = None
    bookmarks: list[UserRef] | None = None


class PromptDetail(PromptSummary):
    """Full prompt for the detail page, including the viewer's interaction state."""

    author: AuthorDetail
    results: list[PromptResultResponse] = Field(default_factory=list)
    comments: list[CommentResponse] = Field(default_factory=list)
    is_upvoted: bool = False
    is_bookmarked: bool = False
