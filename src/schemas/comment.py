"""Pydantic schemas for comment endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import field_validator

from schemas.base import CamelModel
from schemas.validators import validate_comment_content


class CommentCreate(CamelModel):
    """Schema for creating a comment."""

    content: str

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        """Trim and validate comment content."""
        return validate_comment_content(v)


class CommentAuthor(CamelModel):
    """Public fields of a comment's author."""

    id: UUID
    name: str | None
    image: str | None


class CommentResponse(CamelModel):
    """A comment with its author."""

    id: UUID
    content: str
    created_at: datetime
    user_id: UUID
    prompt_id: UUID
    user: CommentAuthor
