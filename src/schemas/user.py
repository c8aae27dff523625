"""Pydantic schemas for user, stats and category endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import Field

from models.enums import Category, UserRole
from schemas.base import CamelModel


class UserResponse(CamelModel):
    """The authenticated user's profile."""

    id: UUID
    name: str | None
    email: str | None
    image: str | None
    bio: str | None
    role: UserRole
    created_at: datetime


class UserStats(CamelModel):
    """Totals across every prompt the user authored."""

    total_prompts: int = 0
    total_upvotes: int = 0
    total_views: int = 0
    total_copies: int = 0


class CategoryCount(CamelModel):
    """Number of published prompts in a category."""

    category: Category
    count: int = Field(alias="_count")


class UserUpdate(CamelModel):
    """Partial profile update. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, max_length=255)
    bio: str | None = Field(default=None, max_length=2000)
    image: str | None = None
