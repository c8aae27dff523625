"""Per-user binary relations on prompts: upvotes and bookmarks."""
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.prompt import Prompt
    from models.user import User


class Upvote(Base, UUIDv7Mixin, TimestampMixin):
    """A user's upvote on a prompt. At most one row per (user, prompt)."""

    __tablename__ = "upvotes"
    __table_args__ = (
        UniqueConstraint("user_id", "prompt_id", name="uq_upvotes_user_prompt"),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    prompt_id: Mapped[UUID] = mapped_column(
        ForeignKey("prompts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,  # Count-per-prompt for ranking
    )

    user: Mapped["User"] = relationship(back_populates="upvotes")
    prompt: Mapped["Prompt"] = relationship(back_populates="upvotes")


class Bookmark(Base, UUIDv7Mixin, TimestampMixin):
    """A user's saved prompt. At most one row per (user, prompt)."""

    __tablename__ = "bookmarks"
    __table_args__ = (
        UniqueConstraint("user_id", "prompt_id", name="uq_bookmarks_user_prompt"),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    prompt_id: Mapped[UUID] = mapped_column(
        ForeignKey("prompts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user: Mapped["User"] = relationship(back_populates="bookmarks")
    prompt: Mapped["Prompt"] = relationship(back_populates="bookmarks")
