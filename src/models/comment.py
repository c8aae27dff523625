"""Comment model for discussion on prompts."""
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.prompt import Prompt
    from models.user import User


class Comment(Base, UUIDv7Mixin, TimestampMixin):
    """Comment model - free text authored by a user against a prompt."""

    __tablename__ = "comments"

    content: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    prompt_id: Mapped[UUID] = mapped_column(
        ForeignKey("prompts.id", ondelete="CASCADE"),
        index=True,
    )

    user: Mapped["User"] = relationship(back_populates="comments")
    prompt: Mapped["Prompt"] = relationship(back_populates="comments")
