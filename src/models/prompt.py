"""Prompt model and its child rows (tags, target AI tools, example results)."""
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin, enum_column_type
from models.enums import AiTool, Category, Difficulty, ResultType

if TYPE_CHECKING:
    from models.comment import Comment
    from models.interaction import Bookmark, Upvote
    from models.user import User


class Prompt(Base, UUIDv7Mixin, TimestampMixin):
    """Prompt model - a shareable prompt formula with category, target tools and counters."""

    __tablename__ = "prompts"
    __table_args__ = (
        # Feed queries always filter on published; most also filter by category
        Index("ix_prompts_published_category", "published", "category"),
    )

    # id provided by UUIDv7Mixin
    author_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[Category] = mapped_column(
        enum_column_type(Category, "prompt_category"),
        nullable=False,
    )
    difficulty: Mapped[Difficulty] = mapped_column(
        enum_column_type(Difficulty, "prompt_difficulty"),
        nullable=False,
        default=Difficulty.BEGINNER,
    )
    # Monotonic counters, only ever changed through atomic UPDATE ... SET x = x + 1
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    copy_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )
    published: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true(), index=True,
    )

    author: Mapped["User"] = relationship(back_populates="prompts")
    tag_objects: Mapped[list["PromptTag"]] = relationship(
        back_populates="prompt",
        cascade="all, delete-orphan",
        order_by="PromptTag.position",
        passive_deletes=True,
    )
    ai_tool_objects: Mapped[list["PromptAiTool"]] = relationship(
        back_populates="prompt",
        cascade="all, delete-orphan",
        order_by="PromptAiTool.position",
        passive_deletes=True,
    )
    results: Mapped[list["PromptResult"]] = relationship(
        back_populates="prompt",
        cascade="all, delete-orphan",
        order_by="PromptResult.created_at",
        passive_deletes=True,
    )
    upvotes: Mapped[list["Upvote"]] = relationship(
        back_populates="prompt",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    bookmarks: Mapped[list["Bookmark"]] = relationship(
        back_populates="prompt",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    comments: Mapped[list["Comment"]] = relationship(
        back_populates="prompt",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def tags(self) -> list[str]:
        """Tag names in their stored order."""
        return [tag.name for tag in self.tag_objects]

    @property
    def ai_tools(self) -> list[str]:
        """Target AI tool names in their stored order."""
        return [tool.ai_tool.value for tool in self.ai_tool_objects]

    def set_tags(self, tags: list[str]) -> None:
        """Replace the prompt's tags."""
        self.tag_objects = [
            PromptTag(name=name, position=position) for position, name in enumerate(tags)
        ]

    def set_ai_tools(self, ai_tools: list[AiTool]) -> None:
        """Replace the prompt's target AI tools."""
        self.ai_tool_objects = [
            PromptAiTool(ai_tool=tool, position=position)
            for position, tool in enumerate(ai_tools)
        ]


class PromptTag(Base):
    """Free-text tag attached to a prompt. One row per (prompt, tag)."""

    __tablename__ = "prompt_tags"
    __table_args__ = (
        # Lookups by tag value for the search "tag membership" branch
        Index("ix_prompt_tags_name", "name"),
    )

    prompt_id: Mapped[UUID] = mapped_column(
        ForeignKey("prompts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    prompt: Mapped["Prompt"] = relationship(back_populates="tag_objects")


class PromptAiTool(Base):
    """Target AI tool of a prompt. One row per (prompt, tool)."""

    __tablename__ = "prompt_ai_tools"
    __table_args__ = (
        Index("ix_prompt_ai_tools_ai_tool", "ai_tool"),
    )

    prompt_id: Mapped[UUID] = mapped_column(
        ForeignKey("prompts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    ai_tool: Mapped[AiTool] = mapped_column(
        enum_column_type(AiTool, "prompt_ai_tool"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    prompt: Mapped["Prompt"] = relationship(back_populates="ai_tool_objects")


class PromptResult(Base, UUIDv7Mixin, TimestampMixin):
    """Example output produced by a prompt (text, image, video or link)."""

    __tablename__ = "prompt_results"

    prompt_id: Mapped[UUID] = mapped_column(
        ForeignKey("prompts.id", ondelete="CASCADE"),
        index=True,
    )
    type: Mapped[ResultType] = mapped_column(
        enum_column_type(ResultType, "prompt_result_type"),
        nullable=False,
    )
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)

    prompt: Mapped["Prompt"] = relationship(back_populates="results")
