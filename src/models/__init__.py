"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.user import User
from models.prompt import Prompt, PromptAiTool, PromptResult, PromptTag
from models.interaction import Bookmark, Upvote
from models.comment import Comment

__all__ = [
    "Base",
    "Bookmark",
    "Comment",
    "Prompt",
    "PromptAiTool",
    "PromptResult",
    "PromptTag",
    "TimestampMixin",
    "UUIDv7Mixin",
    "Upvote",
    "User",
]
