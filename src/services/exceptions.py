"""Shared exceptions for service layer operations."""
from uuid import UUID


class NotFoundError(Exception):
    """Raised when a referenced resource does not exist (or was concurrently deleted)."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class PromptNotFoundError(NotFoundError):
    """Raised when a prompt id does not resolve to a prompt visible to the caller."""

    def __init__(self, prompt_id: UUID) -> None:
        self.prompt_id = prompt_id
        super().__init__("Prompt not found")


class CommentNotFoundError(NotFoundError):
    """Raised when a comment id does not resolve to a comment."""

    def __init__(self, comment_id: UUID) -> None:
        self.comment_id = comment_id
        super().__init__("Comment not found")


class ForbiddenError(Exception):
    """
    Raised when an authenticated user acts on a resource they do not own.

    Distinct from authentication failures (401), which the auth dependency raises.
    """

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class ValidationFailedError(Exception):
    """Raised for malformed input that passed schema parsing but is still invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class TransientStorageError(Exception):
    """
    Raised when the storage engine is unreachable or too slow.

    Safe to retry. Callers must surface this as a failure rather than falling back
    to stale or empty data.
    """

    def __init__(self, message: str = "Storage temporarily unavailable") -> None:
        super().__init__(message)
