"""Shared utility functions for service layer."""
import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError

from core.config import get_settings
from services.exceptions import TransientStorageError

T = TypeVar("T")

# Escape character used with every ILIKE pattern built by escape_ilike()
ILIKE_ESCAPE = "\\"


def escape_ilike(value: str) -> str:
    r"""
    Escape special ILIKE characters for safe use in LIKE/ILIKE patterns.

    LIKE/ILIKE treats these characters specially:
    - % matches any sequence of characters
    - _ matches any single character
    - \\ is the escape character

    This function escapes them so they match literally. Pass
    ``escape=ILIKE_ESCAPE`` to ``ilike()`` so every backend honours the escapes.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def with_storage_timeout(operation: Awaitable[T]) -> T:
    """
    Await a storage operation, mapping timeouts and connectivity errors to TransientStorageError.

    Only connection-level failures are translated; integrity and programming errors
    propagate unchanged so callers can handle them.
    """
    settings = get_settings()
    try:
        async with asyncio.timeout(settings.storage_timeout_seconds):
            return await operation
    except TimeoutError as e:
        raise TransientStorageError("Storage request timed out") from e
    except OperationalError as e:
        raise TransientStorageError() from e
    except DBAPIError as e:
        if e.connection_invalidated:
            raise TransientStorageError() from e
        raise
