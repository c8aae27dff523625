"""
Shared validation functions for Pydantic schemas.

This module contains validators used across the prompt, comment and feed schemas.
Limits come from Settings so they can be tuned per deployment.
"""
import re

from core.config import get_settings

MAX_TAG_LENGTH = 50

# Runs of whitespace inside a tag collapse to a single space
_WHITESPACE = re.compile(r"\s+")


def normalize_tag(tag: str) -> str:
    """Normalize a free-text tag: trim, collapse whitespace, lowercase."""
    return _WHITESPACE.sub(" ", tag).strip().lower()


def validate_and_normalize_tags(tags: list[str]) -> list[str]:
    """
    Normalize and validate a list of free-text tags.

    Args:
        tags: List of tag strings to validate.

    Returns:
        List of normalized tags, with empty strings filtered out and duplicates
        removed (preserving first occurrence order).

    Raises:
        ValueError: If a tag is too long or there are too many tags.
    """
    settings = get_settings()
    normalized: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        value = normalize_tag(tag)
        if not value:
            continue  # Skip empty tags silently
        if len(value) > MAX_TAG_LENGTH:
            raise ValueError(
                f"Tag '{value[:20]}...' exceeds maximum length of {MAX_TAG_LENGTH} characters.",
            )
        if value not in seen:
            seen.add(value)
            normalized.append(value)
    if len(normalized) > settings.max_tags:
        raise ValueError(f"A prompt can have at most {settings.max_tags} tags.")
    return normalized


def validate_title_length(title: str | None) -> str | None:
    """Validate that title doesn't exceed maximum length."""
    settings = get_settings()
    if title is not None and len(title) > settings.max_title_length:
        raise ValueError(
            f"Title exceeds maximum length of {settings.max_title_length:,} characters "
            f"(got {len(title):,} characters).",
        )
    return title


def validate_description_length(description: str | None) -> str | None:
    """Validate that description doesn't exceed maximum length."""
    settings = get_settings()
    if description is not None and len(description) > settings.max_description_length:
        max_len = settings.max_description_length
        raise ValueError(
            f"Description exceeds maximum length of {max_len:,} characters "
            f"(got {len(description):,} characters).",
        )
    return description


def validate_content_length(content: str | None) -> str | None:
    """Validate that content doesn't exceed maximum length."""
    settings = get_settings()
    if content is not None and len(content) > settings.max_content_length:
        raise ValueError(
            f"Content exceeds maximum length of {settings.max_content_length:,} characters "
            f"(got {len(content):,} characters).",
        )
    return content


def validate_comment_content(content: str) -> str:
    """Trim a comment and reject empty or oversized ones."""
    settings = get_settings()
    trimmed = content.strip()
    if not trimmed:
        raise ValueError("Comment content is required")
    if len(trimmed) > settings.max_comment_length:
        raise ValueError(
            f"Comment exceeds maximum length of {settings.max_comment_length:,} characters.",
        )
    return trimmed


def split_multi_value(value: str | list[str] | None) -> list[str]:
    """
    Split a comma-joined query value into its parts.

    Accepts a single string ("Coding,Writing"), a list of strings (repeated query
    parameters, each possibly comma-joined), or None. Blank parts are dropped.
    """
    if value is None:
        return []
    raw = [value] if isinstance(value, str) else value
    parts: list[str] = []
    for item in raw:
        parts.extend(part.strip() for part in item.split(",") if part.strip())
    return parts
