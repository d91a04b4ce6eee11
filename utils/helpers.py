"""
Helper Utility Module

This module provides various helper functions used throughout Snapgram.
"""

import re
from typing import Optional, List
from urllib.parse import urlparse

_WHITESPACE = re.compile(r'\s+')


def is_valid_url(url: str) -> bool:
    """
    Check if a URL is valid.

    Args:
        url: The URL to validate

    Returns:
        bool: True if the URL is valid, False otherwise
    """
    try:
        result = urlparse(url)
        return all([result.scheme, result.netloc])
    except Exception:
        return False


def normalize_tags(tags: Optional[str]) -> List[str]:
    """
    Turn a free-text, comma separated tag field into a list of tags.

    All whitespace is removed before splitting. Empty entries are dropped
    and duplicates keep their first position.

    Args:
        tags: Raw tag text, e.g. "travel, food ,art"

    Returns:
        List[str]: Distinct non-empty tags, empty for None or blank input
    """
    if not tags:
        return []

    normalized = []
    for tag in _WHITESPACE.sub('', tags).split(','):
        if tag and tag not in normalized:
            normalized.append(tag)
    return normalized


def truncate_text(text: str, max_length: int = 100, add_ellipsis: bool = True) -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: The text to truncate
        max_length: Maximum length
        add_ellipsis: Whether to add an ellipsis if text is truncated

    Returns:
        str: Truncated text
    """
    if not text or len(text) <= max_length:
        return text

    truncated = text[:max_length].rstrip()
    if add_ellipsis:
        truncated += "..."

    return truncated
