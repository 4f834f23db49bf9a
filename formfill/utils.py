"""Utility functions for the formfill library."""

from __future__ import annotations

import re

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WS_RE = re.compile(r"\s+")
_NON_DIGIT_RE = re.compile(r"\D")


def normalize_text(text: str) -> str:
    """Normalize text for comparison by lowercasing and collapsing whitespace.

    Args:
        text: Text to normalize

    Returns:
        Normalized text
    """
    return _WS_RE.sub(" ", (text or "").strip()).lower()


def normalize_search_text(text: str) -> str:
    """Normalize slot metadata or table keywords into matchable search text.

    camelCase boundaries are split, everything is lowercased, and any character
    that is not a letter, digit or whitespace becomes a separator.

    Args:
        text: Raw text to normalize

    Returns:
        Lowercase alphanumeric words separated by single spaces

    Examples:
        >>> normalize_search_text("contact_Email")
        'contact email'
        >>> normalize_search_text("zipCode")
        'zip code'
    """
    if not text:
        return ""
    split = _CAMEL_RE.sub(" ", text)
    cleaned = _NON_ALNUM_RE.sub(" ", split.lower())
    return _WS_RE.sub(" ", cleaned).strip()


def contains_word(text: str, word: str) -> bool:
    """Check whether ``word`` appears in ``text`` bounded on both sides."""
    if not word:
        return False
    return re.search(r"\b" + re.escape(word) + r"\b", text) is not None


def digits_only(value: str) -> str:
    """Strip everything but digits."""
    return _NON_DIGIT_RE.sub("", value or "")
