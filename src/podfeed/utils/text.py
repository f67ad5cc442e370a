"""Text processing utilities."""

import html
import re

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")


def strip_html(text: str) -> str:
    """
    Reduce an HTML fragment to plain text.

    Markup is parsed with BeautifulSoup and the text nodes are joined with
    single spaces.

    Args:
        text: HTML or plain text

    Returns:
        Plain text, stripped of surrounding whitespace
    """
    if not text:
        return ""
    text = BeautifulSoup(text, "html.parser").get_text(" ", strip=True)
    text = html.unescape(text)
    return _WHITESPACE.sub(" ", text).strip()


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length with suffix.

    Args:
        text: Text to truncate
        max_length: Maximum length including suffix
        suffix: Suffix to add when truncating

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text

    return text[: max_length - len(suffix)] + suffix
