"""Text formatting utilities."""

import re


def slugify(text: str) -> str:
    """
    Convert text to a URL-safe slug.

    Every run of characters other than lowercase letters and digits becomes
    one hyphen; leading and trailing hyphens are dropped.

    Args:
        text: Text to convert

    Returns:
        URL-safe slug, e.g. "AT&T Labs" -> "at-t-labs"
    """
    text = text.lower()
    text = re.sub(r'[^a-z0-9]+', '-', text)
    return text.strip('-')


LIKE_ESCAPE = "\\"


def like_pattern(term: str) -> str:
    """
    Wrap a search term for a case-insensitive substring `ILIKE` match.

    `%` and `_` in the term match themselves; pair the result with
    `escape=LIKE_ESCAPE`.
    """
    term = term.strip()
    for char in (LIKE_ESCAPE, "%", "_"):
        term = term.replace(char, LIKE_ESCAPE + char)
    return f"%{term}%"
