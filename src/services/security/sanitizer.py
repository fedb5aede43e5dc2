"""
Markup Sanitizer

Free-text fields (names, descriptions, icons) are stored as plain text.
Any HTML is removed before storage: tags are dropped, the contents of
script and style elements are dropped with them, entities are decoded,
and surrounding whitespace is trimmed.

    strip_markup('<script>alert("x")</script>Test User')  -> 'Test User'
"""

import html
from typing import Optional

import nh3


def strip_markup(text: str) -> str:
    """Return text with all markup removed and whitespace trimmed."""
    cleaned = nh3.clean(text, tags=set())
    return html.unescape(cleaned).strip()


def strip_optional(text: Optional[str]) -> Optional[str]:
    """strip_markup for optional fields; None stays None."""
    if text is None:
        return None
    return strip_markup(text)
