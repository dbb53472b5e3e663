"""
Redaction helpers for diagnostic text.
"""

import re
from typing import Optional
from urllib.parse import urlsplit

URL_PLACEHOLDER = "(url)"

# Optional scheme, "//", then host and path up to whitespace or ")";
# an enclosing pair of parentheses is consumed with it.
URL_PATTERN = re.compile(r"\(?(?:[A-Za-z][A-Za-z0-9+.\-]*:)?//[^\s)]*\)?")


def redact_text(text: str) -> str:
    """Replace URL-like substrings in a single piece of text."""
    return URL_PATTERN.sub(URL_PLACEHOLDER, text)


def redact_stack(stack: Optional[str]) -> Optional[str]:
    """Replace every URL-like substring in ``stack`` with a placeholder.

    Works line by line so the number of lines is unchanged.
    """
    if not stack:
        return None
    return "\n".join(redact_text(line) for line in stack.split("\n"))


def truncate(text: Optional[str], limit: int) -> Optional[str]:
    if text is None:
        return None
    return text[:limit]


def sanitize_path(location: Optional[str]) -> Optional[str]:
    """Reduce a URL or path to ``pathname?query``; host and fragment are dropped."""
    if not location:
        return None
    parts = urlsplit(location)
    path = redact_text(parts.path) or "/"
    if not path.startswith("/"):
        path = "/" + path
    if path.startswith("//"):
        path = "/" + path.lstrip("/")
    if parts.query:
        return f"{path}?{redact_text(parts.query)}"
    return path
