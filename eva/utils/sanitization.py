"""
Escaping of user-written text before it is forwarded to the marketplace

The marketplace renders vendor names, listing copy, reviews and messages
back into HTML pages, so every free-text field leaves the portal escaped.
"""

import html
import re
from typing import Any, Iterable, Optional

CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")

MAX_MESSAGE_LENGTH = 5000


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """HTML-escape a string and drop control characters; non-strings pass through"""
    if not isinstance(value, str):
        return value
    return html.escape(CONTROL_CHARS.sub("", value), quote=True)


def _sanitize_value(value: Any, fields: Optional[frozenset]) -> Any:
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, dict):
        return sanitize_dict(value, fields)
    if isinstance(value, list):
        return [_sanitize_value(item, fields) for item in value]
    return value


def sanitize_dict(data: dict[str, Any], fields: Optional[Iterable[str]] = None) -> dict[str, Any]:
    """
    Escape the text under the listed keys, at any nesting depth.

    Nested records (listings and team members inside an onboarding payload)
    are walked with the same key list, so "headline" is escaped wherever it
    appears. With fields=None every string is escaped.

    Example:
        >>> sanitize_dict({"businessName": "<b>Ada</b>", "website": "https://a.example"}, ["businessName"])
        {'businessName': '&lt;b&gt;Ada&lt;/b&gt;', 'website': 'https://a.example'}
    """
    if not data:
        return data

    keys = None if fields is None else frozenset(fields)
    result = {}
    for key, value in data.items():
        if keys is None or key in keys:
            result[key] = _sanitize_value(value, keys)
        elif isinstance(value, (dict, list)):
            # Untouched container, but its records may carry listed keys
            result[key] = _walk(value, keys)
        else:
            result[key] = value
    return result


def _walk(value: Any, keys: frozenset) -> Any:
    if isinstance(value, dict):
        return sanitize_dict(value, keys)
    if isinstance(value, list):
        return [_walk(item, keys) for item in value]
    return value


def sanitize_message(value: Optional[str], max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """
    Trim and escape a conversational message (inquiry replies, review responses)

    Raises:
        ValueError: when the trimmed message is longer than max_length
    """
    if not value:
        return ""
    value = value.strip()
    if len(value) > max_length:
        raise ValueError(f"Message exceeds maximum length of {max_length} characters")
    return sanitize_string(value)
