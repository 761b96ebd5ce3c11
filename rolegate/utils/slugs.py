"""
Slug helpers.
"""

import re

from rolegate.core.exceptions import InvalidInputError

_SLUG_PATTERN = re.compile(r"[^a-z0-9._]+")


def slugify(value: str) -> str:
    """
    Lowercase slug for a role name.

        slugify("Content Editor")  -> "content-editor"
        slugify("  Admin ")        -> "admin"
    """
    candidate = _SLUG_PATTERN.sub("-", value.lower()).strip("-")
    return re.sub(r"-{2,}", "-", candidate)


def require_slug(value: str | None, kind: str, max_length: int) -> str:
    """Validate an already-normalized slug."""
    if not value:
        raise InvalidInputError(f"{kind} slug is required")
    if len(value) > max_length:
        raise InvalidInputError(f"{kind} slug longer than {max_length} characters: {value!r}")
    return value


def require_name(value: str | None, kind: str) -> str:
    candidate = (value or "").strip()
    if not candidate:
        raise InvalidInputError(f"{kind} name is required")
    return candidate
