"""Text helpers for slugs and tags."""

from __future__ import annotations

import re

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(value: str, *, max_length: int = 80) -> str:
    """Lowercase `value` and collapse anything but letters and digits to dashes."""
    slug = _NON_SLUG.sub("-", (value or "").strip().lower()).strip("-")
    return slug[:max_length].rstrip("-")

