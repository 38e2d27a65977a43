"""Shared Pydantic helpers for request validation."""
from __future__ import annotations


def require_text(value: str) -> str:
    """Strip `value` and reject it when nothing is left."""
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("must not be blank")
    return cleaned


def optional_text(value: str | None) -> str | None:
    """Strip `value`, mapping blank input to None."""
    if value is None:
        return None
    return value.strip() or None
