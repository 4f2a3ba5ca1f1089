"""Slug helpers for comparing upstream term names."""

from __future__ import annotations

import re
import unicodedata

WHITESPACE_RE = re.compile(r"\s+")
INVALID_CHARS_RE = re.compile(r"[^a-z0-9-]+")


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_slug(text: str | None) -> str:
    """Turn display text such as ``"Café Oscuro"`` into ``"cafe-oscuro"``.

    Total and idempotent: any input, including ``None``, yields a string made
    only of ``[a-z0-9-]``.
    """
    if not text:
        return ""
    value = strip_accents(str(text).lower())
    value = WHITESPACE_RE.sub("-", value)
    return INVALID_CHARS_RE.sub("", value)


def matches_slug(left: str | None, right: str | None) -> bool:
    left_slug = normalize_slug(left)
    return bool(left_slug) and left_slug == normalize_slug(right)
