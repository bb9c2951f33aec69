"""Normalization helpers for free-text sector names."""
from __future__ import annotations

from typing import Optional


def is_blank(raw: Optional[str]) -> bool:
    """Return whether ``raw`` is missing, empty or whitespace only."""

    return raw is None or not raw.strip()


def normalize(raw: str) -> str:
    """Trim surrounding whitespace; the result is used for directory lookups."""

    return raw.strip()


def comparison_key(raw: str) -> str:
    """Return the upper-cased trimmed name used for hashing and fuzzy matching."""

    return raw.strip().upper()


__all__ = ["comparison_key", "is_blank", "normalize"]
