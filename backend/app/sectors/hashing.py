"""Deterministic synthetic sector ids derived from sector names.

Ids already persisted by existing deployments were produced by a 32-bit
``hash * 31 + code_unit`` rolling hash over the UTF-16 code units of the name. The
functions below reproduce it bit for bit, including the signed 32-bit wraparound
after every step and the ``abs(hash) % 999 + 1`` reduction.

Distinct names may collide on the same synthetic id. Collisions are neither
detected nor reported, so two real sectors can end up merged in filters and
reports that group by id.
"""
from __future__ import annotations

from typing import Iterator

SYNTHETIC_ID_MIN = 1
SYNTHETIC_ID_MAX = 999

_UINT32_MASK = 0xFFFFFFFF
_INT32_SIGN_BIT = 0x80000000


def _to_int32(value: int) -> int:
    value &= _UINT32_MASK
    if value & _INT32_SIGN_BIT:
        return value - (1 << 32)
    return value


def _utf16_code_units(text: str) -> Iterator[int]:
    for char in text:
        code_point = ord(char)
        if code_point <= 0xFFFF:
            yield code_point
            continue
        offset = code_point - 0x10000
        yield 0xD800 + (offset >> 10)
        yield 0xDC00 + (offset & 0x3FF)


def rolling_hash(text: str) -> int:
    """Return the signed 32-bit rolling hash (multiplier 31) of ``text``."""

    acc = 0
    for unit in _utf16_code_units(text):
        acc = _to_int32((acc << 5) - acc + unit)
    return acc


def hash_sector_id(upper_trimmed_name: str) -> int:
    """Return a synthetic sector id in ``[1, 999]`` for a normalized name.

    Args:
        upper_trimmed_name: Sector name already trimmed and upper-cased.

    Returns:
        int: Stable synthetic id for the name.
    """
    return abs(rolling_hash(upper_trimmed_name)) % SYNTHETIC_ID_MAX + SYNTHETIC_ID_MIN


__all__ = ["SYNTHETIC_ID_MAX", "SYNTHETIC_ID_MIN", "hash_sector_id", "rolling_hash"]
