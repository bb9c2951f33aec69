"""Static directory of canonical hospital sectors."""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

# Canonical ids 1-12 are stable for the lifetime of the system. Lookups are exact
# (trimmed, case-sensitive) on the names below.
SECTOR_DIRECTORY: Mapping[str, int] = MappingProxyType(
    {
        "UTI 1": 1,
        "UTI 2": 2,
        "UTI 3": 3,
        "Emergência": 4,
        "Centro Cirúrgico": 5,
        "Radiologia": 6,
        "Cardiologia": 7,
        "Neurologia": 8,
        "Ortopedia": 9,
        "Pediatria": 10,
        "Maternidade": 11,
        "Ambulatório": 12,
    }
)

SECTOR_NAMES_BY_ID: Mapping[int, str] = MappingProxyType(
    {sector_id: name for name, sector_id in SECTOR_DIRECTORY.items()}
)


def lookup_canonical_id(trimmed_name: str) -> Optional[int]:
    """Return the canonical id for an already trimmed sector name, if any."""

    return SECTOR_DIRECTORY.get(trimmed_name)


def sector_id_to_name(sector_id: int) -> Optional[str]:
    """Return the canonical display name for ``sector_id`` or ``None``."""

    return SECTOR_NAMES_BY_ID.get(sector_id)


def sector_ids_to_names(sector_ids: Iterable[int]) -> List[str]:
    """Map ids to canonical names, silently dropping ids without a canonical name."""

    names: List[str] = []
    for sector_id in sector_ids:
        name = sector_id_to_name(sector_id)
        if name is not None:
            names.append(name)
    return names


__all__ = [
    "SECTOR_DIRECTORY",
    "SECTOR_NAMES_BY_ID",
    "lookup_canonical_id",
    "sector_id_to_name",
    "sector_ids_to_names",
]
