"""Single source of truth for turning a sector name into a sector id."""
from __future__ import annotations

from typing import Any, Optional

from backend.app.contracts import SectorRecord
from backend.app.sectors.directory import lookup_canonical_id
from backend.app.sectors.hashing import hash_sector_id
from backend.app.sectors.normalization import comparison_key, is_blank, normalize


def resolve_sector_id(raw_name: Optional[str]) -> Optional[int]:
    """Resolve a sector name to its id.

    The canonical directory is consulted with the trimmed, case-sensitive name;
    anything else gets a synthetic id hashed from the upper-cased trimmed name.
    ``" emergência "`` therefore does not resolve to the canonical ``4`` that
    ``"Emergência"`` does.

    Args:
        raw_name: Free-text sector name.

    Returns:
        Optional[int]: ``None`` for blank input, otherwise a positive id.
    """
    if raw_name is None or is_blank(raw_name):
        return None
    trimmed = normalize(raw_name)
    canonical = lookup_canonical_id(trimmed)
    if canonical is not None:
        return canonical
    return hash_sector_id(comparison_key(trimmed))


def resolve_from_item(item: Any) -> Optional[int]:
    """Resolve the sector id of an equipment, work-order or legacy record.

    An explicit sector id on the record is trusted verbatim; the sector name is only
    used when no id is present.

    Args:
        item: A :class:`SectorRecord` or a raw mapping from a collaborator.

    Returns:
        Optional[int]: The sector id, or ``None`` when the record carries neither an
            id nor a non-blank name.
    """
    record = SectorRecord.from_payload(item)
    if record.sector_id is not None:
        return record.sector_id
    return resolve_sector_id(record.sector_name)


__all__ = ["resolve_from_item", "resolve_sector_id"]
