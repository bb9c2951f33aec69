"""Harvest a sector name to id catalog from live external listings."""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from backend.app.contracts import SectorRecord
from backend.app.sectors.normalization import comparison_key, is_blank
from backend.app.sectors.resolver import resolve_from_item
from backend.app.sectors.sources import SectorSource

LOGGER = logging.getLogger(__name__)

SectorCatalog = Dict[str, int]
Listing = Sequence[Mapping[str, Any]]


def merge_into_catalog(catalog: SectorCatalog, records: Iterable[Any]) -> int:
    """Fold records into ``catalog`` keeping the first id seen for each name.

    Args:
        catalog: Mapping of upper-cased trimmed name to sector id, updated in place.
        records: Collaborator records (mappings or :class:`SectorRecord`).

    Returns:
        int: Number of new catalog entries added.
    """
    added = 0
    for raw in records:
        record = SectorRecord.from_payload(raw)
        name = record.sector_name
        if name is None or is_blank(name):
            continue
        key = comparison_key(name)
        if key in catalog:
            continue
        sector_id = resolve_from_item(record)
        if sector_id is None:
            continue
        catalog[key] = sector_id
        added += 1
    return added


class ExternalCatalogBuilder:
    """Build the external sector catalog from equipment and work-order listings.

    Equipment is authoritative: its records are always merged before work orders,
    whether the two listings are fetched sequentially or concurrently, so a name
    present in both keeps the equipment id.
    """

    def __init__(self, source: SectorSource, *, concurrent: bool = False) -> None:
        self._source = source
        self._concurrent = concurrent

    def build(self) -> SectorCatalog:
        """Return a freshly harvested catalog.

        Returns:
            SectorCatalog: Insertion-ordered mapping of normalized name to id. Empty
                when both listings fail.
        """
        if self._concurrent:
            equipment, work_orders = self._fetch_concurrently()
        else:
            equipment = self._fetch("equipment", self._source.list_equipment)
            work_orders = self._fetch("work orders", self._source.list_work_orders_summary)
        catalog: SectorCatalog = {}
        from_equipment = merge_into_catalog(catalog, equipment)
        from_work_orders = merge_into_catalog(catalog, work_orders)
        LOGGER.info(
            "Sector catalog built with %d entries (equipment=%d, work_orders=%d)",
            len(catalog),
            from_equipment,
            from_work_orders,
        )
        return catalog

    def _fetch_concurrently(self) -> Tuple[Listing, Listing]:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="sector-catalog") as executor:
            equipment_future = executor.submit(
                self._fetch, "equipment", self._source.list_equipment
            )
            work_orders_future = executor.submit(
                self._fetch, "work orders", self._source.list_work_orders_summary
            )
            return equipment_future.result(), work_orders_future.result()

    @staticmethod
    def _fetch(label: str, query: Callable[[], Listing]) -> Listing:
        try:
            records = query()
        except Exception:  # noqa: BLE001 - a failing half contributes no entries
            LOGGER.exception("Failed to list %s for the sector catalog", label)
            return []
        if records is None:
            return []
        return list(records)


class CachedCatalogProvider:
    """Time-bounded cache in front of :class:`ExternalCatalogBuilder`."""

    def __init__(
        self,
        builder: ExternalCatalogBuilder,
        *,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._builder = builder
        self._ttl = max(0.0, float(ttl_seconds))
        self._clock = clock
        self._lock = threading.Lock()
        self._catalog: Optional[SectorCatalog] = None
        self._built_at = 0.0

    def get(self) -> SectorCatalog:
        """Return a copy of the cached catalog, rebuilding it when expired."""

        with self._lock:
            now = self._clock()
            if self._catalog is None or self._ttl == 0 or now - self._built_at >= self._ttl:
                self._catalog = self._builder.build()
                self._built_at = now
            return dict(self._catalog)

    def invalidate(self) -> None:
        """Drop the cached catalog so the next call rebuilds it."""

        with self._lock:
            self._catalog = None
            self._built_at = 0.0


def catalog_entries(catalog: Mapping[str, int]) -> List[Tuple[str, int]]:
    """Return catalog entries as ``(name, id)`` pairs in insertion order."""

    return list(catalog.items())


__all__ = [
    "CachedCatalogProvider",
    "ExternalCatalogBuilder",
    "SectorCatalog",
    "catalog_entries",
    "merge_into_catalog",
]
