"""Batch reconciliation of records with a mapped/unmapped report."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set

from backend.app.contracts import SectorRecord
from backend.app.sectors.catalog import SectorCatalog, catalog_entries
from backend.app.sectors.normalization import comparison_key, is_blank
from backend.app.sectors.reconciliation import MatchSource, SectorReconciler

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class MappedSector:
    """A sector name that reconciled to an id."""

    name: str
    sector_id: int
    source: MatchSource


@dataclass(frozen=True)
class CatalogEntry:
    """Entry of the external catalog used for a batch."""

    name: str
    sector_id: int


@dataclass(frozen=True)
class ReconciliationReport:
    """Result of reconciling a batch of records."""

    mapped: List[MappedSector] = field(default_factory=list)
    unmapped: List[str] = field(default_factory=list)
    all_catalog_entries: List[CatalogEntry] = field(default_factory=list)

    def counts_by_source(self) -> Dict[str, int]:
        """Return how many mapped names each reconciliation step produced."""

        counts: Dict[str, int] = {}
        for entry in self.mapped:
            counts[entry.source.value] = counts.get(entry.source.value, 0) + 1
        return counts

    def format_report(self) -> str:
        """Generate a human-readable summary of the batch."""

        lines: List[str] = []
        lines.append(f"Mapped sectors ({len(self.mapped)}):")
        for entry in self.mapped:
            lines.append(f"  - {entry.name} → {entry.sector_id} ({entry.source.value})")
        if self.unmapped:
            lines.append("")
            lines.append(f"Unmapped sectors ({len(self.unmapped)}):")
            for name in self.unmapped:
                lines.append(f"  - {name}")
        lines.append("")
        lines.append(f"External catalog entries ({len(self.all_catalog_entries)}):")
        for catalog_entry in self.all_catalog_entries:
            lines.append(f"  - {catalog_entry.sector_id}\t{catalog_entry.name}")
        return "\n".join(lines)


def reconcile_records(
    records: Iterable[Any],
    catalog: Mapping[str, int],
    reconciler: SectorReconciler,
) -> ReconciliationReport:
    """Reconcile each distinct sector name found in ``records``.

    Names are deduplicated on their upper-cased trimmed form; the first record
    bearing a name is the one reported, and report order follows first occurrence.

    Args:
        records: Records carrying a sector name (mappings or :class:`SectorRecord`).
        catalog: External catalog for the batch.
        reconciler: Reconciliation engine applied to each distinct name.

    Returns:
        ReconciliationReport: Mapped and unmapped names plus the catalog entries.
    """
    mapped: List[MappedSector] = []
    unmapped: List[str] = []
    seen: Set[str] = set()
    for raw in records:
        name = SectorRecord.from_payload(raw).sector_name
        if name is None or is_blank(name):
            continue
        key = comparison_key(name)
        if key in seen:
            continue
        seen.add(key)
        result = reconciler.explain(name, catalog)
        if result.sector_id is not None and result.source is not None:
            mapped.append(MappedSector(name=name, sector_id=result.sector_id, source=result.source))
        else:
            unmapped.append(name)
    entries = [
        CatalogEntry(name=name, sector_id=sector_id)
        for name, sector_id in catalog_entries(catalog)
    ]
    LOGGER.info(
        "Reconciled %d distinct sector names (mapped=%d, unmapped=%d)",
        len(seen),
        len(mapped),
        len(unmapped),
    )
    return ReconciliationReport(mapped=mapped, unmapped=unmapped, all_catalog_entries=entries)


class BulkReconciliationReporter:
    """Run reconciliation over record batches against a freshly built catalog."""

    def __init__(
        self,
        reconciler: SectorReconciler,
        catalog_provider: Callable[[], SectorCatalog],
    ) -> None:
        self._reconciler = reconciler
        self._catalog_provider = catalog_provider

    def reconcile_all(
        self,
        records: Iterable[Any],
        *,
        catalog: Optional[Mapping[str, int]] = None,
    ) -> ReconciliationReport:
        """Build the catalog once and reconcile every distinct name in ``records``."""

        effective_catalog = catalog if catalog is not None else self._catalog_provider()
        return reconcile_records(records, effective_catalog, self._reconciler)


__all__ = [
    "BulkReconciliationReporter",
    "CatalogEntry",
    "MappedSector",
    "ReconciliationReport",
    "reconcile_records",
]
