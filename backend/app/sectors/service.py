"""Facade exposing sector identity resolution to pages, jobs and scripts."""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from backend.app.config import AppConfig
from backend.app.contracts import SectorRecord
from backend.app.sectors.catalog import CachedCatalogProvider, ExternalCatalogBuilder, SectorCatalog
from backend.app.sectors.directory import sector_id_to_name, sector_ids_to_names
from backend.app.sectors.overrides import default_override_table, load_override_table
from backend.app.sectors.reconciliation import SectorReconciler
from backend.app.sectors.reporting import BulkReconciliationReporter, ReconciliationReport
from backend.app.sectors.resolver import resolve_from_item, resolve_sector_id
from backend.app.sectors.sources import SectorSource, build_sector_source

SECTOR_ID_FIELD = "sectorId"


def _empty_catalog() -> SectorCatalog:
    return {}


class SectorIdentityService:
    """Resolve, reconcile and report sector ids through one shared chain."""

    def __init__(
        self,
        *,
        reconciler: Optional[SectorReconciler] = None,
        catalog_provider: Optional[Callable[[], SectorCatalog]] = None,
        invalidate: Optional[Callable[[], None]] = None,
    ) -> None:
        self._reconciler = reconciler or SectorReconciler()
        self._catalog_provider = catalog_provider or _empty_catalog
        self._invalidate = invalidate
        self._reporter = BulkReconciliationReporter(self._reconciler, self._catalog_provider)

    @classmethod
    def from_source(
        cls,
        source: SectorSource,
        *,
        reconciler: Optional[SectorReconciler] = None,
        concurrent_fetch: bool = False,
        cache_ttl_seconds: float = 0,
    ) -> "SectorIdentityService":
        """Build a service whose catalog is harvested from ``source``."""

        builder = ExternalCatalogBuilder(source, concurrent=concurrent_fetch)
        if cache_ttl_seconds > 0:
            cache = CachedCatalogProvider(builder, ttl_seconds=cache_ttl_seconds)
            return cls(reconciler=reconciler, catalog_provider=cache.get, invalidate=cache.invalidate)
        return cls(reconciler=reconciler, catalog_provider=builder.build)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        *,
        source: Optional[SectorSource] = None,
    ) -> "SectorIdentityService":
        """Build a service from application configuration.

        Args:
            config: Loaded application configuration.
            source: Optional collaborator replacing the configured one.

        Returns:
            SectorIdentityService: Service wired with overrides, source and cache.
        """
        overrides_path = config.reconciliation.overrides_path
        if overrides_path:
            overrides = load_override_table(config.resolve_path(overrides_path))
        else:
            overrides = default_override_table()
        reconciler = SectorReconciler(
            overrides,
            log_ambiguous_matches=config.reconciliation.log_ambiguous_matches,
        )
        return cls.from_source(
            source or build_sector_source(config),
            reconciler=reconciler,
            concurrent_fetch=config.catalog.concurrent_fetch,
            cache_ttl_seconds=config.catalog.cache_ttl_seconds,
        )

    @property
    def reconciler(self) -> SectorReconciler:
        return self._reconciler

    def resolve(self, name: Optional[str]) -> Optional[int]:
        """Resolve a name through the directory and hash fallback only."""

        return resolve_sector_id(name)

    def resolve_from_item(self, item: Any) -> Optional[int]:
        """Resolve a record, trusting its explicit sector id when present."""

        return resolve_from_item(item)

    def build_catalog(self) -> SectorCatalog:
        """Return the external catalog for the current external state."""

        return self._catalog_provider()

    def invalidate_catalog(self) -> None:
        """Drop any cached catalog."""

        if self._invalidate is not None:
            self._invalidate()

    def reconcile(
        self,
        name: Optional[str],
        catalog: Optional[Mapping[str, int]] = None,
    ) -> Optional[int]:
        """Reconcile one name, building the catalog when none is supplied.

        Blank names return ``None`` without querying the external sources.
        """
        if name is None or not name.strip():
            return None
        effective = catalog if catalog is not None else self.build_catalog()
        return self._reconciler.reconcile(name, effective)

    def reconcile_all(self, records: Iterable[Any]) -> ReconciliationReport:
        """Reconcile every distinct sector name carried by ``records``."""

        return self._reporter.reconcile_all(records)

    def annotate_records(
        self,
        records: Iterable[Mapping[str, Any]],
        catalog: Optional[Mapping[str, int]] = None,
    ) -> List[Dict[str, Any]]:
        """Return copies of ``records`` with ``sectorId`` set from reconciliation.

        Records without a sector name get ``sectorId = None``. The catalog is built
        once for the whole batch.
        """
        effective = catalog if catalog is not None else self.build_catalog()
        annotated: List[Dict[str, Any]] = []
        for record in records:
            name = SectorRecord.from_payload(record).sector_name
            copy = dict(record)
            copy[SECTOR_ID_FIELD] = self._reconciler.reconcile(name, effective)
            annotated.append(copy)
        return annotated

    @staticmethod
    def sector_id_to_name(sector_id: int) -> Optional[str]:
        return sector_id_to_name(sector_id)

    @staticmethod
    def sector_ids_to_names(sector_ids: Iterable[int]) -> List[str]:
        return sector_ids_to_names(sector_ids)


__all__ = ["SECTOR_ID_FIELD", "SectorIdentityService"]
