"""Sector identity resolution: directory, hash fallback, catalog and reconciliation."""

from backend.app.sectors.catalog import (
    CachedCatalogProvider,
    ExternalCatalogBuilder,
    SectorCatalog,
    merge_into_catalog,
)
from backend.app.sectors.directory import (
    SECTOR_DIRECTORY,
    lookup_canonical_id,
    sector_id_to_name,
    sector_ids_to_names,
)
from backend.app.sectors.hashing import hash_sector_id
from backend.app.sectors.normalization import comparison_key, is_blank, normalize
from backend.app.sectors.overrides import (
    ManualOverrideTable,
    default_override_table,
    load_override_table,
)
from backend.app.sectors.reconciliation import MatchSource, ReconciliationResult, SectorReconciler
from backend.app.sectors.reporting import (
    BulkReconciliationReporter,
    CatalogEntry,
    MappedSector,
    ReconciliationReport,
    reconcile_records,
)
from backend.app.sectors.resolver import resolve_from_item, resolve_sector_id
from backend.app.sectors.service import SectorIdentityService
from backend.app.sectors.sources import (
    EffortSectorSource,
    FixtureSectorSource,
    SectorSource,
    SectorSourceError,
    build_sector_source,
)
from backend.app.sectors.store import JSONRecordStore, RecordStoreError

__all__ = [
    "BulkReconciliationReporter",
    "CachedCatalogProvider",
    "CatalogEntry",
    "EffortSectorSource",
    "ExternalCatalogBuilder",
    "FixtureSectorSource",
    "JSONRecordStore",
    "ManualOverrideTable",
    "MappedSector",
    "MatchSource",
    "ReconciliationReport",
    "ReconciliationResult",
    "RecordStoreError",
    "SECTOR_DIRECTORY",
    "SectorCatalog",
    "SectorIdentityService",
    "SectorReconciler",
    "SectorSource",
    "SectorSourceError",
    "build_sector_source",
    "comparison_key",
    "default_override_table",
    "hash_sector_id",
    "is_blank",
    "load_override_table",
    "lookup_canonical_id",
    "merge_into_catalog",
    "normalize",
    "reconcile_records",
    "resolve_from_item",
    "resolve_sector_id",
    "sector_id_to_name",
    "sector_ids_to_names",
]
