from __future__ import annotations

from backend.app.contracts import SectorRecord
from backend.app.sectors.hashing import hash_sector_id
from backend.app.sectors.reconciliation import MatchSource, SectorReconciler
from backend.app.sectors.reporting import (
    BulkReconciliationReporter,
    CatalogEntry,
    MappedSector,
    reconcile_records,
)

CATALOG = {"LABORATÓRIO CENTRAL": 42, "FARMÁCIA": 43}

RECORDS = [
    {"id": "a", "setor": "UTI"},
    {"id": "b", "setor": "Laboratório Central"},
    {"id": "c", "setor": " uti "},
    {"id": "d", "setor": ""},
    {"id": "e"},
    {"id": "f", "setor": "Setor Experimental X"},
    SectorRecord(sector_name="Farmácia"),
]


def test_reconcile_records_deduplicates_in_first_occurrence_order() -> None:
    report = reconcile_records(RECORDS, CATALOG, SectorReconciler())
    assert report.mapped == [
        MappedSector("UTI", 2, MatchSource.OVERRIDE_PARTIAL),
        MappedSector("Laboratório Central", 42, MatchSource.CATALOG_EXACT),
        MappedSector(
            "Setor Experimental X",
            hash_sector_id("SETOR EXPERIMENTAL X"),
            MatchSource.FALLBACK,
        ),
        MappedSector("Farmácia", 43, MatchSource.CATALOG_EXACT),
    ]
    assert report.unmapped == []
    assert report.all_catalog_entries == [
        CatalogEntry("LABORATÓRIO CENTRAL", 42),
        CatalogEntry("FARMÁCIA", 43),
    ]


def test_reconcile_records_is_idempotent() -> None:
    reconciler = SectorReconciler()
    first = reconcile_records(RECORDS, CATALOG, reconciler)
    second = reconcile_records(RECORDS, CATALOG, reconciler)
    assert first == second


def test_counts_by_source() -> None:
    report = reconcile_records(RECORDS, CATALOG, SectorReconciler())
    assert report.counts_by_source() == {
        "override_partial": 1,
        "catalog_exact": 2,
        "fallback": 1,
    }


def test_format_report_lists_sections() -> None:
    report = reconcile_records(RECORDS[:2], CATALOG, SectorReconciler())
    text = report.format_report()
    assert text.splitlines()[0] == "Mapped sectors (2):"
    assert "  - UTI → 2 (override_partial)" in text
    assert "Unmapped sectors" not in text
    assert "External catalog entries (2):" in text
    assert "  - 42\tLABORATÓRIO CENTRAL" in text


def test_bulk_reporter_builds_catalog_once_per_batch() -> None:
    calls = []

    def provider():
        calls.append(1)
        return dict(CATALOG)

    reporter = BulkReconciliationReporter(SectorReconciler(), provider)
    report = reporter.reconcile_all(RECORDS)
    assert len(calls) == 1
    assert len(report.mapped) == 4

    reporter.reconcile_all(RECORDS, catalog={})
    assert len(calls) == 1


def test_empty_batch_yields_empty_report() -> None:
    reporter = BulkReconciliationReporter(SectorReconciler(), lambda: {})
    report = reporter.reconcile_all([])
    assert report.mapped == []
    assert report.unmapped == []
    assert report.all_catalog_entries == []
