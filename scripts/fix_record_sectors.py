#!/usr/bin/env python3
"""Recompute the sector id of every stored record through the shared reconciler."""
from __future__ import annotations

import argparse
import dataclasses
import logging
from collections import OrderedDict
from pathlib import Path
from typing import Dict, List, Optional

from backend.app.config import load_config
from backend.app.contracts import SectorRecord
from backend.app.sectors import JSONRecordStore, RecordStoreError, SectorIdentityService
from backend.app.sectors.service import SECTOR_ID_FIELD

LOGGER = logging.getLogger(__name__)


@dataclasses.dataclass
class SectorStats:
    """Per-sector tally after the fix."""

    count: int = 0
    sector_id: Optional[int] = None


@dataclasses.dataclass
class FixSummary:
    """Counters describing a fix run."""

    total: int = 0
    updated: int = 0
    kept: int = 0
    skipped: int = 0
    errors: int = 0
    sectors: Dict[str, SectorStats] = dataclasses.field(default_factory=OrderedDict)

    def format_report(self) -> str:
        """Generate a human-readable summary of the run."""

        lines: List[str] = [
            "Summary:",
            f"  updated: {self.updated}",
            f"  kept (already correct): {self.kept}",
            f"  skipped (no sector): {self.skipped}",
            f"  errors: {self.errors}",
            f"  total: {self.total}",
        ]
        if self.sectors:
            lines.append("")
            lines.append("Records per sector:")
            for name, stats in self.sectors.items():
                lines.append(f'  "{name}": {stats.count} record(s) → sectorId: {stats.sector_id}')
        return "\n".join(lines)


def fix_record_sectors(
    store: JSONRecordStore,
    service: SectorIdentityService,
    *,
    dry_run: bool = False,
) -> FixSummary:
    """Rewrite stored sector ids that disagree with the reconciliation chain.

    Args:
        store: Record store keyed by entity id.
        service: Sector identity service supplying the catalog and reconciler.
        dry_run: When set, count the changes without writing them.

    Returns:
        FixSummary: Counters and per-sector statistics.
    """
    summary = FixSummary()
    records = store.find_all()
    summary.total = len(records)
    catalog = service.build_catalog()
    for record_id, record in records:
        name = SectorRecord.from_payload(record).sector_name
        if name is None or not name.strip():
            LOGGER.warning("Record %s has no sector name", record_id)
            summary.skipped += 1
            continue
        new_id = service.reconcile(name, catalog)
        stats = summary.sectors.setdefault(name, SectorStats())
        stats.count += 1
        stats.sector_id = new_id
        if record.get(SECTOR_ID_FIELD) == new_id:
            summary.kept += 1
            continue
        if dry_run:
            summary.updated += 1
            continue
        try:
            store.update(record_id, {SECTOR_ID_FIELD: new_id})
        except RecordStoreError:
            LOGGER.exception("Failed to update record %s", record_id)
            summary.errors += 1
            continue
        LOGGER.info(
            'Updated "%s" (old id: %s → new: %s)', name, record.get(SECTOR_ID_FIELD), new_id
        )
        summary.updated += 1
    return summary


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments for the fix utility."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="Record store JSON file (default: storage.records_path from config.yaml)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report the changes without writing them",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the fix utility.

    Returns:
        int: ``0`` when every record was processed, ``1`` when updates failed.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    args = parse_args(argv)
    config = load_config()
    store_path = args.store or config.resolve_path(config.storage.records_path)
    store = JSONRecordStore(store_path)
    service = SectorIdentityService.from_config(config)

    summary = fix_record_sectors(store, service, dry_run=args.dry_run)
    print(summary.format_report())
    return 1 if summary.errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
