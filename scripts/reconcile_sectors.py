#!/usr/bin/env python3
"""CLI utility printing a sector reconciliation report for a JSON record file."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Mapping, Optional

from backend.app.config import load_config
from backend.app.sectors import SectorIdentityService


def load_records(path: Path) -> List[Mapping[str, Any]]:
    """Load records from a JSON list or a ``{id: record}`` mapping.

    Raises:
        ValueError: If the document holds neither shape.
    """
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, dict):
        payload = list(payload.values())
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a list of records")
    return [record for record in payload if isinstance(record, dict)]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments for the reconciliation report."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("records", type=Path, help="JSON file holding the records to reconcile")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the reconciliation report.

    Returns:
        int: Exit status code where ``0`` indicates success.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    args = parse_args(argv)
    try:
        records = load_records(args.records)
    except (OSError, ValueError) as exc:
        print(f"Unable to read records: {exc}", file=sys.stderr)
        return 1

    service = SectorIdentityService.from_config(load_config())
    report = service.reconcile_all(records)
    print(report.format_report())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
