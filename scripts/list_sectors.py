#!/usr/bin/env python3
"""CLI utility listing the sectors visible in the maintenance API."""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from backend.app.config import load_config
from backend.app.sectors import SectorIdentityService


def sorted_sectors(catalog: Mapping[str, int]) -> List[Dict[str, Union[str, int]]]:
    """Return catalog entries as ``{"name", "id"}`` dicts sorted by name."""

    entries: List[Dict[str, Union[str, int]]] = [
        {"name": name, "id": sector_id} for name, sector_id in catalog.items()
    ]
    entries.sort(key=lambda entry: (str(entry["name"]).casefold(), str(entry["name"])))
    return entries


def write_sectors_json(entries: List[Dict[str, Union[str, int]]], path: Path) -> None:
    """Write the sector listing to ``path`` as ``{"sectors": [...], "total": n}``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"sectors": entries, "total": len(entries)}
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments for the sector listing utility.

    Returns:
        argparse.Namespace: Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional JSON file receiving the sector listing",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the sector listing utility.

    Returns:
        int: Exit status code where ``0`` indicates success.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    args = parse_args(argv)

    service = SectorIdentityService.from_config(load_config())
    entries = sorted_sectors(service.build_catalog())

    print(f"Total sectors found: {len(entries)}")
    print("ID\tSector name")
    print("-" * 50)
    for entry in entries:
        print(f"{entry['id']}\t{entry['name']}")

    if args.output is not None:
        write_sectors_json(entries, args.output)
        print(f"Listing saved to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
